"""
Statistics over the trailing window of a numeric series.

Used by signal generators to summarize recent model outputs or prices.
"""

from typing import Optional, Sequence

import numpy as np


def _trailing_deltas(series: Sequence[float], window: int) -> np.ndarray:
    if window < 1:
        raise ValueError(f"Window must be a positive integer, got {window}")
    values = np.asarray(series, dtype=float)
    window = min(len(values) - 1, window)
    return np.diff(values[-window - 1:])


def get_series_trend(series: Sequence[float], window: int = 2) -> float:
    """
    Calculate the average net change over the last `window` transitions.

    Positive means rising, negative means falling. A series with fewer than
    two points has a trend of 1.

    Args:
        series: Numeric series to analyze
        window: Number of recent transitions to consider

    Returns:
        Average signed change between consecutive values
    """
    if len(series) < 2:
        return 1.0
    return float(_trailing_deltas(series, window).mean())


def get_series_volatility(series: Sequence[float], window: int = 10) -> float:
    """
    Calculate the average absolute change over the last `window` transitions.

    A series with fewer than two points has a volatility of 1.

    Args:
        series: Numeric series to analyze
        window: Number of recent transitions to consider

    Returns:
        Average magnitude of changes between consecutive values
    """
    if len(series) < 2:
        return 1.0
    return float(np.abs(_trailing_deltas(series, window)).mean())


def calculate_sharpe_ratio(series: Sequence[float]) -> float:
    """Mean over sample standard deviation; 0 for short or flat series."""
    if len(series) < 2:
        return 0.0
    values = np.asarray(series, dtype=float)
    std = values.std(ddof=1)
    if std == 0:
        return 0.0
    return float(values.mean() / std)


def _trailing_window(series: Sequence[float], window: Optional[int]) -> np.ndarray:
    values = np.asarray(series, dtype=float)
    if values.size == 0:
        raise ValueError("Series is empty")
    if window is not None:
        if window < 1:
            raise ValueError(f"Window must be a positive integer, got {window}")
        values = values[-window:]
    return values


def get_series_ceiling(series: Sequence[float], window: Optional[int] = None) -> float:
    """Maximum over the trailing window (whole series if window is None)."""
    return float(_trailing_window(series, window).max())


def get_steps_since_ceiling(series: Sequence[float], window: Optional[int] = None) -> int:
    """
    Count the steps since the trailing window's maximum.

    Ties resolve to the most recent occurrence, so the result is 0 whenever
    the last point equals the maximum.
    """
    values = _trailing_window(series, window)
    return int(np.argmax(values[::-1]))
