"""
Range tracking and normalization of indicator values.

Bounds are taken over a complete batch, so a row can only be normalized
once the whole series is known.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Sequence, Union

import numpy as np
import pandas as pd

from shared.exceptions import RangeValidationError

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray, pd.Series]

PRICE_COLUMNS = ["open", "high", "low", "close"]

# Field group -> indicator columns sharing one bound
BOUND_GROUPS: Dict[str, list] = {
    "price": PRICE_COLUMNS,
    "volume": ["volume"],
    "macd": ["macd"],
    "signal": ["signal"],
    "histogram": ["histogram"],
}


@dataclass(frozen=True)
class Bounds:
    """Observed min/max of one field group."""

    min: float
    max: float

    @property
    def is_degenerate(self) -> bool:
        return self.min == self.max

    @classmethod
    def from_values(cls, values: Union[Sequence[float], np.ndarray, pd.Series]) -> "Bounds":
        """Bounds of the defined (non-NaN) values; (0, 0) if there are none."""
        arr = np.asarray(values, dtype=float).ravel()
        arr = arr[~np.isnan(arr)]
        if arr.size == 0:
            return cls(0.0, 0.0)
        return cls(float(arr.min()), float(arr.max()))


def _zeros_like(value: ArrayLike) -> ArrayLike:
    if isinstance(value, pd.Series):
        return pd.Series(0.0, index=value.index, name=value.name)
    if isinstance(value, np.ndarray):
        return np.zeros_like(value, dtype=float)
    return 0.0


def normalize(value: ArrayLike, min_value: float, max_value: float) -> ArrayLike:
    """
    Map values from [min_value, max_value] onto [-1, 1].

    A degenerate range (min == max) maps everything to 0.
    """
    if max_value == min_value:
        return _zeros_like(value)
    return ((value - min_value) / (max_value - min_value)) * 2 - 1


def unnormalize(normalized: ArrayLike, min_value: float, max_value: float) -> ArrayLike:
    """Inverse of normalize for a non-degenerate range."""
    return ((normalized + 1) / 2) * (max_value - min_value) + min_value


def scale_unit(value: ArrayLike, min_value: float, max_value: float) -> ArrayLike:
    """Map values from [min_value, max_value] onto [0, 1]; degenerate range -> 0."""
    if max_value == min_value:
        return _zeros_like(value)
    return (value - min_value) / (max_value - min_value)


def scale_oscillator(value: ArrayLike) -> ArrayLike:
    """Map a 0-100 oscillator (RSI, MFI) onto [0, 1]."""
    return value / 100


def validate_series_range(series: Iterable[float], lower: float = -1, upper: float = 1) -> None:
    """
    Check that every value lies within [lower, upper].

    Raises:
        RangeValidationError: On the first value outside the bounds
    """
    for value in series:
        if value < lower or value > upper:
            raise RangeValidationError(value, lower, upper)


def track_bounds(indicators: pd.DataFrame) -> Dict[str, Bounds]:
    """
    Compute the bounds of every field group over a completed batch.

    Args:
        indicators: Indicator DataFrame (see IndicatorCalculator.calculate_all)

    Returns:
        Dict mapping group name (price, volume, macd, signal, histogram) to Bounds
    """
    bounds = {}
    for group, columns in BOUND_GROUPS.items():
        bounds[group] = Bounds.from_values(indicators[columns].to_numpy(dtype=float).ravel())
        if indicators[columns].isna().all().all():
            logger.warning(f"No defined values for bound group '{group}', using (0, 0)")

    logger.debug(f"Tracked bounds: {bounds}")

    return bounds
