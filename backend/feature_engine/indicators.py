"""
Technical indicator calculations using pandas and numpy.

Implements the recurrence-based indicators used for model features:
- Trend: EMA (ultra slow, super slow, slow, fast)
- Momentum: RSI (Wilder), MACD
- Volatility: ATR (Wilder)
- Volume: MFI

Every indicator returns a pandas Series aligned with its input index.
Missing values (not enough lookback) are NaN.
"""

import logging
from collections import deque
from typing import Optional

import numpy as np
import pandas as pd

from shared.config import IndicatorPeriods
from shared.exceptions import InsufficientDataError, InsufficientDataForIndicatorError

logger = logging.getLogger(__name__)

INDICATOR_COLUMNS = [
    "timestamp",
    "open",
    "high",
    "low",
    "close",
    "volume",
    "ultra_slow_ema",
    "super_slow_ema",
    "slow_ema",
    "fast_ema",
    "slow_rsi",
    "fast_rsi",
    "macd",
    "signal",
    "histogram",
    "mfi",
    "atr",
]


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"Period must be a positive integer, got {period}")


def _oscillator(up: float, down: float) -> float:
    """100 - 100 / (1 + up/down), with a zero denominator mapped to 100."""
    if down == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + up / down)


class MoneyFlowWindow:
    """
    Sliding windows of positive and negative money flow for MFI.

    A positive flow is appended to the positive window and trims the
    negative window by one entry once it is full; negative flows mirror
    this. A flat typical price appends nothing and trims both full
    windows. Neither window ever holds more than `period` flows.
    """

    def __init__(self, period: int):
        _check_period(period)
        self.period = period
        self.positive: deque = deque(maxlen=period)
        self.negative: deque = deque(maxlen=period)

    def _trim(self, window: deque) -> None:
        if len(window) >= self.period:
            window.popleft()

    def update(self, typical_price: float, previous_typical_price: float, money_flow: float):
        """Classify one candle's money flow and update both windows."""
        if typical_price > previous_typical_price:
            self.positive.append(money_flow)
            self._trim(self.negative)
        elif typical_price < previous_typical_price:
            self.negative.append(money_flow)
            self._trim(self.positive)
        else:
            self._trim(self.positive)
            self._trim(self.negative)

    def value(self) -> float:
        """Current MFI (100 when there is no negative flow)."""
        return _oscillator(sum(self.positive), sum(self.negative))


class IndicatorCalculator:
    """
    Calculate technical indicators from OHLCV data.

    Recurrences (EMA, Wilder smoothing, MFI windows) are computed as a
    single left-to-right pass over the series.
    """

    @staticmethod
    def validate_data(df: pd.DataFrame, min_periods: int) -> None:
        """
        Check if sufficient data for indicator calculation.

        Args:
            df: DataFrame with OHLCV data
            min_periods: Largest lookback required by the configured periods

        Raises:
            InsufficientDataError: If the batch has min_periods candles or fewer
            ValueError: If required columns are missing
        """
        required_cols = ["open", "high", "low", "close", "volume"]
        missing_cols = [col for col in required_cols if col not in df.columns]
        if missing_cols:
            raise ValueError(f"Missing required columns: {missing_cols}")

        if len(df) <= min_periods:
            logger.error(f"Insufficient data: {len(df)} candles <= {min_periods} periods")
            raise InsufficientDataError(min_periods, len(df))

    @staticmethod
    def calculate_ema(series: pd.Series, period: int) -> pd.Series:
        """
        Calculate Exponential Moving Average.

        Seeded with the first value (no simple-average warm-up), so the
        output is defined from index 0.
        """
        _check_period(period)
        return series.astype(float).ewm(span=period, adjust=False).mean()

    @staticmethod
    def calculate_true_range(high: pd.Series, low: pd.Series, close: pd.Series) -> pd.Series:
        """
        Calculate True Range.

        The first candle has no previous close; its own high stands in.
        """
        prev_close = close.shift(1).astype(float)
        if len(prev_close):
            prev_close.iloc[0] = high.iloc[0]

        high_low = high - low
        high_close = (high - prev_close).abs()
        low_close = (low - prev_close).abs()

        return pd.concat([high_low, high_close, low_close], axis=1).max(axis=1)

    @classmethod
    def calculate_atr(
        cls, high: pd.Series, low: pd.Series, close: pd.Series, period: int = 14
    ) -> pd.Series:
        """
        Calculate Average True Range with Wilder smoothing.

        Args:
            high: High prices
            low: Low prices
            close: Close prices
            period: ATR period (default 14)

        Returns:
            ATR values; NaN before index `period`, the mean true range of
            the first period+1 candles at `period`, Wilder-smoothed after
        """
        _check_period(period)
        true_range = cls.calculate_true_range(high, low, close).to_numpy(dtype=float)
        atr = np.full(len(true_range), np.nan)

        if len(true_range) > period:
            atr[period] = true_range[: period + 1].mean()
            for i in range(period + 1, len(true_range)):
                atr[i] = (atr[i - 1] * (period - 1) + true_range[i]) / period

        return pd.Series(atr, index=high.index)

    @staticmethod
    def calculate_rsi(series: pd.Series, period: int = 14) -> pd.Series:
        """
        Calculate Relative Strength Index with Wilder smoothing.

        Args:
            series: Price series (typically close)
            period: RSI period (default 14)

        Returns:
            RSI values (0-100), one per price from position `period` on.
            The result is not padded: its length is len(series) - period
            and it keeps the input index labels of those positions.

        Raises:
            InsufficientDataForIndicatorError: If fewer than period + 1 prices
        """
        _check_period(period)
        if len(series) < period + 1:
            raise InsufficientDataForIndicatorError("RSI", period + 1, len(series))

        delta = np.diff(series.to_numpy(dtype=float))
        gains = np.where(delta > 0, delta, 0.0)
        losses = np.where(delta < 0, -delta, 0.0)

        avg_gain = gains[:period].mean()
        avg_loss = losses[:period].mean()

        rsi = np.empty(len(series) - period)
        rsi[0] = _oscillator(avg_gain, avg_loss)

        for j, i in enumerate(range(period, len(delta)), start=1):
            avg_gain = (avg_gain * (period - 1) + gains[i]) / period
            avg_loss = (avg_loss * (period - 1) + losses[i]) / period
            rsi[j] = _oscillator(avg_gain, avg_loss)

        return pd.Series(rsi, index=series.index[period:])

    @classmethod
    def calculate_macd(
        cls, series: pd.Series, fast: int = 12, slow: int = 26, signal: int = 9
    ) -> tuple[pd.Series, pd.Series, pd.Series]:
        """
        Calculate MACD (Moving Average Convergence Divergence).

        Args:
            series: Price series (typically close)
            fast: Fast EMA period (default 12)
            slow: Slow EMA period (default 26)
            signal: Signal line period (default 9)

        Returns:
            Tuple of (macd_line, signal_line, histogram)
        """
        ema_fast = cls.calculate_ema(series, fast)
        ema_slow = cls.calculate_ema(series, slow)

        macd_line = ema_fast - ema_slow
        signal_line = cls.calculate_ema(macd_line, signal)
        histogram = macd_line - signal_line

        return macd_line, signal_line, histogram

    @staticmethod
    def calculate_mfi(
        high: pd.Series,
        low: pd.Series,
        close: pd.Series,
        volume: pd.Series,
        period: int = 14,
    ) -> pd.Series:
        """
        Calculate Money Flow Index.

        Args:
            high: High prices
            low: Low prices
            close: Close prices
            volume: Volume
            period: MFI period (default 14)

        Returns:
            MFI values (0-100); NaN before index `period`, and NaN
            everywhere when there are fewer than `period` candles
        """
        _check_period(period)
        mfi = np.full(len(close), np.nan)
        if len(close) < period:
            return pd.Series(mfi, index=close.index)

        typical_price = ((high + low + close) / 3).to_numpy(dtype=float)
        money_flow = typical_price * volume.to_numpy(dtype=float)

        window = MoneyFlowWindow(period)
        for i in range(1, len(typical_price)):
            window.update(typical_price[i], typical_price[i - 1], money_flow[i])
            if i >= period:
                mfi[i] = window.value()

        return pd.Series(mfi, index=close.index)

    @classmethod
    def calculate_all(
        cls, df: pd.DataFrame, periods: Optional[IndicatorPeriods] = None
    ) -> pd.DataFrame:
        """
        Calculate all indicators.

        Args:
            df: DataFrame with columns [open, high, low, close, volume, timestamp]
            periods: Indicator lookback periods (defaults to IndicatorPeriods())

        Returns:
            New DataFrame with INDICATOR_COLUMNS, one row per candle

        Raises:
            InsufficientDataError: If the batch is not longer than the
                largest lookback; nothing is computed in that case
        """
        periods = periods if periods is not None else IndicatorPeriods()
        cls.validate_data(df, min_periods=periods.max_lookback)

        df = df.reset_index(drop=True)
        open_price = df["open"].astype(float)
        high = df["high"].astype(float)
        low = df["low"].astype(float)
        close = df["close"].astype(float)
        volume = df["volume"].astype(float)

        macd_line, signal_line, histogram = cls.calculate_macd(
            close,
            fast=periods.macd_fast_period,
            slow=periods.macd_slow_period,
            signal=periods.macd_signal_period,
        )

        result = pd.DataFrame(
            {
                "timestamp": df["timestamp"] if "timestamp" in df.columns else df.index,
                "open": open_price,
                "high": high,
                "low": low,
                "close": close,
                "volume": volume,
                "ultra_slow_ema": cls.calculate_ema(close, periods.ultra_slow_ema_period),
                "super_slow_ema": cls.calculate_ema(close, periods.super_slow_ema_period),
                "slow_ema": cls.calculate_ema(close, periods.slow_ema_period),
                "fast_ema": cls.calculate_ema(close, periods.fast_ema_period),
                # RSI starts at position `period`; reindexing pads the warm-up with NaN
                "slow_rsi": cls.calculate_rsi(close, periods.slow_rsi_period).reindex(df.index),
                "fast_rsi": cls.calculate_rsi(close, periods.fast_rsi_period).reindex(df.index),
                "macd": macd_line,
                "signal": signal_line,
                "histogram": histogram,
                "mfi": cls.calculate_mfi(high, low, close, volume, periods.mfi_period),
                "atr": cls.calculate_atr(high, low, close, periods.atr_period),
            },
            columns=INDICATOR_COLUMNS,
        )

        logger.info(f"Calculated indicators for {len(result)} candles")

        return result
