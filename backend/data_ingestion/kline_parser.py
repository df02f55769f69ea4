"""
Kline parsing for exchange candle data.

Converts positional kline records (as returned by a typical exchange kline
endpoint, numeric values possibly encoded as text) into a typed pandas
DataFrame that the indicator engine consumes.
"""

import logging
from typing import Sequence

import pandas as pd

from shared.exceptions import KlineFormatError

logger = logging.getLogger(__name__)

# Positional layout of an exchange kline record
KLINE_COLUMNS = [
    "open_time",
    "open",
    "high",
    "low",
    "close",
    "volume",
    "close_time",
    "quote_volume",
    "trade_count",
    "taker_buy_base_volume",
    "taker_buy_quote_volume",
    "ignore",
]

KLINE_FIELD_COUNT = len(KLINE_COLUMNS)

OHLCV_COLUMNS = ["open", "high", "low", "close", "volume"]


def parse_klines(klines: Sequence[Sequence]) -> pd.DataFrame:
    """
    Parse raw kline records into a candle DataFrame.

    Args:
        klines: Sequence of 12-field kline records

    Returns:
        DataFrame with numeric columns [open_time, open, high, low, close,
        volume, close_time, quote_volume, trade_count,
        taker_buy_base_volume, taker_buy_quote_volume, timestamp]

    Raises:
        KlineFormatError: If a record has the wrong width or a field
            cannot be parsed as a number
    """
    for i, kline in enumerate(klines):
        if len(kline) != KLINE_FIELD_COUNT:
            raise KlineFormatError(
                f"Kline {i} has {len(kline)} fields, expected {KLINE_FIELD_COUNT}"
            )

    df = pd.DataFrame([list(k) for k in klines], columns=KLINE_COLUMNS)
    df = df.drop(columns=["ignore"])

    for col in df.columns:
        try:
            df[col] = pd.to_numeric(df[col], errors="raise")
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to parse kline column {col}: {e}")
            raise KlineFormatError(f"Invalid numeric value in column {col}: {e}") from e

    df[OHLCV_COLUMNS] = df[OHLCV_COLUMNS].astype(float)
    df["timestamp"] = df["open_time"]

    logger.debug(f"Parsed {len(df)} klines")

    return df


def ensure_candle_frame(data) -> pd.DataFrame:
    """
    Accept either raw klines or an already parsed candle DataFrame.

    Args:
        data: Kline records or DataFrame with OHLCV columns

    Returns:
        Candle DataFrame with a fresh RangeIndex
    """
    if isinstance(data, pd.DataFrame):
        missing_cols = [col for col in OHLCV_COLUMNS if col not in data.columns]
        if missing_cols:
            raise KlineFormatError(f"Missing required columns: {missing_cols}")

        df = data.reset_index(drop=True)
        if "timestamp" not in df.columns:
            df = df.assign(timestamp=df["open_time"] if "open_time" in df.columns else df.index)
        return df

    return parse_klines(data)
