"""
Shared fixtures for feature engine tests.
"""

import logging
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from shared.config import IndicatorPeriods

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

START_TIME_MS = 1_700_000_000_000
INTERVAL_MS = 60_000


def generate_klines(n: int, seed: int = 42, start_price: float = 100.0) -> list:
    """Random-walk klines in exchange format (numbers as text)."""
    rng = np.random.default_rng(seed)
    klines = []
    price = start_price

    for i in range(n):
        open_price = price
        close = max(1.0, open_price * (1 + rng.normal(0, 0.01)))
        high = max(open_price, close) * (1 + abs(rng.normal(0, 0.003)))
        low = min(open_price, close) * (1 - abs(rng.normal(0, 0.003)))
        volume = rng.uniform(10, 1000)
        open_time = START_TIME_MS + i * INTERVAL_MS

        klines.append(
            [
                open_time,
                f"{open_price:.4f}",
                f"{high:.4f}",
                f"{low:.4f}",
                f"{close:.4f}",
                f"{volume:.4f}",
                open_time + INTERVAL_MS - 1,
                f"{volume * close:.4f}",
                int(rng.integers(1, 500)),
                f"{volume / 2:.4f}",
                f"{volume * close / 2:.4f}",
                "0",
            ]
        )
        price = close

    return klines


def candle_frame(close, high=None, low=None, open_price=None, volume=None) -> pd.DataFrame:
    """Candle DataFrame from explicit price lists."""
    close = [float(c) for c in close]
    n = len(close)
    return pd.DataFrame(
        {
            "timestamp": [START_TIME_MS + i * INTERVAL_MS for i in range(n)],
            "open": open_price if open_price is not None else close,
            "high": high if high is not None else close,
            "low": low if low is not None else close,
            "close": close,
            "volume": volume if volume is not None else [100.0] * n,
        }
    )


@pytest.fixture
def kline_factory():
    return generate_klines


@pytest.fixture
def klines():
    return generate_klines(300)


@pytest.fixture
def small_periods():
    """Short lookbacks so tests can run on small batches (max lookback 20)."""
    return IndicatorPeriods(
        ultra_slow_ema_period=20,
        super_slow_ema_period=15,
        slow_ema_period=10,
        fast_ema_period=5,
        slow_rsi_period=14,
        fast_rsi_period=7,
        mfi_period=14,
        atr_period=14,
    )


@pytest.fixture
def make_candles():
    return candle_frame
