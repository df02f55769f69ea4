"""
Test kline ingestion.

Tests:
1. Parsing exchange klines into a typed candle DataFrame
2. Seeded noise augmentation
"""

import copy

import numpy as np
import pandas as pd
import pytest

from data_ingestion.augmentation import add_noise_to_klines, get_rng
from data_ingestion.kline_parser import ensure_candle_frame, parse_klines
from shared.exceptions import KlineFormatError


class TestParseKlines:
    """Test kline parsing"""

    def test_numeric_columns(self, klines):
        df = parse_klines(klines)

        assert len(df) == len(klines)
        assert "ignore" not in df.columns
        for col in ["open", "high", "low", "close", "volume"]:
            assert df[col].dtype == float
        assert df["open"].iloc[0] == float(klines[0][1])
        assert df["close"].iloc[-1] == float(klines[-1][4])
        assert df["trade_count"].iloc[0] == klines[0][8]

    def test_timestamp_is_open_time(self, klines):
        df = parse_klines(klines)
        assert (df["timestamp"] == df["open_time"]).all()
        assert df["timestamp"].iloc[0] == klines[0][0]

    def test_mixed_text_and_numbers(self):
        kline = [0, "1.5", 2.0, "1", 1.75, "10", 59999, "17.5", 3, "5", "8.75", "0"]
        df = parse_klines([kline])
        assert df.loc[0, "open"] == 1.5
        assert df.loc[0, "high"] == 2.0
        assert df.loc[0, "low"] == 1.0

    def test_wrong_width(self, klines):
        with pytest.raises(KlineFormatError):
            parse_klines([klines[0][:6]])

    def test_unparsable_value(self, klines):
        bad = copy.deepcopy(klines[:3])
        bad[1][4] = "not-a-number"

        with pytest.raises(KlineFormatError):
            parse_klines(bad)

    def test_input_not_modified(self, klines):
        snapshot = copy.deepcopy(klines)
        parse_klines(klines)
        assert klines == snapshot


class TestEnsureCandleFrame:
    def test_accepts_dataframe(self, make_candles):
        df = make_candles(close=[1.0, 2.0, 3.0]).set_index(pd.Index([10, 11, 12]))

        result = ensure_candle_frame(df)

        assert list(result.index) == [0, 1, 2]
        assert list(result["close"]) == [1.0, 2.0, 3.0]

    def test_adds_missing_timestamp(self, make_candles):
        df = make_candles(close=[1.0, 2.0]).drop(columns=["timestamp"])
        assert list(ensure_candle_frame(df)["timestamp"]) == [0, 1]

    def test_rejects_missing_columns(self, make_candles):
        df = make_candles(close=[1.0, 2.0]).drop(columns=["volume"])
        with pytest.raises(KlineFormatError):
            ensure_candle_frame(df)

    def test_parses_klines(self, klines):
        assert len(ensure_candle_frame(klines)) == len(klines)


class TestNoiseAugmentation:
    """Test seeded kline augmentation"""

    def test_reproducible_with_seed(self, klines):
        first = add_noise_to_klines(klines, percent=0.01, rng=123)
        second = add_noise_to_klines(klines, percent=0.01, rng=123)
        assert first == second

    def test_different_seeds_differ(self, klines):
        first = add_noise_to_klines(klines, percent=0.01, rng=1)
        second = add_noise_to_klines(klines, percent=0.01, rng=2)
        assert first != second

    def test_accepts_generator(self, klines):
        result = add_noise_to_klines(klines, percent=0.01, rng=np.random.default_rng(5))
        assert len(result) == len(klines)

    def test_noise_within_percent(self, klines):
        percent = 0.002
        noisy = add_noise_to_klines(klines, percent=percent, rng=7)

        original = parse_klines(klines)
        perturbed = parse_klines(noisy)

        for col in ["open", "high", "low", "close", "volume"]:
            ratio = perturbed[col] / original[col]
            assert ((ratio >= 1 - percent - 1e-12) & (ratio <= 1 + percent + 1e-12)).all(), col

    def test_other_fields_pass_through(self, klines):
        noisy = add_noise_to_klines(klines, percent=0.01, rng=3)

        for before, after in zip(klines, noisy):
            assert after[0] == before[0]
            assert after[6:] == before[6:]
            assert all(isinstance(v, str) for v in after[1:6])

    def test_zero_percent_keeps_values(self, klines):
        noisy = add_noise_to_klines(klines, percent=0.0, rng=3)
        for before, after in zip(klines, noisy):
            assert [float(v) for v in after[1:6]] == [float(v) for v in before[1:6]]

    def test_input_not_modified(self, klines):
        snapshot = copy.deepcopy(klines)
        add_noise_to_klines(klines, percent=0.05, rng=9)
        assert klines == snapshot

    def test_negative_percent(self, klines):
        with pytest.raises(ValueError):
            add_noise_to_klines(klines, percent=-0.1)

    def test_get_rng_passthrough(self):
        generator = np.random.default_rng(0)
        assert get_rng(generator) is generator
