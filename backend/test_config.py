"""
Test configuration loading.
"""

import pytest
from pydantic import ValidationError

from shared.config import IndicatorPeriods, Settings, configure_logging


class TestIndicatorPeriods:
    def test_defaults(self):
        periods = IndicatorPeriods()

        assert periods.ultra_slow_ema_period == 200
        assert periods.fast_ema_period == 7
        assert (periods.macd_fast_period, periods.macd_slow_period, periods.macd_signal_period) == (
            12,
            26,
            9,
        )
        assert periods.max_lookback == 200

    def test_rejects_non_positive_period(self):
        with pytest.raises(ValidationError):
            IndicatorPeriods(atr_period=0)

    def test_rejects_inverted_macd(self):
        with pytest.raises(ValidationError):
            IndicatorPeriods(macd_fast_period=26, macd_slow_period=12)

    def test_frozen(self):
        periods = IndicatorPeriods()
        with pytest.raises(ValidationError):
            periods.atr_period = 3


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FEATURE_PROJECTION", raising=False)
        settings = Settings(_env_file=None)

        assert settings.feature_projection == "compact"
        assert settings.indicator_periods == IndicatorPeriods()
        assert settings.noise_percent == 0.0005
        assert settings.random_seed is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("INDICATOR_PERIODS__ATR_PERIOD", "10")
        monkeypatch.setenv("FEATURE_PROJECTION", "Full")
        monkeypatch.setenv("RANDOM_SEED", "17")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.indicator_periods.atr_period == 10
        assert settings.indicator_periods.mfi_period == 14
        assert settings.feature_projection == "full"
        assert settings.random_seed == 17
        assert settings.log_level == "DEBUG"

    def test_invalid_projection(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, feature_projection="wide")

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="LOUD")


def test_configure_logging_accepts_level():
    configure_logging("WARNING")
