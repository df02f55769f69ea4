"""
Configuration management for the kline feature engine.
Loads settings from environment variables and provides typed access.
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

FEATURE_PROJECTIONS = ("compact", "full")


class IndicatorPeriods(BaseModel):
    """Lookback periods for every indicator in the pipeline."""

    model_config = ConfigDict(frozen=True)

    ultra_slow_ema_period: int = Field(default=200, ge=1, description="Ultra slow EMA period")
    super_slow_ema_period: int = Field(default=100, ge=1, description="Super slow EMA period")
    slow_ema_period: int = Field(default=25, ge=1, description="Slow EMA period")
    fast_ema_period: int = Field(default=7, ge=1, description="Fast EMA period")
    slow_rsi_period: int = Field(default=14, ge=1, description="Slow RSI period")
    fast_rsi_period: int = Field(default=7, ge=1, description="Fast RSI period")
    mfi_period: int = Field(default=14, ge=1, description="Money Flow Index period")
    atr_period: int = Field(default=14, ge=1, description="Average True Range period")
    macd_fast_period: int = Field(default=12, ge=1, description="MACD fast EMA period")
    macd_slow_period: int = Field(default=26, ge=1, description="MACD slow EMA period")
    macd_signal_period: int = Field(default=9, ge=1, description="MACD signal EMA period")

    @model_validator(mode="after")
    def check_macd_periods(self) -> "IndicatorPeriods":
        """MACD needs a fast EMA that is actually faster than the slow one."""
        if self.macd_fast_period >= self.macd_slow_period:
            raise ValueError(
                f"macd_fast_period ({self.macd_fast_period}) must be shorter than "
                f"macd_slow_period ({self.macd_slow_period})"
            )
        return self

    @property
    def max_lookback(self) -> int:
        """
        Largest number of leading candles any indicator needs.

        RSI consumes one extra candle because it works on price deltas.
        """
        return max(
            self.ultra_slow_ema_period,
            self.super_slow_ema_period,
            self.slow_ema_period,
            self.fast_ema_period,
            self.fast_rsi_period + 1,
            self.slow_rsi_period + 1,
            self.mfi_period,
            self.atr_period,
        )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: str = Field(default="development", description="Runtime environment")
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Debug mode")

    # Indicator Configuration
    indicator_periods: IndicatorPeriods = Field(
        default_factory=IndicatorPeriods, description="Indicator lookback periods"
    )
    feature_projection: str = Field(
        default="compact", description="Feature projection (compact or full)"
    )

    # Augmentation Configuration
    noise_percent: float = Field(
        default=0.0005, ge=0.0, description="Relative noise amplitude for kline augmentation"
    )
    random_seed: Optional[int] = Field(
        default=None, description="Seed for augmentation noise (None = fresh entropy)"
    )

    @field_validator("feature_projection")
    @classmethod
    def validate_feature_projection(cls, v: str) -> str:
        """Validate feature projection name."""
        v = v.strip().lower()
        if v not in FEATURE_PROJECTIONS:
            raise ValueError(
                f"Invalid feature projection: {v} (expected one of {FEATURE_PROJECTIONS})"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level name."""
        v = v.strip().upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Invalid log level: {v}")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses LRU cache to ensure singleton pattern.
    """
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging using the configured log level."""
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Convenience instance for direct import
settings = get_settings()
