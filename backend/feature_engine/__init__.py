"""
Feature engine for ML model input.

Calculates technical indicators and assembles normalized feature vectors
from OHLCV candle data.
"""

from .feature_engineer import COMPACT, FULL, FeatureEngineer, FeatureField, FeatureProjection
from .feature_service import FeatureService
from .indicators import IndicatorCalculator
from .normalizer import Bounds, normalize, track_bounds, unnormalize, validate_series_range

__all__ = [
    "IndicatorCalculator",
    "FeatureEngineer",
    "FeatureService",
    "FeatureField",
    "FeatureProjection",
    "COMPACT",
    "FULL",
    "Bounds",
    "normalize",
    "unnormalize",
    "track_bounds",
    "validate_series_range",
]
