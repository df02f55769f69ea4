"""
Feature service for turning kline batches into model features.

Parses klines, calculates indicators and builds normalized feature
matrices for ML training and inference.
"""

import logging
from typing import Dict, Optional, Sequence, Union

import numpy as np
import pandas as pd

from data_ingestion.augmentation import RandomSource, add_noise_to_klines
from data_ingestion.kline_parser import ensure_candle_frame
from shared.config import IndicatorPeriods, settings

from .feature_engineer import FeatureEngineer, FeatureProjection, get_projection
from .indicators import IndicatorCalculator
from .normalizer import Bounds, track_bounds

logger = logging.getLogger(__name__)

CandleInput = Union[Sequence[Sequence], pd.DataFrame]


class FeatureService:
    """
    Service for calculating indicators and feature matrices from klines.

    Every call works on a complete batch and keeps no state between calls.
    """

    def __init__(
        self,
        periods: Optional[IndicatorPeriods] = None,
        projection: Optional[FeatureProjection] = None,
    ):
        """
        Initialize with indicator periods and a feature projection.

        Args:
            periods: Indicator lookback periods (default: settings.indicator_periods)
            projection: Feature projection (default: settings.feature_projection)
        """
        self.periods = periods if periods is not None else settings.indicator_periods
        self.indicator_calculator = IndicatorCalculator()
        self.feature_engineer = FeatureEngineer(
            projection if projection is not None else get_projection(settings.feature_projection)
        )

    @property
    def projection(self) -> FeatureProjection:
        return self.feature_engineer.projection

    def calculate_indicators(self, candles: CandleInput) -> pd.DataFrame:
        """
        Calculate all indicators for a batch.

        Args:
            candles: Kline records or a parsed candle DataFrame

        Returns:
            Indicator DataFrame, one row per candle

        Raises:
            InsufficientDataError: If the batch is not longer than the
                largest configured lookback
        """
        df = ensure_candle_frame(candles)
        return self.indicator_calculator.calculate_all(df, self.periods)

    def get_bounds(self, candles: CandleInput) -> Dict[str, Bounds]:
        """
        Get the normalization bounds of a batch.

        Useful for mapping normalized model outputs back to prices with
        `normalizer.unnormalize`.
        """
        return track_bounds(self.calculate_indicators(candles))

    def build_features(self, candles: CandleInput) -> pd.DataFrame:
        """
        Build the normalized feature DataFrame for a batch.

        Args:
            candles: Kline records or a parsed candle DataFrame

        Returns:
            DataFrame with shape (n_candles, projection width)
        """
        indicators = self.calculate_indicators(candles)
        return self.feature_engineer.build_matrix(indicators)

    def build_feature_matrix(self, candles: CandleInput) -> np.ndarray:
        """
        Build the feature matrix as a numpy array for model input.

        Example:
            >>> service = FeatureService()
            >>> matrix = service.build_feature_matrix(klines)
            >>> print(matrix.shape)
            (500, 11)
        """
        return self.build_features(candles).to_numpy(dtype=float)

    def build_augmented_features(
        self,
        klines: Sequence[Sequence],
        percent: Optional[float] = None,
        rng: RandomSource = None,
    ) -> pd.DataFrame:
        """
        Build features for a noise-perturbed copy of a kline batch.

        Args:
            klines: Kline records
            percent: Noise amplitude (default: settings.noise_percent)
            rng: Random source (Generator, seed, or None)

        Returns:
            Feature DataFrame of the perturbed batch
        """
        noisy_klines = add_noise_to_klines(klines, percent=percent, rng=rng)
        return self.build_features(noisy_klines)
