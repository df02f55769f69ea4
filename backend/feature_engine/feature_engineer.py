"""
Feature engineering for model input.

Projects normalized indicator columns into fixed-width feature rows, one
row per candle. The set and order of fields is a configurable projection.
"""

import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from .normalizer import (
    Bounds,
    normalize,
    scale_oscillator,
    scale_unit,
    track_bounds,
)

logger = logging.getLogger(__name__)


class FeatureField(str, Enum):
    """Indicator columns that can be projected into a feature row."""

    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"
    VOLUME = "volume"
    FAST_EMA = "fast_ema"
    SLOW_EMA = "slow_ema"
    SUPER_SLOW_EMA = "super_slow_ema"
    ULTRA_SLOW_EMA = "ultra_slow_ema"
    FAST_RSI = "fast_rsi"
    SLOW_RSI = "slow_rsi"
    MACD = "macd"
    SIGNAL = "signal"
    HISTOGRAM = "histogram"
    MFI = "mfi"
    ATR = "atr"


# Price-like fields share the price bound and map onto [-1, 1]
PRICE_FIELDS = {
    FeatureField.OPEN,
    FeatureField.HIGH,
    FeatureField.LOW,
    FeatureField.CLOSE,
    FeatureField.FAST_EMA,
    FeatureField.SLOW_EMA,
    FeatureField.SUPER_SLOW_EMA,
    FeatureField.ULTRA_SLOW_EMA,
}

# 0-100 oscillators map onto [0, 1]
OSCILLATOR_FIELDS = {FeatureField.FAST_RSI, FeatureField.SLOW_RSI, FeatureField.MFI}

# Fields with their own bound, mapped onto [-1, 1]
SELF_BOUNDED_FIELDS = {FeatureField.MACD, FeatureField.SIGNAL, FeatureField.HISTOGRAM}


class FeatureProjection:
    """
    Ordered, duplicate-free selection of feature fields.

    Args:
        name: Projection name (used in logs)
        fields: Ordered field names or FeatureField members
    """

    def __init__(self, name: str, fields: Iterable):
        self.name = name
        self.fields: Tuple[FeatureField, ...] = tuple(FeatureField(f) for f in fields)

        if not self.fields:
            raise ValueError(f"Projection '{name}' has no fields")
        if len(set(self.fields)) != len(self.fields):
            raise ValueError(f"Projection '{name}' has duplicate fields")

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        return f"FeatureProjection({self.name!r}, width={len(self)})"

    @property
    def names(self) -> List[str]:
        return [f.value for f in self.fields]


COMPACT = FeatureProjection(
    "compact",
    [
        FeatureField.OPEN,
        FeatureField.HIGH,
        FeatureField.LOW,
        FeatureField.CLOSE,
        FeatureField.VOLUME,
        FeatureField.FAST_EMA,
        FeatureField.SLOW_EMA,
        FeatureField.SUPER_SLOW_EMA,
        FeatureField.SLOW_RSI,
        FeatureField.HISTOGRAM,
        FeatureField.MFI,
    ],
)

FULL = FeatureProjection("full", list(FeatureField))

PROJECTIONS: Dict[str, FeatureProjection] = {"compact": COMPACT, "full": FULL}


def get_projection(name: str) -> FeatureProjection:
    """Look up a named projection (compact or full)."""
    try:
        return PROJECTIONS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown feature projection: {name} (expected one of {list(PROJECTIONS)})"
        ) from None


class FeatureEngineer:
    """
    Assemble feature rows from an indicator DataFrame.

    Each field is normalized by its own rule:
    - price-like fields (OHLC, EMAs): [-1, 1] against the batch price bound
    - volume: [0, 1] against the batch volume bound
    - MACD, signal, histogram: [-1, 1] against their own batch bound
    - RSI, MFI: divided by 100
    - ATR: [0, 1] as a fraction of the batch price range

    Undefined (NaN) values become 0.
    """

    def __init__(self, projection: Optional[FeatureProjection] = None):
        """
        Initialize with a feature projection.

        Args:
            projection: Fields to project (default: COMPACT)
        """
        self.projection = projection if projection is not None else COMPACT

    @staticmethod
    def normalize_field(
        field: FeatureField, values: pd.Series, bounds: Dict[str, Bounds]
    ) -> pd.Series:
        """Apply the normalization rule of a single field."""
        if field in PRICE_FIELDS:
            price = bounds["price"]
            normalized = normalize(values, price.min, price.max)
        elif field is FeatureField.VOLUME:
            volume = bounds["volume"]
            normalized = scale_unit(values, volume.min, volume.max)
        elif field in SELF_BOUNDED_FIELDS:
            own = bounds[field.value]
            normalized = normalize(values, own.min, own.max)
        elif field in OSCILLATOR_FIELDS:
            normalized = scale_oscillator(values)
        elif field is FeatureField.ATR:
            price = bounds["price"]
            normalized = scale_unit(values, 0.0, price.max - price.min)
        else:
            raise ValueError(f"No normalization rule for field {field}")

        return normalized.fillna(0.0)

    def build_matrix(
        self, indicators: pd.DataFrame, bounds: Optional[Dict[str, Bounds]] = None
    ) -> pd.DataFrame:
        """
        Build one feature row per candle.

        Args:
            indicators: Indicator DataFrame (see IndicatorCalculator.calculate_all)
            bounds: Precomputed bounds (default: tracked from `indicators`)

        Returns:
            DataFrame of shape (len(indicators), len(projection)) with the
            projection's field names as columns
        """
        if bounds is None:
            bounds = track_bounds(indicators)

        features = pd.DataFrame(
            {
                field.value: self.normalize_field(field, indicators[field.value], bounds)
                for field in self.projection.fields
            },
            index=indicators.index,
            columns=self.projection.names,
        )

        logger.info(
            f"Built {len(features)} feature rows with {len(features.columns)} "
            f"features ({self.projection.name})"
        )

        return features

    def build_vector(
        self,
        indicators: pd.DataFrame,
        position: int = -1,
        bounds: Optional[Dict[str, Bounds]] = None,
    ) -> np.ndarray:
        """
        Build the feature vector of a single candle.

        Bounds still come from the whole batch.

        Args:
            indicators: Indicator DataFrame
            position: Row position (default: latest candle)
            bounds: Precomputed bounds (default: tracked from `indicators`)

        Returns:
            1-D array of length len(projection)
        """
        return self.build_matrix(indicators, bounds).iloc[position].to_numpy(dtype=float)

    def get_feature_names(self) -> List[str]:
        """
        Get feature names in projection order.

        Returns:
            List of feature names
        """
        return self.projection.names
