"""
Exception classes for kline parsing and feature calculation.
"""

from typing import Optional


class FeatureEngineError(ValueError):
    """Base exception for feature engine errors"""

    pass


class InsufficientDataError(FeatureEngineError):
    """Raised when a candle batch is shorter than the required lookback"""

    def __init__(self, required: int, available: int, message: Optional[str] = None):
        self.required = required
        self.available = available
        super().__init__(
            message
            or f"Not enough candles to compute indicators: need more than {required}, got {available}"
        )


class InsufficientDataForIndicatorError(InsufficientDataError):
    """Raised when a single indicator is called with too short a series"""

    def __init__(self, indicator: str, required: int, available: int):
        self.indicator = indicator
        super().__init__(
            required,
            available,
            f"Cannot calculate {indicator}: need at least {required} values, got {available}",
        )


class RangeValidationError(FeatureEngineError):
    """Raised when a normalized series has a value outside its expected bounds"""

    def __init__(self, value: float, lower: float, upper: float):
        self.value = value
        self.lower = lower
        self.upper = upper
        super().__init__(f"Input value {value} is out of range [{lower}, {upper}]")


class KlineFormatError(FeatureEngineError):
    """Raised when raw kline records cannot be parsed"""

    pass
