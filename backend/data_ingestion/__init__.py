"""
Kline ingestion: parsing exchange klines and synthetic augmentation.
"""

from .augmentation import add_noise_to_klines, get_rng
from .kline_parser import KLINE_COLUMNS, ensure_candle_frame, parse_klines

__all__ = ["KLINE_COLUMNS", "parse_klines", "ensure_candle_frame", "add_noise_to_klines", "get_rng"]
