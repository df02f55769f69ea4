"""
Synthetic augmentation of kline batches.

Produces noise-perturbed copies of a kline batch for training-data
augmentation. Randomness comes from an explicit numpy Generator so runs
can be reproduced from a seed.
"""

import logging
from typing import List, Optional, Sequence, Union

import numpy as np

from shared.config import settings
from shared.exceptions import KlineFormatError

from .kline_parser import KLINE_FIELD_COUNT

logger = logging.getLogger(__name__)

# Positions of open, high, low, close, volume in a kline record
NOISY_FIELDS = slice(1, 6)

RandomSource = Union[np.random.Generator, int, None]


def get_rng(rng: RandomSource = None) -> np.random.Generator:
    """
    Resolve a random source into a numpy Generator.

    Args:
        rng: Generator, integer seed, or None (uses settings.random_seed)

    Returns:
        numpy Generator
    """
    if isinstance(rng, np.random.Generator):
        return rng
    if rng is None:
        rng = settings.random_seed
    return np.random.default_rng(rng)


def add_noise_to_klines(
    klines: Sequence[Sequence],
    percent: Optional[float] = None,
    rng: RandomSource = None,
) -> List[list]:
    """
    Multiply each OHLCV field by (1 + uniform noise in [-percent, +percent]).

    Every field is perturbed independently. Other fields are passed through
    unchanged. Perturbed values are returned as text, matching the
    exchange kline format.

    Args:
        klines: Sequence of 12-field kline records
        percent: Noise amplitude as a fraction (default settings.noise_percent)
        rng: Random source (Generator, seed, or None)

    Returns:
        New list of kline records; the input is not modified
    """
    if percent is None:
        percent = settings.noise_percent
    if percent < 0:
        raise ValueError(f"Noise percent must be non-negative, got {percent}")

    generator = get_rng(rng)
    n_fields = NOISY_FIELDS.stop - NOISY_FIELDS.start
    factors = 1 + generator.uniform(-percent, percent, size=(len(klines), n_fields))

    result = []
    for kline, row_factors in zip(klines, factors):
        if len(kline) != KLINE_FIELD_COUNT:
            raise KlineFormatError(
                f"Kline has {len(kline)} fields, expected {KLINE_FIELD_COUNT}"
            )

        values = [float(v) for v in kline[NOISY_FIELDS]]
        noisy = [str(value * factor) for value, factor in zip(values, row_factors)]
        result.append([kline[0], *noisy, *kline[NOISY_FIELDS.stop:]])

    logger.info(f"Generated noisy copy of {len(result)} klines (±{percent:.4%})")

    return result
