"""
Decimal Utilities
starboard/scoring/utils.py

Provides precision-safe decimal math for scoring calculations.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Union

Number = Union[int, float, Decimal]


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value: Optional[Decimal], places: int = 4) -> Optional[float]:
    """Round a Decimal to `places` and return it as float (None passes through)."""
    if value is None:
        return None
    return float(value.quantize(Decimal(10) ** -places, rounding=ROUND_HALF_UP))


def clamp(
    value: Decimal,
    min_val: Decimal = Decimal("0"),
    max_val: Decimal = Decimal("100"),
) -> Decimal:
    """Clamp value to range [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def weighted_mean(values: List[Decimal], weights: List[Decimal]) -> Decimal:
    """
    Calculate weighted mean.

    Formula: Σ(value_i × weight_i) / Σ(weight_i)
    Returns Decimal("0") if all weights are zero.
    """
    if len(values) != len(weights):
        raise ValueError("values and weights must have same length")

    total_weight = sum(weights, Decimal("0"))
    if total_weight == 0:
        return Decimal("0")

    numerator = sum((v * w for v, w in zip(values, weights)), Decimal("0"))
    return numerator / total_weight


def mean(values: List[Decimal]) -> Optional[Decimal]:
    """Arithmetic mean, or None for an empty list."""
    if not values:
        return None
    return sum(values, Decimal("0")) / Decimal(len(values))
