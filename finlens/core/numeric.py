"""Small numeric helpers with explicit zero guards."""
from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a spreadsheet (2.5 -> 3), not like ``round`` (2.5 -> 2)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def to_score(value: float) -> int:
    return int(round_half_up(value))


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def population_std(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.std(values, ddof=0))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """stdDev / mean; 0.0 when the mean is zero."""
    avg = mean(values)
    if avg == 0:
        return 0.0
    return population_std(values) / avg


def upper_median(values: Sequence[float]) -> float:
    """Element at index ``n // 2`` of the sorted values (0.0 for no values)."""
    if len(values) == 0:
        return 0.0
    ordered = sorted(values)
    return float(ordered[len(ordered) // 2])
