"""Quantile helpers shared by every pipeline stage.

All order statistics use linear interpolation between order statistics
(Hyndman-Fan type 7, numpy's ``method="linear"``). Mixing estimators between
stages shifts the limits measurably at small n, so nothing else in the
package calls ``np.quantile`` directly.
"""

from __future__ import annotations

import math

import numpy as np

from reflim.distributions.models import Quartiles
from reflim.exceptions import DomainError, InsufficientDataError

QUANTILE_METHOD = "linear"


def quantile(values: np.ndarray, probs) -> np.ndarray:
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise InsufficientDataError("Cannot compute quantiles of an empty sample")
    return np.quantile(values, probs, method=QUANTILE_METHOD)


def quartiles(values: np.ndarray) -> Quartiles:
    q1, q2, q3 = quantile(values, [0.25, 0.5, 0.75])
    return Quartiles(float(q1), float(q2), float(q3))


def ensure_positive(values: np.ndarray, what: str = "log transform") -> None:
    values = np.asarray(values, dtype=float)
    if values.size and np.min(values) <= 0:
        n_bad = int(np.sum(values <= 0))
        raise DomainError(f"{what} requires strictly positive values; found {n_bad} value(s) <= 0")


def to_log(values: np.ndarray) -> np.ndarray:
    values = np.asarray(values, dtype=float)
    ensure_positive(values)
    return np.log(values)


def rounding_digits(median: float) -> int:
    """Decimal places for display: three significant digits of the median's magnitude."""
    if not median > 0 or not math.isfinite(median):
        raise DomainError(f"Rounding precision needs a positive finite median, got {median}")
    return 2 - math.floor(math.log10(median))


def round_to(value: float, digits: int) -> float:
    return float(round(value, digits))


__all__ = [
    "QUANTILE_METHOD",
    "ensure_positive",
    "quantile",
    "quartiles",
    "round_to",
    "rounding_digits",
    "to_log",
]
