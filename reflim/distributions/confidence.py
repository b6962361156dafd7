"""Confidence intervals around estimated reference limits."""

from __future__ import annotations

import math
import warnings

from reflim.distributions.models import ConfidenceBounds, DistributionModel
from reflim.exceptions import (
    ConfidenceInstabilityWarning,
    DomainError,
    InsufficientDataError,
    InvalidRangeError,
)

# 95% interval width in SDs (2 * 1.96).
INTERVAL_WIDTH_SD = 3.92
OUTER_COEF = 5.81
OUTER_OFFSET = 0.66
INNER_COEF = 7.26
INNER_OFFSET = 5.58


def confidence_bounds(n: int, lower: float, upper: float, model: DistributionModel) -> ConfidenceBounds:
    """Approximate 95% confidence bounds for both limits from order-statistics theory.

    Below n = 32 the inner-bound denominator ``sqrt(n) - 5.58`` is zero or
    negative, so the call fails rather than return sign-flipped bounds.
    """
    if not upper > lower:
        raise InvalidRangeError(f"upper limit ({upper}) must exceed lower limit ({lower})")
    root_n = math.sqrt(n)
    if root_n - INNER_OFFSET <= 0:
        raise InsufficientDataError(f"Confidence intervals are undefined for n={n} (need n >= 32)")

    if model.is_lognormal:
        if lower <= 0:
            raise DomainError(f"log-normal confidence bounds need a positive lower limit, got {lower}")
        lower, upper = math.log(lower), math.log(upper)

    sigma = (upper - lower) / INTERVAL_WIDTH_SD
    diff_outer = sigma * OUTER_COEF / (root_n + OUTER_OFFSET)
    diff_inner = sigma * INNER_COEF / (root_n - INNER_OFFSET)

    values = (lower - diff_outer, lower + diff_inner, upper - diff_inner, upper + diff_outer)
    if model.is_lognormal:
        values = tuple(math.exp(v) for v in values)
    bounds = ConfidenceBounds(*values)

    if not bounds.is_ordered:
        warnings.warn(
            f"Confidence bounds overlap for n={n}; intervals are unreliable at this sample size",
            ConfidenceInstabilityWarning,
            stacklevel=2,
        )
    return bounds


__all__ = ["confidence_bounds"]
