"""Comparison of estimated limits against externally supplied target limits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from reflim.distributions.models import ConfidenceBounds
from reflim.exceptions import ConfigValidationError

TargetPosition = Literal["below", "within", "above"]


def _position(target: float, low: float, high: float) -> TargetPosition:
    if target < low:
        return "below"
    if target > high:
        return "above"
    return "within"


@dataclass(frozen=True)
class TargetAssessment:
    target_lower: float
    target_upper: float
    lower: TargetPosition
    upper: TargetPosition

    @property
    def consistent(self) -> bool:
        return self.lower == "within" and self.upper == "within"

    def to_dict(self) -> dict:
        return {
            "target_lower": self.target_lower,
            "target_upper": self.target_upper,
            "lower": self.lower,
            "upper": self.upper,
            "consistent": self.consistent,
        }


def validate_targets(target_lower: float, target_upper: float) -> None:
    if target_lower < 0:
        raise ConfigValidationError("target lower limit must be >= 0")
    if not target_upper > target_lower:
        raise ConfigValidationError("target upper limit must exceed target lower limit")


def compare_with_targets(bounds: ConfidenceBounds, target_lower: float, target_upper: float) -> TargetAssessment:
    """Locate each target limit relative to the confidence interval of its estimate."""
    validate_targets(target_lower, target_upper)
    return TargetAssessment(
        target_lower=float(target_lower),
        target_upper=float(target_upper),
        lower=_position(target_lower, bounds.low_low, bounds.low_high),
        upper=_position(target_upper, bounds.high_low, bounds.high_high),
    )


__all__ = ["TargetAssessment", "TargetPosition", "compare_with_targets", "validate_targets"]
