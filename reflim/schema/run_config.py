"""Estimation configuration schema and validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from reflim.distributions.models import DistributionModel
from reflim.exceptions import ConfigValidationError

DEFAULT_MIN_SAMPLES = 100


@dataclass(slots=True)
class ReflimConfig:
    lognorm: Optional[bool] = None
    n_quantiles: int = 100
    apply_rounding: bool = False
    min_samples: int = DEFAULT_MIN_SAMPLES
    targets: Optional[Tuple[float, float]] = None

    def __post_init__(self) -> None:
        if self.lognorm is not None and not isinstance(self.lognorm, bool):
            raise ConfigValidationError("lognorm must be true, false or null")
        if isinstance(self.n_quantiles, bool) or not isinstance(self.n_quantiles, int) or self.n_quantiles < 4:
            raise ConfigValidationError("n_quantiles must be an integer >= 4")
        if self.min_samples < DEFAULT_MIN_SAMPLES:
            raise ConfigValidationError(f"min_samples must be >= {DEFAULT_MIN_SAMPLES}")
        if self.targets is not None:
            if len(self.targets) != 2:
                raise ConfigValidationError("targets must be a (lower, upper) pair")
            lower, upper = (float(t) for t in self.targets)
            if lower < 0 or not upper > lower:
                raise ConfigValidationError("targets must satisfy 0 <= lower < upper")
            self.targets = (lower, upper)

    @property
    def model(self) -> Optional[DistributionModel]:
        return DistributionModel.coerce(self.lognorm)

    @classmethod
    def from_dict(cls, data: dict) -> "ReflimConfig":
        known = {k: v for k, v in data.items() if k in cls.__slots__}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigValidationError(f"Unknown configuration keys: {unknown}")
        if known.get("targets") is not None:
            known["targets"] = tuple(known["targets"])
        return cls(**known)

    def to_dict(self) -> dict:
        return {
            "lognorm": self.lognorm,
            "n_quantiles": self.n_quantiles,
            "apply_rounding": self.apply_rounding,
            "min_samples": self.min_samples,
            "targets": list(self.targets) if self.targets is not None else None,
        }


__all__ = ["DEFAULT_MIN_SAMPLES", "ReflimConfig"]
