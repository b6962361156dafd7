"""Shared models for the reference interval pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


class DistributionModel(str, Enum):
    NORMAL = "normal"
    LOGNORMAL = "lognormal"

    @property
    def is_lognormal(self) -> bool:
        return self is DistributionModel.LOGNORMAL

    @classmethod
    def coerce(cls, value: "DistributionModel | bool | str | None") -> Optional["DistributionModel"]:
        """Map a caller-supplied model hint onto a tag; None means classify."""
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.LOGNORMAL if value else cls.NORMAL
        normalized = str(value).strip().lower()
        if normalized in {"", "auto", "none"}:
            return None
        if normalized in {"log", "lognorm", "lognormal", "log-normal"}:
            return cls.LOGNORMAL
        if normalized in {"norm", "normal"}:
            return cls.NORMAL
        raise ValueError(f"Unknown distribution model '{value}'")


@dataclass(frozen=True)
class Quartiles:
    q1: float
    q2: float
    q3: float

    @property
    def half_lower(self) -> float:
        return self.q2 - self.q1

    @property
    def half_upper(self) -> float:
        return self.q3 - self.q2


@dataclass(frozen=True)
class QQCorrespondence:
    """Theoretical truncated-normal quantiles paired with empirical ones by rank."""

    theoretical: np.ndarray
    empirical: np.ndarray
    central: slice

    def __len__(self) -> int:
        return len(self.theoretical)

    @property
    def central_theoretical(self) -> np.ndarray:
        return self.theoretical[self.central]

    @property
    def central_empirical(self) -> np.ndarray:
        return self.empirical[self.central]


@dataclass(frozen=True)
class RegressionFit:
    slope: float
    intercept: float
    r_squared: float


@dataclass(frozen=True)
class ReferenceLimits:
    lower: float
    upper: float
    meanlog: Optional[float] = None
    sdlog: Optional[float] = None


@dataclass(frozen=True)
class ConfidenceBounds:
    low_low: float
    low_high: float
    high_low: float
    high_high: float

    @property
    def is_ordered(self) -> bool:
        return self.low_low <= self.low_high <= self.high_low <= self.high_high

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.low_low, self.low_high, self.high_low, self.high_high)


__all__ = [
    "ConfidenceBounds",
    "DistributionModel",
    "QQCorrespondence",
    "Quartiles",
    "ReferenceLimits",
    "RegressionFit",
]
