"""Iterative quartile-based truncation of contaminating outliers.

The loop is modeled as a small state machine:

* ``FIRST_PASS``   -- truncate with factor 2.9 (~ z(0.025) / z(0.25)).
* ``STEADY_STATE`` -- truncate with factor 3.1 (~ z(0.025) / z(0.25*0.95 + 0.025)),
  compensating for quartiles measured on an already-truncated distribution.
* ``CONVERGED``    -- a pass removed nothing; the sample is at its fixed point.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List

import numpy as np

from reflim.distributions.quantiles import quartiles, to_log
from reflim.exceptions import ConvergenceWarning, DegenerateSpreadWarning, EmptyTruncationError
from reflim.utils.logging import get_logger

log = get_logger(__name__, component="truncation")

FIRST_PASS_FACTOR = 2.9
STEADY_STATE_FACTOR = 3.1
MAX_ITERATIONS = 50


class TruncationPhase(str, Enum):
    FIRST_PASS = "first_pass"
    STEADY_STATE = "steady_state"
    CONVERGED = "converged"


def truncate_once(values: np.ndarray, quantile_factor: float) -> np.ndarray:
    """Keep values within median +/- factor * (smaller quartile half-distance)."""
    values = np.asarray(values, dtype=float)
    q = quartiles(values)
    spread = min(q.half_lower, q.half_upper)
    if spread == 0:
        warnings.warn(
            f"Zero interquartile half-spread at median {q.q2:g}; truncation keeps only the median value(s)",
            DegenerateSpreadWarning,
            stacklevel=2,
        )
    lim_low = q.q2 - quantile_factor * spread
    lim_high = q.q2 + quantile_factor * spread
    return values[(values >= lim_low) & (values <= lim_high)]


@dataclass(frozen=True)
class TruncationState:
    sample: np.ndarray
    phase: TruncationPhase = TruncationPhase.FIRST_PASS
    iteration: int = 0

    @property
    def quantile_factor(self) -> float:
        if self.phase is TruncationPhase.FIRST_PASS:
            return FIRST_PASS_FACTOR
        return STEADY_STATE_FACTOR

    @property
    def converged(self) -> bool:
        return self.phase is TruncationPhase.CONVERGED


def step(state: TruncationState) -> TruncationState:
    """Run one truncation pass and return the successor state."""
    if state.converged:
        return state
    trimmed = truncate_once(state.sample, state.quantile_factor)
    if trimmed.size == 0:
        raise EmptyTruncationError(
            f"Truncation pass {state.iteration + 1} removed all {state.sample.size} values"
        )
    removed = state.sample.size - trimmed.size
    log.debug(
        "Truncation pass",
        extra={
            "iteration": state.iteration + 1,
            "factor": state.quantile_factor,
            "n_samples": int(trimmed.size),
            "removed": int(removed),
        },
    )
    phase = TruncationPhase.CONVERGED if removed == 0 else TruncationPhase.STEADY_STATE
    return replace(state, sample=trimmed, phase=phase, iteration=state.iteration + 1)


@dataclass
class TruncationResult:
    state: TruncationState
    n_initial: int
    sizes: List[int] = field(default_factory=list)

    @property
    def sample(self) -> np.ndarray:
        return self.state.sample

    @property
    def n_trunc(self) -> int:
        return int(self.state.sample.size)

    @property
    def passes(self) -> int:
        return self.state.iteration


def trim_until_stable(values: np.ndarray, max_iterations: int = MAX_ITERATIONS) -> TruncationResult:
    """Truncate repeatedly in the space the values are given in until a pass removes nothing."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise EmptyTruncationError("Cannot truncate an empty sample")
    state = TruncationState(sample=values)
    sizes = [int(values.size)]
    while not state.converged:
        if state.iteration >= max_iterations:
            warnings.warn(
                f"Truncation did not converge within {max_iterations} passes; using last sample",
                ConvergenceWarning,
                stacklevel=2,
            )
            break
        state = step(state)
        sizes.append(int(state.sample.size))
    return TruncationResult(state=state, n_initial=int(values.size), sizes=sizes)


def robust_trim(values: np.ndarray, is_lognormal: bool) -> np.ndarray:
    """Return the truncated fixed point of ``values`` in original units."""
    values = np.asarray(values, dtype=float)
    if not is_lognormal:
        return trim_until_stable(values).sample
    return np.exp(trim_until_stable(to_log(values)).sample)


__all__ = [
    "FIRST_PASS_FACTOR",
    "MAX_ITERATIONS",
    "STEADY_STATE_FACTOR",
    "TruncationPhase",
    "TruncationResult",
    "TruncationState",
    "robust_trim",
    "step",
    "trim_until_stable",
    "truncate_once",
]
