"""Normal vs log-normal classification from Bowley's quartile skewness."""

from __future__ import annotations

import math

import numpy as np

from reflim.distributions.models import DistributionModel, Quartiles
from reflim.distributions.quantiles import quartiles, to_log
from reflim.exceptions import InsufficientDataError
from reflim.utils.logging import get_logger

log = get_logger(__name__, component="classifier")

# Empirical cutoff on BS(x) - BS(log x).
SKEWNESS_CUTOFF = 0.05


def bowley_from_quartiles(q: Quartiles) -> float:
    """Return (Q1 - 2*Q2 + Q3) / (Q3 - Q1); NaN when the IQR is zero."""
    iqr = q.q3 - q.q1
    if iqr == 0:
        return math.nan
    return (q.q1 - 2.0 * q.q2 + q.q3) / iqr


def bowley_skewness(values: np.ndarray) -> float:
    return bowley_from_quartiles(quartiles(values))


def skewness_gain(values: np.ndarray) -> float:
    """BS(x) - BS(log x): how much symmetry the log transform buys."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise InsufficientDataError("Cannot classify an empty sample")
    logged = to_log(values)
    return bowley_skewness(values) - bowley_skewness(logged)


def classify(values: np.ndarray) -> DistributionModel:
    """Decide whether the sample is better modeled as normal or log-normal.

    Only the interquartile range enters the decision, so pathological values in
    the tails barely move it. A zero IQR (heavily tied data) cannot show skew
    and is classified as normal.
    """
    gain = skewness_gain(values)
    if math.isfinite(gain) and gain >= SKEWNESS_CUTOFF:
        model = DistributionModel.LOGNORMAL
    else:
        model = DistributionModel.NORMAL
    if not math.isfinite(gain):
        log.warning("Bowley skewness undefined (zero IQR); assuming normal", extra={"n_samples": len(values)})
    log.debug("Classified sample", extra={"n_samples": len(values), "gain": gain, "model": model.value})
    return model


__all__ = ["SKEWNESS_CUTOFF", "bowley_from_quartiles", "bowley_skewness", "classify", "skewness_gain"]
