"""Reference limit estimation from a truncated q-q regression.

The truncated sample is compared against a standard normal truncated at the
same 2.5%/97.5% points: theoretical quantiles at probabilities evenly spaced
over [0.025, 0.975] are paired with empirical quantiles evenly spaced over
[0, 1]. A straight line fitted through the central half of that
correspondence estimates mean (intercept) and SD (slope) of the non-diseased
subpopulation; the tails of a truncated sample are least reliable and stay
out of the fit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy import stats

from reflim.distributions.models import (
    DistributionModel,
    QQCorrespondence,
    ReferenceLimits,
    RegressionFit,
)
from reflim.distributions.quantiles import quantile, round_to, rounding_digits, to_log
from reflim.distributions.truncation import TruncationResult, trim_until_stable
from reflim.exceptions import ConfigValidationError, InsufficientDataError
from reflim.utils.logging import get_logger

log = get_logger(__name__, component="limits")

TRUNCATION_PROB = 0.025
Z_975 = 1.96
MIN_QUANTILES = 4


def central_slice(n_quantiles: int) -> slice:
    """Indices round(0.25 n) .. round(0.75 n), 1-based inclusive."""
    start = max(int(round(0.25 * n_quantiles)) - 1, 0)
    stop = int(round(0.75 * n_quantiles))
    return slice(start, stop)


def qq_correspondence(trimmed: np.ndarray, n_quantiles: int = 100) -> QQCorrespondence:
    if n_quantiles < MIN_QUANTILES:
        raise ConfigValidationError(f"n_quantiles must be >= {MIN_QUANTILES}, got {n_quantiles}")
    theoretical = stats.norm.ppf(np.linspace(TRUNCATION_PROB, 1.0 - TRUNCATION_PROB, n_quantiles))
    empirical = quantile(trimmed, np.linspace(0.0, 1.0, n_quantiles))
    return QQCorrespondence(
        theoretical=np.asarray(theoretical, dtype=float),
        empirical=np.asarray(empirical, dtype=float),
        central=central_slice(n_quantiles),
    )


def fit_central_line(qq: QQCorrespondence) -> RegressionFit:
    x = qq.central_theoretical
    y = qq.central_empirical
    if np.ptp(y) == 0:
        # all central quantiles tied: zero slope, linregress would return NaN r
        return RegressionFit(slope=0.0, intercept=float(y[0]), r_squared=float("nan"))
    reg = stats.linregress(x, y)
    return RegressionFit(slope=float(reg.slope), intercept=float(reg.intercept), r_squared=float(reg.rvalue**2))


@dataclass
class LimitEstimate:
    model: DistributionModel
    limits: ReferenceLimits
    fit: RegressionFit
    qq: QQCorrespondence
    truncation: TruncationResult
    digits: Optional[int] = None

    @property
    def lower(self) -> float:
        return self.limits.lower

    @property
    def upper(self) -> float:
        return self.limits.upper

    @property
    def slope(self) -> float:
        return self.fit.slope

    @property
    def intercept(self) -> float:
        return self.fit.intercept

    def rounded(self) -> ReferenceLimits:
        """Limits rounded to display precision; raw values stay on ``limits``."""
        if self.digits is None:
            return self.limits
        return ReferenceLimits(
            lower=round_to(self.limits.lower, self.digits),
            upper=round_to(self.limits.upper, self.digits),
            meanlog=self.limits.meanlog,
            sdlog=self.limits.sdlog,
        )


def estimate_limits(
    values: np.ndarray,
    model: DistributionModel,
    n_quantiles: int = 100,
    apply_rounding: bool = False,
) -> LimitEstimate:
    """Estimate lower/upper reference limits of ``values`` under ``model``."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise InsufficientDataError("Cannot estimate limits of an empty sample")
    working = to_log(values) if model.is_lognormal else values

    truncation = trim_until_stable(working)
    qq = qq_correspondence(truncation.sample, n_quantiles)
    fit = fit_central_line(qq)

    lower = fit.intercept - Z_975 * fit.slope
    upper = fit.intercept + Z_975 * fit.slope
    if model.is_lognormal:
        limits = ReferenceLimits(
            lower=float(np.exp(lower)),
            upper=float(np.exp(upper)),
            meanlog=fit.intercept,
            sdlog=fit.slope,
        )
    else:
        limits = ReferenceLimits(lower=max(float(lower), 0.0), upper=float(upper))

    digits = rounding_digits(float(np.median(values))) if apply_rounding else None
    log.debug(
        "Estimated limits",
        extra={
            "n_samples": int(values.size),
            "model": model.value,
            "lower": limits.lower,
            "upper": limits.upper,
            "r_squared": fit.r_squared,
        },
    )
    return LimitEstimate(model=model, limits=limits, fit=fit, qq=qq, truncation=truncation, digits=digits)


__all__ = [
    "LimitEstimate",
    "TRUNCATION_PROB",
    "Z_975",
    "central_slice",
    "estimate_limits",
    "fit_central_line",
    "qq_correspondence",
]
