"""Reference interval orchestration: clean -> classify -> trim/fit -> confidence.

Any stage failure aborts the call; no partial results are returned. Non-fatal
conditions raised by the stages as ``ReflimWarning`` are collected and
returned on the result instead of being silently dropped.
"""

from __future__ import annotations

import time
import warnings
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import numpy as np

from reflim.data.loader import clean_sample
from reflim.distributions.classifier import classify
from reflim.distributions.confidence import confidence_bounds
from reflim.distributions.limits import LimitEstimate, estimate_limits
from reflim.distributions.models import ConfidenceBounds, DistributionModel, QQCorrespondence
from reflim.distributions.quantiles import ensure_positive, round_to
from reflim.distributions.targets import TargetAssessment, compare_with_targets
from reflim.exceptions import ConfigValidationError, InsufficientDataError, ReflimWarning
from reflim.schema.run_config import DEFAULT_MIN_SAMPLES, ReflimConfig
from reflim.utils.logging import get_logger

log = get_logger(__name__, component="pipeline")


@dataclass
class ReflimResult:
    lower: float
    upper: float
    slope: float
    intercept: float
    low_low: float
    low_high: float
    high_low: float
    high_high: float
    model: DistributionModel
    model_supplied: bool
    n_total: int
    n_trunc: int
    mean: float
    sd: float
    qq: QQCorrespondence
    r_squared: float
    meanlog: Optional[float] = None
    sdlog: Optional[float] = None
    targets: Optional[TargetAssessment] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def perc_norm(self) -> float:
        """Percentage of cleaned values retained by truncation."""
        return 100.0 * self.n_trunc / self.n_total

    @property
    def limits(self) -> Tuple[float, float]:
        return (self.lower, self.upper)

    @property
    def confidence(self) -> ConfidenceBounds:
        return ConfidenceBounds(self.low_low, self.low_high, self.high_low, self.high_high)

    def to_dict(self, include_qq: bool = False) -> dict:
        payload = {
            "lower": self.lower,
            "upper": self.upper,
            "slope": self.slope,
            "intercept": self.intercept,
            "low_low": self.low_low,
            "low_high": self.low_high,
            "high_low": self.high_low,
            "high_high": self.high_high,
            "model": self.model.value,
            "model_supplied": self.model_supplied,
            "n_total": self.n_total,
            "n_trunc": self.n_trunc,
            "perc_norm": self.perc_norm,
            "mean": self.mean,
            "sd": self.sd,
            "meanlog": self.meanlog,
            "sdlog": self.sdlog,
            "r_squared": self.r_squared,
            "targets": self.targets.to_dict() if self.targets else None,
            "warnings": list(self.warnings),
        }
        if include_qq:
            payload["qq"] = {
                "theoretical": self.qq.theoretical.tolist(),
                "empirical": self.qq.empirical.tolist(),
                "central_start": self.qq.central.start,
                "central_stop": self.qq.central.stop,
            }
        return payload


def _run_stages(
    values: np.ndarray,
    model: Optional[DistributionModel],
    config: ReflimConfig,
) -> Tuple[DistributionModel, LimitEstimate, ConfidenceBounds]:
    resolved = model if model is not None else classify(values)
    estimate = estimate_limits(
        values, resolved, n_quantiles=config.n_quantiles, apply_rounding=config.apply_rounding
    )
    bounds = confidence_bounds(values.size, estimate.lower, estimate.upper, resolved)
    return resolved, estimate, bounds


def reflim(
    sample: Iterable,
    model: DistributionModel | bool | str | None = None,
    n_quantiles: int = 100,
    apply_rounding: bool = False,
    targets: Optional[Tuple[float, float]] = None,
    config: Optional[ReflimConfig] = None,
    analyte: Optional[str] = None,
) -> ReflimResult:
    """Estimate the reference interval of the non-pathological part of ``sample``.

    ``model`` bypasses classification when given. When ``config`` is passed it
    replaces ``n_quantiles``, ``apply_rounding`` and ``targets``; an explicit
    ``model`` still wins over ``config.lognorm``.
    """
    if config is None:
        config = ReflimConfig(
            n_quantiles=n_quantiles,
            apply_rounding=apply_rounding,
            targets=tuple(targets) if targets is not None else None,
        )
    try:
        supplied = DistributionModel.coerce(model) if model is not None else config.model
    except ValueError as exc:
        raise ConfigValidationError(str(exc)) from exc

    started = time.perf_counter()
    values = clean_sample(sample)
    min_samples = config.min_samples or DEFAULT_MIN_SAMPLES
    if values.size < min_samples:
        raise InsufficientDataError(f"Need at least {min_samples} finite values, got {values.size}")
    ensure_positive(values, what="reference interval estimation")

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", ReflimWarning)
        resolved, estimate, bounds = _run_stages(values, supplied, config)

    messages: List[str] = []
    for w in caught:
        if issubclass(w.category, ReflimWarning):
            messages.append(f"{w.category.__name__}: {w.message}")
        else:
            warnings.warn_explicit(w.message, w.category, w.filename, w.lineno)
    for message in messages:
        log.warning(message, extra={"analyte": analyte, "n_samples": int(values.size)})

    limits = estimate.rounded() if config.apply_rounding else estimate.limits
    if config.apply_rounding:
        bounds = ConfidenceBounds(*(round_to(v, estimate.digits) for v in bounds.as_tuple()))

    assessment = None
    if config.targets is not None:
        assessment = compare_with_targets(bounds, *config.targets)

    retained = estimate.truncation.sample
    if resolved.is_lognormal:
        retained = np.exp(retained)
    result = ReflimResult(
        lower=limits.lower,
        upper=limits.upper,
        slope=estimate.slope,
        intercept=estimate.intercept,
        low_low=bounds.low_low,
        low_high=bounds.low_high,
        high_low=bounds.high_low,
        high_high=bounds.high_high,
        model=resolved,
        model_supplied=supplied is not None,
        n_total=int(values.size),
        n_trunc=estimate.truncation.n_trunc,
        mean=float(np.mean(retained)),
        sd=float(np.std(retained, ddof=1)) if retained.size > 1 else 0.0,
        qq=estimate.qq,
        r_squared=estimate.fit.r_squared,
        meanlog=limits.meanlog,
        sdlog=limits.sdlog,
        targets=assessment,
        warnings=messages,
    )
    log.info(
        "Reference interval estimated",
        extra={
            "analyte": analyte,
            "n_samples": result.n_total,
            "duration_ms": round((time.perf_counter() - started) * 1000, 3),
            "model": resolved.value,
            "lower": result.lower,
            "upper": result.upper,
        },
    )
    return result


__all__ = ["ReflimResult", "reflim"]
