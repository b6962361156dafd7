"""reflim: reference interval estimation from contaminated laboratory data.

The pipeline classifies the sample shape (normal vs log-normal), trims
pathological contamination iteratively, estimates the 2.5th/97.5th
percentiles from a truncated q-q regression and derives confidence
intervals around both limits.

Example usage:
    >>> from reflim import reflim
    >>> result = reflim(values)
    >>> result.lower, result.upper
"""

from reflim.distributions.classifier import bowley_skewness, classify
from reflim.distributions.confidence import confidence_bounds
from reflim.distributions.limits import estimate_limits
from reflim.distributions.models import DistributionModel
from reflim.distributions.truncation import robust_trim, truncate_once
from reflim.pipeline import ReflimResult, reflim

__version__ = "0.1.0"

__all__ = [
    "DistributionModel",
    "ReflimResult",
    "bowley_skewness",
    "classify",
    "confidence_bounds",
    "estimate_limits",
    "reflim",
    "robust_trim",
    "truncate_once",
]
