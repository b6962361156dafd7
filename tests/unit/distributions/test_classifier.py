import math

import numpy as np
import pytest
from scipy.stats import norm

from reflim.distributions.classifier import bowley_from_quartiles, bowley_skewness, classify, skewness_gain
from reflim.distributions.models import DistributionModel, Quartiles
from reflim.exceptions import DomainError


def _lognormal_grid(meanlog: float, sdlog: float, n: int = 1000) -> np.ndarray:
    probs = (np.arange(n) + 0.5) / n
    return np.exp(meanlog + sdlog * norm.ppf(probs))


def test_bowley_zero_for_equally_spaced_quartiles():
    assert bowley_from_quartiles(Quartiles(10.0, 20.0, 30.0)) == 0.0


def test_bowley_right_skew_example():
    assert bowley_from_quartiles(Quartiles(10.0, 15.0, 40.0)) == pytest.approx(0.6667, abs=1e-4)


def test_bowley_undefined_for_zero_iqr():
    assert math.isnan(bowley_skewness(np.full(50, 7.0)))


def test_classify_symmetric_sample_is_normal():
    values = np.linspace(90.0, 110.0, 1000)
    assert classify(values) is DistributionModel.NORMAL


def test_classify_right_skewed_sample_is_lognormal():
    values = _lognormal_grid(3.0, 0.5)
    assert skewness_gain(values) > 0.05
    assert classify(values) is DistributionModel.LOGNORMAL


def test_classify_tied_sample_falls_back_to_normal():
    assert classify(np.full(200, 4.2)) is DistributionModel.NORMAL


def test_classify_rejects_non_positive_values():
    values = np.linspace(-1.0, 10.0, 200)
    with pytest.raises(DomainError):
        classify(values)


def test_classify_ignores_tail_contamination():
    healthy = np.linspace(90.0, 110.0, 1000)
    contaminated = np.concatenate([healthy, np.full(40, 400.0)])
    assert classify(contaminated) is DistributionModel.NORMAL


def test_model_coerce_accepts_common_spellings():
    assert DistributionModel.coerce(None) is None
    assert DistributionModel.coerce("auto") is None
    assert DistributionModel.coerce(True) is DistributionModel.LOGNORMAL
    assert DistributionModel.coerce(False) is DistributionModel.NORMAL
    assert DistributionModel.coerce("log-normal") is DistributionModel.LOGNORMAL
    assert DistributionModel.coerce("Normal") is DistributionModel.NORMAL
    with pytest.raises(ValueError):
        DistributionModel.coerce("gamma")
