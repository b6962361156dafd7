import numpy as np
import pytest
from scipy.stats import norm

from reflim.distributions.limits import central_slice, estimate_limits, fit_central_line, qq_correspondence
from reflim.distributions.models import DistributionModel
from reflim.distributions.quantiles import quartiles, rounding_digits
from reflim.exceptions import ConfigValidationError, DomainError


def _grid(n: int = 2000) -> np.ndarray:
    return norm.ppf((np.arange(n) + 0.5) / n)


def test_quartiles_use_linear_interpolation():
    q = quartiles(np.arange(1.0, 101.0))
    assert (q.q1, q.q2, q.q3) == pytest.approx((25.75, 50.5, 75.25))


def test_central_slice_covers_middle_half():
    window = central_slice(100)
    assert (window.start, window.stop) == (24, 75)
    assert len(range(100)[window]) == 51


def test_qq_correspondence_endpoints():
    trimmed = np.linspace(5.0, 15.0, 300)
    qq = qq_correspondence(trimmed, n_quantiles=100)
    assert len(qq) == 100
    assert qq.theoretical[0] == pytest.approx(-1.959964, abs=1e-5)
    assert qq.theoretical[-1] == pytest.approx(1.959964, abs=1e-5)
    assert qq.empirical[0] == 5.0
    assert qq.empirical[-1] == 15.0
    assert np.all(np.diff(qq.empirical) >= 0)


def test_qq_correspondence_rejects_tiny_grid():
    with pytest.raises(ConfigValidationError):
        qq_correspondence(np.linspace(1.0, 2.0, 50), n_quantiles=3)


def test_fit_recovers_line_through_truncated_normal():
    z = norm.ppf(np.linspace(0.025, 0.975, 400))
    qq = qq_correspondence(50.0 + 4.0 * z, n_quantiles=100)
    fit = fit_central_line(qq)
    assert fit.slope == pytest.approx(4.0, rel=0.01)
    assert fit.intercept == pytest.approx(50.0, rel=0.001)
    assert fit.r_squared > 0.999


def test_normal_limits_recovered():
    values = 140.0 + 10.0 * _grid()
    est = estimate_limits(values, DistributionModel.NORMAL)
    assert est.lower == pytest.approx(140.0 - 19.6, rel=0.02)
    assert est.upper == pytest.approx(140.0 + 19.6, rel=0.02)
    assert est.limits.meanlog is None
    assert est.digits is None


def test_lognormal_limits_recovered_in_original_units():
    values = np.exp(4.0 + 0.3 * _grid())
    est = estimate_limits(values, DistributionModel.LOGNORMAL)
    assert est.limits.meanlog == pytest.approx(4.0, abs=0.02)
    assert est.limits.sdlog == pytest.approx(0.3, rel=0.03)
    assert est.lower == pytest.approx(np.exp(4.0 - 1.96 * 0.3), rel=0.03)
    assert est.upper == pytest.approx(np.exp(4.0 + 1.96 * 0.3), rel=0.03)


def test_negative_lower_limit_is_clamped():
    est = estimate_limits(np.linspace(0.1, 20.0, 1000), DistributionModel.NORMAL)
    assert est.fit.intercept - 1.96 * est.fit.slope < 0
    assert est.lower == 0.0


def test_lognormal_requires_positive_values():
    with pytest.raises(DomainError):
        estimate_limits(np.linspace(-5.0, 5.0, 200), DistributionModel.LOGNORMAL)


def test_rounding_keeps_raw_limits():
    values = 140.0 + 10.0 * _grid()
    est = estimate_limits(values, DistributionModel.NORMAL, apply_rounding=True)
    assert est.digits == 0
    rounded = est.rounded()
    assert rounded.lower == round(est.lower)
    assert est.limits.lower != rounded.lower


@pytest.mark.parametrize("median,digits", [(140.0, 0), (5.3, 2), (0.045, 4), (1200.0, -1)])
def test_rounding_digits_follow_magnitude(median, digits):
    assert rounding_digits(median) == digits
