"""Tests for pi0 estimation."""

import numpy as np
import pytest

from pyqvalue.errors import EstimationError, RangeError
from pyqvalue.stats.pi0 import (
    DEFAULT_LAMBDA,
    PI0_METHODS,
    BootstrapPi0Estimator,
    SmootherPi0Estimator,
    make_pi0_estimator,
    pi0est,
)


def test_default_lambda_grid():
    assert len(DEFAULT_LAMBDA) == 19
    assert DEFAULT_LAMBDA[0] == pytest.approx(0.05)
    assert DEFAULT_LAMBDA[-1] == pytest.approx(0.95)


def test_uniform_pvalues_smoother(uniform_pvalues):
    est = pi0est(uniform_pvalues)
    assert 0.8 < est.pi0 <= 1.0
    assert est.method == "smoother"
    assert len(est.pi0_smooth) == len(est.lambda_) == 19
    assert len(est.pi0_lambda) == 19


def test_uniform_pvalues_bootstrap(uniform_pvalues):
    est = pi0est(uniform_pvalues, pi0_method="bootstrap")
    assert 0.8 < est.pi0 <= 1.0
    assert est.method == "bootstrap"
    assert est.pi0_smooth is None
    assert len(est.pi0_lambda) == 19


def test_mixture_pvalues(mixture_pvalues):
    for method in PI0_METHODS:
        est = pi0est(mixture_pvalues, pi0_method=method)
        assert 0.6 < est.pi0 <= 1.0, method


def test_smooth_log_pi0(mixture_pvalues):
    est = pi0est(mixture_pvalues, smooth_log_pi0=True)
    assert 0.6 < est.pi0 <= 1.0
    assert np.all(est.pi0_smooth > 0)


def test_pi0_lambda_counts():
    p = np.array([0.02, 0.3, 0.55, 0.7, 0.9])
    est = pi0est(p, lambda_=[0.7, 0.1, 0.5, 0.3], pi0_method="bootstrap")
    assert est.lambda_.tolist() == [0.1, 0.3, 0.5, 0.7]
    expected = [4 / (5 * 0.9), 4 / (5 * 0.7), 3 / (5 * 0.5), 2 / (5 * 0.3)]
    assert np.allclose(est.pi0_lambda, expected)
    assert est.pi0 <= 1.0


def test_single_lambda():
    est = pi0est([0.1, 0.2, 0.3, 0.6], lambda_=0.5)
    assert est.pi0 == pytest.approx(0.5)
    assert est.pi0_lambda.tolist() == [0.5]
    assert est.pi0_smooth is None
    assert est.method == "fixed"


def test_single_lambda_zero_gives_one():
    est = pi0est([0.01, 0.5, 0.9], lambda_=0)
    assert est.pi0 == 1.0


def test_single_lambda_clipped_to_one():
    est = pi0est([0.6, 0.7, 0.8, 0.9], lambda_=0.5)
    assert est.pi0 == 1.0
    # raw estimate kept unclipped
    assert est.pi0_lambda[0] == pytest.approx(2.0)


@pytest.mark.parametrize("lambda_", [[0.1, 0.5], [0.1, 0.2, 0.3]])
def test_short_lambda_grid_rejected(lambda_):
    with pytest.raises(RangeError, match="at least 4"):
        pi0est([0.1, 0.5, 0.9], lambda_=lambda_)


@pytest.mark.parametrize("lambda_", [1.0, -0.1, [0.1, 0.2, 0.3, 1.0]])
def test_lambda_out_of_range(lambda_):
    with pytest.raises(RangeError):
        pi0est([0.1, 0.5, 0.9], lambda_=lambda_)


@pytest.mark.parametrize("p", [[0.1, 1.5], [-0.01, 0.5], [0.1, np.nan], []])
def test_invalid_pvalues(p):
    with pytest.raises(RangeError):
        pi0est(p)


def test_unknown_method():
    with pytest.raises(ValueError, match="Unknown pi0_method"):
        pi0est([0.1, 0.5, 0.9], pi0_method="spline")


def test_zero_pi0_raises():
    p = np.full(10, 0.01)
    with pytest.raises(EstimationError, match="pi0 <= 0"):
        pi0est(p, lambda_=0.5)
    with pytest.raises(EstimationError, match="pi0 <= 0"):
        pi0est(p, pi0_method="bootstrap")


def test_log_smoothing_of_zero_raises():
    p = np.full(10, 0.01)
    with pytest.raises(EstimationError):
        pi0est(p, smooth_log_pi0=True)


def test_extra_options_ignored(uniform_pvalues):
    est = pi0est(uniform_pvalues, transf="logit", adj=2.0)
    assert est.pi0 == pi0est(uniform_pvalues).pi0


def test_make_pi0_estimator():
    est = make_pi0_estimator("smoother", smooth_df=4, smooth_log_pi0=True)
    assert isinstance(est, SmootherPi0Estimator)
    assert est.smooth_df == 4
    assert est.smooth_log_pi0
    assert isinstance(make_pi0_estimator("bootstrap", smooth_df=4), BootstrapPi0Estimator)
