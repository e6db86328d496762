"""Tests for the qvalue() entry point and result assembly."""

import dataclasses
from unittest.mock import patch

import numpy as np
import pytest

from pyqvalue import QValueResult, qvalue
from pyqvalue.core import assemble_result, validate_inputs
from pyqvalue.errors import EstimationError, NumericInstabilityWarning, RangeError
from pyqvalue.stats.pi0 import Pi0Estimate


def test_two_pvalues_with_significance():
    res = qvalue([0.01, 0.04], fdr_level=0.05, lambda_=0)
    assert res.pi0 == 1.0
    assert np.allclose(res.qvalues, [0.02, 0.04])
    assert res.significant.tolist() == [True, True]
    assert res.fdr_level == 0.05

    res = qvalue([0.01, 0.04], fdr_level=0.03, lambda_=0)
    assert res.significant.tolist() == [True, False]
    assert res.n_significant == 1


def test_single_test():
    res = qvalue([0.03], lambda_=0)
    assert np.allclose(res.qvalues, [0.03])
    assert res.m == 1


def test_all_tied():
    res = qvalue([0.5, 0.5, 0.5], lambda_=0)
    assert np.allclose(res.qvalues, [0.5, 0.5, 0.5])


def test_without_fdr_level_has_no_significance(mixture_pvalues):
    res = qvalue(mixture_pvalues)
    assert res.fdr_level is None
    assert res.significant is None
    assert res.n_significant is None
    assert "significant" not in res.to_frame().columns


def test_mixture_properties(mixture_pvalues):
    res = qvalue(mixture_pvalues, fdr_level=0.1)
    m = len(mixture_pvalues)

    assert 0 < res.pi0 <= 1
    for vec in (res.qvalues, res.pvalues, res.lfdr, res.significant):
        assert len(vec) == m

    order = np.argsort(mixture_pvalues, kind="stable")
    assert np.all(np.diff(res.qvalues[order]) >= 0)
    assert np.all((res.qvalues > 0) & (res.qvalues <= 1))
    assert np.all((res.lfdr > 0) & (res.lfdr <= 1))
    assert np.array_equal(res.pvalues, mixture_pvalues)
    assert np.array_equal(res.significant, res.qvalues <= 0.1)
    assert res.n_significant > 0


def test_pfdr_option(mixture_pvalues):
    fdr = qvalue(mixture_pvalues)
    pfdr = qvalue(mixture_pvalues, use_pfdr=True)
    assert pfdr.pi0 == fdr.pi0
    assert np.all(pfdr.qvalues >= fdr.qvalues - 1e-12)
    assert pfdr.call["use_pfdr"] is True


def test_use_pfdr_changes_qvalues():
    p = [0.001, 0.01, 0.04, 0.5, 0.9]
    fdr = qvalue(p, lambda_=0)
    assert np.allclose(fdr.qvalues, [0.005, 0.025, 0.04 * 5 / 3, 0.625, 0.9])

    pfdr = qvalue(p, use_pfdr=True, lambda_=0)
    assert not np.allclose(pfdr.qvalues, fdr.qvalues)
    assert pfdr.qvalues[0] > 0.3
    assert fdr.call["use_pfdr"] is False

    alias = qvalue(p, pfdr=True, lambda_=0)
    assert np.array_equal(alias.qvalues, pfdr.qvalues)
    assert alias.call["use_pfdr"] is True
    assert "pfdr" not in alias.call


def test_pfdr_alias_conflict_raises():
    with pytest.raises(TypeError, match="conflicts"):
        qvalue([0.01, 0.04], use_pfdr=True, pfdr=False)


def test_instability_warning_points_at_qvalue_caller():
    with pytest.warns(NumericInstabilityWarning) as record:
        qvalue([1e-20, 0.3, 0.5, 0.8], use_pfdr=True, lambda_=0)
    instability = [w for w in record if issubclass(w.category, NumericInstabilityWarning)]
    assert instability[0].filename == __file__


def test_smoother_fields_present(mixture_pvalues):
    res = qvalue(mixture_pvalues)
    assert len(res.lambda_) == 19
    assert len(res.pi0_lambda) == 19
    assert len(res.pi0_smooth) == 19


def test_bootstrap_fields_absent(mixture_pvalues):
    res = qvalue(mixture_pvalues, pi0_method="bootstrap")
    assert res.pi0_smooth is None
    assert res.lambda_ is not None
    assert res.call["pi0_method"] == "bootstrap"


@pytest.mark.parametrize("p", [[0.1, 1.5], [0.2, -0.1], [0.1, np.nan], [], [[0.1, 0.2]]])
def test_invalid_pvalues_rejected_before_estimation(p):
    with patch("pyqvalue.core.pi0est") as mock_pi0, patch("pyqvalue.core.lfdr") as mock_lfdr:
        with pytest.raises(RangeError, match="valid range"):
            qvalue(p)
    mock_pi0.assert_not_called()
    mock_lfdr.assert_not_called()


@pytest.mark.parametrize("level", [0, -0.05, 1.01, np.nan])
def test_invalid_fdr_level_rejected_before_estimation(level):
    with patch("pyqvalue.core.pi0est") as mock_pi0, patch("pyqvalue.core.lfdr") as mock_lfdr:
        with pytest.raises(RangeError, match="fdr_level"):
            qvalue([0.01, 0.5], fdr_level=level)
    mock_pi0.assert_not_called()
    mock_lfdr.assert_not_called()


def test_fdr_level_one_allowed():
    res = qvalue([0.01, 0.04], fdr_level=1, lambda_=0)
    assert res.significant.all()


def test_options_forwarded_to_both_estimators():
    p = np.array([0.01, 0.2, 0.6])
    with patch("pyqvalue.core.pi0est", return_value=Pi0Estimate(pi0=0.9)) as mock_pi0, \
            patch("pyqvalue.core.lfdr", return_value=np.array([0.1, 0.5, 0.9])) as mock_lfdr:
        res = qvalue(p, fdr_level=0.05, lambda_=0.5, transf="logit")

    _, pi0_kwargs = mock_pi0.call_args
    assert pi0_kwargs == {"lambda_": 0.5, "transf": "logit"}
    _, lfdr_kwargs = mock_lfdr.call_args
    assert lfdr_kwargs == {"pi0": 0.9, "lambda_": 0.5, "transf": "logit"}

    assert res.pi0 == 0.9
    assert res.lfdr.tolist() == [0.1, 0.5, 0.9]
    assert dict(res.call) == {"fdr_level": 0.05, "use_pfdr": False, "lambda_": 0.5, "transf": "logit"}


def test_absent_estimator_fields_propagate_as_none():
    with patch("pyqvalue.core.pi0est", return_value=Pi0Estimate(pi0=1.0)), \
            patch("pyqvalue.core.lfdr", return_value=np.array([0.2, 0.4])):
        res = qvalue([0.01, 0.04])
    assert res.pi0_lambda is None
    assert res.lambda_ is None
    assert res.pi0_smooth is None
    assert np.allclose(res.qvalues, [0.02, 0.04])


def test_estimation_error_propagates():
    with patch("pyqvalue.core.pi0est", side_effect=EstimationError("boom")):
        with pytest.raises(EstimationError, match="boom"):
            qvalue([0.01, 0.04])


def test_input_not_mutated(mixture_pvalues):
    original = mixture_pvalues.copy()
    as_list = mixture_pvalues.tolist()
    qvalue(mixture_pvalues)
    qvalue(as_list)
    assert np.array_equal(mixture_pvalues, original)
    assert as_list == original.tolist()


def test_result_is_immutable(mixture_pvalues):
    res = qvalue(mixture_pvalues, fdr_level=0.05)
    with pytest.raises(dataclasses.FrozenInstanceError):
        res.pi0 = 0.5
    with pytest.raises(ValueError):
        res.qvalues[0] = 0.0
    with pytest.raises(ValueError):
        res.significant[0] = True
    with pytest.raises(TypeError):
        res.call["use_pfdr"] = True


def test_result_does_not_alias_input(mixture_pvalues):
    res = qvalue(mixture_pvalues)
    mixture_pvalues[0] = 0.999
    assert res.pvalues[0] != 0.999


def test_call_does_not_alias_array_options(mixture_pvalues):
    grid = np.arange(0.05, 0.95, 0.05)
    res = qvalue(mixture_pvalues, lambda_=grid)
    grid[:] = 0.5
    stored = res.call["lambda_"]
    assert stored is not grid
    assert stored[0] == pytest.approx(0.05)
    with pytest.raises(ValueError):
        stored[0] = 0.0


def test_validate_inputs_returns_copy():
    p = np.array([0.1, 0.2])
    out = validate_inputs(p, 0.05)
    out[0] = 0.9
    assert p[0] == 0.1


def test_assemble_result_directly():
    pi0s = Pi0Estimate(pi0=0.5, pi0_lambda=np.array([0.5]), lambda_=np.array([0.5]))
    res = assemble_result(
        {"use_pfdr": False},
        pi0s,
        qvalues=np.array([0.02, 0.04]),
        pvalues=np.array([0.01, 0.04]),
        lfdr_values=np.array([0.1, 0.3]),
        fdr_level=0.03,
    )
    assert isinstance(res, QValueResult)
    assert res.significant.tolist() == [True, False]
    assert res.pi0_smooth is None
    df = res.to_frame()
    assert list(df.columns) == ["pvalue", "qvalue", "lfdr", "significant"]
    assert len(df) == 2
