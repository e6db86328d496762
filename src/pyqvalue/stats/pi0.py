"""Estimation of pi0, the proportion of true null hypotheses.

For a tuning parameter lambda in [0, 1), p-values above lambda come mostly
from nulls, which are uniform, so

    pi0(lambda) = #{p_i >= lambda} / (m * (1 - lambda))

is a conservative estimate whose bias shrinks as lambda -> 1 while its
variance grows. Over a grid of lambdas the final estimate is taken either
from a cubic smoothing spline evaluated at the largest lambda
("smoother", Storey & Tibshirani, 2003) or from the lambda minimizing a
bootstrap-style MSE ("bootstrap", Storey, Taylor & Siegmund, 2004).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

from ..errors import EstimationError, RangeError
from .smoothing import fit_smoothing_spline

logger = logging.getLogger(__name__)

DEFAULT_LAMBDA = np.round(np.arange(0.05, 1.0, 0.05), 2)


@dataclass(frozen=True, eq=False)
class Pi0Estimate:
    """Result of a pi0 estimation."""

    pi0: float
    pi0_lambda: np.ndarray | None = None  # raw pi0(lambda) per grid value
    lambda_: np.ndarray | None = None  # grid actually used
    pi0_smooth: np.ndarray | None = None  # smoothed curve, smoother method only
    method: str = "smoother"


class Pi0Estimator(ABC):
    """Strategy that turns pi0(lambda) over a grid into one pi0 estimate."""

    name: str = "base"

    @abstractmethod
    def estimate(
        self,
        pvals: np.ndarray,
        lambda_: np.ndarray,
        pi0_lambda: np.ndarray,
    ) -> tuple[float, np.ndarray | None]:
        """Return (pi0, pi0_smooth) for a sorted lambda grid."""
        ...


class SmootherPi0Estimator(Pi0Estimator):
    """Cubic smoothing spline of pi0(lambda), read off at the largest lambda.

    Parameters
    ----------
    smooth_df : float
        Effective degrees of freedom of the spline (default 3).
    smooth_log_pi0 : bool
        Smooth log(pi0(lambda)) instead of pi0(lambda).
    """

    name = "smoother"

    def __init__(self, smooth_df: float = 3, smooth_log_pi0: bool = False, **_options):
        self.smooth_df = smooth_df
        self.smooth_log_pi0 = smooth_log_pi0

    def estimate(self, pvals, lambda_, pi0_lambda):
        y = pi0_lambda
        if self.smooth_log_pi0:
            if np.any(pi0_lambda <= 0):
                raise EstimationError(
                    "Cannot smooth log(pi0): pi0(lambda) is 0 for some lambda. "
                    "Use a smaller lambda range or smooth_log_pi0=False."
                )
            y = np.log(pi0_lambda)

        fit = fit_smoothing_spline(lambda_, y, df=self.smooth_df)
        pi0_smooth = fit.fitted
        if self.smooth_log_pi0:
            pi0_smooth = np.exp(pi0_smooth)

        return float(min(pi0_smooth[-1], 1.0)), pi0_smooth


class BootstrapPi0Estimator(Pi0Estimator):
    """Pick the lambda minimizing an estimated mean squared error of pi0(lambda)."""

    name = "bootstrap"

    def __init__(self, **_options):
        pass

    def estimate(self, pvals, lambda_, pi0_lambda):
        m = len(pvals)
        min_pi0 = np.quantile(pi0_lambda, 0.1)
        w = _count_at_least(pvals, lambda_)
        mse = (w / (m ** 2 * (1 - lambda_) ** 2)) * (1 - w / m) + (pi0_lambda - min_pi0) ** 2
        best = pi0_lambda[mse == mse.min()]
        logger.debug("Bootstrap pi0: best lambda %s", lambda_[mse == mse.min()])
        return float(min(best.min(), 1.0)), None


PI0_METHODS: dict[str, type[Pi0Estimator]] = {
    "smoother": SmootherPi0Estimator,
    "bootstrap": BootstrapPi0Estimator,
}


def make_pi0_estimator(method: str, **options) -> Pi0Estimator:
    """Instantiate a registered pi0 strategy by name."""
    if method not in PI0_METHODS:
        available = ", ".join(PI0_METHODS.keys())
        raise ValueError(f"Unknown pi0_method '{method}'. Available: {available}")
    return PI0_METHODS[method](**options)


def _count_at_least(pvals: np.ndarray, lambda_: np.ndarray) -> np.ndarray:
    """#{p_i >= lambda_k} for each k."""
    sorted_p = np.sort(pvals)
    return len(sorted_p) - np.searchsorted(sorted_p, lambda_, side="left")


def pi0est(
    p,
    lambda_=DEFAULT_LAMBDA,
    pi0_method: str = "smoother",
    smooth_df: float = 3,
    smooth_log_pi0: bool = False,
    **kwargs,
) -> Pi0Estimate:
    """Estimate the proportion of true null p-values.

    Parameters
    ----------
    p : array-like
        P-values in [0, 1].
    lambda_ : float or array-like
        Tuning parameter(s) in [0, 1). A grid needs at least 4 values.
    pi0_method : {"smoother", "bootstrap"}
        How to combine pi0(lambda) over a grid. Ignored for a single lambda.
    smooth_df : float
        Degrees of freedom for the smoother method.
    smooth_log_pi0 : bool
        Smooth on the log scale (smoother method).
    **kwargs
        Options for other estimators; ignored here.

    Returns
    -------
    Pi0Estimate
    """
    pvals = np.asarray(p, dtype=float).ravel()
    if len(pvals) == 0 or not (pvals.min() >= 0 and pvals.max() <= 1):
        raise RangeError("p-values not in valid range [0, 1].")

    lambdas = np.sort(np.atleast_1d(np.asarray(lambda_, dtype=float)))
    if len(lambdas) > 1 and len(lambdas) < 4:
        raise RangeError("If length of lambda greater than 1, you need at least 4 values.")
    if not (lambdas.min() >= 0 and lambdas.max() < 1):
        raise RangeError("Lambda must be within [0, 1).")

    m = len(pvals)

    if len(lambdas) == 1:
        lam = lambdas[0]
        raw = float(np.mean(pvals >= lam) / (1 - lam))
        pi0 = min(raw, 1.0)
        pi0_lambda = np.array([raw])
        pi0_smooth = None
        method = "fixed"
    else:
        pi0_lambda = _count_at_least(pvals, lambdas) / (m * (1 - lambdas))
        estimator = make_pi0_estimator(
            pi0_method, smooth_df=smooth_df, smooth_log_pi0=smooth_log_pi0,
        )
        pi0, pi0_smooth = estimator.estimate(pvals, lambdas, pi0_lambda)
        method = estimator.name

    if pi0 <= 0:
        raise EstimationError(
            "The estimated pi0 <= 0. Check that you have valid p-values "
            "or use a different range of lambda."
        )

    logger.debug("pi0 (%s) = %.4f over %d lambda value(s)", method, pi0, len(lambdas))
    return Pi0Estimate(
        pi0=pi0,
        pi0_lambda=pi0_lambda,
        lambda_=lambdas,
        pi0_smooth=pi0_smooth,
        method=method,
    )
