"""Local false discovery rate estimation.

The local FDR of a test is pi0 * f0(p) / f(p), the posterior probability
that the test is null given its p-value. The p-values are mapped to the real
line (probit or logit), the mixture density f is estimated there by a
Gaussian KDE smoothed with a cubic spline, and f0 is the density of the
transformed uniform null.
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np
from scipy import stats
from scipy.interpolate import make_smoothing_spline

from ..errors import EstimationError, RangeError
from .pi0 import pi0est
from .smoothing import gaussian_density

logger = logging.getLogger(__name__)


def _probit(pvals: np.ndarray, eps: float) -> tuple[np.ndarray, np.ndarray]:
    x = stats.norm.ppf(np.clip(pvals, eps, 1 - eps))
    return x, stats.norm.pdf(x)


def _logit(pvals: np.ndarray, eps: float) -> tuple[np.ndarray, np.ndarray]:
    x = np.log((pvals + eps) / (1 - pvals + eps))
    return x, np.exp(x) / (1 + np.exp(x)) ** 2


# name -> (p, eps) -> (transformed p, null density on the transformed scale)
TRANSFORMS: dict[str, Callable[[np.ndarray, float], tuple[np.ndarray, np.ndarray]]] = {
    "probit": _probit,
    "logit": _logit,
}


def lfdr(
    p,
    pi0: float | None = None,
    trunc: bool = True,
    monotone: bool = True,
    transf: str = "probit",
    adj: float = 1.5,
    eps: float = 1e-8,
    **kwargs,
) -> np.ndarray:
    """Estimate local FDR values.

    Parameters
    ----------
    p : array-like
        P-values in [0, 1]. NaNs are carried through to the output.
    pi0 : float, optional
        Proportion of true nulls. Estimated with :func:`pi0est` (receiving
        ``**kwargs``) when not given.
    trunc : bool
        Cap estimates at 1.
    monotone : bool
        Force the estimates to be non-decreasing in p.
    transf : {"probit", "logit"}
        Transformation applied to p before density estimation.
    adj : float
        Multiplier of the KDE bandwidth.
    eps : float
        Guards the transformation against p = 0 and p = 1.

    Returns
    -------
    lfdr : ndarray
        Index-aligned with ``p``.
    """
    p_all = np.asarray(p, dtype=float).ravel()
    out = np.full(len(p_all), np.nan)
    valid = ~np.isnan(p_all)
    pvals = p_all[valid]

    if len(pvals) == 0 or not (pvals.min() >= 0 and pvals.max() <= 1):
        raise RangeError("p-values not in valid range [0, 1].")
    if transf not in TRANSFORMS:
        available = ", ".join(TRANSFORMS.keys())
        raise ValueError(f"Unknown transf '{transf}'. Available: {available}")

    if pi0 is None:
        pi0 = pi0est(pvals, **kwargs).pi0

    x, null_density = TRANSFORMS[transf](pvals, eps)

    grid, dens = gaussian_density(x, adjust=adj)
    # Penalty chosen by generalized cross-validation
    spline = make_smoothing_spline(grid, dens)
    mix_density = spline(x)
    if np.any(mix_density <= 0):
        raise EstimationError(
            "Smoothed density is non-positive at some p-values; "
            "try a larger 'adj' or the other transformation."
        )

    values = pi0 * null_density / mix_density

    if trunc:
        values = np.minimum(values, 1.0)
    if monotone:
        order = np.argsort(pvals, kind="stable")
        values_sorted = np.maximum.accumulate(values[order])
        values = np.empty_like(values_sorted)
        values[order] = values_sorted

    out[valid] = values
    logger.debug(
        "lfdr (%s, adj=%.2f): %d values, range [%.3g, %.3g]",
        transf, adj, len(values), values.min(), values.max(),
    )
    return out
