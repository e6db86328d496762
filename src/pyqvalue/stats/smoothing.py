"""Cubic smoothing splines and Gaussian kernel density used by the estimators.

The smoothing spline is the natural cubic spline g minimizing

    sum_i (y_i - g(x_i))^2 + lam * integral g''(t)^2 dt

with a knot at every (unique) x. Its fitted values are ``H(lam) @ y`` with
``H(lam) = (I + lam K)^-1`` (Reinsch form), so the effective degrees of
freedom ``trace(H)`` follow in closed form from one eigendecomposition of
the penalty matrix K and lam can be solved for a target df.
``scipy.interpolate.make_smoothing_spline`` only selects lam directly or
by GCV, so it covers the density fit in :mod:`.lfdr` but not the
df-targeted pi0 fit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from scipy import linalg, optimize, stats
from scipy.interpolate import CubicSpline

from ..errors import EstimationError, RangeError

logger = logging.getLogger(__name__)


@dataclass
class SmoothingSplineFit:
    """A fitted cubic smoothing spline."""

    x: np.ndarray  # knots (strictly increasing)
    fitted: np.ndarray  # smoothed values at the knots
    lam: float  # roughness penalty
    df: float  # effective degrees of freedom, trace of the smoother matrix

    def __call__(self, x_new: np.ndarray) -> np.ndarray:
        """Evaluate the spline (natural cubic interpolant of the fitted values)."""
        spline = CubicSpline(self.x, self.fitted, bc_type="natural")
        return spline(np.asarray(x_new, dtype=float))


def penalty_matrix(x: np.ndarray) -> np.ndarray:
    """Roughness penalty K = Q R^-1 Q' of a natural cubic spline with knots x."""
    x = np.asarray(x, dtype=float)
    n = len(x)
    h = np.diff(x)

    Q = np.zeros((n, n - 2))
    R = np.zeros((n - 2, n - 2))
    for j in range(1, n - 1):
        Q[j - 1, j - 1] = 1.0 / h[j - 1]
        Q[j, j - 1] = -1.0 / h[j - 1] - 1.0 / h[j]
        Q[j + 1, j - 1] = 1.0 / h[j]
        R[j - 1, j - 1] = (h[j - 1] + h[j]) / 3.0
        if j < n - 2:
            R[j - 1, j] = h[j] / 6.0
            R[j, j - 1] = h[j] / 6.0

    return Q @ linalg.solve(R, Q.T, assume_a="pos")


def _trace(eigvals: np.ndarray, lam: float) -> float:
    return float(np.sum(1.0 / (1.0 + lam * eigvals)))


def _lam_for_df(eigvals: np.ndarray, df: float) -> float:
    """Solve trace(H(lam)) = df for lam by root finding on log10(lam)."""
    positive = eigvals[eigvals > 1e-12 * eigvals.max()]
    lo = np.log10(1e-6 / positive.max())
    hi = np.log10(1e6 / positive.min())
    return float(10 ** optimize.brentq(
        lambda log_lam: _trace(eigvals, 10 ** log_lam) - df, lo, hi, xtol=1e-10,
    ))


def fit_smoothing_spline(
    x: np.ndarray,
    y: np.ndarray,
    df: float,
) -> SmoothingSplineFit:
    """Fit a cubic smoothing spline with a target effective degrees of freedom.

    Parameters
    ----------
    x : ndarray, shape (n,)
        Strictly increasing abscissas, n >= 3.
    y : ndarray, shape (n,)
        Responses.
    df : float
        Target effective degrees of freedom, 2 < df < n.

    Returns
    -------
    SmoothingSplineFit
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    n = len(x)

    if n < 3:
        raise RangeError(f"Smoothing spline needs at least 3 points, got {n}")
    if np.any(np.diff(x) <= 0):
        raise RangeError("Smoothing spline abscissas must be strictly increasing")
    if not np.all(np.isfinite(y)):
        raise EstimationError("Smoothing spline responses must be finite")
    if not (2 < df < n):
        raise RangeError(f"Smoothing spline df must be in (2, {n}), got {df}")

    eigvals, eigvecs = linalg.eigh(penalty_matrix(x))
    eigvals = np.clip(eigvals, 0, None)
    coef = eigvecs.T @ y

    lam = _lam_for_df(eigvals, df)

    shrink = 1.0 / (1.0 + lam * eigvals)
    fitted = eigvecs @ (shrink * coef)
    fit_df = float(shrink.sum())

    logger.debug("Smoothing spline: n=%d, lam=%.3g, df=%.3f", n, lam, fit_df)
    return SmoothingSplineFit(x=x, fitted=fitted, lam=lam, df=fit_df)


def bandwidth_nrd0(x: np.ndarray) -> float:
    """Silverman's rule-of-thumb bandwidth, 0.9 * min(sd, IQR/1.34) * n^-1/5."""
    x = np.asarray(x, dtype=float)
    if len(x) == 0:
        raise EstimationError("Need at least 1 value to choose a bandwidth")

    hi = np.std(x, ddof=1) if len(x) > 1 else 0.0
    iqr = np.subtract(*np.percentile(x, [75, 25]))
    lo = min(hi, iqr / 1.34)
    # Constant or single-value samples fall back to the scale of the data
    if not lo > 0:
        lo = hi or abs(x[0]) or 1.0
    return float(0.9 * lo * len(x) ** -0.2)


def gaussian_density(
    x: np.ndarray,
    adjust: float = 1.0,
    n_points: int = 512,
    cut: float = 3.0,
) -> tuple[np.ndarray, np.ndarray]:
    """Gaussian kernel density estimate on an evenly spaced grid.

    The grid spans ``[min(x) - cut*bw, max(x) + cut*bw]``, with ``bw`` the
    rule-of-thumb bandwidth times ``adjust``. A sample with no spread has a
    single-kernel density centred on its value.

    Returns
    -------
    grid : ndarray, shape (n_points,)
    density : ndarray, shape (n_points,)
    """
    x = np.asarray(x, dtype=float)
    bw = adjust * bandwidth_nrd0(x)
    if not (bw > 0 and np.isfinite(bw)):
        raise EstimationError(f"Invalid kernel bandwidth {bw}")

    grid = np.linspace(x.min() - cut * bw, x.max() + cut * bw, n_points)
    sd = np.std(x, ddof=1) if len(x) > 1 else 0.0
    if sd > 0:
        # gaussian_kde scales its bandwidth factor by the sample sd
        kde = stats.gaussian_kde(x, bw_method=bw / sd)
        density = kde(grid)
    else:
        density = stats.norm.pdf(grid, loc=x[0], scale=bw)
    return grid, density
