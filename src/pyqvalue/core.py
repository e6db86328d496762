"""qvalue(): validate, estimate pi0, compute q-values and local FDR, assemble."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import numpy as np

from .errors import RangeError
from .result import QValueResult, freeze_call, readonly_copy
from .stats.lfdr import lfdr
from .stats.pi0 import Pi0Estimate, pi0est
from .stats.qvalues import compute_qvalues, resolve_pfdr

logger = logging.getLogger(__name__)


def validate_inputs(p, fdr_level: float | None = None) -> np.ndarray:
    """Check p-values and the FDR level before any estimation.

    Returns a float copy of ``p``; the caller's object is untouched.

    Raises
    ------
    RangeError
        If p is empty or not 1-D, any p-value is outside [0, 1] or NaN,
        or ``fdr_level`` is outside (0, 1].
    """
    pvals = np.array(p, dtype=float, copy=True)

    # NaN fails both comparisons
    if pvals.ndim != 1 or len(pvals) == 0 or not (pvals.min() >= 0 and pvals.max() <= 1):
        raise RangeError("p-values not in valid range [0, 1].")
    if fdr_level is not None and not (0 < fdr_level <= 1):
        raise RangeError("'fdr_level' must be in (0, 1].")

    return pvals


def assemble_result(
    call: Mapping[str, Any],
    pi0s: Pi0Estimate,
    qvalues: np.ndarray,
    pvalues: np.ndarray,
    lfdr_values: np.ndarray,
    fdr_level: float | None = None,
) -> QValueResult:
    """Package one estimation into an immutable :class:`QValueResult`."""
    qvalues = readonly_copy(qvalues)
    significant = None
    if fdr_level is not None:
        significant = readonly_copy(qvalues <= fdr_level, dtype=bool)

    return QValueResult(
        call=freeze_call(call),
        pi0=float(pi0s.pi0),
        qvalues=qvalues,
        pvalues=readonly_copy(pvalues),
        lfdr=readonly_copy(lfdr_values),
        pi0_lambda=readonly_copy(pi0s.pi0_lambda),
        lambda_=readonly_copy(pi0s.lambda_),
        pi0_smooth=readonly_copy(pi0s.pi0_smooth),
        fdr_level=fdr_level,
        significant=significant,
    )


def qvalue(
    p,
    fdr_level: float | None = None,
    use_pfdr: bool | None = None,
    *,
    pfdr: bool | None = None,
    **kwargs,
) -> QValueResult:
    """Estimate q-values, local FDRs and pi0 for a vector of p-values.

    Parameters
    ----------
    p : array-like, shape (m,)
        P-values in [0, 1].
    fdr_level : float, optional
        Level in (0, 1] at which to control the FDR. When given, the result
        carries ``significant = qvalues <= fdr_level``.
    use_pfdr : bool
        Estimate the positive FDR, more robust for very small p-values.
        Defaults to False.
    pfdr : bool, optional
        Alias for ``use_pfdr``.
    **kwargs
        Forwarded unchanged to :func:`pyqvalue.stats.pi0est` and
        :func:`pyqvalue.stats.lfdr` (e.g. ``lambda_``, ``pi0_method``,
        ``smooth_df``, ``transf``, ``adj``).

    Returns
    -------
    QValueResult

    Raises
    ------
    RangeError
        Invalid p-values or fdr_level; raised before any estimation.
    TypeError
        ``use_pfdr`` and ``pfdr`` both given with different values.
    EstimationError
        Propagated from the pi0 or local FDR estimator.

    Examples
    --------
    >>> res = qvalue([0.01, 0.04], fdr_level=0.03, lambda_=0)
    >>> res.qvalues
    array([0.02, 0.04])
    >>> res.significant
    array([ True, False])
    """
    use_pfdr = resolve_pfdr(use_pfdr, pfdr)
    pvals = validate_inputs(p, fdr_level)
    call = {"fdr_level": fdr_level, "use_pfdr": use_pfdr, **kwargs}

    pi0s = pi0est(pvals, **kwargs)
    qvals = compute_qvalues(pvals, pi0s.pi0, use_pfdr=use_pfdr, stacklevel=2)
    lfdr_values = lfdr(pvals, pi0=pi0s.pi0, **kwargs)

    result = assemble_result(call, pi0s, qvals, pvals, lfdr_values, fdr_level)

    if fdr_level is not None:
        logger.info(
            "q-values for %d tests: pi0=%.4f, %d significant at FDR %.3g",
            result.m, result.pi0, result.n_significant, fdr_level,
        )
    else:
        logger.info("q-values for %d tests: pi0=%.4f", result.m, result.pi0)
    return result
