"""Q-value calculation from p-values and a null proportion estimate.

For m tests with p-values p_1..p_m and an estimate pi0 of the proportion of
true nulls, the q-value of test i is

    q_i = min_{t >= p_i} pi0 * m * t / #{p_j <= t}

i.e. the smallest estimated FDR over every rejection threshold at or above
its own p-value (Storey, 2002). With ``use_pfdr=True`` the denominator also
carries the probability of at least one rejection, 1 - (1 - t)^m, which
estimates the positive FDR instead.
"""

from __future__ import annotations

import logging
import warnings

import numpy as np

from ..errors import NumericInstabilityWarning, RangeError

logger = logging.getLogger(__name__)

# Relative disagreement between naive and stabilized 1 - (1 - p)^m that
# triggers a NumericInstabilityWarning.
INSTABILITY_RTOL = 1e-8


def order_index(pvals: np.ndarray) -> np.ndarray:
    """Ascending order of the p-values, ties broken by original index."""
    return np.argsort(np.asarray(pvals, dtype=float), kind="stable")


def max_tie_rank(pvals: np.ndarray, order: np.ndarray | None = None) -> np.ndarray:
    """1-based ranks where every tied group gets the largest rank in the group.

    Parameters
    ----------
    pvals : ndarray, shape (m,)
        P-values in input order.
    order : ndarray, optional
        Precomputed ``order_index(pvals)``.

    Returns
    -------
    ranks : ndarray of int, shape (m,)
        Index-aligned with ``pvals``.
    """
    pvals = np.asarray(pvals, dtype=float)
    m = len(pvals)
    if order is None:
        order = order_index(pvals)
    if m == 0:
        return np.array([], dtype=np.int64)

    sorted_p = pvals[order]

    # A sorted position closes its group when the next value differs
    group_end = np.ones(m, dtype=bool)
    group_end[:-1] = sorted_p[1:] != sorted_p[:-1]

    # Every position takes the rank of the nearest group end at or after it
    end_pos = np.where(group_end, np.arange(m), m)
    end_pos = np.minimum.accumulate(end_pos[::-1])[::-1]

    ranks = np.empty(m, dtype=np.int64)
    ranks[order] = end_pos + 1
    return ranks


def pfdr_denominator(pvals: np.ndarray, m: int) -> np.ndarray:
    """Evaluate 1 - (1 - p)^m without cancellation for small p.

    Computed as ``-expm1(m * log1p(-p))``, which keeps full relative
    precision down to p = 0 (where the result is exactly 0).
    """
    pvals = np.asarray(pvals, dtype=float)
    with np.errstate(divide="ignore"):
        return -np.expm1(m * np.log1p(-pvals))


def resolve_pfdr(use_pfdr: bool | None = None, pfdr: bool | None = None) -> bool:
    """Merge the ``use_pfdr`` switch with its short alias ``pfdr``.

    Raises TypeError when both are given and disagree.
    """
    if pfdr is None:
        return bool(use_pfdr)
    if use_pfdr is not None and bool(use_pfdr) != bool(pfdr):
        raise TypeError(
            f"use_pfdr={use_pfdr!r} conflicts with its alias pfdr={pfdr!r}"
        )
    return bool(pfdr)


def _check_instability(
    pvals: np.ndarray,
    stable: np.ndarray,
    m: int,
    stacklevel: int = 1,
) -> None:
    """Warn when the closed form 1 - (1 - p)^m would have lost precision.

    ``stacklevel=1`` attributes the warning to the caller of this function;
    each extra level moves one frame further out.
    """
    positive = pvals > 0
    if not positive.any():
        return

    naive = 1.0 - (1.0 - pvals[positive]) ** m
    ref = stable[positive]
    unstable = (naive <= 0) | (np.abs(naive - ref) > INSTABILITY_RTOL * ref)
    n_unstable = int(unstable.sum())
    if n_unstable:
        logger.debug(
            "pFDR denominator near cancellation for %d of %d tests (m=%d)",
            n_unstable, len(pvals), m,
        )
        warnings.warn(
            f"1 - (1 - p)^m is near cancellation for {n_unstable} p-value(s); "
            "using the stabilized expm1/log1p form",
            NumericInstabilityWarning,
            stacklevel=stacklevel + 1,
        )


def raw_estimates(
    pvals: np.ndarray,
    pi0: float,
    ranks: np.ndarray,
    use_pfdr: bool = False,
    stacklevel: int = 1,
) -> np.ndarray:
    """Per-test FDR (or pFDR) estimates before monotone enforcement."""
    pvals = np.asarray(pvals, dtype=float)
    m = len(pvals)

    if not use_pfdr:
        return pi0 * m * pvals / ranks

    denom = pfdr_denominator(pvals, m)
    _check_instability(pvals, denom, m, stacklevel=stacklevel + 1)

    # p / (1 - (1 - p)^m) -> 1/m as p -> 0
    ratio = np.full(m, 1.0 / m)
    nonzero = pvals > 0
    ratio[nonzero] = pvals[nonzero] / denom[nonzero]
    return pi0 * m * ratio / ranks


def compute_qvalues(
    pvals: np.ndarray,
    pi0: float,
    use_pfdr: bool | None = None,
    *,
    pfdr: bool | None = None,
    stacklevel: int = 1,
) -> np.ndarray:
    """Monotone q-values for validated p-values.

    Parameters
    ----------
    pvals : array-like, shape (m,)
        P-values in [0, 1]. Range checking is the caller's job
        (see :func:`pyqvalue.core.validate_inputs`).
    pi0 : float
        Estimated proportion of true null hypotheses, in (0, 1].
    use_pfdr : bool
        If True, estimate the positive FDR, which is more conservative for
        the smallest p-values. Defaults to False.
    pfdr : bool, optional
        Alias for ``use_pfdr``; passing both with different values raises
        TypeError.
    stacklevel : int
        Frame a NumericInstabilityWarning is attributed to; 1 is the caller
        of this function.

    Returns
    -------
    qvalues : ndarray, shape (m,)
        Index-aligned with ``pvals``. Read in ascending p-value order the
        sequence is non-decreasing and capped at 1.
    """
    use_pfdr = resolve_pfdr(use_pfdr, pfdr)
    pvals = np.asarray(pvals, dtype=float)
    m = len(pvals)

    if not (0 < pi0 <= 1):
        raise RangeError(f"pi0 must be in (0, 1], got {pi0}")
    if m == 0:
        return np.array([], dtype=float)

    order = order_index(pvals)
    ranks = max_tie_rank(pvals, order)
    raw = raw_estimates(pvals, pi0, ranks, use_pfdr=use_pfdr, stacklevel=stacklevel + 1)

    # Running minimum from the largest p-value down
    q_sorted = raw[order]
    q_sorted[-1] = min(q_sorted[-1], 1.0)
    q_sorted = np.minimum.accumulate(q_sorted[::-1])[::-1]

    qvals = np.empty(m)
    qvals[order] = q_sorted

    logger.debug(
        "Computed %d q-values (pi0=%.4f, use_pfdr=%s, min q=%.3g)",
        m, pi0, use_pfdr, q_sorted[0],
    )
    return qvals
