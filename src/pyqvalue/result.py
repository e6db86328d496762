"""QValueResult: immutable container for one q-value estimation."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

import numpy as np
import pandas as pd


def readonly_copy(values, dtype=float) -> np.ndarray | None:
    """Copy an array-like into a new array that cannot be written to."""
    if values is None:
        return None
    arr = np.array(values, dtype=dtype, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class QValueResult:
    """Results of :func:`pyqvalue.qvalue`.

    Attributes
    ----------
    call : Mapping[str, Any]
        Invocation parameters: fdr_level, use_pfdr and every forwarded option.
    pi0 : float
        Estimated proportion of true null hypotheses.
    qvalues : ndarray, shape (m,)
        Estimated q-values, index-aligned with ``pvalues``.
    pvalues : ndarray, shape (m,)
        The input p-values.
    lfdr : ndarray, shape (m,)
        Local FDR estimates.
    pi0_lambda : ndarray or None
        pi0(lambda) at each grid value.
    lambda_ : ndarray or None
        The lambda grid used for pi0 estimation.
    pi0_smooth : ndarray or None
        Smoothed pi0(lambda); None unless the smoother method was used.
    fdr_level : float or None
        FDR control level, when one was requested.
    significant : ndarray of bool or None
        ``qvalues <= fdr_level``, when a level was requested.
    """

    call: Mapping[str, Any]
    pi0: float
    qvalues: np.ndarray
    pvalues: np.ndarray
    lfdr: np.ndarray
    pi0_lambda: np.ndarray | None = None
    lambda_: np.ndarray | None = None
    pi0_smooth: np.ndarray | None = None
    fdr_level: float | None = None
    significant: np.ndarray | None = field(default=None, repr=False)

    @property
    def m(self) -> int:
        """Number of tests."""
        return len(self.pvalues)

    @property
    def n_significant(self) -> int | None:
        """Number of tests called significant, or None without an fdr_level."""
        if self.significant is None:
            return None
        return int(self.significant.sum())

    def to_frame(self) -> pd.DataFrame:
        """One row per test: pvalue, qvalue, lfdr and significant if requested."""
        data = {
            "pvalue": self.pvalues,
            "qvalue": self.qvalues,
            "lfdr": self.lfdr,
        }
        if self.significant is not None:
            data["significant"] = self.significant
        return pd.DataFrame(data)


def freeze_call(call: Mapping[str, Any]) -> Mapping[str, Any]:
    """Read-only view over a copy of the invocation parameters.

    Array-valued options (e.g. a ``lambda_`` grid) are copied into read-only
    arrays so later changes to the caller's arrays do not reach the result.
    """
    frozen = {
        key: readonly_copy(value, dtype=value.dtype) if isinstance(value, np.ndarray) else value
        for key, value in call.items()
    }
    return MappingProxyType(frozen)
