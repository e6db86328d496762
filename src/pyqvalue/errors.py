"""Exception and warning types raised by q-value estimation."""

from __future__ import annotations


class RangeError(ValueError):
    """An input (p-values, fdr_level, pi0 or lambda) lies outside its valid domain."""


class EstimationError(RuntimeError):
    """A pi0 or local FDR estimator could not produce a usable estimate."""


class NumericInstabilityWarning(RuntimeWarning):
    """The pFDR denominator was near cancellation and a stabilized form was used."""
