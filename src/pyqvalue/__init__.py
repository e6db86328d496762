"""q-value and local false discovery rate estimation."""

from .core import assemble_result, qvalue, validate_inputs
from .errors import EstimationError, NumericInstabilityWarning, RangeError
from .result import QValueResult
from .stats import Pi0Estimate, compute_qvalues, lfdr, pi0est

__version__ = "0.1.0"

__all__ = [
    "qvalue",
    "validate_inputs",
    "assemble_result",
    "QValueResult",
    "Pi0Estimate",
    "compute_qvalues",
    "lfdr",
    "pi0est",
    "RangeError",
    "EstimationError",
    "NumericInstabilityWarning",
]
