"""Statistical estimators: q-values, pi0 and local FDR."""

from .qvalues import compute_qvalues, max_tie_rank, order_index, pfdr_denominator
from .pi0 import (
    PI0_METHODS,
    BootstrapPi0Estimator,
    Pi0Estimate,
    Pi0Estimator,
    SmootherPi0Estimator,
    make_pi0_estimator,
    pi0est,
)
from .lfdr import TRANSFORMS, lfdr
from .smoothing import SmoothingSplineFit, fit_smoothing_spline, gaussian_density

__all__ = [
    "compute_qvalues",
    "max_tie_rank",
    "order_index",
    "pfdr_denominator",
    "PI0_METHODS",
    "BootstrapPi0Estimator",
    "Pi0Estimate",
    "Pi0Estimator",
    "SmootherPi0Estimator",
    "make_pi0_estimator",
    "pi0est",
    "TRANSFORMS",
    "lfdr",
    "SmoothingSplineFit",
    "fit_smoothing_spline",
    "gaussian_density",
]
