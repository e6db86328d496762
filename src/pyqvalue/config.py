"""YAML-driven estimation configuration loader."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
import yaml

from .stats.lfdr import TRANSFORMS
from .stats.pi0 import DEFAULT_LAMBDA, PI0_METHODS


def _parse_lambda(value: Any) -> np.ndarray | float:
    """Accept a scalar, a list, or a ``{start, stop, step}`` mapping."""
    if value is None:
        return DEFAULT_LAMBDA
    if isinstance(value, dict):
        start = float(value.get("start", 0.05))
        stop = float(value.get("stop", 0.95))
        step = float(value.get("step", 0.05))
        # stop is inclusive, as written in the YAML
        return np.round(np.arange(start, stop + step / 2, step), 10)
    if isinstance(value, (list, tuple)):
        return np.asarray(value, dtype=float)
    return float(value)


@dataclass
class QValueConfig:
    """Options for one q-value estimation, loaded from YAML.

    Attributes
    ----------
    fdr_level : float or None
        FDR control level for significance calls.
    use_pfdr : bool
        Estimate the positive FDR.
    lambda_ : ndarray or float
        pi0 tuning grid (or a single value).
    pi0_method : str
        "smoother" or "bootstrap".
    smooth_df : float
        Smoothing spline degrees of freedom.
    smooth_log_pi0 : bool
        Smooth pi0(lambda) on the log scale.
    transf, adj, trunc, monotone, eps
        Local FDR options.
    column, sep : str or None
        How to read the p-value table.
    output_dir : Path or None
        Where the CLI writes its outputs.
    raw : dict
        The raw parsed YAML for extension.
    """

    fdr_level: float | None = None
    use_pfdr: bool = False
    lambda_: Any = field(default_factory=lambda: DEFAULT_LAMBDA.copy())
    pi0_method: str = "smoother"
    smooth_df: float = 3
    smooth_log_pi0: bool = False
    transf: str = "probit"
    adj: float = 1.5
    trunc: bool = True
    monotone: bool = True
    eps: float = 1e-8
    column: str | None = None
    sep: str | None = None
    output_dir: Path | None = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_yaml(cls, path: str | Path) -> QValueConfig:
        """Load a config from a YAML file."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QValueConfig:
        pi0 = data.get("pi0", {}) or {}
        lfdr = data.get("lfdr", {}) or {}
        inp = data.get("input", {}) or {}
        output_dir = data.get("output_dir")

        return cls(
            fdr_level=data.get("fdr_level"),
            use_pfdr=bool(data.get("use_pfdr", data.get("pfdr", False))),
            lambda_=_parse_lambda(pi0.get("lambda")),
            pi0_method=pi0.get("method", "smoother"),
            smooth_df=pi0.get("smooth_df", 3),
            smooth_log_pi0=bool(pi0.get("smooth_log_pi0", False)),
            transf=lfdr.get("transf", "probit"),
            adj=lfdr.get("adj", 1.5),
            trunc=bool(lfdr.get("trunc", True)),
            monotone=bool(lfdr.get("monotone", True)),
            eps=lfdr.get("eps", 1e-8),
            column=inp.get("column"),
            sep=inp.get("sep"),
            output_dir=Path(output_dir) if output_dir else None,
            raw=data,
        )

    def to_kwargs(self) -> dict[str, Any]:
        """Options forwarded to :func:`pyqvalue.qvalue`."""
        return {
            "fdr_level": self.fdr_level,
            "use_pfdr": self.use_pfdr,
            "lambda_": self.lambda_,
            "pi0_method": self.pi0_method,
            "smooth_df": self.smooth_df,
            "smooth_log_pi0": self.smooth_log_pi0,
            "transf": self.transf,
            "adj": self.adj,
            "trunc": self.trunc,
            "monotone": self.monotone,
            "eps": self.eps,
        }

    def validate(self) -> list[str]:
        """Check configuration for common errors. Returns list of warnings."""
        warnings = []
        if self.fdr_level is not None and not (0 < self.fdr_level <= 1):
            warnings.append(f"fdr_level must be in (0, 1], got {self.fdr_level}")

        lambdas = np.atleast_1d(np.asarray(self.lambda_, dtype=float))
        if len(lambdas) > 1 and len(lambdas) < 4:
            warnings.append(f"lambda grid has {len(lambdas)} values; need 1 or at least 4")
        if len(lambdas) and not (lambdas.min() >= 0 and lambdas.max() < 1):
            warnings.append("lambda values must be within [0, 1)")

        if self.pi0_method not in PI0_METHODS:
            warnings.append(
                f"Unknown pi0 method '{self.pi0_method}' "
                f"(available: {', '.join(PI0_METHODS)})"
            )
        if self.pi0_method == "smoother" and len(lambdas) > 1 and not (2 < self.smooth_df < len(lambdas)):
            warnings.append(f"smooth_df must be in (2, {len(lambdas)}), got {self.smooth_df}")

        if self.transf not in TRANSFORMS:
            warnings.append(
                f"Unknown lfdr transformation '{self.transf}' "
                f"(available: {', '.join(TRANSFORMS)})"
            )
        if self.adj <= 0:
            warnings.append(f"lfdr adj must be positive, got {self.adj}")
        return warnings
