"""Write q-value results as a delimited table."""

from __future__ import annotations

import logging
from pathlib import Path

from ..result import QValueResult

logger = logging.getLogger(__name__)


def write_qvalues(
    result: QValueResult,
    path: str | Path,
    sep: str = "\t",
    float_format: str = "%.10g",
) -> Path:
    """Write one row per test, preceded by ``#`` comment lines with pi0 and fdr_level.

    Columns: pvalue, qvalue, lfdr, and significant when an fdr_level was set.
    The file reads back with ``pd.read_csv(path, sep=sep, comment="#")``.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        f.write(f"# pi0: {result.pi0:.10g}\n")
        if result.fdr_level is not None:
            f.write(f"# fdr_level: {result.fdr_level:g}\n")
        result.to_frame().to_csv(f, sep=sep, index=False, float_format=float_format)

    logger.info("Wrote %d q-values: %s", result.m, path)
    return path
