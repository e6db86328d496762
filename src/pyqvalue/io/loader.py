"""Load p-values from delimited text or NumPy files."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def load_pvalues(
    path: str | Path,
    column: str | None = None,
    sep: str | None = None,
) -> np.ndarray:
    """Read a vector of p-values.

    Parameters
    ----------
    path : str or Path
        ``.npy`` array, or a CSV/TSV table with a header row.
    column : str, optional
        Column holding the p-values. Defaults to the first numeric column.
    sep : str, optional
        Field separator. Inferred from the extension when None
        (tab for ``.tsv``/``.txt``, comma otherwise).

    Returns
    -------
    pvals : ndarray, shape (m,)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"P-value file not found: {path}")

    if path.suffix == ".npy":
        pvals = np.load(path).astype(float).ravel()
        logger.info("Loaded %d p-values from %s", len(pvals), path)
        return pvals

    if sep is None:
        sep = "\t" if path.suffix in (".tsv", ".txt") else ","
    df = pd.read_csv(path, sep=sep, comment="#")

    if column is None:
        numeric = df.select_dtypes(include="number").columns
        if len(numeric) == 0:
            raise ValueError(f"No numeric column in {path}")
        column = numeric[0]
    elif column not in df.columns:
        available = ", ".join(map(str, df.columns))
        raise ValueError(f"Column '{column}' not in {path}. Available: {available}")

    pvals = df[column].to_numpy(dtype=float)
    logger.info("Loaded %d p-values from %s (column '%s')", len(pvals), path, column)
    return pvals
