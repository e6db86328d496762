"""I/O — reading p-value tables and writing q-value results."""

from .loader import load_pvalues
from .writer import write_qvalues

__all__ = ["load_pvalues", "write_qvalues"]
