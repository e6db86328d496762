"""Visualization and reporting for q-value results."""

from .plots import hist_qvalue, plot_qvalue
from .report import ReportWriter, format_summary, summary_table

__all__ = [
    "hist_qvalue",
    "plot_qvalue",
    "ReportWriter",
    "format_summary",
    "summary_table",
]
