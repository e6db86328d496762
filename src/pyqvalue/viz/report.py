"""Summary tables and a markdown report for q-value results."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import numpy as np
import pandas as pd

from ..result import QValueResult

logger = logging.getLogger(__name__)

DEFAULT_CUTS = (1e-4, 1e-3, 0.01, 0.025, 0.05, 0.1, 1.0)


def summary_table(
    result: QValueResult,
    cuts: tuple[float, ...] = DEFAULT_CUTS,
) -> pd.DataFrame:
    """Cumulative number of tests strictly below each cutoff.

    Rows are ``p-value``, ``q-value`` and ``local FDR``; columns are the cuts
    formatted as ``<cut``.
    """
    columns = [f"<{c:g}" for c in cuts]
    rows = {}
    for label, values in [
        ("p-value", result.pvalues),
        ("q-value", result.qvalues),
        ("local FDR", result.lfdr),
    ]:
        rows[label] = [int(np.sum(values < c)) for c in cuts]
    return pd.DataFrame.from_dict(rows, orient="index", columns=columns)


def format_summary(
    result: QValueResult,
    cuts: tuple[float, ...] = DEFAULT_CUTS,
) -> str:
    """Plain-text summary: the call, pi0 and the cumulative significance table."""
    args = ", ".join(f"{k}={_short(v)}" for k, v in result.call.items())
    lines = [
        f"Call: qvalue(p, {args})" if args else "Call: qvalue(p)",
        "",
        f"pi0:\t{result.pi0:.7g}",
        "",
        "Cumulative number of significant calls:",
        "",
        summary_table(result, cuts).to_string(),
    ]
    if result.fdr_level is not None:
        lines += ["", f"Significant at FDR {result.fdr_level:g}: {result.n_significant} of {result.m}"]
    return "\n".join(lines) + "\n"


def _short(value) -> str:
    if isinstance(value, np.ndarray):
        if value.size > 4:
            return f"[{value[0]:g}, {value[1]:g}, ..., {value[-1]:g}]"
        return "[" + ", ".join(f"{v:g}" for v in value) + "]"
    return repr(value)


class ReportWriter:
    """Builds a markdown summary of a q-value estimation."""

    def __init__(self, title: str):
        self.title = title
        self.sections: list[str] = []
        self._add_header()

    def _add_header(self):
        now = datetime.now().strftime("%Y-%m-%d %H:%M")
        self.sections.append(f"# {self.title}\n")
        self.sections.append(f"**Generated:** {now}\n")

    def add_section(self, heading: str, content: str):
        self.sections.append(f"\n## {heading}\n")
        self.sections.append(content)

    def add_methods(self, result: QValueResult):
        """Add a methods section describing the estimators used."""
        call = result.call
        use_pfdr = bool(call.get("use_pfdr", False))
        lambdas = result.lambda_
        if lambdas is None or len(lambdas) == 1:
            pi0_text = "a single tuning parameter"
        else:
            method = call.get("pi0_method", "smoother")
            pi0_text = f"the {method} method over {len(lambdas)} lambda values " \
                       f"({lambdas.min():g}-{lambdas.max():g})"

        text = (
            f"**Tests:** {result.m}\n\n"
            f"**pi0:** {result.pi0:.4f}, estimated with {pi0_text}\n\n"
            f"**q-values:** {'positive FDR (pFDR)' if use_pfdr else 'FDR'} estimates "
            f"(Storey, 2002), made monotone in p\n\n"
            f"**Local FDR:** {call.get('transf', 'probit')}-transformed kernel density, "
            f"bandwidth adjustment {call.get('adj', 1.5)}\n"
        )
        if result.fdr_level is not None:
            text += f"\n**FDR level:** {result.fdr_level:g}\n"
        self.add_section("Methods", text)

    def add_summary_table(
        self,
        result: QValueResult,
        heading: str = "Cumulative Significant Calls",
        cuts: tuple[float, ...] = DEFAULT_CUTS,
    ):
        """Add the cumulative significance table as markdown."""
        table = summary_table(result, cuts).to_markdown()
        self.add_section(heading, table + "\n")

    def add_top_hits(self, result: QValueResult, n: int = 10, heading: str = "Top Tests"):
        """Add the tests with the smallest q-values."""
        df = result.to_frame()
        if df.empty:
            self.add_section(heading, "*No results available.*\n")
            return
        top = df.sort_values(["qvalue", "pvalue"], kind="stable").head(n)
        table = top.to_markdown(index=True, floatfmt=".4g")
        self.add_section(heading, table + "\n")

    def add_figure_reference(self, fig_path: Path, caption: str):
        """Add a figure reference."""
        self.sections.append(f"\n![{caption}]({Path(fig_path).name})\n")

    def write(self, output_path: Path):
        """Write the report to a file."""
        text = "\n".join(self.sections)
        Path(output_path).write_text(text)
        logger.info("Report written: %s", output_path)
