"""CLI entry point for pyqvalue."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import QValueConfig
from .core import qvalue
from .errors import EstimationError, RangeError
from .io.loader import load_pvalues
from .io.writer import write_qvalues
from .stats.pi0 import PI0_METHODS
from .viz.plots import hist_qvalue, plot_qvalue
from .viz.report import ReportWriter, format_summary

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_config(args) -> QValueConfig:
    """Config from --config, overridden by explicit command-line options."""
    config = QValueConfig.from_yaml(args.config) if args.config else QValueConfig()
    if args.fdr_level is not None:
        config.fdr_level = args.fdr_level
    if args.use_pfdr:
        config.use_pfdr = True
    if args.column is not None:
        config.column = args.column
    if args.pi0_method is not None:
        config.pi0_method = args.pi0_method
    return config


def _estimate(args):
    config = _load_config(args)
    pvals = load_pvalues(args.pvalues, column=config.column, sep=config.sep)
    try:
        return config, qvalue(pvals, **config.to_kwargs())
    except (RangeError, EstimationError) as e:
        logger.error("Estimation failed: %s", e)
        sys.exit(1)


def cmd_run(args):
    """Estimate q-values and write tables, report and figures."""
    config, result = _estimate(args)
    output_dir = args.output or config.output_dir or Path(".")
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    write_qvalues(result, output_dir / "qvalues.tsv")

    report = ReportWriter(f"q-value estimation: {Path(args.pvalues).name}")
    report.add_methods(result)
    report.add_summary_table(result)
    report.add_top_hits(result)

    if args.plots:
        plot_qvalue(result, output_dir / "qvalue_plot.png")
        hist_qvalue(result, output_dir / "pvalue_hist.png")
        report.add_figure_reference(output_dir / "qvalue_plot.png", "q-value diagnostics")
        report.add_figure_reference(output_dir / "pvalue_hist.png", "p-value histogram")

    report.write(output_dir / "summary.md")

    print(format_summary(result))
    print(f"Done. Output: {output_dir}")


def cmd_summary(args):
    """Print the summary of a q-value estimation."""
    _, result = _estimate(args)
    print(format_summary(result))


def cmd_validate(args):
    """Validate an estimation configuration."""
    config = QValueConfig.from_yaml(args.config)
    issues = config.validate()

    print(f"Config: {args.config}")
    print(f"FDR level: {config.fdr_level}")
    print(f"pFDR: {config.use_pfdr}")
    print(f"pi0 method: {config.pi0_method}")
    print(f"lfdr transformation: {config.transf} (adj={config.adj})")

    if issues:
        print(f"\nWarnings ({len(issues)}):")
        for issue in issues:
            print(f"  - {issue}")
        sys.exit(1)
    else:
        print("\nValidation passed.")


def _add_estimation_args(parser: argparse.ArgumentParser):
    parser.add_argument("--pvalues", required=True, type=Path, help="CSV/TSV/.npy file of p-values")
    parser.add_argument("--config", type=Path, help="Path to estimation YAML config")
    parser.add_argument("--column", help="Column holding the p-values")
    parser.add_argument("--fdr-level", type=float, help="FDR control level in (0, 1]")
    parser.add_argument("--use-pfdr", "--pfdr", dest="use_pfdr", action="store_true",
                        help="Estimate the positive FDR")
    parser.add_argument("--pi0-method", choices=list(PI0_METHODS), help="pi0 estimation method")


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="pyqvalue",
        description="q-value and local FDR estimation for large-scale multiple testing",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # run
    p_run = subparsers.add_parser("run", help="Estimate q-values and write outputs")
    _add_estimation_args(p_run)
    p_run.add_argument("--output", type=Path, help="Output directory")
    p_run.add_argument("--plots", action="store_true", help="Also write diagnostic figures")
    p_run.set_defaults(func=cmd_run)

    # summary
    p_sum = subparsers.add_parser("summary", help="Print a summary of the estimation")
    _add_estimation_args(p_sum)
    p_sum.set_defaults(func=cmd_summary)

    # validate
    p_val = subparsers.add_parser("validate", help="Validate an estimation config")
    p_val.add_argument("--config", required=True, type=Path, help="Path to estimation YAML config")
    p_val.set_defaults(func=cmd_validate)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
