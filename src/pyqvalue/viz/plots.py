"""Diagnostic figures for a q-value estimation."""

from __future__ import annotations

import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from ..result import QValueResult
from .style import apply_style, get_quantity_color

logger = logging.getLogger(__name__)


def _in_range(values: np.ndarray, rng: tuple[float, float]) -> np.ndarray:
    return (values >= rng[0]) & (values <= rng[1])


def plot_qvalue(
    result: QValueResult,
    output_path: Path,
    rng: tuple[float, float] = (0.0, 0.1),
):
    """Four-panel summary of a q-value estimation.

    Panels: pi0(lambda) with its smoothed fit, q-values against p-values,
    number of significant tests against the q-value cutoff, and expected
    false positives against the number of significant tests. The last three
    are restricted to q-values inside ``rng``.
    """
    apply_style()
    fig, axes = plt.subplots(2, 2, figsize=(10, 8), squeeze=False)

    # pi0 vs lambda
    ax = axes[0, 0]
    pi0_color = get_quantity_color("pi0")
    if result.lambda_ is not None and result.pi0_lambda is not None:
        ax.scatter(result.lambda_, result.pi0_lambda, color=get_quantity_color("pvalue"), s=15,
                   label=r"$\hat\pi_0(\lambda)$")
        if result.pi0_smooth is not None:
            ax.plot(result.lambda_, result.pi0_smooth, color=get_quantity_color("smooth"),
                    label="smoothed")
    ax.axhline(result.pi0, color=pi0_color, linestyle="--",
               label=rf"$\hat\pi_0$ = {result.pi0:.3f}")
    ax.set_xlabel(r"$\lambda$")
    ax.set_ylabel(r"$\hat\pi_0(\lambda)$")
    ax.set_title(r"$\pi_0$ estimation")
    ax.legend(fontsize=8)

    order = np.argsort(result.pvalues, kind="stable")
    p_sorted = result.pvalues[order]
    q_sorted = result.qvalues[order]
    keep = _in_range(q_sorted, rng)
    q_color = get_quantity_color("qvalue")

    # q vs p
    ax = axes[0, 1]
    if keep.any():
        ax.plot(p_sorted[keep], q_sorted[keep], color=q_color)
    ax.set_xlabel("p-value")
    ax.set_ylabel("q-value")
    ax.set_title("q-values")

    # Significant tests vs q-value cutoff
    n_sig = np.arange(1, len(q_sorted) + 1)
    ax = axes[1, 0]
    if keep.any():
        ax.step(q_sorted[keep], n_sig[keep], where="post", color=q_color)
    ax.set_xlabel("q-value cutoff")
    ax.set_ylabel("significant tests")
    ax.set_title("Significant tests")

    # Expected false positives vs significant tests
    ax = axes[1, 1]
    if keep.any():
        ax.plot(n_sig[keep], q_sorted[keep] * n_sig[keep], color=get_quantity_color("lfdr"))
    ax.set_xlabel("significant tests")
    ax.set_ylabel("expected false positives")
    ax.set_title("Expected false positives")

    fig.suptitle(f"q-value estimation (m = {result.m})", fontsize=14, y=1.02)
    fig.tight_layout()
    output_path = Path(output_path)
    fig.savefig(output_path)
    plt.close(fig)
    logger.info("Saved q-value plot: %s", output_path)


def hist_qvalue(
    result: QValueResult,
    output_path: Path,
    bins: int = 20,
):
    """Histogram of p-values with the q-value and local FDR curves overlaid.

    A horizontal line marks pi0, the height a purely null (uniform) density
    would have after scaling.
    """
    apply_style()
    fig, ax = plt.subplots(figsize=(7, 5))

    sns.histplot(
        x=result.pvalues,
        bins=bins,
        binrange=(0, 1),
        stat="density",
        color=get_quantity_color("pvalue"),
        alpha=0.4,
        ax=ax,
    )

    order = np.argsort(result.pvalues, kind="stable")
    ax.plot(result.pvalues[order], result.qvalues[order],
            color=get_quantity_color("qvalue"), label="q-value")
    ax.plot(result.pvalues[order], result.lfdr[order],
            color=get_quantity_color("lfdr"), label="local FDR")
    ax.axhline(result.pi0, color=get_quantity_color("pi0"), linestyle="--",
               label=rf"$\hat\pi_0$ = {result.pi0:.3f}")

    ax.set_xlim(0, 1)
    ax.set_xlabel("p-value")
    ax.set_ylabel("density")
    ax.set_title("p-value histogram")
    ax.legend(fontsize=8)

    fig.tight_layout()
    output_path = Path(output_path)
    fig.savefig(output_path)
    plt.close(fig)
    logger.info("Saved p-value histogram: %s", output_path)
