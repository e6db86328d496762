"""Publication-quality plot defaults."""

from __future__ import annotations

import matplotlib as mpl


PUBLICATION_PARAMS = {
    "figure.dpi": 150,
    "savefig.dpi": 300,
    "savefig.bbox": "tight",
    "font.size": 10,
    "axes.titlesize": 12,
    "axes.labelsize": 11,
    "xtick.labelsize": 9,
    "ytick.labelsize": 9,
    "legend.fontsize": 9,
    "figure.figsize": (8, 5),
    "axes.spines.top": False,
    "axes.spines.right": False,
    "axes.grid": False,
    "lines.linewidth": 1.5,
    "font.family": "sans-serif",
}

# Line colors for each estimated quantity
QUANTITY_COLORS = {
    "pvalue": "#7F8C8D",
    "qvalue": "#3498DB",
    "lfdr": "#E74C3C",
    "pi0": "#2ECC71",
    "smooth": "#9B59B6",
}


def apply_style():
    """Apply publication defaults to matplotlib."""
    mpl.rcParams.update(PUBLICATION_PARAMS)


def get_quantity_color(name: str) -> str:
    """Return the color used for a quantity, gray if unknown."""
    return QUANTITY_COLORS.get(name, "#7F8C8D")
