"""Synthetic p-value fixtures for testing."""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
from scipy import stats


N_NULL = 800
N_ALT = 200


def _make_mixture(n_null: int = N_NULL, n_alt: int = N_ALT, effect: float = 3.0) -> np.ndarray:
    """Uniform null p-values mixed with one-sided z-test p-values under a shift."""
    rng = np.random.default_rng(42)
    null_p = rng.uniform(size=n_null)
    alt_p = stats.norm.sf(rng.normal(effect, 1.0, n_alt))
    pvals = np.concatenate([null_p, alt_p])
    return pvals[rng.permutation(len(pvals))]


@pytest.fixture
def mixture_pvalues():
    """1000 p-values, 80% null."""
    return _make_mixture()


@pytest.fixture
def uniform_pvalues():
    """2000 null p-values."""
    rng = np.random.default_rng(42)
    return rng.uniform(size=2000)


@pytest.fixture
def pvalue_csv(tmp_path):
    """CSV table with a gene id column and a p-value column."""
    pvals = _make_mixture()
    df = pd.DataFrame({
        "gene": [f"gene_{i:04d}" for i in range(len(pvals))],
        "stat": np.linspace(-3, 3, len(pvals)),
        "pval": pvals,
    })
    path = tmp_path / "pvalues.csv"
    df.to_csv(path, index=False)
    return path


@pytest.fixture
def sample_config_yaml(tmp_path):
    """A sample estimation YAML config."""
    output_dir = tmp_path / "output"

    config_text = f"""
fdr_level: 0.05
use_pfdr: false
output_dir: "{output_dir}"

pi0:
  method: smoother
  lambda:
    start: 0.05
    stop: 0.95
    step: 0.05
  smooth_df: 3
  smooth_log_pi0: false

lfdr:
  transf: probit
  adj: 1.5
  trunc: true
  monotone: true

input:
  column: pval
"""
    config_path = tmp_path / "test_config.yaml"
    config_path.write_text(config_text)
    return config_path
