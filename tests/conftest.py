"""Pytest fixtures for the panassoc test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest

from panassoc.core import configure_jax

# =============================================================================
# Test Tier System
# =============================================================================
#
# tier0 - Fast unit tests: pure computation, no I/O beyond tmp_path.
#   Run: pytest -m tier0
# tier1 - End-to-end tests through files and the CLI.
#   Run: pytest -m tier1
#
# Markers are registered in pyproject.toml.
# =============================================================================

TwoByTwo = Callable[[int, int, int, int], tuple[np.ndarray, np.ndarray]]


@pytest.fixture(autouse=True, scope="session")
def setup_jax():
    """Configure JAX with 64-bit precision once for the session."""
    configure_jax(enable_x64=True)


def make_two_by_two(a: int, b: int, c: int, d: int) -> tuple[np.ndarray, np.ndarray]:
    """Presence and phenotype vectors for a 2x2 table.

    a: present & case, b: present & control, c: absent & case,
    d: absent & control. With no covariates the logistic MLE of the k-mer
    coefficient is log(ad / bc) with standard error sqrt(1/a + 1/b + 1/c + 1/d).
    """
    presence = np.array([1.0] * (a + b) + [0.0] * (c + d))
    phenotype = np.array([1.0] * a + [0.0] * b + [1.0] * c + [0.0] * d)
    return presence, phenotype


@pytest.fixture
def two_by_two() -> TwoByTwo:
    """Factory for 2x2-table datasets with closed-form logistic estimates."""
    return make_two_by_two


@pytest.fixture
def covariate_data() -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Simulated (presence, phenotype, covariates) with two covariates, 300 samples."""
    rng = np.random.default_rng(2024)
    n = 300
    presence = (rng.random(n) < 0.4).astype(np.float64)
    covariates = rng.standard_normal((n, 2))
    eta = -0.5 + 1.2 * presence + 0.8 * covariates[:, 0] - 0.3 * covariates[:, 1]
    phenotype = (rng.random(n) < 1.0 / (1.0 + np.exp(-eta))).astype(np.float64)
    return presence, phenotype, covariates


@pytest.fixture
def example_files(tmp_path: Path) -> dict[str, Path]:
    """Phenotype and k-mer files for 40 samples (20 cases, 20 controls).

    Every k-mer is present in both cases and controls, so none is separated.
    """
    samples = [f"s{i:02d}" for i in range(40)]
    phenotype = [1] * 20 + [0] * 20

    pheno_path = tmp_path / "pheno.txt"
    pheno_path.write_text("".join(f"{s}\t{p}\n" for s, p in zip(samples, phenotype)))

    # (cases carrying, controls carrying) per k-mer
    patterns = {
        "ACGTACGTAC": (14, 6),
        "CCGTACGTAA": (10, 10),
        "GGGTACGTCC": (5, 12),
        "TTGTACGTAG": (8, 3),
        "ATATATATAT": (16, 15),
    }
    lines = []
    for seq, (n_case, n_ctrl) in patterns.items():
        carriers = samples[:n_case] + samples[20 : 20 + n_ctrl]
        lines.append(f"{seq} | " + " ".join(f"{s}:1" for s in carriers))
    kmer_path = tmp_path / "kmers.txt"
    kmer_path.write_text("\n".join(lines) + "\n")

    return {"pheno": pheno_path, "kmers": kmer_path}
