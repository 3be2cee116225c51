"""Symmetric eigendecomposition capability.

The MDS reducer only needs "symmetric matrix -> (eigenvalues ascending,
eigenvectors)". Anything with that call signature can be passed in as an
Eigensolver, which lets tests substitute decompositions with known answers.

The default uses scipy.linalg.eigh (LAPACK dsyevd) under scoped BLAS thread
limits from panassoc.core.threading.
"""

from __future__ import annotations

import time
from typing import Protocol

import numpy as np
import scipy.linalg
from loguru import logger

from panassoc.core.threading import blas_threads


class Eigensolver(Protocol):
    """Callable returning (eigenvalues ascending, eigenvectors as columns)."""

    def __call__(self, matrix: np.ndarray) -> tuple[np.ndarray, np.ndarray]: ...


def symmetric_eigh(
    matrix: np.ndarray, n_threads: int | None = None
) -> tuple[np.ndarray, np.ndarray]:
    """Full eigendecomposition of a real symmetric matrix.

    Args:
        matrix: Symmetric matrix (n, n). Not modified.
        n_threads: BLAS threads for the decomposition. None uses
            get_worker_count().

    Returns:
        Tuple of (eigenvalues, eigenvectors) where:
        - eigenvalues: (n,) sorted ascending
        - eigenvectors: (n, n) columns are eigenvectors

    Raises:
        ValueError: If the matrix is not square.
    """
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"Matrix must be square, got shape {matrix.shape}")

    n = matrix.shape[0]
    start_time = time.perf_counter()
    try:
        with blas_threads(n_threads):
            eigenvalues, eigenvectors = scipy.linalg.eigh(
                matrix, driver="evd", check_finite=True
            )
    except Exception as e:
        logger.error(f"Eigendecomposition failed: {type(e).__name__}: {e}")
        raise

    elapsed = time.perf_counter() - start_time
    logger.debug(f"Eigendecomposition ({n:,} x {n:,}) in {elapsed:.2f}s")
    return eigenvalues, eigenvectors
