"""Classical (metric) multidimensional scaling.

Embeds samples in a low-dimensional space from their pairwise
dissimilarities, to be used as population-structure covariates:

1. P = D^2 (elementwise)
2. J = I - (1/n) 11'
3. B = -0.5 J P J
4. Eigendecompose B (ascending), then reverse to descending order
5. Coordinates = eigenvectors * sqrt(eigenvalues), first k columns

Non-Euclidean dissimilarities give B negative eigenvalues. Their square root
is undefined, so negative eigenvalues are clamped to zero: the matching
coordinate columns are all zero instead of NaN, and a RuntimeWarning reports
how many were clamped.
"""

from __future__ import annotations

import time
import warnings
from dataclasses import dataclass

import numpy as np
from loguru import logger

from panassoc.core.errors import InvalidDimensionRequest
from panassoc.structure.distance import compute_dissimilarity
from panassoc.structure.eigen import Eigensolver, symmetric_eigh

# Relative to the largest |eigenvalue|; below this a negative value is rounding.
NEGATIVE_EIGENVALUE_RTOL = 1e-10


@dataclass
class MDSResult:
    """Output of metric MDS.

    Attributes:
        coordinates: Sample coordinates (n_samples, dimensions).
        eigenvalues: Eigenvalues used for each coordinate column, descending,
            after clamping negatives to zero.
    """

    coordinates: np.ndarray
    eigenvalues: np.ndarray

    @property
    def dimensions(self) -> int:
        return self.coordinates.shape[1]


def _check_dimensions(dimensions: int, n_samples: int) -> None:
    if dimensions < 1 or dimensions > n_samples:
        raise InvalidDimensionRequest(dimensions, n_samples)


def double_center(dissimilarity: np.ndarray) -> np.ndarray:
    """Return B = -0.5 J D^2 J for a square dissimilarity matrix D."""
    n = dissimilarity.shape[0]
    P = np.square(dissimilarity)
    J = np.eye(n) - np.ones((n, n)) / n
    B = -0.5 * J @ P @ J
    # Exactly symmetric for the solver
    return 0.5 * (B + B.T)


def metric_mds(
    dissimilarity: np.ndarray,
    dimensions: int,
    eigensolver: Eigensolver | None = None,
) -> MDSResult:
    """Metric MDS of a precomputed dissimilarity matrix.

    Args:
        dissimilarity: Symmetric (n, n) matrix with zero diagonal.
        dimensions: Number of coordinate columns to return, 1 <= k <= n.
        eigensolver: Symmetric eigendecomposition returning ascending
            eigenvalues. Defaults to symmetric_eigh.

    Returns:
        MDSResult with (n, dimensions) coordinates, largest component first.

    Raises:
        ValueError: If the dissimilarity matrix is not square.
        InvalidDimensionRequest: If dimensions is outside [1, n].
    """
    D = np.asarray(dissimilarity, dtype=np.float64)
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise ValueError(f"Dissimilarity matrix must be square, got shape {D.shape}")

    n_samples = D.shape[0]
    _check_dimensions(dimensions, n_samples)

    solver = eigensolver if eigensolver is not None else symmetric_eigh
    eigenvalues, eigenvectors = solver(double_center(D))

    # Solver convention is ascending; largest-variance component first
    eigenvalues = eigenvalues[::-1]
    eigenvectors = eigenvectors[:, ::-1]

    scale = np.max(np.abs(eigenvalues)) if eigenvalues.size else 0.0
    n_negative = int(np.sum(eigenvalues < -NEGATIVE_EIGENVALUE_RTOL * scale))
    if n_negative > 0:
        warnings.warn(
            f"Double-centred distance matrix has {n_negative} negative "
            "eigenvalue(s); they are clamped to zero. Distances are not Euclidean.",
            RuntimeWarning,
            stacklevel=2,
        )
    clamped = np.clip(eigenvalues, 0.0, None)

    coordinates = eigenvectors[:, :dimensions] * np.sqrt(clamped[:dimensions])
    return MDSResult(coordinates=coordinates, eigenvalues=clamped[:dimensions].copy())


def compute_mds(
    sample_matrix: np.ndarray,
    dimensions: int,
    threads: int = 1,
    eigensolver: Eigensolver | None = None,
) -> np.ndarray:
    """Population-structure coordinates from a binary sample x feature matrix.

    Args:
        sample_matrix: Binary matrix (n_samples, n_features).
        dimensions: Number of MDS dimensions, 1 <= dimensions <= n_samples.
        threads: Worker threads for the distance computation.
        eigensolver: Optional replacement for symmetric_eigh.

    Returns:
        Coordinate matrix (n_samples, dimensions).

    Raises:
        InvalidDimensionRequest: If dimensions is outside [1, n_samples].
            Checked before any distance work is done.
    """
    samples = np.asarray(sample_matrix, dtype=np.float64)
    if samples.ndim != 2:
        raise ValueError(f"Sample matrix must be 2-D, got shape {samples.shape}")
    n_samples = samples.shape[0]
    _check_dimensions(dimensions, n_samples)

    logger.info(
        f"MDS: {n_samples:,} samples x {samples.shape[1]:,} features, "
        f"{dimensions} dimension(s), {threads} thread(s)"
    )
    start_time = time.perf_counter()

    D = compute_dissimilarity(samples, threads)
    result = metric_mds(D, dimensions, eigensolver=eigensolver)

    elapsed = time.perf_counter() - start_time
    logger.info(f"MDS completed in {elapsed:.2f} seconds")
    logger.debug(f"MDS eigenvalues: {np.array2string(result.eigenvalues, precision=4)}")
    return result.coordinates
