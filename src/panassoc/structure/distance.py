"""Pairwise dissimilarity between samples.

Computes the Manhattan distance between every pair of rows of a binary
sample x feature matrix. For 0/1 rows this is the number of features present
in exactly one of the two samples.

Only the upper triangle is computed. Each off-diagonal cell is an independent
task whose result carries its (row, col) coordinate, so results can be written
in any completion order: no two tasks target the same cell, and the output is
bit-identical for every worker count.
"""

from __future__ import annotations

import time
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import NamedTuple

import numpy as np
from loguru import logger


class DistanceElement(NamedTuple):
    """Distance between two samples, tagged with its matrix coordinate."""

    row: int
    col: int
    distance: float


def manhattan_distance(row_a: np.ndarray, row_b: np.ndarray) -> float:
    """Sum of absolute differences between two feature rows."""
    return float(np.sum(np.abs(row_a - row_b)))


def _distance_task(i: int, j: int, row_a: np.ndarray, row_b: np.ndarray) -> DistanceElement:
    return DistanceElement(i, j, manhattan_distance(row_a, row_b))


def _store(dist: np.ndarray, element: DistanceElement) -> None:
    dist[element.row, element.col] = element.distance
    dist[element.col, element.row] = element.distance


def compute_dissimilarity(sample_matrix: np.ndarray, threads: int = 1) -> np.ndarray:
    """Compute the symmetric sample x sample Manhattan distance matrix.

    With ``threads > 1`` the off-diagonal cells are dispatched to a thread pool
    with at most ``threads`` tasks in flight: once the queue is full the oldest
    task is drained before the next is submitted, and every remaining task is
    drained after dispatch finishes.

    Args:
        sample_matrix: Binary matrix (n_samples, n_features).
        threads: Maximum number of concurrently running distance tasks.

    Returns:
        Dissimilarity matrix (n_samples, n_samples) with a zero diagonal.

    Raises:
        ValueError: If sample_matrix is not 2-D or threads < 1.

    Example:
        >>> M = np.array([[0, 0], [1, 0], [0, 1], [1, 1]])
        >>> compute_dissimilarity(M, threads=2)[0, 3]
        2.0
    """
    if threads < 1:
        raise ValueError(f"threads must be >= 1, got {threads}")

    samples = np.asarray(sample_matrix, dtype=np.float64)
    if samples.ndim != 2:
        raise ValueError(f"Sample matrix must be 2-D, got shape {samples.shape}")

    n_samples = samples.shape[0]
    dist = np.zeros((n_samples, n_samples), dtype=np.float64)
    if n_samples < 2:
        return dist

    n_pairs = n_samples * (n_samples - 1) // 2
    logger.debug(
        f"Computing {n_pairs:,} pairwise distances over {samples.shape[1]:,} "
        f"features with {threads} thread(s)"
    )
    start_time = time.perf_counter()

    if threads == 1:
        for i in range(n_samples):
            for j in range(i + 1, n_samples):
                _store(dist, _distance_task(i, j, samples[i], samples[j]))
    else:
        pending: deque[Future[DistanceElement]] = deque()
        with ThreadPoolExecutor(max_workers=threads) as executor:
            for i in range(n_samples):
                ref_row = samples[i]
                for j in range(i + 1, n_samples):
                    if len(pending) == threads:
                        _store(dist, pending.popleft().result())
                    pending.append(
                        executor.submit(_distance_task, i, j, ref_row, samples[j])
                    )

            while pending:
                _store(dist, pending.popleft().result())

    elapsed = time.perf_counter() - start_time
    logger.debug(f"Distance matrix ({n_samples:,} x {n_samples:,}) in {elapsed:.2f}s")
    return dist
