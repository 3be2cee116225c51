"""Worker and BLAS thread management.

panassoc has two separate sources of parallelism:
- The distance engine: a Python thread pool, sized by get_worker_count().
- Numpy/scipy linear algebra (MDS eigendecomposition): system BLAS,
  controlled by threadpool_limits through blas_threads().
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import contextmanager

import psutil
from loguru import logger
from threadpoolctl import threadpool_limits


def get_worker_count(requested: int | None = None) -> int:
    """Determine how many worker threads to use.

    Priority:
    1. ``requested`` (explicit argument, e.g. the CLI --threads option)
    2. PANASSOC_THREADS env var
    3. Physical core count via psutil (avoids hyperthreading oversubscription)

    Returns:
        Positive integer thread count, capped at os.cpu_count().
    """
    max_threads = os.cpu_count() or 64

    if requested is not None:
        n = max(1, min(int(requested), max_threads))
        logger.debug(f"Worker threads from argument: {n}")
        return n

    env_override = os.environ.get("PANASSOC_THREADS")
    if env_override is not None:
        try:
            n = int(env_override)
        except ValueError:
            logger.warning(
                f"PANASSOC_THREADS={env_override!r} is not a valid integer, "
                "falling back to physical core count"
            )
        else:
            n = max(1, min(n, max_threads))
            logger.debug(f"Worker threads from PANASSOC_THREADS: {n}")
            return n

    n = psutil.cpu_count(logical=False) or max_threads
    n = max(1, min(n, max_threads))
    logger.debug(f"Worker threads from physical core count: {n}")
    return n


@contextmanager
def blas_threads(n_threads: int | None = None) -> Generator[None, None, None]:
    """Context manager for scoped BLAS thread control.

    Args:
        n_threads: Number of BLAS threads. None uses get_worker_count().

    Example:
        >>> with blas_threads(4):
        ...     eigenvalues, eigenvectors = scipy.linalg.eigh(B)
    """
    if n_threads is None:
        n_threads = get_worker_count()

    with threadpool_limits(limits=n_threads, user_api="blas"):
        yield
