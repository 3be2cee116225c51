"""Core infrastructure for panassoc.

- config: Output and fit configuration dataclasses
- errors: Exception taxonomy
- jax_config: JAX 64-bit configuration
- threading: Worker pool sizing and BLAS thread limits
- progress: Progress bar wrapper
"""

from panassoc.core.config import FitConfig, OutputConfig
from panassoc.core.errors import (
    InvalidDimensionRequest,
    IterationLimitExceeded,
    OptimizerNonConvergence,
    PanassocError,
    SingularInformation,
)
from panassoc.core.jax_config import configure_jax, ensure_jax_configured, get_jax_info
from panassoc.core.threading import blas_threads, get_worker_count

__all__ = [
    "FitConfig",
    "OutputConfig",
    "InvalidDimensionRequest",
    "IterationLimitExceeded",
    "OptimizerNonConvergence",
    "PanassocError",
    "SingularInformation",
    "blas_threads",
    "configure_jax",
    "ensure_jax_configured",
    "get_jax_info",
    "get_worker_count",
]
