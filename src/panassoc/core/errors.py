"""Exception types for panassoc.

Per-k-mer numerical failures (optimizer non-convergence, singular information,
iteration limits) are caught inside the fitting chain and recorded as
diagnostic tags on the k-mer. Only structurally invalid calls, such as an MDS
dimension request larger than the sample count, reach the caller.
"""

import numpy as np


class PanassocError(Exception):
    """Base exception for all panassoc errors."""


class OptimizerNonConvergence(PanassocError):
    """Raised when the quasi-Newton maximizer fails to reach an optimum."""


class IterationLimitExceeded(PanassocError):
    """Raised when Newton-Raphson hits its iteration cap without converging."""

    def __init__(self, iterations: int, firth: bool = False):
        mode = "Firth" if firth else "plain"
        super().__init__(f"{mode} Newton-Raphson did not converge in {iterations} iterations")
        self.iterations = iterations
        self.firth = firth


class SingularInformation(PanassocError, np.linalg.LinAlgError):
    """Raised when the information matrix cannot be inverted.

    Typical causes are perfectly separated data (fitted probabilities
    saturate at 0 or 1) and zero-variance design columns.
    """


class InvalidDimensionRequest(PanassocError, ValueError):
    """Raised when more MDS dimensions are requested than there are samples."""

    def __init__(self, dimensions: int, n_samples: int):
        super().__init__(
            f"Requested {dimensions} MDS dimensions but only {n_samples} samples "
            f"are available (need 1 <= dimensions <= {n_samples})"
        )
        self.dimensions = dimensions
        self.n_samples = n_samples
