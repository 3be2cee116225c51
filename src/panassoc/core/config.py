"""Configuration dataclasses for panassoc.

This module contains dataclasses that configure output locations and the
numerical constants of the logistic fitting chain.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class OutputConfig:
    """Configuration for output files and directories.

    Attributes:
        outdir: Output directory for result files. Created if it doesn't exist.
        prefix: Prefix for output filenames (e.g., "result" produces "result.log.txt").
        verbose: Enable verbose/debug output to console.
    """

    outdir: Path = field(default_factory=lambda: Path("output"))
    prefix: str = "result"
    verbose: bool = False

    @property
    def log_path(self) -> Path:
        """Path to the run log file ({outdir}/{prefix}.log.txt)."""
        return self.outdir / f"{self.prefix}.log.txt"

    @property
    def assoc_path(self) -> Path:
        """Path to the association results ({outdir}/{prefix}.assoc.txt)."""
        return self.outdir / f"{self.prefix}.assoc.txt"

    @property
    def mds_path(self) -> Path:
        """Path to the MDS coordinates ({outdir}/{prefix}.mds.txt)."""
        return self.outdir / f"{self.prefix}.mds.txt"

    def ensure_outdir(self) -> None:
        """Create output directory if it doesn't exist."""
        self.outdir.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class FitConfig:
    """Numerical constants for the per-k-mer logistic fit.

    The values are fixed per run and never re-derived per call, so the same
    k-mer fitted twice with the same config gives identical output.

    Attributes:
        bfgs_tolerance: Stopping tolerance handed to the quasi-Newton
            maximizer (gradient norm of the sample-averaged log-likelihood).
        convergence_limit: Newton-Raphson stops once the k-mer coefficient
            moves by less than this between iterations.
        max_iterations: Iteration cap for each Newton-Raphson stage
            (plain and Firth separately).

    Example:
        >>> FitConfig().max_iterations
        1000
        >>> FitConfig.strict().convergence_limit
        1e-10
    """

    bfgs_tolerance: float = 1e-6
    convergence_limit: float = 1e-8
    max_iterations: int = 1000

    def __post_init__(self) -> None:
        if self.bfgs_tolerance <= 0:
            raise ValueError(f"bfgs_tolerance must be positive, got {self.bfgs_tolerance}")
        if self.convergence_limit <= 0:
            raise ValueError(
                f"convergence_limit must be positive, got {self.convergence_limit}"
            )
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")

    @classmethod
    def strict(cls) -> "FitConfig":
        """Tighter tolerances, for checking results against reference fits."""
        return cls(bfgs_tolerance=1e-8, convergence_limit=1e-10, max_iterations=5000)

    @classmethod
    def relaxed(cls) -> "FitConfig":
        """Looser tolerances and a short cap, for quick exploratory scans."""
        return cls(bfgs_tolerance=1e-4, convergence_limit=1e-6, max_iterations=100)
