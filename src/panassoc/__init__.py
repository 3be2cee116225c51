"""panassoc: k-mer association testing with population-structure correction.

Each k-mer's presence/absence pattern is tested against a binary phenotype by
logistic regression, optionally adjusted for MDS coordinates that capture
population structure. Fits fall back from BFGS to Newton-Raphson to
Firth-corrected Newton-Raphson when the cheaper stage fails.

Example:
    >>> from panassoc import Kmer, compute_mds, fit_variant
    >>> mds = compute_mds(presence, dimensions=3, threads=4)
    >>> result = fit_variant(Kmer("ACGT", presence[:, 0]), phenotype, mds)
    >>> result.beta, result.p_value, result.comments
"""

import sys
from importlib.metadata import PackageNotFoundError, version

from loguru import logger

try:
    __version__ = version("panassoc")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Users can override by calling logger.remove()/add()
logger.remove()
logger.add(
    sys.stdout,
    level="INFO",
    format="{time:HH:mm:ss} | <level>{level: <8}</level> | {message}",
    colorize=True,
)

from panassoc.association import Kmer, fit_variant, run_association  # noqa: E402
from panassoc.structure import compute_dissimilarity, compute_mds  # noqa: E402

__all__ = [
    "Kmer",
    "compute_dissimilarity",
    "compute_mds",
    "fit_variant",
    "run_association",
    "__version__",
]
