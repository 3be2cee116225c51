"""Population structure from k-mer presence patterns.

Key functions:
- compute_dissimilarity: Threaded pairwise Manhattan distances between samples
- metric_mds: Classical MDS of a dissimilarity matrix
- compute_mds: Distances + MDS in one call, giving covariate coordinates
"""

from panassoc.structure.distance import compute_dissimilarity, manhattan_distance
from panassoc.structure.eigen import Eigensolver, symmetric_eigh
from panassoc.structure.mds import MDSResult, compute_mds, double_center, metric_mds

__all__ = [
    "Eigensolver",
    "MDSResult",
    "compute_dissimilarity",
    "compute_mds",
    "double_center",
    "manhattan_distance",
    "metric_mds",
    "symmetric_eigh",
]
