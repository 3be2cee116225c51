"""Association scan over many k-mers.

K-mers are fitted one at a time on the calling thread. A numerical failure
on one k-mer is recorded on that k-mer and never stops the scan.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
from loguru import logger

from panassoc.association.fit import fit_variant
from panassoc.association.optimize import Maximizer
from panassoc.association.results import AF_FILTER, Kmer
from panassoc.core.config import FitConfig
from panassoc.core.progress import progress_iterator


@dataclass
class AssociationSummary:
    """Result of an association scan.

    Attributes:
        kmers: Updated k-mer records, in input order.
        n_tested: K-mers with a successful fit.
        n_failed: K-mers fitted but left without an estimate.
        n_filtered: K-mers skipped by the frequency filter.
        n_fallback: Tested k-mers that needed at least one fallback stage.
        timing: Timing breakdown with key 'total_s'.
    """

    kmers: list[Kmer]
    n_tested: int = 0
    n_failed: int = 0
    n_filtered: int = 0
    n_fallback: int = 0
    timing: dict[str, float] = field(default_factory=dict)


def _passes_frequency_filter(kmer: Kmer, min_frequency: float, max_frequency: float) -> bool:
    af = kmer.allele_frequency
    return min_frequency <= af <= max_frequency


def run_association(
    kmers: Sequence[Kmer],
    phenotype: np.ndarray,
    covariates: np.ndarray | None = None,
    *,
    config: FitConfig | None = None,
    maximizer: Maximizer | None = None,
    min_frequency: float = 0.0,
    max_frequency: float = 1.0,
    show_progress: bool = True,
) -> AssociationSummary:
    """Fit every k-mer against the phenotype.

    Args:
        kmers: K-mer records with presence columns in phenotype sample order.
        phenotype: 0/1 phenotype (n_samples,).
        covariates: Optional covariates shared by every fit (e.g. MDS).
        config: Fit tolerances and iteration cap.
        maximizer: Replacement for the BFGS maximizer.
        min_frequency: K-mers present in fewer than this fraction of samples
            are skipped and tagged "af-filter".
        max_frequency: K-mers present in more than this fraction are skipped.
        show_progress: Show a progress bar.

    Returns:
        AssociationSummary with updated k-mers and counts.

    Raises:
        ValueError: If the frequency bounds are invalid, or a k-mer's sample
            count does not match the phenotype.
    """
    if not 0.0 <= min_frequency <= max_frequency <= 1.0:
        raise ValueError(
            f"Need 0 <= min_frequency <= max_frequency <= 1, "
            f"got {min_frequency}, {max_frequency}"
        )
    if config is None:
        config = FitConfig()

    t_start = time.perf_counter()
    n_cvt = 0
    if covariates is not None:
        cvt = np.asarray(covariates)
        n_cvt = 1 if cvt.ndim == 1 else cvt.shape[1]
    logger.info(
        f"Testing {len(kmers):,} k-mers across {len(phenotype):,} samples "
        f"with {n_cvt} covariate(s)"
    )

    summary = AssociationSummary(kmers=[])
    for kmer in progress_iterator(
        kmers, total=len(kmers), desc="Association", enabled=show_progress
    ):
        if not _passes_frequency_filter(kmer, min_frequency, max_frequency):
            summary.kmers.append(kmer.add_comment(AF_FILTER))
            summary.n_filtered += 1
            continue

        fitted = fit_variant(
            kmer, phenotype, covariates, config=config, maximizer=maximizer
        )
        summary.kmers.append(fitted)
        if fitted.tested:
            summary.n_tested += 1
            if fitted.comments:
                summary.n_fallback += 1
        else:
            summary.n_failed += 1

    total_s = time.perf_counter() - t_start
    summary.timing["total_s"] = total_s
    logger.info(
        f"Association complete: {summary.n_tested:,} tested, "
        f"{summary.n_failed:,} failed, {summary.n_filtered:,} filtered, "
        f"{summary.n_fallback:,} needed a fallback fit ({total_s:.1f}s)"
    )
    return summary
