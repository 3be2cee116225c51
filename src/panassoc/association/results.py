"""Value types for per-k-mer association fits.

A fit attempt produces a FitOutcome, either FitSuccess or FitFailure. The
orchestrator folds outcomes into a Kmer record with Kmer.with_outcome, which
returns a new record rather than mutating the old one.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

import numpy as np


class FitMethod(str, Enum):
    """Fitting stage that produced an estimate."""

    BFGS = "bfgs"
    NEWTON = "newton-raphson"
    FIRTH = "firth"


# Diagnostic tags recorded on a k-mer when a stage fails
BFGS_FAIL = "bfgs-fail"
NR_FAIL = "nr-fail"
FIRTH_FAIL = "firth-fail"
AF_FILTER = "af-filter"


@dataclass(frozen=True)
class FitSuccess:
    """Converged estimate of the k-mer coefficient."""

    coefficient: float
    standard_error: float
    p_value: float
    iterations: int
    method: FitMethod


@dataclass(frozen=True)
class FitFailure:
    """Failed fit stage; reason is the diagnostic tag to record."""

    reason: str


FitOutcome = FitSuccess | FitFailure


@dataclass(frozen=True, eq=False)
class Kmer:
    """A k-mer (variant) and the outputs of its association test.

    Attributes:
        sequence: K-mer sequence or other identifier.
        presence: 0/1 presence per sample, in phenotype order. Read-only.
        beta: Fitted k-mer coefficient (log odds ratio), None until tested.
        se: Standard error of beta.
        p_value: Two-sided Wald p-value.
        method: Stage that produced the estimate.
        comments: Diagnostic tags, in the order they were recorded.
    """

    sequence: str
    presence: np.ndarray
    beta: float | None = None
    se: float | None = None
    p_value: float | None = None
    method: FitMethod | None = None
    comments: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        presence = np.asarray(self.presence, dtype=np.float64)
        # Records made by replace() share the previous record's frozen column;
        # a float64 array the caller could still write to is copied.
        if not presence.flags.owndata or (
            presence.flags.writeable and presence is self.presence
        ):
            presence = presence.copy()
        if presence.ndim != 1:
            raise ValueError(
                f"K-mer {self.sequence}: presence must be 1-D, got shape {presence.shape}"
            )
        presence.setflags(write=False)
        object.__setattr__(self, "presence", presence)

    @property
    def n_samples(self) -> int:
        return self.presence.shape[0]

    @property
    def allele_frequency(self) -> float:
        """Fraction of samples in which the k-mer is present."""
        if self.n_samples == 0:
            return float("nan")
        return float(np.mean(self.presence))

    @property
    def tested(self) -> bool:
        """True when a fit succeeded and the numeric outputs are set."""
        return self.beta is not None

    def add_comment(self, tag: str) -> Kmer:
        return replace(self, comments=(*self.comments, tag))

    def with_outcome(self, outcome: FitOutcome) -> Kmer:
        """Return a copy updated with a fit outcome.

        Success fills beta/se/p_value/method; failure appends its tag.
        """
        if isinstance(outcome, FitSuccess):
            return replace(
                self,
                beta=outcome.coefficient,
                se=outcome.standard_error,
                p_value=outcome.p_value,
                method=outcome.method,
            )
        return self.add_comment(outcome.reason)
