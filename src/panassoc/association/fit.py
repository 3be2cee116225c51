"""Per-k-mer logistic fit with a fallback chain.

Each k-mer is fitted by a small state machine:

    FAST (BFGS) -> PLAIN (Newton-Raphson) -> FIRTH (Newton-Raphson) -> TERMINAL

A stage returns a FitOutcome. A FitSuccess finalizes the k-mer; a FitFailure
appends its diagnostic tag ("bfgs-fail", "nr-fail", "firth-fail") and moves to
the next stage. Each stage is more robust but slower or more biased than the
one before it, so well-behaved k-mers only pay for the fast path. A k-mer that
reaches TERMINAL keeps beta/se/p_value unset.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from enum import Enum

import numpy as np
from loguru import logger

from panassoc.association.likelihood import (
    log_likelihood,
    log_likelihood_gradient,
    variance_covariance,
)
from panassoc.association.newton import logit_mean, newton_raphson
from panassoc.association.optimize import Maximizer, bfgs_maximize
from panassoc.association.results import (
    BFGS_FAIL,
    FitFailure,
    FitMethod,
    FitOutcome,
    FitSuccess,
    Kmer,
)
from panassoc.association.stats import wald_p_value
from panassoc.core.config import FitConfig
from panassoc.core.errors import OptimizerNonConvergence, SingularInformation


class FitStage(Enum):
    FAST = "fast"
    PLAIN = "plain"
    FIRTH = "firth"
    TERMINAL = "terminal"


NEXT_STAGE = {
    FitStage.FAST: FitStage.PLAIN,
    FitStage.PLAIN: FitStage.FIRTH,
    FitStage.FIRTH: FitStage.TERMINAL,
}

StageFitter = Callable[[np.ndarray, np.ndarray], FitOutcome]


def build_design_matrix(
    presence: np.ndarray, covariates: np.ndarray | None = None
) -> np.ndarray:
    """Stack [intercept, k-mer presence, covariates...] column-wise.

    Args:
        presence: 0/1 k-mer presence (n_samples,).
        covariates: Optional (n_samples, n_cvt) or (n_samples,) covariates,
            typically MDS coordinates.

    Returns:
        Design matrix (n_samples, 2 + n_cvt).

    Raises:
        ValueError: If covariate rows don't match the sample count.
    """
    presence = np.asarray(presence, dtype=np.float64)
    n_samples = presence.shape[0]
    columns = [np.ones((n_samples, 1)), presence.reshape(-1, 1)]

    if covariates is not None:
        cvt = np.asarray(covariates, dtype=np.float64)
        if cvt.ndim == 1:
            cvt = cvt.reshape(-1, 1)
        if cvt.shape[0] != n_samples:
            raise ValueError(
                f"Covariates have {cvt.shape[0]} rows but the k-mer has "
                f"{n_samples} samples"
            )
        columns.append(cvt)

    return np.hstack(columns)


def fast_fit(
    y: np.ndarray,
    X: np.ndarray,
    config: FitConfig | None = None,
    maximizer: Maximizer | None = None,
) -> FitOutcome:
    """Maximize the likelihood with a quasi-Newton maximizer.

    Starts from intercept = logit(mean(y)) and every other coefficient = 1;
    BFGS converges more reliably from a non-zero start here. The objective is
    averaged over samples so the tolerance does not scale with sample size.

    Returns:
        FitSuccess, or FitFailure("bfgs-fail") when the maximizer fails or
        the information matrix at its optimum is singular.
    """
    if config is None:
        config = FitConfig()
    if maximizer is None:
        maximizer = bfgs_maximize

    n_samples = y.shape[0]
    start = np.ones(X.shape[1])
    start[0] = logit_mean(y)

    def objective(b: np.ndarray) -> float:
        return log_likelihood(X, y, b) / n_samples

    def gradient(b: np.ndarray) -> np.ndarray:
        return log_likelihood_gradient(X, y, b) / n_samples

    try:
        optimum = maximizer(objective, gradient, start, config.bfgs_tolerance)
        var_covar = variance_covariance(X, optimum.argmax)
    except (OptimizerNonConvergence, SingularInformation) as e:
        logger.debug(f"bfgs: {e}")
        return FitFailure(BFGS_FAIL)

    beta = float(optimum.argmax[1])
    se = math.sqrt(var_covar[1, 1])
    return FitSuccess(
        coefficient=beta,
        standard_error=se,
        p_value=wald_p_value(beta, se),
        iterations=optimum.iterations,
        method=FitMethod.BFGS,
    )


def default_stage_fitters(
    config: FitConfig, maximizer: Maximizer | None = None
) -> dict[FitStage, StageFitter]:
    """Fitting function for each non-terminal stage."""
    return {
        FitStage.FAST: lambda y, X: fast_fit(y, X, config, maximizer),
        FitStage.PLAIN: lambda y, X: newton_raphson(y, X, firth=False, config=config),
        FitStage.FIRTH: lambda y, X: newton_raphson(y, X, firth=True, config=config),
    }


def _check_phenotype(phenotype: np.ndarray, n_samples: int) -> np.ndarray:
    y = np.asarray(phenotype, dtype=np.float64)
    if y.ndim != 1 or y.shape[0] != n_samples:
        raise ValueError(
            f"Phenotype has shape {y.shape} but the k-mer has {n_samples} samples"
        )
    if not np.all((y == 0.0) | (y == 1.0)):
        raise ValueError("Phenotype must be binary (0/1)")
    if y.min() == y.max():
        raise ValueError("Phenotype must contain both cases (1) and controls (0)")
    return y


def fit_variant(
    kmer: Kmer,
    phenotype: np.ndarray,
    covariates: np.ndarray | None = None,
    *,
    config: FitConfig | None = None,
    maximizer: Maximizer | None = None,
    fitters: Mapping[FitStage, StageFitter] | None = None,
) -> Kmer:
    """Test one k-mer for association with a binary phenotype.

    Args:
        kmer: K-mer record; its presence column is the tested predictor.
        phenotype: 0/1 phenotype in the same sample order.
        covariates: Optional covariate columns (e.g. MDS coordinates).
        config: Fit tolerances and iteration cap.
        maximizer: Replacement for the BFGS maximizer of the fast stage.
        fitters: Replacement stage functions, keyed by FitStage. Stages not
            present use the defaults.

    Returns:
        A new Kmer with beta/se/p_value/method set on success, and one
        diagnostic tag per failed stage.

    Raises:
        ValueError: If phenotype or covariates don't match the k-mer's samples,
            or the phenotype is not binary with both classes present.
    """
    if config is None:
        config = FitConfig()

    y = _check_phenotype(phenotype, kmer.n_samples)
    X = build_design_matrix(kmer.presence, covariates)

    stage_fitters = default_stage_fitters(config, maximizer)
    if fitters is not None:
        stage_fitters.update(fitters)

    stage = FitStage.FAST
    while stage is not FitStage.TERMINAL:
        outcome = stage_fitters[stage](y, X)
        kmer = kmer.with_outcome(outcome)
        if isinstance(outcome, FitSuccess):
            break
        logger.debug(f"K-mer {kmer.sequence}: {outcome.reason}")
        stage = NEXT_STAGE[stage]

    return kmer
