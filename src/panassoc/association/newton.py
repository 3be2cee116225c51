"""Newton-Raphson maximum likelihood for logistic regression.

Plain mode iterates b' = b + V X'(y - p) with V = inv(X'WX). Firth mode adds
the Jeffreys-prior correction to the score:

    b' = b + V X'(y - p + h * (0.5 - p))

where h is the diagonal of the hat matrix W^1/2 X V X' W^1/2. The correction
shrinks estimates towards zero and keeps them finite under separation.
See Heinze & Schemper (2002), doi:10.1002/sim.1047.

Iteration starts from b = 0 with a non-zero intercept, which is more reliable
than a least-squares start (doi:10.1016/S0169-2607(02)00088-3), and stops once
the k-mer coefficient (index 1) moves by less than the convergence limit.
"""

from __future__ import annotations

import math

import numpy as np
from loguru import logger

from panassoc.association.likelihood import (
    hat_diagonal,
    information_matrix,
    invert_information,
    predict,
    variance_covariance,
)
from panassoc.association.results import (
    FIRTH_FAIL,
    NR_FAIL,
    FitFailure,
    FitMethod,
    FitOutcome,
    FitSuccess,
)
from panassoc.association.stats import wald_p_value
from panassoc.core.config import FitConfig
from panassoc.core.errors import IterationLimitExceeded, SingularInformation


def logit_mean(y: np.ndarray) -> float:
    """log(mean / (1 - mean)) of a 0/1 phenotype: the null-model intercept."""
    mean = float(np.mean(y))
    return math.log(mean / (1.0 - mean))


def _iterate(
    y: np.ndarray, X: np.ndarray, firth: bool, config: FitConfig
) -> tuple[list[np.ndarray], np.ndarray]:
    """Run Newton-Raphson to convergence.

    Returns:
        Tuple of (iterates, var_covar) where iterates starts with the starting
        point and var_covar is evaluated at the final iterate.

    Raises:
        IterationLimitExceeded: If max_iterations pass without convergence,
            or an iterate becomes non-finite.
        SingularInformation: If the information matrix cannot be inverted.
    """
    start = np.zeros(X.shape[1])
    start[0] = logit_mean(y)
    iterates = [start]

    for _ in range(config.max_iterations):
        b0 = iterates[-1]
        p = predict(X, b0)
        var_covar = invert_information(information_matrix(X, p))

        residual = y - p
        if firth:
            residual = residual + hat_diagonal(X, p, var_covar) * (0.5 - p)
        b1 = b0 + var_covar @ (X.T @ residual)

        if not np.all(np.isfinite(b1)):
            raise IterationLimitExceeded(len(iterates), firth=firth)
        iterates.append(b1)

        if abs(b1[1] - b0[1]) < config.convergence_limit:
            return iterates, variance_covariance(X, b1)

    raise IterationLimitExceeded(config.max_iterations, firth=firth)


def newton_raphson(
    y: np.ndarray,
    X: np.ndarray,
    firth: bool = False,
    config: FitConfig | None = None,
) -> FitOutcome:
    """Fit a logistic regression by Newton-Raphson.

    Args:
        y: 0/1 phenotype (n_samples,), both classes present.
        X: Design matrix (n_samples, n_params); column 0 intercept, column 1
            the k-mer.
        firth: Use Firth's bias-reduced score.
        config: Convergence limit and iteration cap.

    Returns:
        FitSuccess for the k-mer coefficient, or FitFailure tagged "nr-fail"
        (plain) / "firth-fail" (Firth) when the iteration is exhausted or the
        information matrix is singular.
    """
    if config is None:
        config = FitConfig()
    method = FitMethod.FIRTH if firth else FitMethod.NEWTON

    try:
        iterates, var_covar = _iterate(y, X, firth, config)
    except (IterationLimitExceeded, SingularInformation) as e:
        logger.debug(f"{method.value}: {e}")
        return FitFailure(FIRTH_FAIL if firth else NR_FAIL)

    beta = float(iterates[-1][1])
    se = math.sqrt(var_covar[1, 1])
    p_value = wald_p_value(beta, se)
    logger.trace(
        f"{method.value}: converged in {len(iterates) - 1} iterations, "
        f"beta={beta:.4g}, se={se:.4g}, p={p_value:.4g}"
    )
    return FitSuccess(
        coefficient=beta,
        standard_error=se,
        p_value=p_value,
        iterations=len(iterates) - 1,
        method=method,
    )
