"""Logistic regression association testing of k-mers.

Key components:
- predict / information_matrix / variance_covariance: Logistic likelihood model
- wald_p_value: Two-sided Wald p-value
- fast_fit: BFGS fit of the full model
- newton_raphson: Newton-Raphson fit, optionally with Firth's correction
- fit_variant: BFGS -> Newton-Raphson -> Firth fallback chain for one k-mer
- run_association: Fit every k-mer in a list
"""

from panassoc.association.fit import (
    FitStage,
    build_design_matrix,
    fast_fit,
    fit_variant,
)
from panassoc.association.likelihood import (
    hat_diagonal,
    information_matrix,
    invert_information,
    log_likelihood,
    log_likelihood_gradient,
    predict,
    variance_covariance,
)
from panassoc.association.newton import newton_raphson
from panassoc.association.optimize import Maximizer, Optimum, bfgs_maximize
from panassoc.association.results import (
    AF_FILTER,
    BFGS_FAIL,
    FIRTH_FAIL,
    NR_FAIL,
    FitFailure,
    FitMethod,
    FitOutcome,
    FitSuccess,
    Kmer,
)
from panassoc.association.runner import AssociationSummary, run_association
from panassoc.association.stats import wald_p_value, wald_statistic

__all__ = [
    "AF_FILTER",
    "BFGS_FAIL",
    "FIRTH_FAIL",
    "NR_FAIL",
    "AssociationSummary",
    "FitFailure",
    "FitMethod",
    "FitOutcome",
    "FitStage",
    "FitSuccess",
    "Kmer",
    "Maximizer",
    "Optimum",
    "bfgs_maximize",
    "build_design_matrix",
    "fast_fit",
    "fit_variant",
    "hat_diagonal",
    "information_matrix",
    "invert_information",
    "log_likelihood",
    "log_likelihood_gradient",
    "newton_raphson",
    "predict",
    "run_association",
    "variance_covariance",
    "wald_p_value",
    "wald_statistic",
]
