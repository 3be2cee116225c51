"""Logistic regression likelihood, score and information.

Pure functions of a design matrix X (n_samples, n_params) whose first column
is the intercept, a coefficient vector b and a 0/1 phenotype y.

Reference for the information matrix and its inverse:
Czepiel, "Maximum Likelihood Estimation of Logistic Regression Models"
(http://czep.net/stat/mlelr.pdf).
"""

from __future__ import annotations

import numpy as np
import scipy.linalg
from scipy.special import expit

from panassoc.core.errors import SingularInformation

# Smallest squared Cholesky pivot of the unit-diagonal information matrix,
# i.e. 1 - R^2 of a column on the columns before it.
SINGULAR_PIVOT_RTOL = 1e-10


def predict(X: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Fitted probabilities 1 / (1 + exp(-Xb)), one per row."""
    return expit(X @ b)


def log_likelihood(X: np.ndarray, y: np.ndarray, b: np.ndarray) -> float:
    """Bernoulli log-likelihood sum(y * eta - log(1 + exp(eta))), eta = Xb."""
    eta = X @ b
    return float(np.sum(y * eta - np.logaddexp(0.0, eta)))


def log_likelihood_gradient(X: np.ndarray, y: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Score vector X'(y - p)."""
    return X.T @ (y - predict(X, b))


def information_matrix(X: np.ndarray, p: np.ndarray) -> np.ndarray:
    """Fisher information X' diag(p(1-p)) X.

    This is the negative Hessian of the log-likelihood. Entries are sums of
    elementwise products of design columns; only the upper triangle is
    computed and mirrored.

    Args:
        X: Design matrix (n_samples, n_params).
        p: Fitted probabilities (n_samples,).

    Returns:
        Symmetric (n_params, n_params) matrix.
    """
    weights = p * (1.0 - p)
    n_params = X.shape[1]
    info = np.empty((n_params, n_params), dtype=np.float64)
    for i in range(n_params):
        for j in range(i, n_params):
            info[i, j] = np.sum(weights * X[:, i] * X[:, j])
            if i != j:
                info[j, i] = info[i, j]
    return info


def invert_information(info: np.ndarray) -> np.ndarray:
    """Invert a symmetric positive definite information matrix.

    The matrix is first scaled to unit diagonal, so column scale does not
    affect the singularity test. The Cholesky factor of the scaled matrix must
    have every squared pivot above SINGULAR_PIVOT_RTOL: a column that is a
    linear combination of earlier ones (e.g. a k-mer present in every sample,
    collinear with the intercept) can leave a tiny positive pivot from
    rounding, which would otherwise give a huge but finite inverse. No
    pseudo-inverse is attempted.

    Raises:
        SingularInformation: If a diagonal entry is not positive, the scaled
            matrix is not positive definite or is numerically rank-deficient,
            or the inverse is not finite.
    """
    diag = np.diag(info)
    if not np.all(diag > 0.0):
        raise SingularInformation("Information matrix has a zero-variance column")

    scale = np.sqrt(diag)
    scaled = info / np.outer(scale, scale)
    try:
        factor = scipy.linalg.cho_factor(scaled, lower=True, check_finite=True)
    except (np.linalg.LinAlgError, ValueError) as e:
        raise SingularInformation(f"Information matrix is singular: {e}") from e

    min_pivot = float(np.min(np.diag(factor[0])) ** 2)
    if min_pivot < SINGULAR_PIVOT_RTOL:
        raise SingularInformation(
            f"Information matrix is numerically singular (smallest scaled pivot {min_pivot:.3g})"
        )

    inverse = scipy.linalg.cho_solve(factor, np.eye(info.shape[0])) / np.outer(scale, scale)
    if not np.all(np.isfinite(inverse)):
        raise SingularInformation("Information matrix inverse is not finite")
    return 0.5 * (inverse + inverse.T)


def variance_covariance(X: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Variance-covariance matrix of the estimates, inv(I(b))."""
    return invert_information(information_matrix(X, predict(X, b)))


def hat_diagonal(X: np.ndarray, p: np.ndarray, var_covar: np.ndarray) -> np.ndarray:
    """Diagonal of H = W^1/2 X inv(X'WX) X' W^1/2 with W = diag(p(1-p)).

    Computed row by row without forming the (n, n) matrix.
    """
    sqrt_w_x = np.sqrt(p * (1.0 - p))[:, None] * X
    return np.sum((sqrt_w_x @ var_covar) * sqrt_w_x, axis=1)
