"""Wald test statistics for the k-mer coefficient.

W = |beta_1| / SE(beta_1) is standard normal under the null beta_1 = 0.
The two-sided p-value is 2 * Phi(-W), using JAX's normal CDF in 64-bit mode
so that very small p-values do not underflow.
"""

import math

from jax.scipy.stats import norm

from panassoc.core.jax_config import ensure_jax_configured


def wald_statistic(coefficient: float, standard_error: float) -> float:
    """|coefficient| / standard_error, NaN when the standard error is unusable."""
    if not math.isfinite(coefficient) or not standard_error > 0.0:
        return float("nan")
    return abs(coefficient) / standard_error


def wald_p_value(coefficient: float, standard_error: float) -> float:
    """Two-sided Wald p-value for the null hypothesis coefficient = 0.

    Args:
        coefficient: Estimated coefficient.
        standard_error: Its standard error (must be > 0).

    Returns:
        p-value in [0, 1], or NaN if the statistic is undefined.

    Example:
        >>> round(wald_p_value(1.959964, 1.0), 4)
        0.05
    """
    w = wald_statistic(coefficient, standard_error)
    if math.isnan(w):
        return float("nan")

    ensure_jax_configured()
    return float(2.0 * norm.cdf(-w))
