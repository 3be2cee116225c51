"""Quasi-Newton maximizer capability.

The fast fitting path needs "maximize this objective given its gradient from a
starting point". A Maximizer is any callable with that signature returning an
Optimum, and raising OptimizerNonConvergence when no optimum is reached. Tests
substitute stubs to drive the fallback chain without real numerical failures.

The default, bfgs_maximize, runs scipy's BFGS on the negated objective.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import NamedTuple, Protocol

import numpy as np
import scipy.optimize

from panassoc.core.errors import OptimizerNonConvergence

Objective = Callable[[np.ndarray], float]
Gradient = Callable[[np.ndarray], np.ndarray]


class Optimum(NamedTuple):
    """Location of a maximum and the iterations taken to find it."""

    argmax: np.ndarray
    iterations: int


class Maximizer(Protocol):
    def __call__(
        self,
        objective: Objective,
        gradient: Gradient,
        start: np.ndarray,
        tolerance: float,
    ) -> Optimum: ...


def bfgs_maximize(
    objective: Objective,
    gradient: Gradient,
    start: np.ndarray,
    tolerance: float,
    max_iterations: int | None = None,
) -> Optimum:
    """Maximize a smooth objective with BFGS.

    Args:
        objective: Function to maximize.
        gradient: Its gradient.
        start: Starting point (not modified).
        tolerance: Stop once the largest gradient component is below this.
        max_iterations: Iteration cap (default: scipy's, 200 * n_params).

    Returns:
        Optimum with the maximizing point and iteration count.

    Raises:
        OptimizerNonConvergence: If BFGS reports failure (line search
            failure, precision loss, iteration cap), produces a non-finite
            point, or hits a floating point error.
    """
    options: dict[str, float | int] = {"gtol": tolerance}
    if max_iterations is not None:
        options["maxiter"] = max_iterations

    try:
        result = scipy.optimize.minimize(
            lambda b: -objective(b),
            np.array(start, dtype=np.float64),
            jac=lambda b: -gradient(b),
            method="BFGS",
            options=options,
        )
    except (ArithmeticError, ValueError, np.linalg.LinAlgError) as e:
        raise OptimizerNonConvergence(f"BFGS raised {type(e).__name__}: {e}") from e

    if not result.success:
        raise OptimizerNonConvergence(f"BFGS did not converge: {result.message}")
    if not np.all(np.isfinite(result.x)):
        raise OptimizerNonConvergence("BFGS returned a non-finite optimum")

    return Optimum(argmax=result.x, iterations=int(result.nit))
