"""
solvers.py

Bounded bisection used to invert monotonic property functions (entropy or enthalpy against
temperature at fixed pressure). The evaluator is assumed increasing in x and that is not
checked at runtime: a non-monotonic evaluator converges silently to a wrong root.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

BISECTION_MAX_ITERATIONS = 50
ENTROPY_TOLERANCE = 0.001  # kJ/(kg·K)
ENTHALPY_TOLERANCE = 0.1  # kJ/kg


@dataclass(frozen=True)
class BisectionResult:
    value: float
    iterations: int
    converged: bool
    residual: float


def bisect(
    evaluate: Callable[[float], float],
    lower: float,
    upper: float,
    target: float,
    *,
    tolerance: float,
    max_iterations: int = BISECTION_MAX_ITERATIONS,
) -> BisectionResult:
    """Find x in [lower, upper] with evaluate(x) == target.

    Args:
        evaluate: Function of x, increasing over the bracket
        lower: Lower end of the bracket
        upper: Upper end of the bracket
        target: Value of evaluate(x) being sought
        tolerance: Stop once |evaluate(mid) - target| < tolerance
        max_iterations: Iteration cap; when hit, the last midpoint is returned

    Returns:
        BisectionResult with the midpoint, the iteration count, whether the tolerance was met
        and the final residual evaluate(mid) - target.
    """

    if upper <= lower:
        raise ValueError(f"Invalid bracket [{lower}, {upper}]")
    if max_iterations < 1:
        raise ValueError("max_iterations must be at least 1")

    low, high = lower, upper
    mid = 0.5 * (low + high)
    residual = float("inf")
    for iteration in range(1, max_iterations + 1):
        mid = 0.5 * (low + high)
        residual = evaluate(mid) - target
        if abs(residual) < tolerance:
            logger.debug("Bisection converged to %.6g after %d iterations", mid, iteration)
            return BisectionResult(mid, iteration, True, residual)
        if residual < 0:
            low = mid
        else:
            high = mid

    logger.warning(
        "Bisection hit %d iterations without meeting tolerance %.3g (residual %.3g); "
        "returning midpoint %.6g",
        max_iterations,
        tolerance,
        residual,
        mid,
    )
    return BisectionResult(mid, max_iterations, False, residual)


__all__ = [
    "BISECTION_MAX_ITERATIONS",
    "ENTROPY_TOLERANCE",
    "ENTHALPY_TOLERANCE",
    "BisectionResult",
    "bisect",
]
