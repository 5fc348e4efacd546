"""Numba kernels for per-pixel tone curve evaluation.

Evaluates the same 40%-handle Bezier as :func:`gradekit.curves.bezier.evaluate_curve_array`,
with the same operation order, so a pixel graded through the pipeline gets
the value the scalar evaluator returns.

Control points are passed as sorted arrays ``px``/``py`` with ``n`` valid
entries (see :func:`gradekit.curves.bezier.sorted_control_points`).
"""

from __future__ import annotations

import numpy as np
from numba import njit
from numpy.typing import NDArray

from gradekit.constants import CURVE_CONTROL_RATIO, CURVE_SOLVER_ITERATIONS


@njit(fastmath=False, cache=True, nogil=True)
def bezier_x_numba(t: float) -> float:
    """Normalized segment x(t) for handles at CURVE_CONTROL_RATIO."""
    mt = 1.0 - t
    return 3.0 * mt * mt * t * CURVE_CONTROL_RATIO + 3.0 * mt * t * t * (1.0 - CURVE_CONTROL_RATIO) + t * t * t


@njit(fastmath=False, cache=True, nogil=True)
def evaluate_curve_numba(px: NDArray[np.float64], py: NDArray[np.float64], n: int, x: float) -> float:
    """Evaluate one curve at one position.

    :param px: Sorted control point x values (at least ``n`` entries)
    :param py: Matching y values
    :param n: Number of control points, >= 2
    :param x: Position to evaluate
    :returns: Curve value; the endpoint y is held outside [px[0], px[n-1])
    """
    if x < px[0]:
        return py[0]
    if x >= px[n - 1]:
        return py[n - 1]

    # Last point at or left of x; the later of duplicate x values wins
    k = 0
    while k < n - 2 and px[k + 1] <= x:
        k += 1

    x0 = px[k]
    dx = px[k + 1] - x0
    if dx > 0.0:
        u = (x - x0) / dx
    else:
        u = 1.0
    u = min(max(u, 0.0), 1.0)

    lo = 0.0
    hi = 1.0
    for _ in range(CURVE_SOLVER_ITERATIONS):
        mid = 0.5 * (lo + hi)
        if bezier_x_numba(mid) < u:
            lo = mid
        else:
            hi = mid
    t = 0.5 * (lo + hi)

    y0 = py[k]
    return y0 + (py[k + 1] - y0) * (3.0 * t * t - 2.0 * t * t * t)
