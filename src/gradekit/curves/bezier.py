"""Tone curve evaluation.

A curve is a list of control points in [0, 1]. Consecutive points are joined
by a cubic Bezier whose handles sit horizontally at 40% of the segment width:

    P0 = (x0, y0), P1 = (x0 + 0.4 dx, y0), P2 = (x1 - 0.4 dx, y1), P3 = (x1, y1)

With this handle placement the segment is monotonic in x, so ``x(t) = x`` is
solved by bisection and ``y(t)`` reduces to ``y0 + dy * (3t^2 - 2t^3)``.
Outside the authored range the endpoint y is held.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from gradekit.config.values import CurvePoint, as_curve_points
from gradekit.constants import CURVE_CONTROL_RATIO, CURVE_LUT_SIZE, CURVE_SOLVER_ITERATIONS

logger = logging.getLogger(__name__)


def sorted_control_points(points: Iterable[Any]) -> tuple[NDArray[np.float64], NDArray[np.float64]] | None:
    """Stable-sort control points by x.

    Curves with fewer than two points, or with non-finite values (logged),
    are identity.

    :param points: Control points in any form :func:`as_curve_points` accepts
    :returns: (xs, ys) float64 arrays, or None if the curve is identity
    """
    pts = as_curve_points(points)
    if len(pts) < 2:
        return None

    px = np.array([p.x for p in pts], dtype=np.float64)
    py = np.array([p.y for p in pts], dtype=np.float64)
    if not (np.all(np.isfinite(px)) and np.all(np.isfinite(py))):
        logger.warning("[Curves] Ignoring curve with non-finite control points")
        return None

    order = np.argsort(px, kind="stable")
    return px[order], py[order]


def _bezier_x(t: NDArray[np.float64]) -> NDArray[np.float64]:
    """Normalized segment x(t) for handles at CURVE_CONTROL_RATIO."""
    mt = 1.0 - t
    return 3.0 * mt * mt * t * CURVE_CONTROL_RATIO + 3.0 * mt * t * t * (1.0 - CURVE_CONTROL_RATIO) + t * t * t


def _solve_t(u: NDArray[np.float64]) -> NDArray[np.float64]:
    """Invert the normalized x(t) by bisection."""
    lo = np.zeros_like(u)
    hi = np.ones_like(u)
    for _ in range(CURVE_SOLVER_ITERATIONS):
        mid = 0.5 * (lo + hi)
        below = _bezier_x(mid) < u
        lo = np.where(below, mid, lo)
        hi = np.where(below, hi, mid)
    return 0.5 * (lo + hi)


def evaluate_curve_array(points: Iterable[Any], xs: ArrayLike) -> NDArray[np.float64]:
    """Evaluate a tone curve at many positions.

    The input points are never reordered in place. Points sharing an x
    resolve to the one given last.

    :param points: Control points (CurvePoint, EditablePoint, pairs or dicts)
    :param xs: Positions to evaluate
    :returns: Curve values, float64, same shape as ``xs``
    """
    xs = np.asarray(xs, dtype=np.float64)
    sorted_pts = sorted_control_points(points)
    if sorted_pts is None:
        return xs.copy()

    px, py = sorted_pts
    n = px.shape[0]

    # Segment k joins points k and k+1; side="right" picks the later duplicate
    seg = np.clip(np.searchsorted(px, xs, side="right") - 1, 0, n - 2)
    x0 = px[seg]
    y0 = py[seg]
    dx = px[seg + 1] - x0
    dy = py[seg + 1] - y0

    with np.errstate(divide="ignore", invalid="ignore"):
        u = np.where(dx > 0.0, (xs - x0) / dx, 1.0)
    u = np.clip(u, 0.0, 1.0)

    t = _solve_t(u)
    ys = y0 + dy * (3.0 * t * t - 2.0 * t * t * t)

    # Hold endpoints outside the authored range
    ys = np.where(xs < px[0], py[0], ys)
    ys = np.where(xs >= px[-1], py[-1], ys)
    return ys


def evaluate_curve(points: Iterable[Any], x: float) -> float:
    """Evaluate a tone curve at one position.

    Example:
        >>> evaluate_curve([(0, 0), (1, 1)], 0.5)
        0.5
        >>> evaluate_curve([], 0.37)
        0.37

    :param points: Control points; fewer than two means identity
    :param x: Position to evaluate
    :returns: Curve value
    """
    return float(evaluate_curve_array(points, np.array([x], dtype=np.float64))[0])


def build_curve_lut(points: Iterable[Any], size: int = CURVE_LUT_SIZE) -> NDArray[np.float32] | None:
    """Sample a curve on a uniform grid over [0, 1] for per-pixel lookup.

    :param points: Control points
    :param size: Number of samples
    :returns: Float32 table of ``size`` values, or None if the curve is identity
    """
    if sorted_control_points(points) is None:
        return None
    grid = np.linspace(0.0, 1.0, size, dtype=np.float64)
    return evaluate_curve_array(points, grid).astype(np.float32)


def auto_contrast_curve(max_value: float = 1.0) -> tuple[CurvePoint, ...]:
    """Preset contrast curve used by the curve editor's auto button.

    :param max_value: Upper bound of the curve domain
    :returns: Four control points from (0, 0) to (max_value, max_value)
    """
    m = float(max_value)
    return (
        CurvePoint(0.0, 0.0),
        CurvePoint(0.25 * m, 0.31 * m),
        CurvePoint(0.75 * m, 0.69 * m),
        CurvePoint(m, m),
    )
