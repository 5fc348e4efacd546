"""Bezier tone curves."""

from gradekit.curves.bezier import (
    auto_contrast_curve,
    build_curve_lut,
    evaluate_curve,
    evaluate_curve_array,
    sorted_control_points,
)
from gradekit.curves.kernels import evaluate_curve_numba

__all__ = [
    "evaluate_curve",
    "evaluate_curve_array",
    "build_curve_lut",
    "auto_contrast_curve",
    "sorted_control_points",
    "evaluate_curve_numba",
]
