"""Color wheels, basic parameters and automatic correction."""

from gradekit.color.auto import AutoCorrectionResult, auto_correct, auto_levels, auto_white_balance
from gradekit.color.basic import apply_basic_parameters, basic_factors, compute_luminance, hue_rotation_matrix
from gradekit.color.wheels import apply_color_wheels, apply_wheels, gamma_exponents

__all__ = [
    "apply_wheels",
    "apply_color_wheels",
    "gamma_exponents",
    "apply_basic_parameters",
    "basic_factors",
    "hue_rotation_matrix",
    "compute_luminance",
    "AutoCorrectionResult",
    "auto_levels",
    "auto_white_balance",
    "auto_correct",
]
