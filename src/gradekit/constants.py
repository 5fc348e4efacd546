"""
Constants and default values for gradekit.

Centralizes magic numbers shared by the transform kernels, the parser and the scopes.
"""

from __future__ import annotations

# =============================================================================
# Color Science
# =============================================================================

# ITU-R BT.709 luma weights
LUMA_R = 0.2126
LUMA_G = 0.7152
LUMA_B = 0.0722

# BT.709 chroma denominators: Cb = (B - Y) / 1.8556, Cr = (R - Y) / 1.5748
CB_SCALE = 1.8556
CR_SCALE = 1.5748

# =============================================================================
# Basic Parameter Scaling
# =============================================================================

PARAM_PERCENT = 100.0  # temperature/tint/contrast/saturation/luminance are in [-100, 100]
TEMPERATURE_SHIFT = 0.1  # R/B offset at temperature=100
TINT_SHIFT_G = 0.1  # G offset at tint=100
TINT_SHIFT_RB = 0.05  # R/B offset at tint=100
LUMINANCE_SHIFT = 0.5  # Uniform offset at luminance=100
DEFAULT_PIVOT = 0.5

# =============================================================================
# Curves
# =============================================================================

CURVE_CONTROL_RATIO = 0.4  # Bezier handles at 40% of the horizontal span
CURVE_LUT_SIZE = 1024  # Samples per curve-editor table
CURVE_SOLVER_ITERATIONS = 40  # Bisection steps for x(t) = x

# =============================================================================
# 3D LUT
# =============================================================================

DEFAULT_CUBE_SIZE = 33
MIN_CUBE_SIZE = 2
MAX_CUBE_SIZE = 256
CUBE_EXTENSIONS = (".cube",)

# =============================================================================
# Scopes
# =============================================================================

HISTOGRAM_BINS = 256
DEFAULT_WAVEFORM_ROWS = 256
DEFAULT_VECTORSCOPE_SIZE = 256
VALID_REFRESH_RATES = (15, 30, 60)
DEFAULT_REFRESH_RATE = 30
VALID_WAVEFORM_MODES = {"luma", "rgb"}

# =============================================================================
# Pipeline
# =============================================================================

DEFAULT_TRANSFORM_CACHE_SIZE = 32
VALID_MASTER_MODES = {"channels", "luma"}
