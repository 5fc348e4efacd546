"""Basic tonal parameter transform.

Steps run in a fixed order and each is skipped when its value is neutral:
temperature/tint, contrast about pivot, saturation, hue rotation, luminance.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from gradekit.config.values import BasicParameters, RGBValue
from gradekit.constants import (
    LUMA_B,
    LUMA_G,
    LUMA_R,
    LUMINANCE_SHIFT,
    PARAM_PERCENT,
    TEMPERATURE_SHIFT,
    TINT_SHIFT_G,
    TINT_SHIFT_RB,
)


def hue_rotation_matrix(degrees: float) -> NDArray[np.float64]:
    """Compute RGB rotation matrix for hue shift.

    Uses Rodrigues' rotation formula around the (1,1,1) gray axis, so
    neutral colors are left unchanged.

    :param degrees: Hue shift in degrees
    :returns: 3x3 rotation matrix
    """
    if degrees == 0.0:
        return np.eye(3, dtype=np.float64)

    angle = np.radians(degrees)
    cos_a = np.cos(angle)
    sin_a = np.sin(angle)

    # Rodrigues' rotation formula around (1,1,1)/sqrt(3)
    sqrt3 = np.sqrt(3.0)
    diag = cos_a + (1 - cos_a) / 3
    plus = (1 - cos_a) / 3 + sin_a / sqrt3
    minus = (1 - cos_a) / 3 - sin_a / sqrt3

    return np.array(
        [
            [diag, minus, plus],
            [plus, diag, minus],
            [minus, plus, diag],
        ],
        dtype=np.float64,
    )


def basic_factors(params: BasicParameters) -> NDArray[np.float64]:
    """Precompute the scalar factors used by the kernels.

    :param params: Basic parameters
    :returns: [temperature, tint, contrast_factor, pivot, saturation_factor, luminance_offset]
    """
    return np.array(
        [
            params.temperature / PARAM_PERCENT,
            params.tint / PARAM_PERCENT,
            1.0 + params.contrast / PARAM_PERCENT,
            params.pivot,
            1.0 + params.saturation / PARAM_PERCENT,
            params.luminance / PARAM_PERCENT * LUMINANCE_SHIFT,
        ],
        dtype=np.float64,
    )


def compute_luminance(rgb: NDArray[np.float64]) -> NDArray[np.float64]:
    """BT.709 luma of an array whose last axis is RGB."""
    return rgb[..., 0] * LUMA_R + rgb[..., 1] * LUMA_G + rgb[..., 2] * LUMA_B


def apply_basic_parameters(pixel: RGBValue | ArrayLike, params: BasicParameters) -> RGBValue | NDArray[np.float64]:
    """Apply temperature, tint, contrast, saturation, hue and luminance.

    :param pixel: One RGBValue, or an array whose last axis is RGB
    :param params: Basic parameters (assumed already clamped)
    :returns: Same kind as ``pixel``, not clamped
    """
    as_value = isinstance(pixel, RGBValue)
    x = np.array(tuple(pixel) if as_value else pixel, dtype=np.float64)

    t, k, contrast, pivot, saturation, luminance = basic_factors(params)

    if t != 0.0 or k != 0.0:
        x[..., 0] += t * TEMPERATURE_SHIFT + k * TINT_SHIFT_RB
        x[..., 1] -= k * TINT_SHIFT_G
        x[..., 2] += -t * TEMPERATURE_SHIFT + k * TINT_SHIFT_RB

    if contrast != 1.0:
        x = pivot + (x - pivot) * contrast

    if saturation != 1.0:
        luma = compute_luminance(x)[..., None]
        x = luma + (x - luma) * saturation

    if params.hue != 0.0:
        x = x @ hue_rotation_matrix(params.hue).T

    if luminance != 0.0:
        x = x + luminance

    if as_value:
        return RGBValue.from_sequence(x)
    return x
