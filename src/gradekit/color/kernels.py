"""Fused Numba kernel for the full per-pixel grade.

One pass per pixel: wheels -> basic -> curves -> HSL secondaries -> 3D LUT
-> clamp. All inputs besides ``pixels``/``out`` are read-only arrays
precomputed by :func:`gradekit.pipeline.compose_pipeline`.

Array layouts:
    wheels:     [4, 3]  lift, gamma, gain, offset rows
    gamma_exp:  [3]     2**(-gamma) per channel
    basic:      [6]     temperature/100, tint/100, contrast factor, pivot,
                        saturation factor, luminance offset
    hue_matrix: [3, 3]  rotation about the gray axis
    curve_px:   [4, M]  sorted control x for master, red, green, blue
    curve_py:   [4, M]  matching control y
    curve_n:    [4]     control point count per curve, 0 when inactive
    sec_px:     [2, M]  hue-vs-sat, luma-vs-sat control x (output 0.5 is neutral)
    sec_py:     [2, M]
    sec_n:      [2]
"""

from __future__ import annotations

import numpy as np
from numba import njit, prange
from numpy.typing import NDArray

from gradekit.constants import LUMA_B, LUMA_G, LUMA_R, TEMPERATURE_SHIFT, TINT_SHIFT_G, TINT_SHIFT_RB
from gradekit.curves.kernels import evaluate_curve_numba
from gradekit.lut.kernels import trilinear_sample_numba


@njit(fastmath=False, cache=True, nogil=True)
def rgb_hue_numba(r: float, g: float, b: float) -> float:
    """HSV hue in [0, 1), 0 for achromatic input."""
    mx = max(r, max(g, b))
    mn = min(r, min(g, b))
    c = mx - mn
    if c <= 0.0:
        return 0.0
    if mx == r:
        h = ((g - b) / c) % 6.0
    elif mx == g:
        h = (b - r) / c + 2.0
    else:
        h = (r - g) / c + 4.0
    return h / 6.0


@njit(fastmath=False, cache=True, nogil=True)
def _wheel_channel(x: float, lift: float, gamma: float, exponent: float, gain: float, offset: float) -> float:
    x = float(x) + lift
    if gamma != 0.0:
        x = max(x, 0.0) ** exponent
    x = x * (1.0 + gain)
    return x + offset


@njit(parallel=True, fastmath=False, cache=True, nogil=True)
def grade_pixels_numba(
    pixels: NDArray[np.float32],
    wheels: NDArray[np.float64],
    gamma_exp: NDArray[np.float64],
    basic: NDArray[np.float64],
    use_hue: bool,
    hue_matrix: NDArray[np.float64],
    curve_px: NDArray[np.float64],
    curve_py: NDArray[np.float64],
    curve_n: NDArray[np.int64],
    master_luma: bool,
    sec_px: NDArray[np.float64],
    sec_py: NDArray[np.float64],
    sec_n: NDArray[np.int64],
    use_lut: bool,
    lut_data: NDArray[np.float32],
    lut_size: int,
    lut_min: NDArray[np.float64],
    lut_max: NDArray[np.float64],
    lut_intensity: float,
    out: NDArray[np.float32],
) -> None:
    """Apply a composed grade to every pixel.

    :param pixels: Input RGB [N, 3]
    :param out: Output buffer [N, 3], clamped to [0, 1]
    """
    N = pixels.shape[0]

    temperature = basic[0]
    tint = basic[1]
    contrast = basic[2]
    pivot = basic[3]
    saturation = basic[4]
    luminance = basic[5]

    for i in prange(N):
        # Color wheels
        r = _wheel_channel(pixels[i, 0], wheels[0, 0], wheels[1, 0], gamma_exp[0], wheels[2, 0], wheels[3, 0])
        g = _wheel_channel(pixels[i, 1], wheels[0, 1], wheels[1, 1], gamma_exp[1], wheels[2, 1], wheels[3, 1])
        b = _wheel_channel(pixels[i, 2], wheels[0, 2], wheels[1, 2], gamma_exp[2], wheels[2, 2], wheels[3, 2])

        # Temperature / tint
        if temperature != 0.0 or tint != 0.0:
            r = r + temperature * TEMPERATURE_SHIFT + tint * TINT_SHIFT_RB
            g = g - tint * TINT_SHIFT_G
            b = b - temperature * TEMPERATURE_SHIFT + tint * TINT_SHIFT_RB

        # Contrast about pivot
        if contrast != 1.0:
            r = pivot + (r - pivot) * contrast
            g = pivot + (g - pivot) * contrast
            b = pivot + (b - pivot) * contrast

        # Saturation
        if saturation != 1.0:
            lum = r * LUMA_R + g * LUMA_G + b * LUMA_B
            r = lum + (r - lum) * saturation
            g = lum + (g - lum) * saturation
            b = lum + (b - lum) * saturation

        # Hue rotation
        if use_hue:
            nr = hue_matrix[0, 0] * r + hue_matrix[0, 1] * g + hue_matrix[0, 2] * b
            ng = hue_matrix[1, 0] * r + hue_matrix[1, 1] * g + hue_matrix[1, 2] * b
            nb = hue_matrix[2, 0] * r + hue_matrix[2, 1] * g + hue_matrix[2, 2] * b
            r = nr
            g = ng
            b = nb

        # Luminance
        if luminance != 0.0:
            r = r + luminance
            g = g + luminance
            b = b + luminance

        # Master curve
        n = curve_n[0]
        if n > 0:
            if master_luma:
                lum = r * LUMA_R + g * LUMA_G + b * LUMA_B
                delta = evaluate_curve_numba(curve_px[0], curve_py[0], n, lum) - lum
                r = r + delta
                g = g + delta
                b = b + delta
            else:
                r = evaluate_curve_numba(curve_px[0], curve_py[0], n, r)
                g = evaluate_curve_numba(curve_px[0], curve_py[0], n, g)
                b = evaluate_curve_numba(curve_px[0], curve_py[0], n, b)

        # Per-channel curves
        if curve_n[1] > 0:
            r = evaluate_curve_numba(curve_px[1], curve_py[1], curve_n[1], r)
        if curve_n[2] > 0:
            g = evaluate_curve_numba(curve_px[2], curve_py[2], curve_n[2], g)
        if curve_n[3] > 0:
            b = evaluate_curve_numba(curve_px[3], curve_py[3], curve_n[3], b)

        # HSL secondaries
        if sec_n[0] > 0 or sec_n[1] > 0:
            lum = r * LUMA_R + g * LUMA_G + b * LUMA_B
            factor = 1.0
            if sec_n[0] > 0:
                factor *= 2.0 * evaluate_curve_numba(sec_px[0], sec_py[0], sec_n[0], rgb_hue_numba(r, g, b))
            if sec_n[1] > 0:
                factor *= 2.0 * evaluate_curve_numba(sec_px[1], sec_py[1], sec_n[1], lum)
            r = lum + (r - lum) * factor
            g = lum + (g - lum) * factor
            b = lum + (b - lum) * factor

        # 3D LUT
        if use_lut:
            sr, sg, sb = trilinear_sample_numba(lut_data, lut_size, lut_min, lut_max, r, g, b)
            r = r + (sr - r) * lut_intensity
            g = g + (sg - g) * lut_intensity
            b = b + (sb - b) * lut_intensity

        out[i, 0] = min(max(r, 0.0), 1.0)
        out[i, 1] = min(max(g, 0.0), 1.0)
        out[i, 2] = min(max(b, 0.0), 1.0)
