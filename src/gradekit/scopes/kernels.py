"""Numba-optimized scope kernels.

All kernels read an image [H, W, 3] and visit every ``step``-th row and
column. Values are clamped to [0, 1] before binning.
"""

from __future__ import annotations

import numpy as np
from numba import njit, prange
from numpy.typing import NDArray

from gradekit.constants import CB_SCALE, CR_SCALE, LUMA_B, LUMA_G, LUMA_R


@njit(fastmath=False, cache=True, nogil=True)
def value_bin_numba(value: float, n_bins: int) -> int:
    """Round a [0, 1] value to one of ``n_bins`` evenly spaced bins."""
    v = min(max(value, 0.0), 1.0)
    return int(v * (n_bins - 1) + 0.5)


# Note: Not using parallel=True because histogram accumulation has race conditions
@njit(fastmath=False, cache=True, nogil=True)
def histogram_rgbl_numba(
    image: NDArray[np.float32],
    step: int,
    n_bins: int,
    out_r: NDArray[np.int64],
    out_g: NDArray[np.int64],
    out_b: NDArray[np.int64],
    out_l: NDArray[np.int64],
) -> int:
    """Compute R, G, B and BT.709 luminance histograms.

    :param image: Input image [H, W, 3]
    :param step: Sampling stride along both axes
    :param n_bins: Number of bins (256 for 8-bit buckets)
    :param out_r: Output histogram for R channel [n_bins]
    :param out_g: Output histogram for G channel [n_bins]
    :param out_b: Output histogram for B channel [n_bins]
    :param out_l: Output histogram for luminance [n_bins]
    :returns: Number of pixels sampled
    """
    H = image.shape[0]
    W = image.shape[1]
    count = 0

    for y in range(0, H, step):
        for x in range(0, W, step):
            r = image[y, x, 0]
            g = image[y, x, 1]
            b = image[y, x, 2]

            out_r[value_bin_numba(r, n_bins)] += 1
            out_g[value_bin_numba(g, n_bins)] += 1
            out_b[value_bin_numba(b, n_bins)] += 1
            out_l[value_bin_numba(r * LUMA_R + g * LUMA_G + b * LUMA_B, n_bins)] += 1
            count += 1

    return count


@njit(parallel=True, fastmath=False, cache=True, nogil=True)
def waveform_luma_numba(image: NDArray[np.float32], step: int, out: NDArray[np.int64]) -> None:
    """Per-column luminance distribution.

    Each output column is written by exactly one thread, so columns run in parallel.

    :param image: Input image [H, W, 3]
    :param step: Sampling stride along both axes
    :param out: Output counts [rows, ceil(W / step)], row 0 = black
    """
    H = image.shape[0]
    rows = out.shape[0]
    n_cols = out.shape[1]

    for col in prange(n_cols):
        x = col * step
        for y in range(0, H, step):
            lum = image[y, x, 0] * LUMA_R + image[y, x, 1] * LUMA_G + image[y, x, 2] * LUMA_B
            out[value_bin_numba(lum, rows), col] += 1


@njit(parallel=True, fastmath=False, cache=True, nogil=True)
def waveform_rgb_numba(image: NDArray[np.float32], step: int, out: NDArray[np.int64]) -> None:
    """Per-column distribution of each RGB channel (parade).

    :param image: Input image [H, W, 3]
    :param step: Sampling stride along both axes
    :param out: Output counts [3, rows, ceil(W / step)], row 0 = black
    """
    H = image.shape[0]
    rows = out.shape[1]
    n_cols = out.shape[2]

    for col in prange(n_cols):
        x = col * step
        for y in range(0, H, step):
            for c in range(3):
                out[c, value_bin_numba(image[y, x, c], rows), col] += 1


# Note: Not using parallel=True because scatter accumulation has race conditions
@njit(fastmath=False, cache=True, nogil=True)
def vectorscope_numba(image: NDArray[np.float32], step: int, out: NDArray[np.int64]) -> None:
    """BT.709 Cb/Cr scatter.

    Cb maps to x (left = -0.5) and Cr maps to y with +0.5 at row 0, so the
    centre cell is neutral gray.

    :param image: Input image [H, W, 3]
    :param step: Sampling stride along both axes
    :param out: Output counts [size, size]
    """
    H = image.shape[0]
    W = image.shape[1]
    size = out.shape[0]
    scale = size - 1

    for y in range(0, H, step):
        for x in range(0, W, step):
            r = min(max(image[y, x, 0], 0.0), 1.0)
            g = min(max(image[y, x, 1], 0.0), 1.0)
            b = min(max(image[y, x, 2], 0.0), 1.0)

            lum = r * LUMA_R + g * LUMA_G + b * LUMA_B
            cb = (b - lum) / CB_SCALE
            cr = (r - lum) / CR_SCALE

            px = int((cb + 0.5) * scale + 0.5)
            py = int((0.5 - cr) * scale + 0.5)
            px = max(0, min(size - 1, px))
            py = max(0, min(size - 1, py))
            out[py, px] += 1
