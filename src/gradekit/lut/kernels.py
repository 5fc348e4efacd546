"""Numba-optimized kernels for 3D LUT sampling.

Lattice addressing: the value triplet for grid cell (r, g, b) starts at
``((b * size + g) * size + r) * 3``, i.e. red varies fastest, matching the
row order of .cube files.
"""

from __future__ import annotations

import numpy as np
from numba import njit, prange
from numpy.typing import NDArray


@njit(fastmath=False, cache=True, nogil=True)
def _grid_position(value: float, lo: float, hi: float, size: int) -> tuple[int, float]:
    """Map a channel value to (lower lattice index, fractional offset)."""
    span = hi - lo
    if span > 0.0:
        n = (value - lo) / span
    else:
        n = 0.0
    n = min(max(n, 0.0), 1.0)

    pos = n * (size - 1)
    i0 = int(pos)
    if i0 >= size - 1:
        i0 = size - 2
    return i0, pos - i0


@njit(fastmath=False, cache=True, nogil=True)
def trilinear_sample_numba(
    data: NDArray[np.float32],
    size: int,
    domain_min: NDArray[np.float64],
    domain_max: NDArray[np.float64],
    r: float,
    g: float,
    b: float,
) -> tuple[float, float, float]:
    """Trilinearly interpolate one RGB value from a flat 3D LUT.

    Interpolates along red, then green, then blue.

    :param data: Flat LUT values [size**3 * 3]
    :param size: Cube edge length
    :param domain_min: Input domain minimum [3]
    :param domain_max: Input domain maximum [3]
    :param r: Red input
    :param g: Green input
    :param b: Blue input
    :returns: Sampled (r, g, b), not clamped
    """
    r0, fr = _grid_position(r, domain_min[0], domain_max[0], size)
    g0, fg = _grid_position(g, domain_min[1], domain_max[1], size)
    b0, fb = _grid_position(b, domain_min[2], domain_max[2], size)

    size2 = size * size
    base_b0 = b0 * size2
    base_b1 = base_b0 + size2
    row_g0 = g0 * size
    row_g1 = row_g0 + size

    i000 = (base_b0 + row_g0 + r0) * 3
    i100 = i000 + 3
    i010 = (base_b0 + row_g1 + r0) * 3
    i110 = i010 + 3
    i001 = (base_b1 + row_g0 + r0) * 3
    i101 = i001 + 3
    i011 = (base_b1 + row_g1 + r0) * 3
    i111 = i011 + 3

    out_r = 0.0
    out_g = 0.0
    out_b = 0.0
    for c in range(3):
        # Along red
        c00 = data[i000 + c] + (data[i100 + c] - data[i000 + c]) * fr
        c10 = data[i010 + c] + (data[i110 + c] - data[i010 + c]) * fr
        c01 = data[i001 + c] + (data[i101 + c] - data[i001 + c]) * fr
        c11 = data[i011 + c] + (data[i111 + c] - data[i011 + c]) * fr
        # Along green
        c0 = c00 + (c10 - c00) * fg
        c1 = c01 + (c11 - c01) * fg
        # Along blue
        v = c0 + (c1 - c0) * fb
        if c == 0:
            out_r = v
        elif c == 1:
            out_g = v
        else:
            out_b = v

    return out_r, out_g, out_b


@njit(parallel=True, fastmath=False, cache=True, nogil=True)
def apply_lut_numba(
    pixels: NDArray[np.float32],
    data: NDArray[np.float32],
    size: int,
    domain_min: NDArray[np.float64],
    domain_max: NDArray[np.float64],
    intensity: float,
    out: NDArray[np.float32],
) -> None:
    """Sample a 3D LUT for every pixel and blend with the input by intensity.

    :param pixels: Input RGB [N, 3]
    :param data: Flat LUT values [size**3 * 3]
    :param size: Cube edge length
    :param domain_min: Input domain minimum [3]
    :param domain_max: Input domain maximum [3]
    :param intensity: Blend factor in [0, 1]
    :param out: Output buffer [N, 3], clamped to [0, 1]
    """
    N = pixels.shape[0]

    for i in prange(N):
        r = pixels[i, 0]
        g = pixels[i, 1]
        b = pixels[i, 2]

        sr, sg, sb = trilinear_sample_numba(data, size, domain_min, domain_max, r, g, b)

        out[i, 0] = min(max(r + (sr - r) * intensity, 0.0), 1.0)
        out[i, 1] = min(max(g + (sg - g) * intensity, 0.0), 1.0)
        out[i, 2] = min(max(b + (sb - b) * intensity, 0.0), 1.0)
