"""Lift/gamma/gain/offset color wheels.

Each wheel holds a per-channel value in [-1, 1], neutral at zero. They are
applied per channel in a fixed order with no clamping in between:

    lift:   x + lift
    gamma:  max(x, 0) ** 2**(-gamma)      (skipped when gamma == 0)
    gain:   x * (1 + gain)
    offset: x + offset
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from gradekit.config.values import ColorWheels, RGBValue


def _channels(value: RGBValue | Sequence[float] | None) -> NDArray[np.float64]:
    if value is None:
        return np.zeros(3, dtype=np.float64)
    return np.asarray(tuple(value), dtype=np.float64)


def gamma_exponents(gamma: RGBValue | Sequence[float]) -> NDArray[np.float64]:
    """Per-channel power applied by the gamma wheel.

    :param gamma: Gamma wheel value per channel
    :returns: ``2**(-gamma)`` as a [3] array
    """
    return np.power(2.0, -_channels(gamma))


def apply_wheels(
    pixel: RGBValue | ArrayLike,
    lift: RGBValue | Sequence[float] | None = None,
    gamma: RGBValue | Sequence[float] | None = None,
    gain: RGBValue | Sequence[float] | None = None,
    offset: RGBValue | Sequence[float] | None = None,
) -> RGBValue | NDArray[np.float64]:
    """Apply the four color wheels.

    Results are not clamped, so ``lift=+a`` followed by ``lift=-a``
    restores the input exactly.

    :param pixel: One RGBValue, or an array whose last axis is RGB
    :param lift: Lift wheel
    :param gamma: Gamma wheel
    :param gain: Gain wheel
    :param offset: Offset wheel
    :returns: Same kind as ``pixel``: RGBValue in, RGBValue out
    """
    as_value = isinstance(pixel, RGBValue)
    x = np.array(tuple(pixel) if as_value else pixel, dtype=np.float64)

    lift_arr = _channels(lift)
    gamma_arr = _channels(gamma)
    gain_arr = _channels(gain)
    offset_arr = _channels(offset)

    x = x + lift_arr
    if np.any(gamma_arr != 0.0):
        powered = np.power(np.maximum(x, 0.0), gamma_exponents(gamma_arr))
        x = np.where(gamma_arr != 0.0, powered, x)
    x = x * (1.0 + gain_arr)
    x = x + offset_arr

    if as_value:
        return RGBValue.from_sequence(x)
    return x


def apply_color_wheels(pixel: RGBValue | ArrayLike, wheels: ColorWheels) -> RGBValue | NDArray[np.float64]:
    """Apply a ColorWheels value (see :func:`apply_wheels`)."""
    if wheels.is_neutral():
        if isinstance(pixel, RGBValue):
            return pixel
        return np.array(pixel, dtype=np.float64)
    return apply_wheels(pixel, wheels.lift, wheels.gamma, wheels.gain, wheels.offset)
