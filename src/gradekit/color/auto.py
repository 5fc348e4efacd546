"""Automatic color correction.

Analyzes a frame and proposes wheel and white-balance settings:
- Auto levels: percentile stretch of BT.709 luma via lift and gain
- Gray World white balance solved for temperature and tint

References:
- Adobe Photoshop Auto options: 0.1% shadow/highlight clipping
- Gray World white balance assumption
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from gradekit.color.basic import compute_luminance
from gradekit.config.values import BasicParameters, ColorWheels, GradingDescriptor, RGBValue
from gradekit.constants import PARAM_PERCENT, TEMPERATURE_SHIFT, TINT_SHIFT_G, TINT_SHIFT_RB
from gradekit.shared.frames import as_pixel_array

logger = logging.getLogger(__name__)


@dataclass
class AutoCorrectionResult:
    """Result of automatic color correction analysis.

    Contains computed adjustments that can be turned into a descriptor.
    """

    # Levels (uniform across channels)
    lift: float = 0.0
    gain: float = 0.0

    # White balance, in BasicParameters units
    temperature: float = 0.0
    tint: float = 0.0

    def to_descriptor(self, base: GradingDescriptor | None = None) -> GradingDescriptor:
        """Convert to a GradingDescriptor, clamped to valid ranges.

        :param base: Descriptor to add the corrections to (default: neutral)
        :returns: GradingDescriptor with computed adjustments
        """
        if base is None:
            base = GradingDescriptor()

        correction = GradingDescriptor(
            wheels=ColorWheels(lift=RGBValue.uniform(self.lift), gain=RGBValue.uniform(self.gain)),
            basic=BasicParameters(temperature=self.temperature, tint=self.tint),
        )
        return GradingDescriptor(
            wheels=base.wheels + correction.wheels,
            basic=base.basic + correction.basic,
            curves=base.curves,
            lut=base.lut,
        ).clamp()


def auto_levels(frame: NDArray, clip_percent: float = 0.1) -> AutoCorrectionResult:
    """Compute a luma stretch that maps the clipped range to [0, 1].

    Solves ``(low + lift) * (1 + gain) = 0`` and ``(high + lift) * (1 + gain) = 1``.

    :param frame: RGB frame [H, W, 3] or [N, 3]
    :param clip_percent: Percentage of pixels to clip at each end (0.1 = 0.1%)
    :returns: AutoCorrectionResult with lift and gain

    Example:
        >>> result = auto_levels(frame)
        >>> descriptor = result.to_descriptor()
    """
    pixels, _ = as_pixel_array(frame)
    if pixels.shape[0] == 0:
        return AutoCorrectionResult()

    luminance = compute_luminance(pixels.astype(np.float64))
    low = float(np.percentile(luminance, clip_percent))
    high = float(np.percentile(luminance, 100 - clip_percent))
    current_range = high - low

    if current_range < 0.01:
        return AutoCorrectionResult()

    lift = -low
    gain = 1.0 / current_range - 1.0
    logger.debug("[Auto] Levels: low=%.4f high=%.4f -> lift=%.4f gain=%.4f", low, high, lift, gain)
    return AutoCorrectionResult(lift=lift, gain=gain)


def auto_white_balance(frame: NDArray, clip_percent: float = 1.0) -> AutoCorrectionResult:
    """Compute white balance using the Gray World assumption.

    The average color of mid-luminance pixels should be neutral gray. The
    temperature/tint offsets that equalize the channel means are solved
    exactly from the basic-parameter formulas.

    :param frame: RGB frame [H, W, 3] or [N, 3]
    :param clip_percent: Exclude luminance extremes from the average
    :returns: AutoCorrectionResult with temperature and tint

    Example:
        >>> result = auto_white_balance(frame)
        >>> print(f"Temperature: {result.temperature}, Tint: {result.tint}")
    """
    pixels, _ = as_pixel_array(frame)
    if pixels.shape[0] == 0:
        return AutoCorrectionResult()

    colors = pixels.astype(np.float64)
    luminance = compute_luminance(colors)

    # Exclude over/underexposed pixels
    low_thresh = np.percentile(luminance, clip_percent)
    high_thresh = np.percentile(luminance, 100 - clip_percent)
    mask = (luminance >= low_thresh) & (luminance <= high_thresh)

    if not np.any(mask):
        return AutoCorrectionResult()

    avg_r, avg_g, avg_b = colors[mask].mean(axis=0)
    if (avg_r + avg_g + avg_b) / 3 < 0.01:
        return AutoCorrectionResult()

    # r - b moves by 2 * TEMPERATURE_SHIFT per unit temperature
    temperature = (avg_b - avg_r) / (2 * TEMPERATURE_SHIFT) * PARAM_PERCENT
    # g - (r + b) / 2 moves by -(TINT_SHIFT_G + TINT_SHIFT_RB) per unit tint
    tint = (avg_g - (avg_r + avg_b) / 2) / (TINT_SHIFT_G + TINT_SHIFT_RB) * PARAM_PERCENT

    temperature = float(np.clip(temperature, -PARAM_PERCENT, PARAM_PERCENT))
    tint = float(np.clip(tint, -PARAM_PERCENT, PARAM_PERCENT))
    logger.debug("[Auto] White balance: temperature=%.2f tint=%.2f", temperature, tint)
    return AutoCorrectionResult(temperature=temperature, tint=tint)


def auto_correct(
    frame: NDArray,
    strength: float = 1.0,
    white_balance: bool = True,
    base: GradingDescriptor | None = None,
) -> GradingDescriptor:
    """Compute a combined levels and white-balance correction.

    :param frame: RGB frame [H, W, 3] or [N, 3]
    :param strength: Scale applied to every correction (0-1)
    :param white_balance: Include the Gray World white balance
    :param base: Descriptor to add the corrections to
    :returns: Corrected GradingDescriptor

    Example:
        >>> descriptor = auto_correct(frame, strength=0.8)
        >>> graded = apply_pipeline(compose_pipeline(descriptor), frame)
    """
    levels = auto_levels(frame)
    wb = auto_white_balance(frame) if white_balance else AutoCorrectionResult()

    result = AutoCorrectionResult(
        lift=levels.lift * strength,
        gain=levels.gain * strength,
        temperature=wb.temperature * strength,
        tint=wb.tint * strength,
    )
    logger.info(
        "[Auto] Correction: lift=%.3f gain=%.3f temperature=%.1f tint=%.1f",
        result.lift,
        result.gain,
        result.temperature,
        result.tint,
    )
    return result.to_descriptor(base)
