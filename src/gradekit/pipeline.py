"""Grading pipeline: compose a descriptor once, apply it to many frames.

Example:
    >>> from gradekit import GradingDescriptor, BasicParameters, compose_pipeline, apply_pipeline
    >>>
    >>> descriptor = GradingDescriptor(basic=BasicParameters(contrast=20, saturation=-15))
    >>> transform = compose_pipeline(descriptor)
    >>> graded = apply_pipeline(transform, frame)  # new array, frame untouched
    >>>
    >>> # Interactive use: recompose only when the descriptor changes
    >>> pipeline = ColorTransformPipeline()
    >>> pipeline.update(descriptor)
    >>> graded = pipeline.process(frame)
"""

from __future__ import annotations

import logging
import math
import threading
from collections import OrderedDict
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from gradekit.color.basic import basic_factors, hue_rotation_matrix
from gradekit.color.kernels import grade_pixels_numba
from gradekit.color.wheels import gamma_exponents
from gradekit.config.values import CurveSet, GradingDescriptor, RGBValue
from gradekit.constants import DEFAULT_TRANSFORM_CACHE_SIZE
from gradekit.curves.bezier import sorted_control_points
from gradekit.shared.frames import as_pixel_array

logger = logging.getLogger(__name__)

_NO_LUT_DATA = np.zeros(24, dtype=np.float32)


@dataclass(frozen=True, eq=False)
class PixelTransform:
    """A composed, read-only per-pixel grade.

    Holds every precomputed coefficient the fused kernel needs. Instances
    are safe to share between threads.

    Attributes:
        descriptor: Descriptor this transform was composed from
        is_identity: True if applying it leaves [0, 1] input unchanged
    """

    descriptor: GradingDescriptor
    is_identity: bool
    wheels: NDArray[np.float64] = field(repr=False)
    gamma_exp: NDArray[np.float64] = field(repr=False)
    basic: NDArray[np.float64] = field(repr=False)
    use_hue: bool = field(repr=False)
    hue_matrix: NDArray[np.float64] = field(repr=False)
    curve_px: NDArray[np.float64] = field(repr=False)
    curve_py: NDArray[np.float64] = field(repr=False)
    curve_n: NDArray[np.int64] = field(repr=False)
    master_luma: bool = field(repr=False)
    sec_px: NDArray[np.float64] = field(repr=False)
    sec_py: NDArray[np.float64] = field(repr=False)
    sec_n: NDArray[np.int64] = field(repr=False)
    use_lut: bool = field(repr=False)
    lut_data: NDArray[np.float32] = field(repr=False)
    lut_size: int = field(repr=False)
    lut_min: NDArray[np.float64] = field(repr=False)
    lut_max: NDArray[np.float64] = field(repr=False)
    lut_intensity: float = field(repr=False)

    def apply(self, frame: NDArray) -> NDArray[np.float32]:
        """Apply to a frame (see :func:`apply_pipeline`)."""
        return apply_pipeline(self, frame)

    def __call__(self, pixel: RGBValue | tuple[float, float, float]) -> RGBValue:
        """Apply to one pixel with the same kernel used for frames.

        :param pixel: RGB value
        :returns: Graded RGB value in [0, 1]
        """
        pixels = np.asarray(tuple(pixel), dtype=np.float32).reshape(1, 3)
        return RGBValue.from_sequence(apply_pipeline(self, pixels)[0])


def _check_finite(descriptor: GradingDescriptor) -> None:
    wheels = descriptor.wheels
    basic = descriptor.basic
    values = [*wheels.lift, *wheels.gamma, *wheels.gain, *wheels.offset]
    values += [basic.temperature, basic.tint, basic.contrast, basic.pivot, basic.saturation, basic.hue, basic.luminance]
    if not all(math.isfinite(v) for v in values):
        raise ValueError("GradingDescriptor contains non-finite wheel or basic values")


def _compile_curves(
    curves: CurveSet, names: tuple[str, ...]
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.int64]]:
    compiled = {}
    for name in names:
        if curves.is_channel_identity(name):
            continue
        points = sorted_control_points(getattr(curves, name))
        if points is not None:
            compiled[name] = points

    width = max((px.shape[0] for px, _ in compiled.values()), default=2)
    xs = np.zeros((len(names), width), dtype=np.float64)
    ys = np.zeros((len(names), width), dtype=np.float64)
    counts = np.zeros(len(names), dtype=np.int64)
    for row, name in enumerate(names):
        if name not in compiled:
            continue
        px, py = compiled[name]
        xs[row, : px.shape[0]] = px
        ys[row, : py.shape[0]] = py
        counts[row] = px.shape[0]
    return xs, ys, counts


def compose_pipeline(descriptor: GradingDescriptor) -> PixelTransform:
    """Compose a descriptor into a PixelTransform.

    Order: wheels -> basic -> curves (master, then R/G/B, then HSL
    secondaries) -> 3D LUT (when enabled with intensity > 0) -> clamp [0, 1].

    Curves are evaluated per pixel with the same Bezier as
    :func:`gradekit.curves.evaluate_curve`, so a curve channel graded here
    matches the scalar evaluator for every input.

    Composition is all-or-nothing: any failure raises and nothing partial
    is returned.

    :param descriptor: Grade to compose
    :returns: Immutable PixelTransform
    :raises TypeError: If ``descriptor`` is not a GradingDescriptor
    :raises ValueError: If the descriptor holds non-finite values
    """
    if not isinstance(descriptor, GradingDescriptor):
        raise TypeError(f"Expected GradingDescriptor, got {type(descriptor).__name__}")
    _check_finite(descriptor)

    wheels = descriptor.wheels.as_array()
    basic = basic_factors(descriptor.basic)
    hue_matrix = hue_rotation_matrix(descriptor.basic.hue)
    use_hue = descriptor.basic.hue != 0.0

    curves = descriptor.curves
    curve_px, curve_py, curve_n = _compile_curves(curves, CurveSet.TONE_CHANNELS)
    sec_px, sec_py, sec_n = _compile_curves(curves, CurveSet.SECONDARY_CHANNELS)

    settings = descriptor.lut
    use_lut = settings is not None and settings.is_active
    if use_lut:
        lut = settings.lut
        lut_data = lut.data
        lut_size = lut.size
        lut_min, lut_max = lut.domain_arrays
        lut_intensity = settings.intensity
    else:
        lut_data = _NO_LUT_DATA
        lut_size = 2
        lut_min = np.zeros(3, dtype=np.float64)
        lut_max = np.ones(3, dtype=np.float64)
        lut_intensity = 0.0

    is_identity = (
        descriptor.wheels.is_neutral()
        and descriptor.basic.is_neutral()
        and not curve_n.any()
        and not sec_n.any()
        and not use_lut
    )

    for array in (wheels, basic, hue_matrix, curve_px, curve_py, curve_n, sec_px, sec_py, sec_n):
        array.flags.writeable = False

    transform = PixelTransform(
        descriptor=descriptor,
        is_identity=is_identity,
        wheels=wheels,
        gamma_exp=gamma_exponents(descriptor.wheels.gamma),
        basic=basic,
        use_hue=use_hue,
        hue_matrix=hue_matrix,
        curve_px=curve_px,
        curve_py=curve_py,
        curve_n=curve_n,
        master_luma=curves.master_mode == "luma",
        sec_px=sec_px,
        sec_py=sec_py,
        sec_n=sec_n,
        use_lut=use_lut,
        lut_data=lut_data,
        lut_size=lut_size,
        lut_min=lut_min,
        lut_max=lut_max,
        lut_intensity=float(lut_intensity),
    )
    logger.debug(
        "[Pipeline] Composed transform (identity=%s, curves=%d, secondaries=%d, lut=%s)",
        is_identity,
        int(np.count_nonzero(curve_n)),
        int(np.count_nonzero(sec_n)),
        use_lut,
    )
    return transform


def apply_pipeline(transform: PixelTransform, frame: NDArray) -> NDArray[np.float32]:
    """Apply a composed transform to every pixel of a frame.

    :param transform: Result of :func:`compose_pipeline`
    :param frame: RGB frame [H, W, 3] or [N, 3]; uint8 is normalized by 1/255
    :returns: New float32 array of the same shape, in [0, 1]
    """
    pixels, shape = as_pixel_array(frame)

    # Fast-path: identity grade only clamps
    if transform.is_identity:
        return np.clip(pixels, 0.0, 1.0).reshape(shape)

    out = np.empty_like(pixels)
    grade_pixels_numba(
        pixels,
        transform.wheels,
        transform.gamma_exp,
        transform.basic,
        transform.use_hue,
        transform.hue_matrix,
        transform.curve_px,
        transform.curve_py,
        transform.curve_n,
        transform.master_luma,
        transform.sec_px,
        transform.sec_py,
        transform.sec_n,
        transform.use_lut,
        transform.lut_data,
        transform.lut_size,
        transform.lut_min,
        transform.lut_max,
        transform.lut_intensity,
        out,
    )
    return out.reshape(shape)


IDENTITY_TRANSFORM = compose_pipeline(GradingDescriptor())


class ColorTransformPipeline:
    """Stateful pipeline for interactive grading.

    Keeps the current transform and an LRU cache of composed transforms
    keyed by descriptor, so toggling between recent grades is free.

    If composing a new descriptor fails, the last good transform stays
    current and the error is re-raised.
    """

    def __init__(
        self,
        descriptor: GradingDescriptor | None = None,
        cache_size: int = DEFAULT_TRANSFORM_CACHE_SIZE,
    ):
        if cache_size < 1:
            raise ValueError(f"cache_size must be >= 1, got {cache_size}")
        self.cache_size = cache_size
        self._cache: OrderedDict[GradingDescriptor, PixelTransform] = OrderedDict()
        self._lock = threading.RLock()
        self._transform = IDENTITY_TRANSFORM
        self._hits = 0
        self._misses = 0

        if descriptor is not None:
            self.update(descriptor)

    @property
    def descriptor(self) -> GradingDescriptor:
        """Descriptor of the current transform."""
        return self._transform.descriptor

    @property
    def transform(self) -> PixelTransform:
        """Current transform."""
        return self._transform

    def get_transform(self, descriptor: GradingDescriptor) -> PixelTransform:
        """Get the composed transform for a descriptor, composing on a cache miss.

        :param descriptor: Grade to compose
        :returns: Cached or newly composed transform
        """
        with self._lock:
            cached = self._cache.get(descriptor)
            if cached is not None:
                self._cache.move_to_end(descriptor)
                self._hits += 1
                logger.debug("[Pipeline] Cache hit")
                return cached

        transform = compose_pipeline(descriptor)

        with self._lock:
            self._misses += 1
            self._cache[descriptor] = transform
            while len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)
        return transform

    def update(self, descriptor: GradingDescriptor) -> PixelTransform:
        """Make a descriptor current, recomposing only if it changed.

        :param descriptor: New grade
        :returns: The current transform
        :raises TypeError: If ``descriptor`` is not a GradingDescriptor
        :raises ValueError: If the descriptor cannot be composed
        """
        if descriptor == self._transform.descriptor:
            return self._transform

        try:
            transform = self.get_transform(descriptor)
        except (TypeError, ValueError):
            logger.error("[Pipeline] Composition failed, keeping last good transform")
            raise

        self._transform = transform
        return transform

    def process(self, frame: NDArray) -> NDArray[np.float32]:
        """Apply the current transform to a frame.

        :param frame: RGB frame [H, W, 3] or [N, 3]
        :returns: New graded frame
        """
        return apply_pipeline(self._transform, frame)

    def clear_cache(self) -> None:
        """Drop all cached transforms. The current transform stays active."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def cache_info(self) -> dict[str, int]:
        """Get cache statistics.

        :returns: Dict with ``hits``, ``misses``, ``size`` and ``max_size``
        """
        with self._lock:
            return {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._cache),
                "max_size": self.cache_size,
            }

    def __repr__(self) -> str:
        return f"ColorTransformPipeline(identity={self._transform.is_identity}, cached={len(self._cache)})"
