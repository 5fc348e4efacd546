"""Grading value dataclasses with merge support.

This module provides the immutable value types a grade is described with.
Every type can report whether it is neutral (no-op), clamp itself to the
ranges in :mod:`gradekit.config.grading`, and most merge with ``+``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

import numpy as np

from gradekit.config.grading import BASIC_CONFIG, WHEEL_CONFIG
from gradekit.constants import (
    DEFAULT_PIVOT,
    DEFAULT_REFRESH_RATE,
    DEFAULT_VECTORSCOPE_SIZE,
    DEFAULT_WAVEFORM_ROWS,
    VALID_MASTER_MODES,
    VALID_REFRESH_RATES,
    VALID_WAVEFORM_MODES,
)

if TYPE_CHECKING:
    from gradekit.lut.cube import LUTData


@dataclass(frozen=True)
class RGBValue:
    """Three floating-point channel values.

    Used for wheel offsets (in [-1, 1]) and for single pixels.

    Example:
        >>> warm_lift = RGBValue(0.02, 0.0, -0.02)
        >>> r, g, b = warm_lift
    """

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.r
        yield self.g
        yield self.b

    def __add__(self, other: RGBValue) -> RGBValue:
        if not isinstance(other, RGBValue):
            return NotImplemented
        return RGBValue(self.r + other.r, self.g + other.g, self.b + other.b)

    def __neg__(self) -> RGBValue:
        return RGBValue(-self.r, -self.g, -self.b)

    @classmethod
    def uniform(cls, value: float) -> RGBValue:
        """Create an RGBValue with the same value on every channel."""
        return cls(value, value, value)

    @classmethod
    def from_sequence(cls, values: Iterable[float]) -> RGBValue:
        """Create from any 3-element sequence (list, tuple, array)."""
        r, g, b = (float(v) for v in values)
        return cls(r, g, b)

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)

    def is_neutral(self) -> bool:
        return self.r == 0.0 and self.g == 0.0 and self.b == 0.0


@dataclass(frozen=True)
class ColorWheels:
    """Lift/gamma/gain/offset wheel state.

    All four wheels are neutral at zero. They are applied per channel in the
    fixed order lift -> gamma -> gain -> offset.

    Merge semantics: per-channel additive.
    """

    lift: RGBValue = RGBValue()
    gamma: RGBValue = RGBValue()
    gain: RGBValue = RGBValue()
    offset: RGBValue = RGBValue()

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, RGBValue):
                object.__setattr__(self, f.name, RGBValue.from_sequence(value))

    def __add__(self, other: ColorWheels) -> ColorWheels:
        if not isinstance(other, ColorWheels):
            return NotImplemented
        return ColorWheels(
            lift=self.lift + other.lift,
            gamma=self.gamma + other.gamma,
            gain=self.gain + other.gain,
            offset=self.offset + other.offset,
        )

    def is_neutral(self) -> bool:
        return all(getattr(self, f.name).is_neutral() for f in fields(self))

    def clamp(self) -> ColorWheels:
        """Clamp every channel of every wheel to its configured range.

        :returns: New ColorWheels with clamped values
        """
        specs = WHEEL_CONFIG.get_all_specs()
        return ColorWheels(
            **{
                name: RGBValue(*(spec.validate(v) for v in getattr(self, name)))
                for name, spec in specs.items()
            }
        )

    def as_array(self) -> np.ndarray:
        """Pack wheels into a [4, 3] float64 array (lift, gamma, gain, offset rows)."""
        return np.array(
            [self.lift.to_tuple(), self.gamma.to_tuple(), self.gain.to_tuple(), self.offset.to_tuple()],
            dtype=np.float64,
        )


@dataclass(frozen=True)
class BasicParameters:
    """Basic tonal parameters.

    Ranges: temperature/tint/contrast/saturation/luminance in [-100, 100],
    hue in [-180, 180] degrees, pivot in [0, 1]. The engine assumes
    pre-clamped input; call :meth:`clamp` on untrusted values.

    Merge semantics:
    - temperature, tint, contrast, saturation, luminance: additive
    - hue: additive with wrap to [-180, 180]
    - pivot: the right-hand value wins unless it is the default
    """

    temperature: float = 0.0
    tint: float = 0.0
    contrast: float = 0.0
    pivot: float = DEFAULT_PIVOT
    saturation: float = 0.0
    hue: float = 0.0
    luminance: float = 0.0

    def __add__(self, other: BasicParameters) -> BasicParameters:
        if not isinstance(other, BasicParameters):
            return NotImplemented
        specs = BASIC_CONFIG.get_all_specs()
        return BasicParameters(
            **{name: spec.combine(getattr(self, name), getattr(other, name)) for name, spec in specs.items()}
        )

    def __radd__(self, other):
        """Support sum() with initial value 0."""
        if other == 0:
            return self
        return self.__add__(other)

    def clamp(self) -> BasicParameters:
        """Clamp all values to valid ranges.

        :returns: New BasicParameters with clamped values
        """
        specs = BASIC_CONFIG.get_all_specs()
        return BasicParameters(**{name: spec.validate(getattr(self, name)) for name, spec in specs.items()})

    def is_neutral(self) -> bool:
        """Check if applying these values would have no effect.

        The pivot only matters when contrast is active, so it is ignored here.
        """
        return (
            self.temperature == 0.0
            and self.tint == 0.0
            and self.contrast == 0.0
            and self.saturation == 0.0
            and self.hue == 0.0
            and self.luminance == 0.0
        )


@dataclass(frozen=True)
class CurvePoint:
    """A control point in the normalized curve domain."""

    x: float
    y: float


@dataclass(frozen=True)
class EditablePoint:
    """A curve point carrying an opaque identity for interactive editors.

    The ``id`` never reaches the evaluator; use :attr:`point` for math.
    """

    point: CurvePoint
    id: str

    @property
    def x(self) -> float:
        return self.point.x

    @property
    def y(self) -> float:
        return self.point.y


def as_curve_points(points: Iterable[Any]) -> tuple[CurvePoint, ...]:
    """Normalize a point sequence to a tuple of CurvePoint.

    Accepts CurvePoint, EditablePoint, ``(x, y)`` pairs and ``{"x", "y"}`` dicts.
    Any extra keys (such as an editor ``id``) are dropped.

    :param points: Point sequence in any supported form
    :returns: Tuple of CurvePoint in the original order
    """
    result = []
    for p in points:
        if isinstance(p, CurvePoint):
            result.append(p)
        elif isinstance(p, EditablePoint):
            result.append(p.point)
        elif isinstance(p, dict):
            result.append(CurvePoint(float(p["x"]), float(p["y"])))
        else:
            x, y = p
            result.append(CurvePoint(float(x), float(y)))
    return tuple(result)


@dataclass(frozen=True)
class CurveSet:
    """Tone curves by channel.

    ``master``/``red``/``green``/``blue`` map an input channel value to an output
    value. ``hue_vs_sat``/``luma_vs_sat`` are HSL-secondary curves whose output
    is a saturation factor of ``2 * y`` (0.5 is neutral).

    ``master_mode`` selects whether the master curve is applied to every RGB
    channel (``"channels"``) or evaluated on luma with the delta added to each
    channel (``"luma"``).

    A channel with fewer than two points is identity. Any other tone curve is
    evaluated as authored, so even ``[(0, 0), (1, 1)]`` eases in and out.
    A secondary curve whose every output is 0.5 is identity.
    """

    master: tuple[CurvePoint, ...] = ()
    red: tuple[CurvePoint, ...] = ()
    green: tuple[CurvePoint, ...] = ()
    blue: tuple[CurvePoint, ...] = ()
    hue_vs_sat: tuple[CurvePoint, ...] = ()
    luma_vs_sat: tuple[CurvePoint, ...] = ()
    master_mode: str = "channels"

    TONE_CHANNELS = ("master", "red", "green", "blue")
    SECONDARY_CHANNELS = ("hue_vs_sat", "luma_vs_sat")

    def __post_init__(self):
        for name in self.TONE_CHANNELS + self.SECONDARY_CHANNELS:
            object.__setattr__(self, name, as_curve_points(getattr(self, name)))
        if self.master_mode not in VALID_MASTER_MODES:
            raise ValueError(
                f"master_mode='{self.master_mode}' is invalid. Use one of: {sorted(VALID_MASTER_MODES)}"
            )

    def is_channel_identity(self, name: str) -> bool:
        """Check whether one curve channel leaves values unchanged.

        :param name: Channel name (e.g. "master", "hue_vs_sat")
        :returns: True if the channel is identity
        """
        points = getattr(self, name)
        if len(points) < 2:
            return True
        if name in self.SECONDARY_CHANNELS:
            return all(p.y == 0.5 for p in points)
        return False

    def is_neutral(self) -> bool:
        return all(self.is_channel_identity(name) for name in self.TONE_CHANNELS + self.SECONDARY_CHANNELS)


@dataclass(frozen=True)
class LUTSettings:
    """A parsed 3D LUT with its blend intensity and enable flag."""

    lut: LUTData
    intensity: float = 1.0
    enabled: bool = True

    def __post_init__(self):
        object.__setattr__(self, "intensity", max(0.0, min(1.0, float(self.intensity))))

    @property
    def is_active(self) -> bool:
        """True if sampling the LUT would change anything."""
        return self.enabled and self.intensity > 0.0


@dataclass(frozen=True)
class GradingDescriptor:
    """Complete, immutable description of a grade.

    This is the only object the pipeline consumes. It is hashable, so it
    doubles as the cache key for composed transforms.

    Example:
        >>> descriptor = GradingDescriptor(
        ...     wheels=ColorWheels(lift=RGBValue(0.02, 0.0, -0.02)),
        ...     basic=BasicParameters(contrast=15, saturation=-10),
        ... )
        >>> transform = compose_pipeline(descriptor)
    """

    wheels: ColorWheels = ColorWheels()
    basic: BasicParameters = BasicParameters()
    curves: CurveSet = CurveSet()
    lut: LUTSettings | None = None

    def is_neutral(self) -> bool:
        """Check if the descriptor composes to the identity transform."""
        return (
            self.wheels.is_neutral()
            and self.basic.is_neutral()
            and self.curves.is_neutral()
            and (self.lut is None or not self.lut.is_active)
        )

    def clamp(self) -> GradingDescriptor:
        """Return a copy with wheels and basic parameters clamped to range."""
        return GradingDescriptor(
            wheels=self.wheels.clamp(),
            basic=self.basic.clamp(),
            curves=self.curves,
            lut=self.lut,
        )


@dataclass
class ScopeConfig:
    """Scope analysis configuration.

    Example:
        >>> config = ScopeConfig(waveform_enabled=True, refresh_rate=60)
        >>> analyzer = ScopeAnalyzer(config)
    """

    histogram_enabled: bool = True
    waveform_enabled: bool = False
    vectorscope_enabled: bool = False

    # Ticks per second (15, 30 or 60)
    refresh_rate: int = DEFAULT_REFRESH_RATE

    # Analyze every Nth pixel along each axis
    sample_step: int = 1

    waveform_rows: int = DEFAULT_WAVEFORM_ROWS
    waveform_mode: str = "luma"
    vectorscope_size: int = DEFAULT_VECTORSCOPE_SIZE

    def __post_init__(self):
        if self.refresh_rate not in VALID_REFRESH_RATES:
            raise ValueError(
                f"refresh_rate={self.refresh_rate} is invalid. Use one of: {VALID_REFRESH_RATES}"
            )
        if self.sample_step < 1:
            raise ValueError(f"sample_step must be >= 1, got {self.sample_step}")
        if self.waveform_mode not in VALID_WAVEFORM_MODES:
            raise ValueError(
                f"waveform_mode='{self.waveform_mode}' is invalid. Use one of: {sorted(VALID_WAVEFORM_MODES)}"
            )

    @property
    def enabled_scopes(self) -> tuple[str, ...]:
        """Names of the enabled scopes, in display order."""
        return tuple(
            name
            for name, enabled in (
                ("histogram", self.histogram_enabled),
                ("waveform", self.waveform_enabled),
                ("vectorscope", self.vectorscope_enabled),
            )
            if enabled
        )

    @property
    def interval(self) -> float:
        """Seconds between ticks."""
        return 1.0 / self.refresh_rate
