"""Preset library for grading descriptors.

Provides pre-configured GradingDescriptor looks for common use cases,
with support for loading from dict and JSON.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from gradekit.config.values import (
    BasicParameters,
    ColorWheels,
    CurvePoint,
    CurveSet,
    GradingDescriptor,
    LUTSettings,
    RGBValue,
)

logger = logging.getLogger(__name__)

# Gentle S-curve shared by the contrast-heavy looks
_S_CURVE = (CurvePoint(0.0, 0.0), CurvePoint(0.25, 0.2), CurvePoint(0.75, 0.8), CurvePoint(1.0, 1.0))
_FADE_CURVE = (CurvePoint(0.0, 0.08), CurvePoint(0.5, 0.52), CurvePoint(1.0, 0.94))

# ============================================================================
# Grading Presets - Basic
# ============================================================================

NEUTRAL = GradingDescriptor()

WARM = GradingDescriptor(basic=BasicParameters(temperature=25, tint=5))

COOL = GradingDescriptor(basic=BasicParameters(temperature=-25, tint=-3))

CINEMATIC = GradingDescriptor(
    wheels=ColorWheels(
        lift=RGBValue(0.0, 0.0, 0.02),
        gain=RGBValue(0.03, 0.01, -0.02),
    ),
    basic=BasicParameters(contrast=15, saturation=-10),
    curves=CurveSet(master=_S_CURVE),
)

VINTAGE = GradingDescriptor(
    wheels=ColorWheels(lift=RGBValue(0.04, 0.03, 0.0)),
    basic=BasicParameters(temperature=15, contrast=-10, saturation=-25),
    curves=CurveSet(master=_FADE_CURVE),
)

HIGH_CONTRAST = GradingDescriptor(basic=BasicParameters(contrast=35), curves=CurveSet(master=_S_CURVE))

LOW_CONTRAST = GradingDescriptor(basic=BasicParameters(contrast=-30, luminance=4))

BLACK_AND_WHITE = GradingDescriptor(basic=BasicParameters(saturation=-100, contrast=10))

# ============================================================================
# Grading Presets - Artistic
# ============================================================================

TEAL_ORANGE = GradingDescriptor(
    wheels=ColorWheels(
        lift=RGBValue(-0.02, 0.01, 0.04),
        gain=RGBValue(0.05, 0.01, -0.04),
    ),
    basic=BasicParameters(contrast=12, saturation=15),
)

BLEACH_BYPASS = GradingDescriptor(
    basic=BasicParameters(contrast=40, saturation=-55),
    curves=CurveSet(master=_S_CURVE),
)

CROSS_PROCESS = GradingDescriptor(
    wheels=ColorWheels(gamma=RGBValue(-0.05, 0.08, -0.1)),
    basic=BasicParameters(contrast=20, saturation=20, hue=8),
    curves=CurveSet(blue=(CurvePoint(0.0, 0.12), CurvePoint(1.0, 0.88))),
)

FADED_FILM = GradingDescriptor(
    basic=BasicParameters(saturation=-20, temperature=8),
    curves=CurveSet(master=_FADE_CURVE),
)

# ============================================================================
# Grading Presets - Time of Day
# ============================================================================

GOLDEN_HOUR = GradingDescriptor(
    wheels=ColorWheels(gain=RGBValue(0.04, 0.02, -0.03)),
    basic=BasicParameters(temperature=40, saturation=10, luminance=5),
)

MOONLIGHT = GradingDescriptor(
    wheels=ColorWheels(gain=RGBValue(-0.05, -0.02, 0.04)),
    basic=BasicParameters(temperature=-45, saturation=-30, luminance=-15, contrast=10),
)

# ============================================================================
# Preset Registry
# ============================================================================

GRADING_PRESETS: dict[str, GradingDescriptor] = {
    # Basic
    "neutral": NEUTRAL,
    "warm": WARM,
    "cool": COOL,
    "cinematic": CINEMATIC,
    "vintage": VINTAGE,
    "high_contrast": HIGH_CONTRAST,
    "low_contrast": LOW_CONTRAST,
    "black_and_white": BLACK_AND_WHITE,
    # Artistic
    "teal_orange": TEAL_ORANGE,
    "bleach_bypass": BLEACH_BYPASS,
    "cross_process": CROSS_PROCESS,
    "faded_film": FADED_FILM,
    # Time of Day
    "golden_hour": GOLDEN_HOUR,
    "moonlight": MOONLIGHT,
}

# ============================================================================
# Loading Functions
# ============================================================================


def get_grading_preset(name: str) -> GradingDescriptor:
    """Get grading preset by name.

    :param name: Preset name (case-insensitive)
    :returns: GradingDescriptor preset
    :raises KeyError: If preset not found
    """
    name_lower = name.lower()
    if name_lower not in GRADING_PRESETS:
        available = ", ".join(GRADING_PRESETS.keys())
        raise KeyError(f"Unknown grading preset '{name}'. Available: {available}")
    return GRADING_PRESETS[name_lower]


# ============================================================================
# Dict/JSON Loading
# ============================================================================


def wheels_from_dict(d: dict) -> ColorWheels:
    """Create ColorWheels from dictionary of ``[r, g, b]`` lists."""
    valid_fields = {"lift", "gamma", "gain", "offset"}
    kwargs = {k: RGBValue.from_sequence(v) for k, v in d.items() if k in valid_fields}
    return ColorWheels(**kwargs)


def basic_from_dict(d: dict) -> BasicParameters:
    """Create BasicParameters from dictionary.

    :param d: Dictionary with basic parameters
    :returns: BasicParameters instance

    Example:
        >>> d = {"temperature": 20, "contrast": 10}
        >>> params = basic_from_dict(d)
    """
    valid_fields = {"temperature", "tint", "contrast", "pivot", "saturation", "hue", "luminance"}
    kwargs = {k: float(v) for k, v in d.items() if k in valid_fields}
    return BasicParameters(**kwargs)


def curves_from_dict(d: dict) -> CurveSet:
    """Create CurveSet from dictionary.

    Points may be ``[x, y]`` pairs or ``{"x", "y"}`` objects; editor ids are dropped.
    """
    valid_fields = set(CurveSet.TONE_CHANNELS + CurveSet.SECONDARY_CHANNELS) | {"master_mode"}
    kwargs = {k: v for k, v in d.items() if k in valid_fields}
    return CurveSet(**kwargs)


def lut_settings_from_dict(d: dict) -> LUTSettings:
    """Create LUTSettings from dictionary.

    :param d: Dictionary with ``title``, ``size``, ``domain_min``, ``domain_max``,
        ``data``, and optional ``intensity`` and ``enabled``
    :returns: LUTSettings instance
    :raises MalformedLUT: If ``data`` does not hold ``size**3 * 3`` values
    """
    from gradekit.lut.cube import LUTData

    lut = LUTData(
        title=d.get("title", ""),
        size=int(d["size"]),
        domain_min=tuple(d.get("domain_min", (0.0, 0.0, 0.0))),
        domain_max=tuple(d.get("domain_max", (1.0, 1.0, 1.0))),
        data=d["data"],
    )
    return LUTSettings(lut=lut, intensity=d.get("intensity", 1.0), enabled=d.get("enabled", True))


def descriptor_from_dict(d: dict) -> GradingDescriptor:
    """Create GradingDescriptor from dictionary.

    Missing sections take their neutral defaults.

    :param d: Dictionary with optional ``wheels``, ``basic``, ``curves`` and ``lut``
    :returns: GradingDescriptor instance
    """
    lut = d.get("lut")
    return GradingDescriptor(
        wheels=wheels_from_dict(d.get("wheels", {})),
        basic=basic_from_dict(d.get("basic", {})),
        curves=curves_from_dict(d.get("curves", {})),
        lut=lut_settings_from_dict(lut) if lut is not None else None,
    )


def load_descriptor_json(path: str | Path) -> GradingDescriptor:
    """Load GradingDescriptor from JSON file.

    :param path: Path to JSON file
    :returns: GradingDescriptor instance
    """
    with open(path) as f:
        d = json.load(f)
    return descriptor_from_dict(d)


# ============================================================================
# Saving Functions
# ============================================================================


def _points_to_list(points: tuple[CurvePoint, ...]) -> list[list[float]]:
    return [[p.x, p.y] for p in points]


def descriptor_to_dict(descriptor: GradingDescriptor) -> dict:
    """Convert GradingDescriptor to dictionary.

    :param descriptor: GradingDescriptor instance
    :returns: JSON-compatible dictionary representation
    """
    wheels = descriptor.wheels
    basic = descriptor.basic
    curves = descriptor.curves

    d = {
        "wheels": {
            "lift": list(wheels.lift),
            "gamma": list(wheels.gamma),
            "gain": list(wheels.gain),
            "offset": list(wheels.offset),
        },
        "basic": {
            "temperature": basic.temperature,
            "tint": basic.tint,
            "contrast": basic.contrast,
            "pivot": basic.pivot,
            "saturation": basic.saturation,
            "hue": basic.hue,
            "luminance": basic.luminance,
        },
        "curves": {
            **{
                name: _points_to_list(getattr(curves, name))
                for name in CurveSet.TONE_CHANNELS + CurveSet.SECONDARY_CHANNELS
            },
            "master_mode": curves.master_mode,
        },
        "lut": None,
    }
    if descriptor.lut is not None:
        lut = descriptor.lut.lut
        d["lut"] = {
            "title": lut.title,
            "size": lut.size,
            "domain_min": list(lut.domain_min),
            "domain_max": list(lut.domain_max),
            "data": lut.data.tolist(),
            "intensity": descriptor.lut.intensity,
            "enabled": descriptor.lut.enabled,
        }
    return d


def save_descriptor_json(descriptor: GradingDescriptor, path: str | Path) -> None:
    """Save GradingDescriptor to JSON file.

    :param descriptor: GradingDescriptor instance
    :param path: Output path
    """
    with open(path, "w") as f:
        json.dump(descriptor_to_dict(descriptor), f, indent=2)


# ============================================================================
# Preset Store
# ============================================================================


class JsonPresetStore:
    """Directory of user presets, one ``<name>.json`` file per preset.

    Names not found on disk fall back to the built-in presets, so
    ``store.load("cinematic")`` works on an empty directory.

    Example:
        >>> store = JsonPresetStore("~/.config/grading/presets")
        >>> store.save("my_look", descriptor)
        >>> store.list()
        ['my_look']
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory).expanduser()

    def _path(self, name: str) -> Path:
        if not name or Path(name).name != name:
            raise ValueError(f"Invalid preset name: {name!r}")
        return self.directory / f"{name}.json"

    def list(self) -> list[str]:
        """List user preset names, sorted."""
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))

    def load(self, name: str) -> GradingDescriptor:
        """Load a preset by name.

        :param name: User preset name or built-in preset name
        :returns: GradingDescriptor
        :raises KeyError: If no user or built-in preset has this name
        """
        path = self._path(name)
        if path.is_file():
            return load_descriptor_json(path)
        return get_grading_preset(name)

    def save(self, name: str, descriptor: GradingDescriptor) -> Path:
        """Save a preset, replacing any existing file of the same name.

        :param name: Preset name (used as the file stem)
        :param descriptor: Descriptor to store
        :returns: Path written
        """
        path = self._path(name)
        self.directory.mkdir(parents=True, exist_ok=True)
        save_descriptor_json(descriptor, path)
        logger.info("[Presets] Saved '%s' to %s", name, path)
        return path
