"""Grading parameter configuration.

Standardized parameter specifications for the color wheels and the basic
parameters, shared by value clamping, preset loading and the kernels.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

from gradekit.config.operations import OperationSpec
from gradekit.constants import DEFAULT_PIVOT


def _wheel_spec(name: str, description: str) -> OperationSpec:
    return OperationSpec(
        name=name,
        min_value=-1.0,
        max_value=1.0,
        default=0.0,
        neutral=0.0,
        composition="additive",
        description=description,
    )


@dataclass(frozen=True)
class WheelConfig:
    """Configuration for the lift/gamma/gain/offset wheels (per RGB channel)."""

    lift: OperationSpec = _wheel_spec("lift", "Additive shadow shift")
    gamma: OperationSpec = _wheel_spec("gamma", "Midtone power: exponent 2**(-gamma)")
    gain: OperationSpec = _wheel_spec("gain", "Highlight multiplier: x * (1 + gain)")
    offset: OperationSpec = _wheel_spec("offset", "Uniform additive shift")

    def get_all_specs(self) -> dict[str, OperationSpec]:
        """Get all wheel specs by name."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class BasicConfig:
    """Configuration for the basic tonal parameters."""

    temperature: OperationSpec = OperationSpec(
        name="temperature",
        min_value=-100.0,
        max_value=100.0,
        default=0.0,
        neutral=0.0,
        composition="additive",
        description="Color temperature: -100=cool/blue, 0=neutral, 100=warm/orange",
    )

    tint: OperationSpec = OperationSpec(
        name="tint",
        min_value=-100.0,
        max_value=100.0,
        default=0.0,
        neutral=0.0,
        composition="additive",
        description="Tint: -100=green, 0=neutral, 100=magenta",
    )

    contrast: OperationSpec = OperationSpec(
        name="contrast",
        min_value=-100.0,
        max_value=100.0,
        default=0.0,
        neutral=0.0,
        composition="additive",
        description="Contrast about pivot: factor = 1 + contrast/100",
    )

    pivot: OperationSpec = OperationSpec(
        name="pivot",
        min_value=0.0,
        max_value=1.0,
        default=DEFAULT_PIVOT,
        neutral=DEFAULT_PIVOT,
        composition="override",
        description="Tonal value the contrast adjustment rotates about",
    )

    saturation: OperationSpec = OperationSpec(
        name="saturation",
        min_value=-100.0,
        max_value=100.0,
        default=0.0,
        neutral=0.0,
        composition="additive",
        description="Saturation: -100=grayscale, 0=unchanged, 100=double",
    )

    hue: OperationSpec = OperationSpec(
        name="hue",
        min_value=-180.0,
        max_value=180.0,
        default=0.0,
        neutral=0.0,
        composition="wrapped",
        description="Hue rotation in degrees",
    )

    luminance: OperationSpec = OperationSpec(
        name="luminance",
        min_value=-100.0,
        max_value=100.0,
        default=0.0,
        neutral=0.0,
        composition="additive",
        description="Uniform luminance shift",
    )

    def get_all_specs(self) -> dict[str, OperationSpec]:
        """Get all basic parameter specs by name."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class GradingConfig:
    """Top-level configuration containing all grading parameter specs.

    Provides hierarchical access:
        CONFIG.wheels.lift
        CONFIG.basic.contrast
    """

    wheels: WheelConfig = WheelConfig()
    basic: BasicConfig = BasicConfig()

    def get_all_specs(self) -> dict[str, dict[str, OperationSpec]]:
        """Get all specs organized by group.

        :return: Nested dictionary of all specifications
        """
        return {
            "wheels": self.wheels.get_all_specs(),
            "basic": self.basic.get_all_specs(),
        }


# Main singleton instance
CONFIG = GradingConfig()

WHEEL_CONFIG = CONFIG.wheels
BASIC_CONFIG = CONFIG.basic
