"""Configuration module for gradekit.

This module provides standardized parameter specifications for every
grading control, the immutable value types a grade is made of, and the
preset library.

Usage:
    from gradekit.config import CONFIG
    CONFIG.basic.contrast.neutral  # 0.0
    CONFIG.wheels.gamma.max_value  # 1.0

    from gradekit.config import get_grading_preset
    descriptor = get_grading_preset("cinematic")
"""

from gradekit.config.grading import BASIC_CONFIG, CONFIG, WHEEL_CONFIG, BasicConfig, GradingConfig, WheelConfig
from gradekit.config.operations import OperationSpec
from gradekit.config.presets import (
    BLACK_AND_WHITE,
    BLEACH_BYPASS,
    CINEMATIC,
    COOL,
    CROSS_PROCESS,
    FADED_FILM,
    GOLDEN_HOUR,
    GRADING_PRESETS,
    HIGH_CONTRAST,
    LOW_CONTRAST,
    MOONLIGHT,
    NEUTRAL,
    TEAL_ORANGE,
    VINTAGE,
    WARM,
    JsonPresetStore,
    basic_from_dict,
    curves_from_dict,
    descriptor_from_dict,
    descriptor_to_dict,
    get_grading_preset,
    load_descriptor_json,
    lut_settings_from_dict,
    save_descriptor_json,
    wheels_from_dict,
)
from gradekit.config.values import (
    BasicParameters,
    ColorWheels,
    CurvePoint,
    CurveSet,
    EditablePoint,
    GradingDescriptor,
    LUTSettings,
    RGBValue,
    ScopeConfig,
    as_curve_points,
)

__all__ = [
    # Core types
    "OperationSpec",
    "GradingConfig",
    "WheelConfig",
    "BasicConfig",
    # Value classes
    "RGBValue",
    "ColorWheels",
    "BasicParameters",
    "CurvePoint",
    "EditablePoint",
    "CurveSet",
    "LUTSettings",
    "GradingDescriptor",
    "ScopeConfig",
    "as_curve_points",
    # Presets
    "NEUTRAL",
    "WARM",
    "COOL",
    "CINEMATIC",
    "VINTAGE",
    "HIGH_CONTRAST",
    "LOW_CONTRAST",
    "BLACK_AND_WHITE",
    "TEAL_ORANGE",
    "BLEACH_BYPASS",
    "CROSS_PROCESS",
    "FADED_FILM",
    "GOLDEN_HOUR",
    "MOONLIGHT",
    "GRADING_PRESETS",
    # Loading functions
    "get_grading_preset",
    "wheels_from_dict",
    "basic_from_dict",
    "curves_from_dict",
    "lut_settings_from_dict",
    "descriptor_from_dict",
    "descriptor_to_dict",
    "load_descriptor_json",
    "save_descriptor_json",
    "JsonPresetStore",
    # Singletons
    "CONFIG",
    "WHEEL_CONFIG",
    "BASIC_CONFIG",
]
