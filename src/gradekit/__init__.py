"""
gradekit - Color Grading Engine

Deterministic, CPU-optimized color grading for video frames.

Features:
- Declarative grades: color wheels, basic parameters, tone curves, 3D LUTs
- One fused Numba kernel per frame, parallel across pixels
- .cube 3D LUT parsing with trilinear sampling and a parse-once cache
- Bezier tone curves with HSL-secondary hue/luma vs saturation
- Histogram, waveform (luma or RGB parade) and vectorscope scopes
- Non-blocking scope scheduling at 15/30/60 Hz
- Presets with dict/JSON round-tripping and automatic correction

Example - Grade a frame:
    >>> from gradekit import (
    ...     BasicParameters, ColorWheels, GradingDescriptor, RGBValue,
    ...     apply_pipeline, compose_pipeline,
    ... )
    >>>
    >>> descriptor = GradingDescriptor(
    ...     wheels=ColorWheels(lift=RGBValue(0.0, 0.0, 0.02)),
    ...     basic=BasicParameters(contrast=15, saturation=-10),
    ... )
    >>> graded = apply_pipeline(compose_pipeline(descriptor), frame)

Example - LUT and scopes:
    >>> from gradekit import LUTSettings, compute_histogram, parse_cube_lut
    >>>
    >>> lut = parse_cube_lut(Path("film.cube").read_text())
    >>> descriptor = GradingDescriptor(lut=LUTSettings(lut, intensity=0.8))
    >>> histogram = compute_histogram(apply_pipeline(compose_pipeline(descriptor), frame))
"""

__version__ = "0.1.0"

# Configuration and values
from gradekit.config import (
    BASIC_CONFIG,
    CONFIG,
    GRADING_PRESETS,
    WHEEL_CONFIG,
    BasicParameters,
    ColorWheels,
    CurvePoint,
    CurveSet,
    EditablePoint,
    GradingDescriptor,
    JsonPresetStore,
    LUTSettings,
    OperationSpec,
    RGBValue,
    ScopeConfig,
    descriptor_from_dict,
    descriptor_to_dict,
    get_grading_preset,
    load_descriptor_json,
    save_descriptor_json,
)

# Errors
from gradekit.errors import GradingError, LUTLoadCancelled, MalformedLUT, UnsupportedLUTSize

# 3D LUTs
from gradekit.lut import LUTCache, LUTData, apply_lut, create_identity_lut, parse_cube_lut, sample_lut

# Curves
from gradekit.curves import auto_contrast_curve, build_curve_lut, evaluate_curve, evaluate_curve_array

# Color operations
from gradekit.color import (
    AutoCorrectionResult,
    apply_basic_parameters,
    apply_wheels,
    auto_correct,
    auto_levels,
    auto_white_balance,
    hue_rotation_matrix,
)

# Pipeline
from gradekit.pipeline import ColorTransformPipeline, PixelTransform, apply_pipeline, compose_pipeline

# Scopes
from gradekit.scopes import (
    HistogramResult,
    ScopeAnalyzer,
    ScopeSample,
    VectorscopeResult,
    WaveformResult,
    compute_histogram,
    compute_scopes,
    compute_vectorscope,
    compute_waveform,
)

# Host capabilities
from gradekit.protocols import FileOpener, FrameSource, PresetStore

__all__ = [
    "__version__",
    # Values
    "RGBValue",
    "ColorWheels",
    "BasicParameters",
    "CurvePoint",
    "EditablePoint",
    "CurveSet",
    "LUTSettings",
    "GradingDescriptor",
    "ScopeConfig",
    # Config
    "OperationSpec",
    "CONFIG",
    "WHEEL_CONFIG",
    "BASIC_CONFIG",
    # Presets
    "GRADING_PRESETS",
    "get_grading_preset",
    "descriptor_to_dict",
    "descriptor_from_dict",
    "save_descriptor_json",
    "load_descriptor_json",
    "JsonPresetStore",
    # Errors
    "GradingError",
    "MalformedLUT",
    "UnsupportedLUTSize",
    "LUTLoadCancelled",
    # LUT
    "LUTData",
    "parse_cube_lut",
    "create_identity_lut",
    "sample_lut",
    "apply_lut",
    "LUTCache",
    # Curves
    "evaluate_curve",
    "evaluate_curve_array",
    "build_curve_lut",
    "auto_contrast_curve",
    # Color
    "apply_wheels",
    "apply_basic_parameters",
    "hue_rotation_matrix",
    "AutoCorrectionResult",
    "auto_levels",
    "auto_white_balance",
    "auto_correct",
    # Pipeline
    "PixelTransform",
    "compose_pipeline",
    "apply_pipeline",
    "ColorTransformPipeline",
    # Scopes
    "HistogramResult",
    "WaveformResult",
    "VectorscopeResult",
    "ScopeSample",
    "compute_histogram",
    "compute_waveform",
    "compute_vectorscope",
    "compute_scopes",
    "ScopeAnalyzer",
    # Protocols
    "FileOpener",
    "PresetStore",
    "FrameSource",
]
