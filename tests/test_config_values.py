"""Tests for configuration specs and grading value classes.

Tests the composition semantics:
- OperationSpec: additive, wrapped and override composition with clamping
- ColorWheels / BasicParameters: per-field merge, clamp and neutrality
- CurveSet / GradingDescriptor: normalization, identity rules and hashing
"""

import pytest

from gradekit.config import BASIC_CONFIG, CONFIG, WHEEL_CONFIG
from gradekit.config.operations import OperationSpec
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
from gradekit.lut import create_identity_lut


class TestOperationSpec:
    """Test OperationSpec validation and composition."""

    def test_validate_clamps(self):
        """Values outside the range are clamped."""
        spec = BASIC_CONFIG.contrast
        assert spec.validate(150) == 100.0
        assert spec.validate(-150) == -100.0
        assert spec.validate(42) == 42.0

    def test_validate_rejects_non_numbers(self):
        """Booleans and strings are not accepted as numbers."""
        spec = BASIC_CONFIG.contrast
        with pytest.raises(ValueError):
            spec.validate(True)
        with pytest.raises(ValueError):
            spec.validate("10")

    def test_additive_combine(self):
        """Additive specs sum values."""
        assert BASIC_CONFIG.temperature.combine(20, 15) == 35

    def test_wrapped_combine(self):
        """Hue wraps into [-180, 180)."""
        hue = BASIC_CONFIG.hue
        assert abs(hue.combine(170, 30) - (-160)) < 1e-9
        assert abs(hue.combine(-170, -30) - 160) < 1e-9
        assert abs(hue.combine(30, 45) - 75) < 1e-9

    def test_override_combine(self):
        """Pivot takes the right-hand value unless it is the default."""
        pivot = BASIC_CONFIG.pivot
        assert pivot.combine(0.3, 0.7) == 0.7
        assert pivot.combine(0.3, 0.5) == 0.3

    def test_is_neutral(self):
        """Values within tolerance of neutral count as neutral."""
        spec = OperationSpec("x", -1.0, 1.0, 0.0, 0.0, "additive")
        assert spec.is_neutral(0.0)
        assert spec.is_neutral(1e-9)
        assert not spec.is_neutral(0.1)

    def test_config_hierarchy(self):
        """Specs are reachable through the singleton."""
        assert CONFIG.wheels.gamma is WHEEL_CONFIG.gamma
        assert CONFIG.basic.hue.max_value == 180.0
        assert set(CONFIG.get_all_specs()) == {"wheels", "basic"}
        assert set(WHEEL_CONFIG.get_all_specs()) == {"lift", "gamma", "gain", "offset"}


class TestColorWheels:
    """Test ColorWheels value class."""

    def test_default_is_neutral(self):
        """A default instance is neutral."""
        assert ColorWheels().is_neutral()

    def test_sequences_are_coerced(self):
        """Lists and tuples become RGBValue."""
        wheels = ColorWheels(lift=[0.1, 0.0, -0.1], gain=(0.2, 0.2, 0.2))
        assert isinstance(wheels.lift, RGBValue)
        assert wheels.lift == RGBValue(0.1, 0.0, -0.1)
        assert wheels.gain == RGBValue.uniform(0.2)
        assert not wheels.is_neutral()

    def test_merge_is_additive(self):
        """Merging wheels adds each component."""
        w1 = ColorWheels(lift=RGBValue(0.1, 0.0, 0.0))
        w2 = ColorWheels(lift=RGBValue(-0.05, 0.02, 0.0), gamma=RGBValue(0.3, 0.3, 0.3))
        merged = w1 + w2
        assert abs(merged.lift.r - 0.05) < 1e-12
        assert abs(merged.lift.g - 0.02) < 1e-12
        assert merged.gamma == RGBValue(0.3, 0.3, 0.3)

    def test_clamp(self):
        """Out-of-range values are clamped."""
        wheels = ColorWheels(gain=RGBValue(2.0, -3.0, 0.5)).clamp()
        assert wheels.gain == RGBValue(1.0, -1.0, 0.5)

    def test_as_array(self):
        """as_array has one row per wheel."""
        wheels = ColorWheels(lift=RGBValue(0.1, 0.2, 0.3), offset=RGBValue(-0.1, 0.0, 0.1))
        arr = wheels.as_array()
        assert arr.shape == (4, 3)
        assert arr[0].tolist() == [0.1, 0.2, 0.3]
        assert arr[3].tolist() == [-0.1, 0.0, 0.1]


class TestBasicParameters:
    """Test BasicParameters value class."""

    def test_default_is_neutral(self):
        """A default instance is neutral."""
        assert BasicParameters().is_neutral()

    def test_pivot_alone_is_neutral(self):
        """Pivot only matters when contrast is active."""
        assert BasicParameters(pivot=0.2).is_neutral()
        assert not BasicParameters(pivot=0.2, contrast=10).is_neutral()

    def test_merge(self):
        """Merging wraps hue and keeps the left pivot."""
        p1 = BasicParameters(temperature=20, hue=170, pivot=0.3)
        p2 = BasicParameters(temperature=-5, hue=30)
        merged = p1 + p2
        assert merged.temperature == 15
        assert abs(merged.hue - (-160)) < 1e-9
        assert merged.pivot == 0.3

    def test_sum(self):
        """sum() works via __radd__."""
        total = sum([BasicParameters(contrast=10), BasicParameters(contrast=5)])
        assert total.contrast == 15

    def test_clamp(self):
        """Out-of-range values are clamped."""
        params = BasicParameters(temperature=250, hue=-400, pivot=2.0).clamp()
        assert params.temperature == 100.0
        assert params.hue == -180.0
        assert params.pivot == 1.0


class TestCurveSet:
    """Test CurveSet normalization and identity rules."""

    def test_default_is_neutral(self):
        """A default instance is neutral."""
        assert CurveSet().is_neutral()

    def test_points_are_normalized(self):
        """Point pairs become CurvePoint tuples."""
        curves = CurveSet(master=[(0, 0), (0.5, 0.6), (1, 1)])
        assert curves.master == (CurvePoint(0.0, 0.0), CurvePoint(0.5, 0.6), CurvePoint(1.0, 1.0))

    def test_diagonal_is_active(self):
        """A two-point diagonal is a real curve, not identity."""
        assert not CurveSet(master=[(0, 0), (1, 1)]).is_channel_identity("master")
        assert not CurveSet(red=[(1, 1), (0, 0)]).is_channel_identity("red")
        assert not CurveSet(master=[(0, 0), (1, 1)]).is_neutral()

    def test_single_point_is_identity(self):
        """A single point is identity."""
        assert CurveSet(green=[(0.5, 0.9)]).is_channel_identity("green")

    def test_secondary_identity_at_half(self):
        """Secondary curves are neutral when every output is 0.5."""
        assert CurveSet(hue_vs_sat=[(0, 0.5), (1, 0.5)]).is_neutral()
        assert not CurveSet(hue_vs_sat=[(0, 0.5), (0.5, 0.8), (1, 0.5)]).is_neutral()

    def test_invalid_master_mode(self):
        """Unknown master modes are rejected."""
        with pytest.raises(ValueError, match="master_mode"):
            CurveSet(master_mode="hsv")

    def test_editable_point_id_is_dropped(self):
        """Editor ids never reach the curve data."""
        points = as_curve_points(
            [EditablePoint(CurvePoint(0.0, 0.1), id="a"), {"x": 1.0, "y": 0.9, "id": "b"}]
        )
        assert points == (CurvePoint(0.0, 0.1), CurvePoint(1.0, 0.9))

    def test_input_order_is_kept(self):
        """Normalization does not sort points."""
        curves = CurveSet(blue=[(1, 1), (0, 0)])
        assert curves.blue[0] == CurvePoint(1.0, 1.0)


class TestGradingDescriptor:
    """Test GradingDescriptor aggregate."""

    def test_default_is_neutral(self):
        """A default instance is neutral."""
        assert GradingDescriptor().is_neutral()

    def test_hash_and_equality(self):
        """Equal descriptors hash equal, so they can key caches."""
        d1 = GradingDescriptor(basic=BasicParameters(contrast=10), curves=CurveSet(master=[(0, 0.1), (1, 1)]))
        d2 = GradingDescriptor(basic=BasicParameters(contrast=10), curves=CurveSet(master=[(0, 0.1), (1, 1)]))
        assert d1 == d2
        assert hash(d1) == hash(d2)
        assert d1 != GradingDescriptor(basic=BasicParameters(contrast=11))

    def test_hash_with_lut(self):
        """Descriptors with equal LUT content hash equal."""
        lut_a = create_identity_lut(3)
        lut_b = create_identity_lut(3)
        d1 = GradingDescriptor(lut=LUTSettings(lut_a, intensity=0.5))
        d2 = GradingDescriptor(lut=LUTSettings(lut_b, intensity=0.5))
        assert d1 == d2
        assert hash(d1) == hash(d2)

    def test_inactive_lut_is_neutral(self):
        """Disabled or zero-intensity LUTs are neutral."""
        lut = create_identity_lut(2)
        assert GradingDescriptor(lut=LUTSettings(lut, enabled=False)).is_neutral()
        assert GradingDescriptor(lut=LUTSettings(lut, intensity=0.0)).is_neutral()
        assert not GradingDescriptor(lut=LUTSettings(lut)).is_neutral()

    def test_lut_intensity_clamped(self):
        """LUT intensity is clamped to [0, 1]."""
        lut = create_identity_lut(2)
        assert LUTSettings(lut, intensity=1.5).intensity == 1.0
        assert LUTSettings(lut, intensity=-0.5).intensity == 0.0

    def test_clamp(self):
        """Out-of-range values are clamped."""
        descriptor = GradingDescriptor(
            wheels=ColorWheels(lift=RGBValue(5.0, 0.0, 0.0)),
            basic=BasicParameters(saturation=-300),
        ).clamp()
        assert descriptor.wheels.lift.r == 1.0
        assert descriptor.basic.saturation == -100.0


class TestScopeConfig:
    """Test ScopeConfig validation."""

    def test_defaults(self):
        """Defaults are 30 Hz with only the histogram on."""
        config = ScopeConfig()
        assert config.refresh_rate == 30
        assert config.enabled_scopes == ("histogram",)
        assert abs(config.interval - 1 / 30) < 1e-12

    def test_enabled_scopes_follow_toggles(self):
        """enabled_scopes reflects the toggles."""
        config = ScopeConfig()
        config.vectorscope_enabled = True
        config.histogram_enabled = False
        assert config.enabled_scopes == ("vectorscope",)

    @pytest.mark.parametrize("rate", [15, 30, 60])
    def test_valid_rates(self, rate):
        """Supported refresh rates are accepted."""
        assert ScopeConfig(refresh_rate=rate).refresh_rate == rate

    @pytest.mark.parametrize("rate", [0, 24, 120])
    def test_invalid_rates(self, rate):
        """Other refresh rates are rejected."""
        with pytest.raises(ValueError, match="refresh_rate"):
            ScopeConfig(refresh_rate=rate)

    def test_invalid_step(self):
        """sample_step must be positive."""
        with pytest.raises(ValueError, match="sample_step"):
            ScopeConfig(sample_step=0)

    def test_invalid_waveform_mode(self):
        """Unknown waveform modes are rejected."""
        with pytest.raises(ValueError, match="waveform_mode"):
            ScopeConfig(waveform_mode="hsv")
