"""Tests for pipeline composition, application and transform caching."""

import numpy as np
import pytest

from gradekit.color import apply_basic_parameters, apply_wheels
from gradekit.config.values import (
    BasicParameters,
    ColorWheels,
    CurvePoint,
    CurveSet,
    GradingDescriptor,
    LUTSettings,
    RGBValue,
)
from gradekit.curves import evaluate_curve
from gradekit.lut import create_identity_lut, parse_cube_lut
from gradekit.pipeline import IDENTITY_TRANSFORM, ColorTransformPipeline, apply_pipeline, compose_pipeline

S_CURVE = (CurvePoint(0.0, 0.0), CurvePoint(0.25, 0.18), CurvePoint(0.75, 0.82), CurvePoint(1.0, 1.0))


def invert_cube_text(size=2):
    lines = [f"LUT_3D_SIZE {size}"]
    grid = np.linspace(0.0, 1.0, size)
    for b in grid:
        for g in grid:
            for r in grid:
                lines.append(f"{1 - r:.6f} {1 - g:.6f} {1 - b:.6f}")
    return "\n".join(lines) + "\n"


def as_f32(v):
    """Value a float32 frame actually carries."""
    return float(np.float32(v))


@pytest.fixture
def frame():
    """Random float32 frame [16, 24, 3] in [0.1, 0.9]."""
    rng = np.random.default_rng(42)
    return rng.uniform(0.1, 0.9, (16, 24, 3)).astype(np.float32)


@pytest.fixture
def invert_lut():
    return parse_cube_lut(invert_cube_text())


class TestIdentity:
    """Test the neutral descriptor and identity fast path."""

    def test_neutral_is_identity(self):
        """A neutral descriptor composes to the identity transform."""
        transform = compose_pipeline(GradingDescriptor())
        assert transform.is_identity
        assert IDENTITY_TRANSFORM.is_identity

    def test_identity_returns_new_array(self, frame):
        """The identity fast path never returns the input buffer."""
        out = apply_pipeline(IDENTITY_TRANSFORM, frame)
        assert out is not frame
        assert not np.shares_memory(out, frame)
        np.testing.assert_array_equal(out, frame)

    def test_identity_clamps(self):
        """The identity fast path still clamps to [0, 1]."""
        pixels = np.array([[-0.5, 0.5, 1.5]], dtype=np.float32)
        out = apply_pipeline(IDENTITY_TRANSFORM, pixels)
        np.testing.assert_array_equal(out, [[0.0, 0.5, 1.0]])

    def test_input_not_mutated(self, frame):
        """Applying a transform leaves the input frame unchanged."""
        original = frame.copy()
        transform = compose_pipeline(GradingDescriptor(basic=BasicParameters(contrast=40, saturation=30)))
        transform.apply(frame)
        np.testing.assert_array_equal(frame, original)

    def test_uint8_input_normalized(self):
        """uint8 frames are normalized to float32 in [0, 1]."""
        frame = np.full((2, 2, 3), 255, dtype=np.uint8)
        out = apply_pipeline(IDENTITY_TRANSFORM, frame)
        assert out.dtype == np.float32
        np.testing.assert_allclose(out, 1.0)

    def test_diagonal_curve_is_evaluated(self):
        """A two-point diagonal eases in and out like the scalar evaluator."""
        diagonal = [(0.0, 0.0), (1.0, 1.0)]
        transform = compose_pipeline(GradingDescriptor(curves=CurveSet(master=diagonal)))
        assert not transform.is_identity
        for v in (0.1, 0.25, 0.5, 0.8):
            expected = evaluate_curve(diagonal, as_f32(v))
            assert transform(RGBValue(v, v, v)).r == pytest.approx(expected, abs=1e-6)
        assert transform(RGBValue(0.25, 0.25, 0.25)).r != pytest.approx(0.25, abs=1e-3)

    def test_neutral_secondaries_are_identity(self):
        """A flat 0.5 secondary curve is identity."""
        curves = CurveSet(hue_vs_sat=[(0.0, 0.5), (1.0, 0.5)])
        assert compose_pipeline(GradingDescriptor(curves=curves)).is_identity

    def test_shape_preserved(self, frame):
        """Output has the shape of the input frame."""
        transform = compose_pipeline(GradingDescriptor(basic=BasicParameters(temperature=30)))
        assert transform.apply(frame).shape == frame.shape
        assert transform.apply(frame.reshape(-1, 3)).shape == (16 * 24, 3)

    def test_invalid_frame_shape(self):
        """Frames without three channels are rejected."""
        with pytest.raises(ValueError, match="RGB"):
            apply_pipeline(IDENTITY_TRANSFORM, np.zeros((4, 4, 4), dtype=np.float32))


class TestComposition:
    """Test that the fused kernel matches the individual stages."""

    def test_matches_wheels_then_basic(self, frame):
        """The fused kernel matches the wheel and basic stages run separately."""
        wheels = ColorWheels(
            lift=RGBValue(0.02, 0.0, -0.03),
            gamma=RGBValue(0.1, -0.2, 0.0),
            gain=RGBValue(0.1, 0.05, -0.1),
            offset=RGBValue(0.0, 0.01, 0.02),
        )
        basic = BasicParameters(temperature=25, tint=-10, contrast=20, pivot=0.4, saturation=-30, hue=15, luminance=5)
        transform = compose_pipeline(GradingDescriptor(wheels=wheels, basic=basic))

        pixels = frame.reshape(-1, 3).astype(np.float64)
        stepped = apply_wheels(pixels, wheels.lift, wheels.gamma, wheels.gain, wheels.offset)
        expected = np.clip(apply_basic_parameters(stepped, basic), 0.0, 1.0)

        np.testing.assert_allclose(transform.apply(frame).reshape(-1, 3), expected, atol=1e-5)

    def test_wheels_run_before_basic(self):
        """Wheels are applied before basic parameters."""
        descriptor = GradingDescriptor(
            wheels=ColorWheels(gain=RGBValue.uniform(1.0)),
            basic=BasicParameters(luminance=20),
        )
        out = compose_pipeline(descriptor)(RGBValue(0.4, 0.4, 0.4))
        assert out.to_tuple() == pytest.approx((0.9, 0.9, 0.9), abs=1e-6)

    def test_single_pixel_call(self):
        """Calling a transform on one pixel returns an RGBValue."""
        transform = compose_pipeline(GradingDescriptor(basic=BasicParameters(temperature=100)))
        out = transform((0.5, 0.5, 0.5))
        assert isinstance(out, RGBValue)
        assert out.to_tuple() == pytest.approx((0.6, 0.5, 0.4), abs=1e-6)

    def test_output_clamped(self, frame):
        """Graded output stays in [0, 1]."""
        transform = compose_pipeline(GradingDescriptor(basic=BasicParameters(contrast=100, luminance=60)))
        out = transform.apply(frame)
        assert out.min() >= 0.0
        assert out.max() <= 1.0

    def test_master_curve_matches_evaluator(self):
        """The master curve gives the scalar evaluator's value on every channel."""
        transform = compose_pipeline(GradingDescriptor(curves=CurveSet(master=S_CURVE)))
        assert not transform.is_identity
        for v in (0.1, 0.3, 0.5, 0.62, 0.9):
            out = transform(RGBValue(v, v, v))
            expected = evaluate_curve(S_CURVE, as_f32(v))
            assert out.to_tuple() == pytest.approx((expected,) * 3, abs=1e-6)

    def test_red_curve_only_touches_red(self):
        """A red curve leaves green and blue untouched."""
        transform = compose_pipeline(GradingDescriptor(curves=CurveSet(red=S_CURVE)))
        out = transform(RGBValue(0.3, 0.3, 0.3))
        assert out.r == pytest.approx(evaluate_curve(S_CURVE, as_f32(0.3)), abs=1e-6)
        assert out.g == pytest.approx(0.3, abs=1e-6)
        assert out.b == pytest.approx(0.3, abs=1e-6)

    def test_steep_segment_matches_evaluator(self):
        """A near-vertical segment is evaluated exactly, not sampled."""
        steep = [(0.0, 0.0), (0.5, 0.0), (0.502, 1.0), (1.0, 1.0)]
        transform = compose_pipeline(GradingDescriptor(curves=CurveSet(red=steep)))
        for v in np.linspace(0.49, 0.53, 41):
            out = transform(RGBValue(float(v), 0.5, 0.5))
            assert out.r == pytest.approx(evaluate_curve(steep, as_f32(v)), abs=1e-6)

    def test_narrow_segment_is_not_lost(self):
        """A segment narrower than any sampling grid step still shapes the output."""
        step = [(0.0, 0.0), (0.3, 0.0), (0.3001, 1.0), (1.0, 1.0)]
        transform = compose_pipeline(GradingDescriptor(curves=CurveSet(red=step)))
        x = 0.30005
        out = transform(RGBValue(x, 0.5, 0.5))
        expected = evaluate_curve(step, as_f32(x))
        assert 0.0 < expected < 1.0
        assert out.r == pytest.approx(expected, abs=1e-6)

    def test_master_luma_mode_adds_delta(self):
        """Luma mode shifts every channel by the curve's change in luma."""
        pixel = RGBValue(0.6, 0.3, 0.2)
        r, g, b = (as_f32(c) for c in pixel)
        luma = r * 0.2126 + g * 0.7152 + b * 0.0722
        delta = evaluate_curve(S_CURVE, luma) - luma

        transform = compose_pipeline(GradingDescriptor(curves=CurveSet(master=S_CURVE, master_mode="luma")))
        out = transform(pixel)
        assert out.to_tuple() == pytest.approx((r + delta, g + delta, b + delta), abs=1e-6)

    def test_luma_vs_sat_zero_is_grayscale(self, frame):
        """A zero luma-vs-sat curve removes all saturation."""
        curves = CurveSet(luma_vs_sat=[(0.0, 0.0), (1.0, 0.0)])
        out = compose_pipeline(GradingDescriptor(curves=curves)).apply(frame)
        np.testing.assert_allclose(out[..., 0], out[..., 1], atol=1e-6)
        np.testing.assert_allclose(out[..., 1], out[..., 2], atol=1e-6)

    def test_hue_vs_sat_keeps_gray(self):
        """Hue-vs-sat leaves achromatic pixels alone."""
        curves = CurveSet(hue_vs_sat=[(0.0, 1.0), (1.0, 1.0)])
        out = compose_pipeline(GradingDescriptor(curves=curves))(RGBValue(0.4, 0.4, 0.4))
        assert out.to_tuple() == pytest.approx((0.4, 0.4, 0.4), abs=1e-6)


class TestPipelineLUT:
    """Test the 3D LUT stage."""

    def test_identity_lut_is_passthrough(self, frame):
        """An identity LUT leaves pixels unchanged."""
        settings = LUTSettings(create_identity_lut(size=17))
        transform = compose_pipeline(GradingDescriptor(lut=settings))
        assert not transform.is_identity
        np.testing.assert_allclose(transform.apply(frame), frame, atol=1e-5)

    def test_invert_lut(self, invert_lut):
        """An inverting LUT maps each channel to one minus itself."""
        transform = compose_pipeline(GradingDescriptor(lut=LUTSettings(invert_lut)))
        assert transform(RGBValue(0.2, 0.5, 0.9)).to_tuple() == pytest.approx((0.8, 0.5, 0.1), abs=1e-5)

    def test_half_intensity(self, invert_lut):
        """Intensity blends the LUT output with its input."""
        transform = compose_pipeline(GradingDescriptor(lut=LUTSettings(invert_lut, intensity=0.5)))
        assert transform(RGBValue(0.2, 0.0, 1.0)).to_tuple() == pytest.approx((0.5, 0.5, 0.5), abs=1e-5)

    def test_zero_intensity_is_identity(self, invert_lut):
        """A LUT at zero intensity is skipped."""
        transform = compose_pipeline(GradingDescriptor(lut=LUTSettings(invert_lut, intensity=0.0)))
        assert transform.is_identity

    def test_disabled_is_identity(self, invert_lut):
        """A disabled LUT is skipped."""
        transform = compose_pipeline(GradingDescriptor(lut=LUTSettings(invert_lut, enabled=False)))
        assert transform.is_identity

    def test_lut_runs_after_basic(self, invert_lut):
        """The LUT sees the output of the basic stage."""
        descriptor = GradingDescriptor(basic=BasicParameters(luminance=20), lut=LUTSettings(invert_lut))
        out = compose_pipeline(descriptor)(RGBValue(0.2, 0.2, 0.2))
        assert out.r == pytest.approx(0.7, abs=1e-5)


class TestComposeErrors:
    """Test rejection of invalid descriptors."""

    def test_not_a_descriptor(self):
        """Only GradingDescriptor instances compose."""
        with pytest.raises(TypeError, match="GradingDescriptor"):
            compose_pipeline({"basic": {"contrast": 10}})

    def test_non_finite_value(self):
        """NaN basic parameters are rejected."""
        with pytest.raises(ValueError, match="non-finite"):
            compose_pipeline(GradingDescriptor(basic=BasicParameters(contrast=float("nan"))))

    def test_non_finite_wheel(self):
        """Infinite wheel values are rejected."""
        with pytest.raises(ValueError):
            compose_pipeline(GradingDescriptor(wheels=ColorWheels(gain=RGBValue(float("inf"), 0.0, 0.0))))


class TestColorTransformPipeline:
    """Test the stateful pipeline and its transform cache."""

    def test_starts_neutral(self, frame):
        """A new pipeline is neutral."""
        pipeline = ColorTransformPipeline()
        assert pipeline.transform.is_identity
        assert pipeline.descriptor == GradingDescriptor()
        np.testing.assert_array_equal(pipeline.process(frame), frame)

    def test_update_and_process(self, frame):
        """process applies the current descriptor."""
        descriptor = GradingDescriptor(basic=BasicParameters(saturation=-100))
        pipeline = ColorTransformPipeline()
        pipeline.update(descriptor)
        out = pipeline.process(frame)
        np.testing.assert_allclose(out[..., 0], out[..., 1], atol=1e-6)

    def test_cache_hits_and_misses(self):
        """Revisiting a descriptor reuses its compiled transform."""
        a = GradingDescriptor(basic=BasicParameters(contrast=10))
        b = GradingDescriptor(basic=BasicParameters(contrast=20))
        pipeline = ColorTransformPipeline()

        first = pipeline.update(a)
        pipeline.update(b)
        again = pipeline.update(a)

        assert again is first
        info = pipeline.cache_info()
        assert info["misses"] == 2
        assert info["hits"] == 1
        assert info["size"] == 2

    def test_same_descriptor_skips_lookup(self):
        """Updating to an equal descriptor does not touch the cache."""
        descriptor = GradingDescriptor(basic=BasicParameters(tint=5))
        pipeline = ColorTransformPipeline(descriptor)
        pipeline.update(GradingDescriptor(basic=BasicParameters(tint=5)))
        assert pipeline.cache_info()["misses"] == 1
        assert pipeline.cache_info()["hits"] == 0

    def test_lru_eviction(self):
        """The least recently used transform is evicted first."""
        pipeline = ColorTransformPipeline(cache_size=2)
        descriptors = [GradingDescriptor(basic=BasicParameters(hue=h)) for h in (10, 20, 30)]
        for d in descriptors:
            pipeline.get_transform(d)
        assert pipeline.cache_info()["size"] == 2

        pipeline.get_transform(descriptors[0])
        assert pipeline.cache_info()["misses"] == 4

        pipeline.get_transform(descriptors[2])
        assert pipeline.cache_info()["hits"] == 1

    def test_failed_update_keeps_last_good(self):
        """A rejected update keeps the previous transform."""
        good = GradingDescriptor(basic=BasicParameters(contrast=25))
        pipeline = ColorTransformPipeline(good)
        kept = pipeline.transform

        with pytest.raises(ValueError):
            pipeline.update(GradingDescriptor(basic=BasicParameters(hue=float("nan"))))
        with pytest.raises(TypeError):
            pipeline.update("not a descriptor")

        assert pipeline.transform is kept
        assert pipeline.descriptor == good

    def test_equal_luts_share_cache_entry(self):
        """LUTs with equal content share one cache entry."""
        text = invert_cube_text(size=3)
        pipeline = ColorTransformPipeline()
        pipeline.get_transform(GradingDescriptor(lut=LUTSettings(parse_cube_lut(text), intensity=0.8)))
        pipeline.get_transform(GradingDescriptor(lut=LUTSettings(parse_cube_lut(text), intensity=0.8)))
        assert pipeline.cache_info()["hits"] == 1

    def test_clear_cache_keeps_current(self):
        """Clearing the cache keeps the current descriptor."""
        descriptor = GradingDescriptor(basic=BasicParameters(luminance=10))
        pipeline = ColorTransformPipeline(descriptor)
        pipeline.clear_cache()
        assert pipeline.cache_info() == {"hits": 0, "misses": 0, "size": 0, "max_size": 32}
        assert pipeline.descriptor == descriptor

    def test_invalid_cache_size(self):
        """cache_size must be positive."""
        with pytest.raises(ValueError, match="cache_size"):
            ColorTransformPipeline(cache_size=0)
