"""Scope computation functions."""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray

from gradekit.config.values import ScopeConfig
from gradekit.constants import (
    DEFAULT_VECTORSCOPE_SIZE,
    DEFAULT_WAVEFORM_ROWS,
    HISTOGRAM_BINS,
    VALID_WAVEFORM_MODES,
)
from gradekit.scopes.kernels import (
    histogram_rgbl_numba,
    vectorscope_numba,
    waveform_luma_numba,
    waveform_rgb_numba,
)
from gradekit.scopes.result import HistogramResult, ScopeSample, VectorscopeResult, WaveformResult
from gradekit.shared.frames import as_frame_image

logger = logging.getLogger(__name__)


def _check_step(step: int) -> None:
    if step < 1:
        raise ValueError(f"step must be >= 1, got {step}")


def compute_histogram(frame: NDArray, step: int = 1) -> HistogramResult:
    """Compute R, G, B and luminance histograms in 8-bit buckets.

    Each value lands in bucket ``round(v * 255)``; luminance is BT.709.

    :param frame: RGB frame [H, W, 3] or [N, 3] in [0, 1]
    :param step: Analyze every ``step``-th row and column
    :return: HistogramResult with 256 counts per channel
    """
    _check_step(step)
    image = as_frame_image(frame)

    # Handle empty data
    if image.size == 0:
        return HistogramResult.empty()

    counts_r = np.zeros(HISTOGRAM_BINS, dtype=np.int64)
    counts_g = np.zeros(HISTOGRAM_BINS, dtype=np.int64)
    counts_b = np.zeros(HISTOGRAM_BINS, dtype=np.int64)
    counts_l = np.zeros(HISTOGRAM_BINS, dtype=np.int64)

    n_samples = histogram_rgbl_numba(image, step, HISTOGRAM_BINS, counts_r, counts_g, counts_b, counts_l)

    return HistogramResult(r=counts_r, g=counts_g, b=counts_b, luminance=counts_l, n_samples=int(n_samples))


def compute_waveform(
    frame: NDArray,
    rows: int = DEFAULT_WAVEFORM_ROWS,
    mode: str = "luma",
    step: int = 1,
) -> WaveformResult:
    """Compute a waveform: for each column, the distribution of values.

    :param frame: RGB frame [H, W, 3] or [N, 3] in [0, 1]
    :param rows: Vertical resolution (value buckets); row 0 is black
    :param mode: "luma" for BT.709 luminance, "rgb" for a per-channel parade
    :param step: Analyze every ``step``-th row and column
    :return: WaveformResult with data [rows, W'] or [3, rows, W']
    """
    _check_step(step)
    if mode not in VALID_WAVEFORM_MODES:
        raise ValueError(f"mode='{mode}' is invalid. Use one of: {sorted(VALID_WAVEFORM_MODES)}")
    if rows < 2:
        raise ValueError(f"rows must be >= 2, got {rows}")

    image = as_frame_image(frame)
    n_cols = -(-image.shape[1] // step)

    if mode == "luma":
        data = np.zeros((rows, n_cols), dtype=np.int64)
        if image.size:
            waveform_luma_numba(image, step, data)
    else:
        data = np.zeros((3, rows, n_cols), dtype=np.int64)
        if image.size:
            waveform_rgb_numba(image, step, data)

    return WaveformResult(data=data, mode=mode)


def compute_vectorscope(frame: NDArray, size: int = DEFAULT_VECTORSCOPE_SIZE, step: int = 1) -> VectorscopeResult:
    """Compute a BT.709 Cb/Cr vectorscope.

    :param frame: RGB frame [H, W, 3] or [N, 3] in [0, 1]
    :param size: Output resolution (square)
    :param step: Analyze every ``step``-th row and column
    :return: VectorscopeResult with data [size, size]; the centre is neutral
    """
    _check_step(step)
    if size < 2:
        raise ValueError(f"size must be >= 2, got {size}")

    image = as_frame_image(frame)
    data = np.zeros((size, size), dtype=np.int64)
    if image.size:
        vectorscope_numba(image, step, data)
    return VectorscopeResult(data=data)


def compute_scopes(frame: NDArray, config: ScopeConfig | None = None, sequence: int = 0) -> ScopeSample:
    """Compute every scope enabled in the config.

    :param frame: RGB frame [H, W, 3] or [N, 3] in [0, 1]
    :param config: Scope configuration (default: histogram only)
    :param sequence: Tick number stored on the sample
    :return: ScopeSample with the enabled results
    """
    if config is None:
        config = ScopeConfig()

    image = as_frame_image(frame)
    sample = ScopeSample(sequence=sequence)

    if config.histogram_enabled:
        sample.histogram = compute_histogram(image, step=config.sample_step)
    if config.waveform_enabled:
        sample.waveform = compute_waveform(
            image, rows=config.waveform_rows, mode=config.waveform_mode, step=config.sample_step
        )
    if config.vectorscope_enabled:
        sample.vectorscope = compute_vectorscope(image, size=config.vectorscope_size, step=config.sample_step)

    logger.debug("[Scopes] Sample %d: %s", sequence, ", ".join(config.enabled_scopes) or "none")
    return sample
