"""Scope result dataclasses with analysis methods."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

import numpy as np

from gradekit.constants import HISTOGRAM_BINS

HISTOGRAM_CHANNELS = ("r", "g", "b", "luminance")


@dataclass
class HistogramResult:
    """8-bit bucket histograms of one frame.

    Attributes:
        r: Red counts [256]
        g: Green counts [256]
        b: Blue counts [256]
        luminance: BT.709 luminance counts [256]
        n_samples: Number of pixels sampled

    Example:
        >>> result = compute_histogram(frame)
        >>> print(f"Median luma: {result.percentile(50)}")
        >>> print(f"Clipped highlights: {result.clipped_fraction()[1]:.1%}")
    """

    r: np.ndarray
    g: np.ndarray
    b: np.ndarray
    luminance: np.ndarray
    n_samples: int

    @classmethod
    def empty(cls, n_bins: int = HISTOGRAM_BINS) -> HistogramResult:
        """Create a result with all-zero counts."""
        return cls(
            r=np.zeros(n_bins, dtype=np.int64),
            g=np.zeros(n_bins, dtype=np.int64),
            b=np.zeros(n_bins, dtype=np.int64),
            luminance=np.zeros(n_bins, dtype=np.int64),
            n_samples=0,
        )

    @property
    def counts(self) -> np.ndarray:
        """All channels stacked as [4, n_bins] in (r, g, b, luminance) order."""
        return np.stack([self.r, self.g, self.b, self.luminance])

    @property
    def n_bins(self) -> int:
        return len(self.r)

    @property
    def bin_centers(self) -> np.ndarray:
        """Value each bucket represents, shape [n_bins]."""
        return np.linspace(0.0, 1.0, self.n_bins)

    def channel(self, name: str) -> np.ndarray:
        """Get counts by channel name ("r", "g", "b" or "luminance").

        :raises ValueError: If the name is unknown
        """
        if name not in HISTOGRAM_CHANNELS:
            raise ValueError(f"Unknown channel '{name}'. Available: {', '.join(HISTOGRAM_CHANNELS)}")
        return getattr(self, name)

    def percentile(self, p: float, channel: str = "luminance") -> float:
        """Compute percentile from histogram.

        :param p: Percentile value (0-100)
        :param channel: Channel name
        :return: Value at percentile
        """
        counts = self.channel(channel)
        cumsum = np.cumsum(counts)
        total = cumsum[-1]
        if total == 0:
            return float(self.bin_centers[0])

        target = total * (p / 100.0)
        idx = np.searchsorted(cumsum, target)
        idx = min(idx, self.n_bins - 1)
        return float(self.bin_centers[idx])

    def mean(self, channel: str = "luminance") -> float:
        """Mean bucket value of a channel."""
        counts = self.channel(channel)
        total = counts.sum()
        if total == 0:
            return 0.0
        return float(np.dot(counts, self.bin_centers) / total)

    def clipped_fraction(self, channel: str = "luminance") -> tuple[float, float]:
        """Fraction of samples in the lowest and highest bucket.

        :param channel: Channel name
        :return: (shadows clipped, highlights clipped)
        """
        if self.n_samples == 0:
            return 0.0, 0.0
        counts = self.channel(channel)
        return float(counts[0] / self.n_samples), float(counts[-1] / self.n_samples)


@dataclass
class WaveformResult:
    """Per-column value distribution.

    Attributes:
        data: Counts [rows, columns] in luma mode, [3, rows, columns] in rgb mode.
            Row 0 is black.
        mode: "luma" or "rgb"
    """

    data: np.ndarray
    mode: str

    @property
    def rows(self) -> int:
        return self.data.shape[-2]

    @property
    def columns(self) -> int:
        return self.data.shape[-1]

    def normalized(self) -> np.ndarray:
        """Counts scaled to [0, 1] by the peak cell, as float32 for display."""
        peak = self.data.max() if self.data.size else 0
        if peak == 0:
            return np.zeros(self.data.shape, dtype=np.float32)
        return (self.data / peak).astype(np.float32)


@dataclass
class VectorscopeResult:
    """Cb/Cr scatter counts.

    Attributes:
        data: Counts [size, size]; x is Cb (left = -0.5), y is Cr (row 0 = +0.5)
    """

    data: np.ndarray

    @property
    def size(self) -> int:
        return self.data.shape[0]

    def normalized(self) -> np.ndarray:
        """Counts scaled to [0, 1] by the peak cell, as float32 for display."""
        peak = self.data.max() if self.data.size else 0
        if peak == 0:
            return np.zeros(self.data.shape, dtype=np.float32)
        return (self.data / peak).astype(np.float32)

    def centroid(self) -> tuple[float, float]:
        """Count-weighted mean chroma (cb, cr); (0, 0) means no cast.

        :return: Tuple of (cb, cr) in [-0.5, 0.5]
        """
        total = self.data.sum()
        if total == 0:
            return 0.0, 0.0
        axis = np.linspace(-0.5, 0.5, self.size)
        cb = float(np.dot(self.data.sum(axis=0), axis) / total)
        cr = float(np.dot(self.data.sum(axis=1), axis[::-1]) / total)
        return cb, cr


@dataclass
class ScopeSample:
    """Scope datasets computed from one frame.

    Only the scopes enabled in the ScopeConfig are filled in.
    """

    sequence: int
    histogram: HistogramResult | None = None
    waveform: WaveformResult | None = None
    vectorscope: VectorscopeResult | None = None
    timestamp: float = field(default_factory=time.monotonic)
