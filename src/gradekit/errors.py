"""Error types raised by the grading engine."""

from __future__ import annotations


class GradingError(Exception):
    """Base class for all gradekit errors."""


class MalformedLUT(GradingError, ValueError):
    """Structural or count mismatch while parsing a 3D LUT.

    :param message: Human-readable reason
    :param expected: Expected number of float values (``size**3 * 3``), if known
    :param actual: Number of float values found, if known
    :param line: 1-based line number of the offending line, if known
    """

    def __init__(
        self,
        message: str,
        expected: int | None = None,
        actual: int | None = None,
        line: int | None = None,
    ):
        self.expected = expected
        self.actual = actual
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class UnsupportedLUTSize(GradingError, ValueError):
    """LUT edge length outside the supported range."""

    def __init__(self, size: int, min_size: int, max_size: int):
        self.size = size
        super().__init__(
            f"LUT_3D_SIZE={size} is outside supported range [{min_size}, {max_size}]"
        )


class LUTLoadCancelled(GradingError):
    """An in-flight LUT parse was discarded because its request was cancelled."""
