"""Operation specifications for grading parameters.

This module defines the OperationSpec dataclass that specifies parameter
ranges, defaults, and composition behavior for every grading control.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class OperationSpec:
    """Specification for a grading parameter.

    Attributes:
        name: Parameter name (e.g., "contrast", "lift")
        min_value: Minimum allowed value
        max_value: Maximum allowed value
        default: Default value when not specified
        neutral: Value that causes no change (identity)
        composition: How two values combine ("additive", "wrapped" or "override")
        description: Human-readable description
    """

    name: str
    min_value: float
    max_value: float
    default: float
    neutral: float
    composition: Literal["additive", "wrapped", "override"]
    description: str = ""

    def validate(self, value: float) -> float:
        """Validate and clamp value to allowed range.

        :param value: Value to validate
        :returns: Clamped value within [min_value, max_value]
        :raises ValueError: If value is not a number
        """
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ValueError(f"{self.name}: expected number, got {type(value).__name__}")

        return max(self.min_value, min(self.max_value, float(value)))

    def is_neutral(self, value: float, tolerance: float = 1e-6) -> bool:
        """Check if value is effectively neutral (no change).

        :param value: Value to check
        :param tolerance: Tolerance for floating point comparison
        :returns: True if value is within tolerance of neutral
        """
        return abs(value - self.neutral) < tolerance

    def combine(self, a: float, b: float) -> float:
        """Combine two values according to composition rule.

        :param a: First value
        :param b: Second value (applied on top of a)
        :returns: Combined value
        """
        if self.composition == "override":
            return a if self.is_neutral(b) else b
        combined = a + b - self.neutral
        if self.composition == "wrapped":
            span = self.max_value - self.min_value
            combined = (combined - self.min_value) % span + self.min_value
        return combined

    def __repr__(self) -> str:
        return (
            f"OperationSpec({self.name}, "
            f"range=[{self.min_value}, {self.max_value}], "
            f"default={self.default}, neutral={self.neutral}, "
            f"{self.composition})"
        )
