"""Shared utilities for gradekit."""

from gradekit.shared.frames import as_frame_image, as_pixel_array

__all__ = ["as_pixel_array", "as_frame_image"]
