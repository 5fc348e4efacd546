"""
Protocol definitions for capabilities the host application provides.

The engine performs no I/O of its own. File reading, preset storage and
frame delivery are injected through these interfaces.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    import numpy as np

    from gradekit.config.values import GradingDescriptor


@runtime_checkable
class FileOpener(Protocol):
    """Protocol for reading LUT files on behalf of the engine."""

    def read_text(self, path: str | Path) -> str:
        """
        Read a text file.

        :param path: File path as chosen by the user
        :returns: File content
        :raises OSError: If the file cannot be read
        """
        ...


@runtime_checkable
class PresetStore(Protocol):
    """Protocol for named grading preset storage."""

    def load(self, name: str) -> GradingDescriptor:
        """Load a preset by name (raises KeyError if unknown)."""
        ...

    def save(self, name: str, descriptor: GradingDescriptor) -> object:
        """Store a preset under a name."""
        ...

    def list(self) -> list[str]:
        """List stored preset names."""
        ...


@runtime_checkable
class FrameSource(Protocol):
    """Protocol for the current-frame provider polled by the scope analyzer."""

    def current_frame(self) -> np.ndarray | None:
        """
        Get the frame currently on display.

        :returns: RGB frame [H, W, 3], or None if nothing is available
        """
        ...
