"""Frame buffer helpers shared by the pipeline, LUT and scope code."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


def as_pixel_array(frame: NDArray) -> tuple[NDArray[np.float32], tuple[int, ...]]:
    """Flatten a frame to contiguous float32 pixels.

    ``uint8`` frames are normalized by 1/255. The input is never written to;
    the returned array may be a view of it.

    :param frame: RGB frame [H, W, 3] or pixels [N, 3]
    :returns: Tuple of (pixels [N, 3] float32, original shape)
    :raises ValueError: If the last axis is not 3 channels
    """
    frame = np.asarray(frame)
    if frame.ndim not in (2, 3) or frame.shape[-1] != 3:
        raise ValueError(f"Expected RGB frame [H, W, 3] or [N, 3], got shape {frame.shape}")

    if frame.dtype == np.uint8:
        pixels = frame.astype(np.float32) / np.float32(255.0)
    elif frame.dtype != np.float32:
        pixels = frame.astype(np.float32)
    else:
        pixels = frame

    pixels = np.ascontiguousarray(pixels).reshape(-1, 3)
    return pixels, frame.shape


def as_frame_image(frame: NDArray) -> NDArray[np.float32]:
    """Get a frame as a contiguous float32 [H, W, 3] image.

    Pixel lists [N, 3] are treated as a single row.

    :param frame: RGB frame [H, W, 3] or pixels [N, 3]
    :returns: Image [H, W, 3]
    """
    pixels, shape = as_pixel_array(frame)
    if len(shape) == 2:
        return pixels.reshape(1, shape[0], 3)
    return pixels.reshape(shape)
