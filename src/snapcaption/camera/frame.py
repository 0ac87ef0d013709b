"""
Frame Data Model
================

Internal frame representation for the capture pipeline.

This module defines the typed Frame class passed between the frame
source, the preview poller and the caption pipeline.

Design Rules:
    - Pixels are stored exactly as the camera returned them (BGR)
    - Frames handed to background work are always clones
    - Does NOT encode or colour-convert image data
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class Frame:
    """
    One decoded video frame.

    Frozen so fields can't be reassigned; use clone() before handing a
    frame to another thread so the pixel buffer is not shared.

    Attributes:
        frame_id: Monotonically increasing counter per frame source
        timestamp: UNIX timestamp when the frame was read
        pixels: Decoded pixel buffer, shape (H, W, 3), dtype uint8, BGR
    """

    frame_id: int
    timestamp: float
    pixels: np.ndarray

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2]) if self.pixels.ndim == 3 else 1

    @property
    def pixel_format(self) -> str:
        return "BGR" if self.channels == 3 else "GRAY"

    def clone(self) -> "Frame":
        """Return a copy that owns its own pixel buffer."""
        return Frame(
            frame_id=self.frame_id,
            timestamp=self.timestamp,
            pixels=self.pixels.copy(),
        )

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the pixel buffer."""
        return (
            f"Frame(frame_id={self.frame_id}, "
            f"timestamp={self.timestamp:.3f}, "
            f"size={self.width}x{self.height}, "
            f"format={self.pixel_format})"
        )
