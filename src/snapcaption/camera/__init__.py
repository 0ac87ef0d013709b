"""
Camera Module
=============

Camera device access and preview polling.

This module provides the capture layer for SnapCaption:
    - Frame: Typed frame data model (BGR pixel buffer)
    - FrameSource: OpenCV VideoCapture wrapper with open/read/close
    - FramePoller: Fixed-cadence polling thread

Example:
    from snapcaption.camera import FrameSource, FramePoller

    source = FrameSource(device_index=0)
    source.open()
    poller = FramePoller(source, on_frame=print, interval=0.033)
    poller.start()
"""

from snapcaption.camera.frame import Frame
from snapcaption.camera.source import (
    CameraError,
    DeviceUnavailable,
    FrameSource,
    NotOpen,
    ReadError,
)
from snapcaption.camera.poller import FramePoller, FramePollerMetrics


__all__ = [
    "Frame",
    "FrameSource",
    "FramePoller",
    "FramePollerMetrics",
    "CameraError",
    "DeviceUnavailable",
    "NotOpen",
    "ReadError",
]
