"""
Frame Source
============

Camera device wrapper built on OpenCV's VideoCapture.

This module:
    - Owns the device open/close lifecycle
    - Produces the most recently read frame on demand
    - Serializes device access so close() never races a read

Polling cadence is NOT decided here; the FramePoller (or any other
caller) drives read_frame() at whatever interval it wants.
"""

import logging
import threading
import time
from typing import Callable, Optional

import cv2

from snapcaption.camera.frame import Frame


logger = logging.getLogger(__name__)


class CameraError(Exception):
    """Base class for camera failures."""
    pass


class DeviceUnavailable(CameraError):
    """Raised when the camera device cannot be opened."""
    pass


class ReadError(CameraError):
    """Raised when a single read returns no frame."""
    pass


class NotOpen(CameraError):
    """Raised when reading from a closed frame source."""
    pass


class FrameSource:
    """
    Camera device handle.

    States are simply "opened" and "closed". Reading while closed
    raises NotOpen.

    Attributes:
        device_index: OpenCV device index
        width: Requested capture width (None = device default)
        height: Requested capture height (None = device default)

    Example:
        with FrameSource(device_index=0) as source:
            frame = source.read_frame()
            print(frame.width, frame.height)
    """

    def __init__(
        self,
        device_index: int = 0,
        width: Optional[int] = None,
        height: Optional[int] = None,
        capture_factory: Callable[[int], "cv2.VideoCapture"] = cv2.VideoCapture,
    ) -> None:
        """
        Initialize frame source. The device is not opened yet.

        Args:
            device_index: OpenCV device index
            width: Requested capture width
            height: Requested capture height
            capture_factory: Callable returning a VideoCapture-like object
        """
        self.device_index = device_index
        self.width = width
        self.height = height
        self._capture_factory = capture_factory

        self._capture = None
        self._lock = threading.Lock()
        self._next_frame_id: int = 0

    @property
    def is_open(self) -> bool:
        """Whether the device is currently opened."""
        return self._capture is not None

    def open(self) -> None:
        """
        Open the camera device.

        Raises:
            DeviceUnavailable: If the device cannot be opened
        """
        with self._lock:
            if self._capture is not None:
                return

            logger.info(f"Opening camera {self.device_index}...")
            try:
                capture = self._capture_factory(self.device_index)
            except Exception as e:
                raise DeviceUnavailable(
                    f"Cannot open camera {self.device_index}: {e}"
                ) from e

            if not capture.isOpened():
                capture.release()
                raise DeviceUnavailable(f"Cannot open camera {self.device_index}")

            if self.width:
                capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            if self.height:
                capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

            self._capture = capture
            logger.info(
                f"Camera {self.device_index} opened: "
                f"{int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))}x"
                f"{int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))}"
            )

    def read_frame(self) -> Frame:
        """
        Read the next frame from the device.

        Returns:
            Frame with a freshly allocated BGR pixel buffer

        Raises:
            NotOpen: If the source is closed
            ReadError: If the device returned no frame
        """
        with self._lock:
            if self._capture is None:
                raise NotOpen(f"Camera {self.device_index} is not open")

            ret, pixels = self._capture.read()
            if not ret or pixels is None or pixels.size == 0:
                raise ReadError(f"Camera {self.device_index} returned no frame")

            frame = Frame(
                frame_id=self._next_frame_id,
                timestamp=time.time(),
                pixels=pixels,
            )
            self._next_frame_id += 1
            return frame

    def close(self) -> None:
        """Release the device. Safe to call when already closed."""
        with self._lock:
            if self._capture is None:
                return
            self._capture.release()
            self._capture = None
            logger.info(f"Camera {self.device_index} released")

    def __enter__(self) -> "FrameSource":
        self.open()
        return self

    def __exit__(self, *args) -> None:
        self.close()
