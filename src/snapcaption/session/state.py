"""
Session State
=============

Explicit state object for one capture session.

Holds the flags and the current-frame slot that the preview poller and
the caption worker share. Every access to the slot goes through a lock,
and readers only ever get a clone.
"""

import logging
import threading
from typing import List, Optional

from snapcaption.camera.frame import Frame


logger = logging.getLogger(__name__)


class CaptionLog:
    """
    Append-only text log shown to the user and exported on save.

    Example:
        log = CaptionLog()
        log.append("Camera started successfully")
        print(log.text())
    """

    def __init__(self) -> None:
        self._lines: List[str] = []
        self._lock = threading.Lock()

    def append(self, message: str) -> None:
        with self._lock:
            self._lines.append(message)

    def lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def text(self) -> str:
        """Full log as newline-terminated lines."""
        with self._lock:
            return "".join(f"{line}\n" for line in self._lines)

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)


class SessionState:
    """
    Mutable state of one capture session.

    Attributes:
        camera_active: Whether the preview is running
        dark_mode: Presentation theme flag
        busy: Whether a caption request is in flight
        status: Last one-line status message
        log: Append-only caption/event log
    """

    def __init__(self) -> None:
        self.camera_active: bool = False
        self.dark_mode: bool = False
        self.busy: bool = False
        self.status: str = "Ready"
        self.log = CaptionLog()

        self._frame: Optional[Frame] = None
        self._frame_lock = threading.Lock()

    def set_frame(self, frame: Frame) -> None:
        """Replace the current frame."""
        with self._frame_lock:
            self._frame = frame

    def snapshot_frame(self) -> Optional[Frame]:
        """Clone of the current frame, or None if there is none."""
        with self._frame_lock:
            if self._frame is None:
                return None
            return self._frame.clone()

    def has_frame(self) -> bool:
        with self._frame_lock:
            return self._frame is not None

    def clear_frame(self) -> None:
        with self._frame_lock:
            self._frame = None
