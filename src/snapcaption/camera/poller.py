"""
Frame Poller
============

Background thread that reads frames from a FrameSource at a fixed cadence.

Design Rules:
    - A failed read (ReadError) skips that tick, never stops the loop
    - A closed source (NotOpen) ends the loop quietly
    - Frames are handed to the callback; the poller keeps no frame itself
"""

import logging
import threading
from typing import Callable, Optional

from snapcaption.camera.frame import Frame
from snapcaption.camera.source import FrameSource, NotOpen, ReadError


logger = logging.getLogger(__name__)


class FramePollerMetrics:
    """Metrics for FramePoller observability."""

    __slots__ = (
        "frames_read",
        "read_errors",
        "callback_errors",
        "last_frame_id",
    )

    def __init__(self) -> None:
        self.frames_read: int = 0
        self.read_errors: int = 0
        self.callback_errors: int = 0
        self.last_frame_id: int = -1

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "frames_read": self.frames_read,
            "read_errors": self.read_errors,
            "callback_errors": self.callback_errors,
            "last_frame_id": self.last_frame_id,
        }


class FramePoller:
    """
    Fixed-interval frame polling thread.

    Attributes:
        source: FrameSource to read from (must already be open)
        interval: Seconds between reads (0.033 ~ 30 fps)
        metrics: Operational counters

    Example:
        poller = FramePoller(source, on_frame=state.set_frame)
        poller.start()
        ...
        poller.stop()
    """

    def __init__(
        self,
        source: FrameSource,
        on_frame: Callable[[Frame], None],
        interval: float = 0.033,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")

        self.source = source
        self.interval = interval
        self._on_frame = on_frame

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.metrics = FramePollerMetrics()

    @property
    def running(self) -> bool:
        """Whether the polling thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the polling thread. No-op if already running."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="frame-poller",
            daemon=True,
        )
        self._thread.start()
        logger.debug(f"FramePoller started (interval={self.interval:.3f}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Signal the loop to exit and wait for the thread.

        Args:
            timeout: Max seconds to wait for the thread. None = wait forever.
        """
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("FramePoller thread did not stop within timeout")
        self._thread = None
        logger.debug(f"FramePoller stopped: {self.metrics.to_dict()}")

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                frame = self.source.read_frame()
            except ReadError as e:
                self.metrics.read_errors += 1
                logger.debug(f"Skipping frame: {e}")
            except NotOpen:
                logger.debug("Frame source closed, poller exiting")
                break
            else:
                self.metrics.frames_read += 1
                self.metrics.last_frame_id = frame.frame_id
                try:
                    self._on_frame(frame)
                except Exception as e:
                    self.metrics.callback_errors += 1
                    logger.error(f"Frame callback error (frame={frame.frame_id}): {e}")

            self._stop_event.wait(self.interval)
