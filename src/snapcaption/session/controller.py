"""
Caption Session
===============

The boundary a presentation layer drives.

A CaptionSession owns the frame source, the preview poller, the caption
worker and the session state. The presentation layer calls its methods
from the UI thread and receives log lines, status text, preview images
and caption results through callbacks.

Callbacks:
    on_log(str)               - one line appended to the log
    on_status(str)            - new one-line status
    on_frame(np.ndarray)      - RGB preview image, once per poll tick
    on_caption(CaptionResult) - caption outcome, on the worker thread

Example:
    session = CaptionSession(FrameSource(0), client, on_log=print)
    session.start_preview()
    future = session.request_caption()
    if future is not None:
        print(future.result().text)
    session.close()
"""

import logging
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np

from snapcaption.camera.frame import Frame
from snapcaption.camera.poller import FramePoller
from snapcaption.camera.source import DeviceUnavailable, FrameSource
from snapcaption.caption.client import CaptionClient
from snapcaption.caption.pipeline import caption_frame
from snapcaption.codec.image_encoder import EncodeError, encode, to_rgb
from snapcaption.models.result import CaptionResult, EncodedImage
from snapcaption.session.dispatcher import SingleSlotDispatcher
from snapcaption.session.exports import save_capture, save_caption_log
from snapcaption.session.state import SessionState


logger = logging.getLogger(__name__)


class CaptionSession:
    """
    Capture-and-caption session.

    Attributes:
        source: Camera frame source
        client: Caption API client
        state: Session flags, frame slot and log
        poll_interval: Seconds between preview reads
        export_dir: Directory for capture/caption exports
    """

    def __init__(
        self,
        source: FrameSource,
        client: CaptionClient,
        state: Optional[SessionState] = None,
        poll_interval: float = 0.033,
        export_dir: Union[str, Path] = ".",
        caption_format: str = "jpeg",
        jpeg_quality: int = 95,
        on_log: Optional[Callable[[str], None]] = None,
        on_status: Optional[Callable[[str], None]] = None,
        on_frame: Optional[Callable[[np.ndarray], None]] = None,
        on_caption: Optional[Callable[[CaptionResult], None]] = None,
    ) -> None:
        self.source = source
        self.client = client
        self.state = state or SessionState()
        self.poll_interval = poll_interval
        self.export_dir = Path(export_dir)
        self.caption_format = caption_format
        self.jpeg_quality = jpeg_quality

        self._on_log = on_log
        self._on_status = on_status
        self._on_frame = on_frame
        self._on_caption = on_caption

        self._poller: Optional[FramePoller] = None
        self._dispatcher = SingleSlotDispatcher()
        self._closed: bool = False

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def _log(self, message: str) -> None:
        self.state.log.append(message)
        logger.info(message)
        if self._on_log is not None:
            self._on_log(message)

    def _status(self, message: str) -> None:
        self.state.status = message
        if self._on_status is not None:
            self._on_status(message)

    # -------------------------------------------------------------------------
    # Preview
    # -------------------------------------------------------------------------

    def _handle_frame(self, frame: Frame) -> None:
        self.state.set_frame(frame)
        if self._on_frame is not None:
            self._on_frame(to_rgb(frame))

    def start_preview(self) -> bool:
        """
        Open the camera and start polling.

        Returns:
            True if the preview is running, False if the camera
            could not be opened or the session is closed.
        """
        if self._closed:
            self._log("Session closed, camera not started")
            return False
        if self.state.camera_active:
            return True

        try:
            self.source.open()
        except DeviceUnavailable as e:
            logger.error(str(e))
            self._log("Error: Cannot open camera")
            self._status("Camera unavailable")
            return False

        self._poller = FramePoller(
            self.source,
            on_frame=self._handle_frame,
            interval=self.poll_interval,
        )
        self._poller.start()
        self.state.camera_active = True
        self._log("Camera started successfully")
        self._status("Camera started")
        return True

    def stop_preview(self) -> None:
        """Stop polling and release the camera. No-op if not running."""
        if not self.state.camera_active:
            return

        self.state.camera_active = False
        if self._poller is not None:
            self._poller.stop()
            self._poller = None
        self.source.close()
        self.state.clear_frame()
        self._log("Camera stopped")
        self._status("Camera stopped")

    # -------------------------------------------------------------------------
    # Capture
    # -------------------------------------------------------------------------

    def capture_still(self) -> Optional[EncodedImage]:
        """
        Save the current frame as ``capture_<ms>.png``.

        Returns:
            The PNG-encoded frame, or None if no frame was available
            or encoding failed.
        """
        if not self.state.camera_active:
            self._log("Camera not active, can't capture")
            return None

        frame = self.state.snapshot_frame()
        if frame is None:
            self._log("Failed to capture frame")
            return None

        try:
            image = encode(frame, fmt="png")
        except EncodeError as e:
            self._log(f"Failed to capture frame: {e}")
            return None

        path = save_capture(image, self.export_dir)
        self._log(f"Captured frame saved: {path.name}")
        self._status("Frame saved")
        return image

    # -------------------------------------------------------------------------
    # Caption
    # -------------------------------------------------------------------------

    def request_caption(self) -> Optional["Future[CaptionResult]"]:
        """
        Caption the current frame in the background.

        Returns:
            Future resolving to the CaptionResult, or None if there is no
            frame or a request is already in flight.
        """
        if self._dispatcher.busy:
            logger.debug("Caption request ignored, one is already in flight")
            return None

        if not self.state.camera_active:
            self._log("No frame available to caption")
            return None

        frame = self.state.snapshot_frame()
        if frame is None:
            self._log("No frame available to caption")
            return None

        try:
            return self._dispatcher.submit(
                lambda: self._caption(frame),
                on_complete=self._deliver_caption,
                on_accept=self._mark_busy,
            )
        except RuntimeError as e:
            # Executor refused the task; the slot is already released
            logger.error(f"Caption request not dispatched: {e}")
            self.state.busy = False
            self._log(f"Error getting caption: {e}")
            self._status("Caption failed")
            return None

    def _caption(self, frame: Frame) -> CaptionResult:
        try:
            return caption_frame(
                frame,
                self.client,
                fmt=self.caption_format,
                quality=self.jpeg_quality,
            )
        except Exception as e:
            logger.exception(f"Caption pipeline error (frame={frame.frame_id})")
            return CaptionResult.failure(f"Error: {e}")

    def _mark_busy(self) -> None:
        self.state.busy = True
        self._status("Processing image...")

    def _deliver_caption(self, result: CaptionResult) -> None:
        try:
            if result.success:
                self._log(f"Caption: {result.text}")
                self._status("Caption received")
            else:
                self._log(f"Error getting caption: {result.text}")
                self._status("Caption failed")
            if self._on_caption is not None:
                self._on_caption(result)
        finally:
            self.state.busy = False

    # -------------------------------------------------------------------------
    # Log / presentation flags
    # -------------------------------------------------------------------------

    def save_log(self) -> Optional[Path]:
        """Write the accumulated log to ``caption_<ms>.txt``."""
        path = save_caption_log(self.state.log.text(), self.export_dir)
        if path is None:
            self._log("No caption to save")
            return None
        self._log(f"Caption saved to: {path.name}")
        self._status("Caption saved")
        return path

    def clear_log(self) -> None:
        self.state.log.clear()

    def toggle_theme(self) -> bool:
        """Flip the dark-mode flag and return the new value."""
        self.state.dark_mode = not self.state.dark_mode
        return self.state.dark_mode

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Stop the preview, wait for any caption request, close the client."""
        if self._closed:
            return
        self._closed = True
        self.stop_preview()
        self._dispatcher.shutdown(wait=True)
        self.client.close()

    def __enter__(self) -> "CaptionSession":
        return self

    def __exit__(self, *args) -> None:
        self.close()
