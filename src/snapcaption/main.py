"""
SnapCaption Command Line
========================

Thin presentation layer over CaptionSession.

Commands:
    caption          - Open the camera, caption the first frame, print it
    capture          - Open the camera, save capture_<ms>.png
    describe PATH    - Caption an existing image file

Usage:
    snapcaption caption --save
    snapcaption capture --device 1
    snapcaption describe photo.jpg
    snapcaption --config config.yaml --log-level DEBUG caption
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from snapcaption import config
from snapcaption.camera import FrameSource
from snapcaption.caption import CaptionClient, caption_frame
from snapcaption.codec import EncodeError, load_image
from snapcaption.config import Settings, setup_logging
from snapcaption.session import CaptionSession


logger = logging.getLogger(__name__)


# =============================================================================
# Factories
# =============================================================================

def create_caption_client(settings: Settings) -> CaptionClient:
    """
    Create the caption client from config.

    Fails fast if no API token is configured.
    """
    logger.info(f"Caption API: {settings.caption.api_url}")
    return CaptionClient(
        api_url=settings.caption.api_url,
        api_token=settings.caption.api_token,
        timeout=settings.caption.timeout_seconds,
        retry_on_error_text=settings.caption.retry_on_error_text,
    )


def build_session(settings: Settings, device_index: Optional[int] = None) -> CaptionSession:
    """Wire a CaptionSession from config."""
    source = FrameSource(
        device_index=settings.camera.device_index if device_index is None else device_index,
        width=settings.camera.width,
        height=settings.camera.height,
    )
    return CaptionSession(
        source=source,
        client=create_caption_client(settings),
        poll_interval=settings.camera.poll_interval_ms / 1000.0,
        export_dir=settings.export.directory,
        caption_format=settings.codec.caption_format,
        jpeg_quality=settings.codec.jpeg_quality,
        on_log=print,
    )


def _wait_for_frame(session: CaptionSession, timeout: float) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if session.state.has_frame():
            return True
        time.sleep(0.05)
    return session.state.has_frame()


# =============================================================================
# Commands
# =============================================================================

def cmd_caption(args: argparse.Namespace, settings: Settings) -> int:
    with build_session(settings, args.device) as session:
        if not session.start_preview():
            return 1
        if not _wait_for_frame(session, settings.camera.first_frame_timeout_seconds):
            print("No frame received from camera", file=sys.stderr)
            return 1

        future = session.request_caption()
        if future is None:
            return 1
        result = future.result()

        if args.save:
            session.save_log()
        return 0 if result.success else 2


def cmd_capture(args: argparse.Namespace, settings: Settings) -> int:
    with build_session(settings, args.device) as session:
        if not session.start_preview():
            return 1
        if not _wait_for_frame(session, settings.camera.first_frame_timeout_seconds):
            print("No frame received from camera", file=sys.stderr)
            return 1
        return 0 if session.capture_still() is not None else 1


def cmd_describe(args: argparse.Namespace, settings: Settings) -> int:
    try:
        frame = load_image(args.path)
    except EncodeError as e:
        print(str(e), file=sys.stderr)
        return 1

    client = create_caption_client(settings)
    try:
        result = caption_frame(
            frame,
            client,
            fmt=settings.codec.caption_format,
            quality=settings.codec.jpeg_quality,
        )
    finally:
        client.close()

    print(result.text)
    return 0 if result.success else 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snapcaption",
        description="Capture webcam frames and caption them with a hosted model",
    )
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--log-level", help="Override logging.level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_caption = subparsers.add_parser("caption", help="Caption the current camera frame")
    p_caption.add_argument("--device", type=int, default=None, help="Camera device index")
    p_caption.add_argument("--save", action="store_true", help="Save caption_<ms>.txt")
    p_caption.set_defaults(func=cmd_caption)

    p_capture = subparsers.add_parser("capture", help="Save the current camera frame")
    p_capture.add_argument("--device", type=int, default=None, help="Camera device index")
    p_capture.set_defaults(func=cmd_capture)

    p_describe = subparsers.add_parser("describe", help="Caption an image file")
    p_describe.add_argument("path", help="Image file to caption")
    p_describe.set_defaults(func=cmd_describe)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = config.load_config(args.config) if args.config else config.settings
    if args.log_level:
        settings.logging.level = args.log_level
    setup_logging(settings)

    logger.info(f"Starting {settings.app.name} {settings.app.version}")
    try:
        return args.func(args, settings)
    except ValueError as e:
        # Misconfiguration (e.g. missing API token)
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
