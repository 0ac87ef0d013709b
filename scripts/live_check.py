#!/usr/bin/env python3
"""
Live Camera + Caption Check
===========================

Standalone script to exercise the pipeline against real hardware.

This script:
    1. Opens the configured camera and polls it for a while
    2. Logs preview stats every few seconds
    3. Requests one caption from the live caption API
    4. Reports a final summary

Prerequisites:
    - A webcam on the configured device index
    - SNAPCAPTION_API_TOKEN (or HF_TOKEN) set
    - pip install -e .

Usage:
    python scripts/live_check.py --duration 10
    python scripts/live_check.py --device 1 --report-interval 2
"""

import argparse
import logging
import sys
import time

from snapcaption.camera import DeviceUnavailable, FramePoller, FrameSource
from snapcaption.caption import CaptionClient, caption_frame
from snapcaption.config import settings
from snapcaption.session import SessionState


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def run_check(device: int, duration: float, report_interval: float) -> dict:
    """
    Poll the camera, then caption the last frame.

    Args:
        device: Camera device index
        duration: Seconds to poll before captioning
        report_interval: Seconds between progress reports

    Returns:
        Final metrics dict
    """
    logger.info("=" * 60)
    logger.info(f"Device: {device}")
    logger.info(f"Caption API: {settings.caption.api_url}")
    logger.info(f"Duration: {duration} seconds")
    logger.info("=" * 60)

    state = SessionState()
    source = FrameSource(
        device_index=device,
        width=settings.camera.width,
        height=settings.camera.height,
    )
    try:
        source.open()
    except DeviceUnavailable as e:
        logger.error(str(e))
        return {"frames_read": 0, "caption_ok": False}

    poller = FramePoller(
        source,
        on_frame=state.set_frame,
        interval=settings.camera.poll_interval_ms / 1000.0,
    )
    poller.start()

    start_time = time.time()
    last_report_time = start_time
    last_count = 0
    try:
        while time.time() - start_time < duration:
            since_report = time.time() - last_report_time
            if since_report >= report_interval:
                metrics = poller.metrics
                fps = (metrics.frames_read - last_count) / since_report
                logger.info(
                    f"Frames read: {metrics.frames_read}, "
                    f"read errors: {metrics.read_errors}, fps: {fps:.1f}"
                )
                last_report_time = time.time()
                last_count = metrics.frames_read
            time.sleep(0.2)
    except KeyboardInterrupt:
        logger.info("Check interrupted by user")
    finally:
        poller.stop(timeout=5.0)
        source.close()

    frame = state.snapshot_frame()
    result = None
    if frame is not None:
        client = CaptionClient(
            api_url=settings.caption.api_url,
            api_token=settings.caption.api_token,
            timeout=settings.caption.timeout_seconds,
            retry_on_error_text=settings.caption.retry_on_error_text,
        )
        try:
            result = caption_frame(frame, client, quality=settings.codec.jpeg_quality)
        finally:
            client.close()

    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Frames read: {poller.metrics.frames_read}")
    logger.info(f"Read errors: {poller.metrics.read_errors}")
    if result is not None:
        logger.info(f"Caption ({result.attempts} attempt(s)): {result.text}")
    else:
        logger.error("No frame was captured")
    logger.info("=" * 60)

    return {
        "frames_read": poller.metrics.frames_read,
        "read_errors": poller.metrics.read_errors,
        "caption_ok": bool(result and result.success),
    }


def main():
    parser = argparse.ArgumentParser(description="Live camera and caption API check")
    parser.add_argument(
        "--device",
        type=int,
        default=settings.camera.device_index,
        help="Camera device index",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=5.0,
        help="Seconds to poll before captioning (default: 5)",
    )
    parser.add_argument(
        "--report-interval",
        type=float,
        default=1.0,
        help="Seconds between progress reports (default: 1)",
    )
    args = parser.parse_args()

    result = run_check(args.device, args.duration, args.report_interval)
    sys.exit(0 if result["caption_ok"] else 1)


if __name__ == "__main__":
    main()
