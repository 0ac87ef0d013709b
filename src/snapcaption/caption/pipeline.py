"""
Capture-and-Caption Pipeline
============================

Clone -> encode -> caption, as one unit of background work.
"""

import logging

from snapcaption.camera.frame import Frame
from snapcaption.caption.client import CaptionClient
from snapcaption.codec.image_encoder import EncodeError, encode
from snapcaption.models.result import CaptionResult


logger = logging.getLogger(__name__)


def caption_frame(
    frame: Frame,
    client: CaptionClient,
    fmt: str = "jpeg",
    quality: int = 95,
) -> CaptionResult:
    """
    Caption one frame.

    The frame is cloned first, so the caller may keep mutating or
    replacing the original while the request is in flight.

    Args:
        frame: Frame to describe
        client: Caption client to call
        fmt: Transport image format
        quality: JPEG quality

    Returns:
        CaptionResult; an encoding failure is returned as a failed result
    """
    snapshot = frame.clone()
    try:
        image = encode(snapshot, fmt=fmt, quality=quality)
    except EncodeError as e:
        logger.error(f"Encode failed, caption aborted: {e}")
        return CaptionResult.failure(f"Error: {e}", attempts=0)

    logger.info(f"Requesting caption for {snapshot!r} ({image.byte_length} bytes)")
    return client.caption(image)
