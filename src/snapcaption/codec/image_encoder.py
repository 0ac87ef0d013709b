"""
Image Encoder
=============

Dedicated module for converting OpenCV frames into transportable images.

Design Rules:
    - This is the ONLY place in the codebase that encodes or decodes images
    - Encodes the original BGR pixels; preview colour conversion is separate
    - Validates shape and dtype before handing pixels to OpenCV
    - Fails fast with EncodeError on unusable frames
"""

import base64
import logging
import time
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from snapcaption.camera.frame import Frame
from snapcaption.models.result import EncodedImage


logger = logging.getLogger(__name__)


class EncodeError(Exception):
    """Raised when a frame cannot be compressed or an image cannot be read."""
    pass


# format name -> (OpenCV extension, MIME type)
SUPPORTED_FORMATS = {
    "jpeg": (".jpg", "image/jpeg"),
    "jpg": (".jpg", "image/jpeg"),
    "png": (".png", "image/png"),
}


def _validate_pixels(frame: Frame) -> None:
    pixels = frame.pixels
    if not isinstance(pixels, np.ndarray) or pixels.size == 0:
        raise EncodeError(f"Frame {frame.frame_id} has no pixel data")
    if pixels.ndim not in (2, 3) or (pixels.ndim == 3 and pixels.shape[2] not in (1, 3, 4)):
        raise EncodeError(f"Invalid image shape for frame {frame.frame_id}: {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise EncodeError(f"Invalid dtype for frame {frame.frame_id}: {pixels.dtype}")


def encode(frame: Frame, fmt: str = "jpeg", quality: int = 95) -> EncodedImage:
    """
    Compress a frame into an image byte stream.

    Args:
        frame: Frame with BGR pixels
        fmt: Output format ("jpeg", "jpg" or "png")
        quality: JPEG quality 1-100 (ignored for PNG)

    Returns:
        EncodedImage with compressed bytes and MIME type

    Raises:
        EncodeError: If the format is unknown or encoding fails
    """
    key = fmt.lower()
    if key not in SUPPORTED_FORMATS:
        raise EncodeError(f"Unsupported image format: {fmt}")
    ext, mime_type = SUPPORTED_FORMATS[key]

    _validate_pixels(frame)

    params = [cv2.IMWRITE_JPEG_QUALITY, int(quality)] if ext == ".jpg" else []
    try:
        ok, buffer = cv2.imencode(ext, frame.pixels, params)
    except cv2.error as e:
        raise EncodeError(f"Failed to encode frame {frame.frame_id}: {e}") from e

    if not ok or buffer is None:
        raise EncodeError(
            f"Failed to encode frame {frame.frame_id}: cv2.imencode returned False"
        )

    image = EncodedImage(
        data=buffer.tobytes(),
        mime_type=mime_type,
        format="png" if ext == ".png" else "jpeg",
    )
    logger.debug(f"Encoded frame {frame.frame_id} as {image.format}: {image.byte_length} bytes")
    return image


def to_base64(data: bytes) -> str:
    """Base64-encode arbitrary bytes as ASCII text."""
    return base64.b64encode(data).decode("ascii")


def to_rgb(frame: Frame) -> np.ndarray:
    """
    Convert a frame to RGB for preview display.

    Args:
        frame: Frame with BGR pixels

    Returns:
        RGB image as np.ndarray (H, W, 3), dtype=uint8
    """
    _validate_pixels(frame)
    if frame.pixels.ndim == 2:
        return cv2.cvtColor(frame.pixels, cv2.COLOR_GRAY2RGB)
    return cv2.cvtColor(frame.pixels, cv2.COLOR_BGR2RGB)


def load_image(path: Union[str, Path]) -> Frame:
    """
    Read an image file into a Frame.

    Args:
        path: Path to any image file OpenCV can decode

    Returns:
        Frame with BGR pixels (frame_id 0)

    Raises:
        EncodeError: If the file is missing or not a decodable image
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise EncodeError(f"Cannot read image {path}: {e}") from e

    bgr = cv2.imdecode(np.frombuffer(raw, np.uint8), cv2.IMREAD_COLOR)
    if bgr is None:
        raise EncodeError(f"Failed to decode image {path}: cv2.imdecode returned None")

    return Frame(frame_id=0, timestamp=time.time(), pixels=bgr)
