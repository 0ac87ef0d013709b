"""
Session Exports
===============

Writes captured frames and caption logs to timestamped files.

File names:
    capture_<unixMillis>.png
    caption_<unixMillis>.txt
"""

import logging
import time
from pathlib import Path
from typing import Optional, Union

from snapcaption.models.result import EncodedImage


logger = logging.getLogger(__name__)


def _unix_millis() -> int:
    return int(time.time() * 1000)


def save_capture(image: EncodedImage, directory: Union[str, Path] = ".") -> Path:
    """
    Write an encoded capture to ``capture_<ms>.<ext>``.

    Args:
        image: Encoded frame (normally PNG)
        directory: Target directory, created if missing

    Returns:
        Path of the written file
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    ext = "png" if image.format == "png" else "jpg"
    path = directory / f"capture_{_unix_millis()}.{ext}"
    path.write_bytes(image.data)
    logger.info(f"Captured frame saved: {path}")
    return path


def save_caption_log(text: str, directory: Union[str, Path] = ".") -> Optional[Path]:
    """
    Write the accumulated log text to ``caption_<ms>.txt``.

    Args:
        text: Full log text
        directory: Target directory, created if missing

    Returns:
        Path of the written file, or None if there was nothing to save
    """
    if not text:
        return None

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    path = directory / f"caption_{_unix_millis()}.txt"
    path.write_text(text, encoding="utf-8")
    logger.info(f"Caption saved to: {path}")
    return path
