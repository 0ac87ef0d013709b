"""
SnapCaption
===========

Webcam capture and remote image captioning.

This package polls a live camera, captures still frames and asks a hosted
image-captioning model to describe them, without blocking the caller.

Components:
    - camera: Frame source and preview polling
    - codec: Frame to JPEG/PNG/Base64 conversion
    - caption: Caption API client and pipeline
    - session: State, single-slot dispatcher and presentation boundary

Example:
    from snapcaption.config import settings
    from snapcaption.main import build_session

    with build_session(settings) as session:
        session.start_preview()
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
