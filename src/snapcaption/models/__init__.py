"""
Models Module
=============

Typed values flowing through the capture-and-caption pipeline.

Components:
    - EncodedImage: Compressed image bytes with Base64 helpers
    - CaptionResult: Outcome of a caption request
"""

from snapcaption.models.result import CaptionResult, EncodedImage


__all__ = [
    "CaptionResult",
    "EncodedImage",
]
