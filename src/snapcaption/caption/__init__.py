"""
Caption Module
==============

Remote image captioning.

Components:
    - CaptionClient: HTTP client with a one-shot prefix-free fallback
    - extract_generated_text: Response body parsing
    - caption_frame: Clone -> encode -> caption pipeline
"""

from snapcaption.caption.client import CaptionClient
from snapcaption.caption.parsing import NO_CAPTION, extract_generated_text
from snapcaption.caption.pipeline import caption_frame


__all__ = [
    "CaptionClient",
    "NO_CAPTION",
    "caption_frame",
    "extract_generated_text",
]
