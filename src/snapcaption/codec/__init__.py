"""
Codec Module
============

Conversion between camera frames and compressed, transportable images.
"""

from snapcaption.codec.image_encoder import (
    EncodeError,
    SUPPORTED_FORMATS,
    encode,
    load_image,
    to_base64,
    to_rgb,
)


__all__ = [
    "EncodeError",
    "SUPPORTED_FORMATS",
    "encode",
    "load_image",
    "to_base64",
    "to_rgb",
]
