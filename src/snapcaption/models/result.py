"""
Pipeline Result Models
======================

Typed values passed between the codec, the caption client and the session.

These are transient, single-owner values. Nothing here is persisted.
"""

import base64
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EncodedImage:
    """
    Compressed image bytes ready for transport.

    Produced by the codec from a Frame clone, consumed by the caption
    client and the capture export.

    Attributes:
        data: Compressed image bytes (JPEG, PNG, ...)
        mime_type: MIME type of ``data`` (e.g. "image/jpeg")
        format: Short format name (e.g. "jpeg")
    """

    data: bytes
    mime_type: str
    format: str

    @property
    def byte_length(self) -> int:
        """Size of the compressed payload in bytes."""
        return len(self.data)

    def to_base64(self) -> str:
        """Base64 text form of the payload (no prefix)."""
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        """Payload as a ``data:<mime>;base64,<b64>`` URI."""
        return f"data:{self.mime_type};base64,{self.to_base64()}"

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the payload."""
        return (
            f"EncodedImage(format={self.format}, "
            f"mime_type={self.mime_type}, "
            f"byte_length={self.byte_length})"
        )


@dataclass(frozen=True, slots=True)
class CaptionResult:
    """
    Outcome of one caption request.

    Produced once per request and handed to the presentation layer.

    Attributes:
        success: True if a usable caption was produced
        text: Caption text on success, error message otherwise
        attempts: Number of HTTP attempts made (1 or 2)
    """

    success: bool
    text: str
    attempts: int = 1

    @classmethod
    def ok(cls, text: str, attempts: int = 1) -> "CaptionResult":
        return cls(success=True, text=text, attempts=attempts)

    @classmethod
    def failure(cls, message: str, attempts: int = 1) -> "CaptionResult":
        return cls(success=False, text=message, attempts=attempts)

    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "success": self.success,
            "text": self.text,
            "attempts": self.attempts,
        }
