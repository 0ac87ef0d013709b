"""
Codec Tests
===========

Tests for frame encoding, Base64 text form and preview conversion.
"""

import base64

import cv2
import numpy as np
import pytest

from snapcaption.camera.frame import Frame
from snapcaption.codec import EncodeError, encode, load_image, to_base64, to_rgb


class TestEncode:
    """Tests for encode()."""

    def test_jpeg_encoding(self, red_frame):
        image = encode(red_frame)

        assert image.format == "jpeg"
        assert image.mime_type == "image/jpeg"
        assert image.data[:2] == b"\xff\xd8"
        assert image.byte_length == len(image.data)

    def test_png_encoding_is_lossless(self, red_frame):
        image = encode(red_frame, fmt="png")

        assert image.mime_type == "image/png"
        decoded = cv2.imdecode(np.frombuffer(image.data, np.uint8), cv2.IMREAD_COLOR)
        assert np.array_equal(decoded, red_frame.pixels)

    def test_encodes_original_bgr_pixels(self, red_frame):
        image = encode(red_frame, fmt="png")
        decoded = cv2.imdecode(np.frombuffer(image.data, np.uint8), cv2.IMREAD_COLOR)

        # Red in BGR order: blue=0, green=0, red=255
        assert tuple(decoded[0, 0]) == (0, 0, 255)

    def test_unknown_format(self, red_frame):
        with pytest.raises(EncodeError, match="Unsupported"):
            encode(red_frame, fmt="bmpx")

    def test_empty_frame(self):
        frame = Frame(frame_id=7, timestamp=1.0, pixels=np.zeros((0, 0, 3), dtype=np.uint8))

        with pytest.raises(EncodeError, match="no pixel data"):
            encode(frame)

    def test_wrong_dtype(self):
        frame = Frame(frame_id=8, timestamp=1.0, pixels=np.zeros((4, 4, 3), dtype=np.float32))

        with pytest.raises(EncodeError, match="dtype"):
            encode(frame)


class TestBase64:
    """Tests for to_base64()."""

    def test_matches_standard_encoding(self):
        data = bytes(range(256))
        assert to_base64(data) == base64.b64encode(data).decode("ascii")

    def test_empty_bytes(self):
        assert to_base64(b"") == ""

    def test_jpeg_text_round_trip(self, red_frame):
        text = to_base64(encode(red_frame).data)
        assert to_base64(base64.b64decode(text)) == text

    def test_encoded_image_helpers(self, red_frame):
        image = encode(red_frame)

        assert image.to_base64() == to_base64(image.data)
        assert image.to_data_uri() == "data:image/jpeg;base64," + to_base64(image.data)


class TestPreviewAndFiles:
    """Tests for to_rgb() and load_image()."""

    def test_to_rgb_swaps_channels(self, red_frame):
        rgb = to_rgb(red_frame)

        assert tuple(rgb[0, 0]) == (255, 0, 0)
        # Source frame is untouched
        assert tuple(red_frame.pixels[0, 0]) == (0, 0, 255)

    def test_load_image(self, red_frame, tmp_path):
        path = tmp_path / "red.png"
        path.write_bytes(encode(red_frame, fmt="png").data)

        frame = load_image(path)

        assert (frame.width, frame.height) == (640, 480)
        assert np.array_equal(frame.pixels, red_frame.pixels)

    def test_load_missing_image(self, tmp_path):
        with pytest.raises(EncodeError, match="Cannot read"):
            load_image(tmp_path / "missing.jpg")

    def test_load_non_image(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not an image")

        with pytest.raises(EncodeError, match="Failed to decode"):
            load_image(path)
