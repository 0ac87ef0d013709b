"""
Test Configuration
==================

Pytest fixtures and fakes for SnapCaption.

The camera and the HTTP endpoint are replaced by in-process fakes:
    - FakeCapture stands in for cv2.VideoCapture
    - FakeHTTPSession stands in for requests.Session
"""

import threading
from typing import List, Optional

import numpy as np
import pytest
import requests

from snapcaption.camera.frame import Frame


def make_response(status_code: int, body: str) -> requests.Response:
    """Build a real requests.Response with the given status and body."""
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


class FakeHTTPSession:
    """
    Records POSTs and replays queued responses.

    Each queued item is either a requests.Response or an exception
    instance to raise. The last item is repeated once the queue runs out.
    """

    def __init__(self, *responses, gate: Optional[threading.Event] = None) -> None:
        self._responses = list(responses)
        self.calls: List[dict] = []
        self.closed = False
        self.gate = gate
        self.entered = threading.Event()

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(5.0)
        item = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


class FakeCapture:
    """cv2.VideoCapture stand-in producing solid-colour frames."""

    def __init__(
        self,
        opened: bool = True,
        width: int = 640,
        height: int = 480,
        color=(0, 0, 255),
        fail_reads: int = 0,
        read_gate: Optional[threading.Event] = None,
    ) -> None:
        self.opened = opened
        self.width = width
        self.height = height
        self.color = color
        self.fail_reads = fail_reads
        self.read_gate = read_gate
        self.read_entered = threading.Event()
        self.read_count = 0
        self.released = False
        self.props = {}

    def isOpened(self) -> bool:
        return self.opened and not self.released

    def read(self):
        self.read_entered.set()
        if self.read_gate is not None:
            self.read_gate.wait(5.0)
        self.read_count += 1
        if self.fail_reads > 0:
            self.fail_reads -= 1
            return False, None
        pixels = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        pixels[:] = self.color
        return True, pixels

    def set(self, prop, value) -> bool:
        self.props[prop] = value
        return True

    def get(self, prop) -> float:
        return float(self.props.get(prop, 0))

    def release(self) -> None:
        self.released = True


@pytest.fixture
def red_frame() -> Frame:
    """A 640x480 solid red BGR frame."""
    pixels = np.zeros((480, 640, 3), dtype=np.uint8)
    pixels[:] = (0, 0, 255)
    return Frame(frame_id=1, timestamp=1707321234.567, pixels=pixels)


@pytest.fixture
def fake_capture() -> FakeCapture:
    return FakeCapture()


@pytest.fixture
def caption_ok_response() -> requests.Response:
    return make_response(200, '[{"generated_text":"a red square"}]')
