"""
Camera Tests
============

Tests for Frame, FrameSource and FramePoller using a fake VideoCapture.
"""

import threading
import time

import cv2
import numpy as np
import pytest

from conftest import FakeCapture
from snapcaption.camera import (
    DeviceUnavailable,
    Frame,
    FramePoller,
    FrameSource,
    NotOpen,
    ReadError,
)


def source_for(capture: FakeCapture, **kwargs) -> FrameSource:
    return FrameSource(device_index=0, capture_factory=lambda index: capture, **kwargs)


def wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestFrame:
    """Tests for the Frame model."""

    def test_dimensions(self, red_frame):
        assert (red_frame.width, red_frame.height, red_frame.channels) == (640, 480, 3)
        assert red_frame.pixel_format == "BGR"

    def test_clone_owns_its_pixels(self, red_frame):
        clone = red_frame.clone()
        red_frame.pixels[:] = 0

        assert clone.frame_id == red_frame.frame_id
        assert tuple(clone.pixels[0, 0]) == (0, 0, 255)

    def test_repr_is_compact(self, red_frame):
        text = repr(red_frame)
        assert "640x480" in text
        assert "array" not in text


class TestFrameSource:
    """Tests for the open/read/close lifecycle."""

    def test_read_before_open(self, fake_capture):
        with pytest.raises(NotOpen):
            source_for(fake_capture).read_frame()

    def test_open_read_close(self, fake_capture):
        source = source_for(fake_capture)
        source.open()

        first = source.read_frame()
        second = source.read_frame()

        assert isinstance(first, Frame)
        assert (first.width, first.height) == (640, 480)
        assert second.frame_id == first.frame_id + 1

        source.close()
        assert fake_capture.released
        assert not source.is_open
        with pytest.raises(NotOpen):
            source.read_frame()

    def test_device_unavailable(self):
        capture = FakeCapture(opened=False)
        source = source_for(capture)

        with pytest.raises(DeviceUnavailable):
            source.open()
        assert capture.released
        assert not source.is_open

    def test_factory_error_is_device_unavailable(self):
        def broken_factory(index):
            raise RuntimeError("no backend")

        with pytest.raises(DeviceUnavailable, match="no backend"):
            FrameSource(capture_factory=broken_factory).open()

    def test_read_error(self):
        capture = FakeCapture(fail_reads=1)
        source = source_for(capture)
        source.open()

        with pytest.raises(ReadError):
            source.read_frame()
        assert source.read_frame().frame_id == 0

    def test_requested_resolution(self, fake_capture):
        source_for(fake_capture, width=1280, height=720).open()

        assert fake_capture.props[cv2.CAP_PROP_FRAME_WIDTH] == 1280
        assert fake_capture.props[cv2.CAP_PROP_FRAME_HEIGHT] == 720

    def test_context_manager_releases(self, fake_capture):
        with source_for(fake_capture) as source:
            source.read_frame()
        assert fake_capture.released

    def test_close_twice(self, fake_capture):
        source = source_for(fake_capture)
        source.open()
        source.close()
        source.close()
        assert fake_capture.released


class TestFramePoller:
    """Tests for the polling thread."""

    def test_delivers_frames(self, fake_capture):
        source = source_for(fake_capture)
        source.open()
        frames = []

        poller = FramePoller(source, on_frame=frames.append, interval=0.005)
        poller.start()
        assert wait_until(lambda: len(frames) >= 3)
        poller.stop(timeout=2.0)
        source.close()

        ids = [f.frame_id for f in frames]
        assert ids == sorted(ids)
        assert poller.metrics.frames_read == len(frames)
        assert not poller.running

    def test_read_errors_are_skipped(self):
        capture = FakeCapture(fail_reads=2)
        source = source_for(capture)
        source.open()
        frames = []

        poller = FramePoller(source, on_frame=frames.append, interval=0.005)
        poller.start()
        assert wait_until(lambda: len(frames) >= 1)
        poller.stop(timeout=2.0)

        assert poller.metrics.read_errors == 2

    def test_exits_when_source_closed(self, fake_capture):
        source = source_for(fake_capture)
        source.open()
        poller = FramePoller(source, on_frame=lambda f: None, interval=0.005)
        poller.start()

        source.close()
        assert wait_until(lambda: not poller.running)

    def test_close_during_read_waits_and_releases(self):
        gate = threading.Event()
        capture = FakeCapture(read_gate=gate)
        source = source_for(capture)
        source.open()

        poller = FramePoller(source, on_frame=lambda f: None, interval=0.005)
        poller.start()
        assert capture.read_entered.wait(2.0)

        def stop():
            poller.stop(timeout=5.0)
            source.close()

        stopper = threading.Thread(target=stop)
        stopper.start()
        # The read is still blocked; the handle must not be released under it
        time.sleep(0.05)
        assert not capture.released

        gate.set()
        stopper.join(5.0)

        assert not stopper.is_alive()
        assert capture.released
        assert not source.is_open

    def test_invalid_interval(self, fake_capture):
        with pytest.raises(ValueError):
            FramePoller(source_for(fake_capture), on_frame=lambda f: None, interval=0)
