"""
Dispatcher Tests
================

Tests for the capacity-1, reject-if-busy background runner.
"""

import threading

import pytest

from snapcaption.session import SingleSlotDispatcher


@pytest.fixture
def dispatcher():
    d = SingleSlotDispatcher()
    yield d
    d.shutdown(wait=True)


class TestSingleSlotDispatcher:

    def test_runs_task(self, dispatcher):
        delivered = []

        future = dispatcher.submit(lambda: 42, on_complete=delivered.append)

        assert future.result(timeout=2.0) == 42
        assert delivered == [42]
        assert not dispatcher.busy

    def test_rejects_while_busy(self, dispatcher):
        gate = threading.Event()
        calls = []

        def task():
            calls.append(1)
            gate.wait(5.0)
            return "done"

        first = dispatcher.submit(task)
        second = dispatcher.submit(task)

        assert first is not None
        assert second is None
        assert dispatcher.rejected_count == 1

        gate.set()
        assert first.result(timeout=2.0) == "done"
        assert calls == [1]

    def test_accepts_again_after_completion(self, dispatcher):
        dispatcher.submit(lambda: 1).result(timeout=2.0)
        assert dispatcher.submit(lambda: 2).result(timeout=2.0) == 2

    def test_on_accept_runs_before_task(self, dispatcher):
        order = []

        future = dispatcher.submit(
            lambda: order.append("task"),
            on_accept=lambda: order.append("accept"),
        )
        future.result(timeout=2.0)

        assert order == ["accept", "task"]

    def test_busy_until_completion_callback_finishes(self, dispatcher):
        seen = []

        future = dispatcher.submit(lambda: None, on_complete=lambda r: seen.append(dispatcher.busy))
        future.result(timeout=2.0)

        assert seen == [True]
        assert not dispatcher.busy

    def test_failed_task_releases_slot(self, dispatcher):
        def boom():
            raise RuntimeError("boom")

        future = dispatcher.submit(boom)

        with pytest.raises(RuntimeError):
            future.result(timeout=2.0)
        assert not dispatcher.busy
        assert dispatcher.submit(lambda: "ok").result(timeout=2.0) == "ok"
