"""Tests for the cancellable interval timer."""

import signal
import threading
import time

import pytest

from git_relay.timer import POLL_SLICE, IntervalTimer


def test_wait_never_returns_early() -> None:
    """Verifies that an uncancelled wait lasts at least the full interval."""
    timer = IntervalTimer(0.25)

    start = time.monotonic()
    assert timer.wait() is True
    assert time.monotonic() - start >= 0.25


def test_cancel_before_wait_returns_immediately() -> None:
    """Verifies that a cancelled timer no longer blocks."""
    timer = IntervalTimer(30)
    timer.cancel()

    start = time.monotonic()
    assert timer.wait() is False
    assert time.monotonic() - start < 1
    assert timer.cancelled


def test_cancel_wakes_pending_wait() -> None:
    """Verifies that cancelling from another thread ends a wait in progress."""
    timer = IntervalTimer(30)
    threading.Timer(0.05, timer.cancel).start()

    start = time.monotonic()
    assert timer.wait() is False
    assert time.monotonic() - start < 5


@pytest.mark.skipif(not hasattr(signal, "setitimer"), reason="needs SIGALRM")
def test_cancel_from_signal_handler_on_waiting_thread() -> None:
    """Verifies that a handler interrupting `wait` can cancel it without blocking."""
    timer = IntervalTimer(30)
    previous = signal.signal(signal.SIGALRM, lambda *_: timer.cancel())
    try:
        signal.setitimer(signal.ITIMER_REAL, 0.05)
        start = time.monotonic()
        assert timer.wait() is False
        elapsed = time.monotonic() - start
    finally:
        signal.setitimer(signal.ITIMER_REAL, 0)
        signal.signal(signal.SIGALRM, previous)

    assert elapsed < 0.05 + POLL_SLICE + 1
