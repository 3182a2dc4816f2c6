import time

# Upper bound on how long a cancelled wait keeps sleeping.
POLL_SLICE = 0.1


class IntervalTimer:
    """A fixed-interval wait that can be cancelled from a signal handler.

    `cancel` only flips a flag, so it takes no locks and is safe to call from
    a handler that interrupts `wait` on the same thread. `wait` sleeps in
    short slices and checks the flag between them.

    Once cancelled the timer stays cancelled; every later `wait` returns
    immediately.

    Attributes:
        seconds (float): The wait duration.
    """

    def __init__(self, seconds: float):
        self.seconds = seconds
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        """bool: Whether `cancel` has been called."""
        return self._cancelled

    def wait(self) -> bool:
        """Blocks for the full interval unless cancelled first.

        Returns:
            bool: True if the interval elapsed, False if cancelled.
        """
        deadline = time.monotonic() + self.seconds
        while not self._cancelled:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return True
            time.sleep(min(remaining, POLL_SLICE))
        return False

    def cancel(self) -> None:
        """Makes any pending `wait` return within one slice, and later waits at once."""
        self._cancelled = True
