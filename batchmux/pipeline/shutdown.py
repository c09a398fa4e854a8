import threading
from typing import Optional


class ShutdownAcknowledgments:
    """Counting barrier for the shutdown handshake.

    Each worker acknowledges exactly once as it exits; `wait` returns only
    after all `expected` acknowledgments have arrived.
    """

    def __init__(self, expected: int):
        if expected < 1:
            raise ValueError("expected must be >= 1")
        self.expected = expected
        self._received = 0
        self._cond = threading.Condition()

    @property
    def received(self) -> int:
        with self._cond:
            return self._received

    def acknowledge(self) -> None:
        with self._cond:
            if self._received >= self.expected:
                raise RuntimeError(
                    f"unexpected shutdown acknowledgment ({self._received + 1} > {self.expected})"
                )
            self._received += 1
            self._cond.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Blocks until every worker has acknowledged.

        Returns False only if a timeout was given and expired.
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._received >= self.expected, timeout)
