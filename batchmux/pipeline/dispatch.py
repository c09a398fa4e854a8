"""Zero-capacity hand-off queue between the job source and the workers.

`put` does not return until a worker has taken the job, so the producer never
runs ahead of consumption. Both sides also wake up when the cancellation token
they pass in fires.
"""

import threading
from typing import List, Optional

from batchmux.pipeline.cancellation import CancellationToken


class DispatchQueue:
    """Rendezvous channel of job paths.

    A job is only placed once at least one receiver is waiting, and a placed
    job is always taken: a waiting receiver prefers a pending job over
    cancellation. Which receiver gets it is unspecified.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._item: Optional[str] = None
        self._has_item = False
        self._receivers = 0
        self._watched: List[CancellationToken] = []

    def _wake(self) -> None:
        with self._cond:
            self._cond.notify_all()

    def _watch(self, cancel: CancellationToken) -> None:
        # Register before the first check under the lock so no wakeup is lost.
        with self._cond:
            if any(token is cancel for token in self._watched):
                return
            self._watched.append(cancel)
        cancel.add_callback(self._wake)

    @property
    def waiting_receivers(self) -> int:
        with self._cond:
            return self._receivers

    def put(self, job: str, cancel: CancellationToken) -> bool:
        """Hands a job to a worker, blocking until one takes it.

        Returns False without handing anything over if cancellation is
        observed first.
        """
        self._watch(cancel)
        with self._cond:
            while (self._has_item or self._receivers == 0) and not cancel.cancelled:
                self._cond.wait()
            if cancel.cancelled:
                return False

            self._item = job
            self._has_item = True
            self._cond.notify_all()

            # A receiver was waiting when the job was placed; it will take it
            # even if cancellation fires in the meantime.
            while self._has_item:
                self._cond.wait()
            return True

    def get(self, cancel: CancellationToken) -> Optional[str]:
        """Blocks until a job is available or cancellation is observed.

        Returns the job, or None once cancelled.
        """
        self._watch(cancel)
        with self._cond:
            self._receivers += 1
            self._cond.notify_all()
            try:
                while not self._has_item and not cancel.cancelled:
                    self._cond.wait()
                if self._has_item:
                    job = self._item
                    self._item = None
                    self._has_item = False
                    self._cond.notify_all()
                    return job
                return None
            finally:
                self._receivers -= 1
