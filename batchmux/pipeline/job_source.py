import logging
from pathlib import Path
from typing import Iterable, Union

from batchmux.infrastructure.file_scanner import FileScanner
from batchmux.pipeline.cancellation import CancellationToken
from batchmux.pipeline.dispatch import DispatchQueue

PathLike = Union[str, Path]


class JobSource:
    """Feeds matching paths into the dispatch queue, one blocking hand-off at a time.

    Runs on the caller's thread. Stops early, without error, once the
    cancellation token fires. `dispatched` counts jobs actually taken by a
    worker, including when dispatch ends with an exception.
    """

    def __init__(self, file_scanner: FileScanner, work: DispatchQueue, cancel: CancellationToken):
        self.file_scanner = file_scanner
        self.work = work
        self.cancel = cancel
        self.dispatched = 0
        self.logger = logging.getLogger(__name__)

    def dispatch_file(self, path: PathLike) -> int:
        """Single-file mode; raises InvalidInputError for a wrong extension."""
        job = self.file_scanner.check_file(path)
        return self._emit([job])

    def dispatch_directory(self, root: PathLike, recursive: bool = False) -> int:
        """Directory mode; raises TargetNotFoundError, TargetNotADirectoryError or EnumerationError."""
        return self._emit(self.file_scanner.scan(root, recursive=recursive))

    def _emit(self, jobs: Iterable[str]) -> int:
        emitted = 0
        for job in jobs:
            if not self.work.put(job, self.cancel):
                self.logger.debug(f"DISPATCH_CANCELLED: {job} not dispatched")
                break
            emitted += 1
            self.dispatched += 1
            self.logger.debug(f"DISPATCHED: {job}")
        return emitted
