"""Lifecycle coordinator for a batch conversion run.

Starts a fixed pool of worker threads, drives the job source on the calling
thread, and always finishes with the shutdown handshake: cancel once, then
wait until every worker has acknowledged. Fatal errors (bad input, failed
enumeration, Ctrl+C) are re-raised only after the handshake, so nothing is
still writing output or logs when the caller tears down.
"""

import logging
import threading
from pathlib import Path
from typing import List, Optional, Union

from batchmux.config.models import AppConfig
from batchmux.domain.errors import InvalidInputError
from batchmux.domain.events import DispatchFinished, JobCompleted, JobFailed, ShutdownCompleted
from batchmux.domain.models import RunSummary
from batchmux.infrastructure.event_bus import EventBus
from batchmux.infrastructure.file_scanner import FileScanner
from batchmux.pipeline.cancellation import CancellationToken
from batchmux.pipeline.conversion import ConversionTask
from batchmux.pipeline.dispatch import DispatchQueue
from batchmux.pipeline.job_source import JobSource
from batchmux.pipeline.shutdown import ShutdownAcknowledgments
from batchmux.pipeline.worker import Worker

PathLike = Union[str, Path]


class Orchestrator:
    """Batch conversion orchestrator.

    Args:
        config: AppConfig; `general.workers` sizes the pool, `general.recursive`
            is the default traversal mode.
        event_bus: EventBus for job and lifecycle events.
        file_scanner: FileScanner selecting files by extension.
        conversion_task: ConversionTask run by every worker.
    """

    def __init__(
        self,
        config: AppConfig,
        event_bus: EventBus,
        file_scanner: FileScanner,
        conversion_task: ConversionTask,
    ):
        self.config = config
        self.event_bus = event_bus
        self.file_scanner = file_scanner
        self.conversion_task = conversion_task
        self.logger = logging.getLogger(__name__)

    @property
    def worker_count(self) -> int:
        return max(1, self.config.general.workers)

    @staticmethod
    def _validate_inputs(file: Optional[PathLike], directory: Optional[PathLike]) -> None:
        if file is None and directory is None:
            raise InvalidInputError("no input supplied")
        if file is not None and directory is not None:
            raise InvalidInputError("too many inputs supplied")

    def run(
        self,
        file: Optional[PathLike] = None,
        directory: Optional[PathLike] = None,
        recursive: Optional[bool] = None,
    ) -> RunSummary:
        """Converts one file or every matching file in a directory.

        Returns the run summary. Per-job failures are counted, not raised.
        """
        self._validate_inputs(file, directory)
        if recursive is None:
            recursive = self.config.general.recursive

        count = self.worker_count
        cancel = CancellationToken()
        work = DispatchQueue()
        acks = ShutdownAcknowledgments(count)
        summary = RunSummary(workers=count)

        threads = self._start_workers(count, work, cancel, acks)
        on_completed = self.event_bus.subscribe(JobCompleted, lambda _e: summary.record_completed())
        on_failed = self.event_bus.subscribe(JobFailed, lambda _e: summary.record_failed())

        source = JobSource(self.file_scanner, work, cancel)

        try:
            if directory is not None:
                self.logger.info(f"Scanning {directory} (recursive={recursive}, workers={count})")
                source.dispatch_directory(directory, recursive=recursive)
            else:
                self.logger.info(f"Converting single file {file} (workers={count})")
                source.dispatch_file(file)
        finally:
            summary.dispatched = source.dispatched
            self.event_bus.publish(DispatchFinished(jobs_dispatched=source.dispatched))
            self._shutdown(cancel, acks, threads)
            self.event_bus.unsubscribe(JobCompleted, on_completed)
            self.event_bus.unsubscribe(JobFailed, on_failed)

        self.logger.info(
            f"Run finished: dispatched={summary.dispatched}, "
            f"completed={summary.completed}, failed={summary.failed}"
        )
        return summary

    def _start_workers(
        self,
        count: int,
        work: DispatchQueue,
        cancel: CancellationToken,
        acks: ShutdownAcknowledgments,
    ) -> List[threading.Thread]:
        threads = []
        for i in range(count):
            worker = Worker(
                worker_id=i,
                work=work,
                cancel=cancel,
                acks=acks,
                task=self.conversion_task,
                event_bus=self.event_bus,
            )
            t = threading.Thread(target=worker.listen, name=f"worker_{i}", daemon=True)
            threads.append(t)

        started = []
        try:
            for t in threads:
                t.start()
                started.append(t)
        except BaseException:
            # Nothing was dispatched, so started workers just acknowledge and exit
            cancel.cancel()
            for t in started:
                t.join()
            raise
        return threads

    def _shutdown(
        self,
        cancel: CancellationToken,
        acks: ShutdownAcknowledgments,
        threads: List[threading.Thread],
    ) -> None:
        cancel.cancel()
        self.logger.debug(f"SHUTDOWN: waiting for {acks.expected} workers")
        acks.wait()
        for t in threads:
            t.join()
        self.logger.debug(f"SHUTDOWN: {acks.received} workers acknowledged")
        self.event_bus.publish(ShutdownCompleted(workers=acks.received))
