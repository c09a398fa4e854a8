import logging
import time
from pathlib import Path
from typing import Optional

from batchmux.domain.errors import ConversionError
from batchmux.domain.events import JobCompleted, JobFailed, JobStarted
from batchmux.domain.models import ConversionJob, JobStatus
from batchmux.infrastructure.event_bus import EventBus
from batchmux.pipeline.cancellation import CancellationToken
from batchmux.pipeline.conversion import ConversionTask
from batchmux.pipeline.dispatch import DispatchQueue
from batchmux.pipeline.shutdown import ShutdownAcknowledgments


class Worker:
    """One member of the fixed-size worker pool.

    `listen` loops until cancellation: take a job, convert it, log the
    outcome, repeat. Conversion failures are logged and never end the loop.
    Cancellation is only seen between jobs. On exit the worker sends exactly
    one shutdown acknowledgment.

    Args:
        worker_id: Index used in log lines and job events.
        work: Dispatch queue shared with the job source.
        cancel: Token the orchestrator cancels at shutdown.
        acks: Shutdown barrier the orchestrator waits on.
        task: Conversion task run for every job.
        event_bus: Receives JobStarted / JobCompleted / JobFailed.
        logger: Info and error sink (defaults to this module's logger).
    """

    def __init__(
        self,
        worker_id: int,
        work: DispatchQueue,
        cancel: CancellationToken,
        acks: ShutdownAcknowledgments,
        task: ConversionTask,
        event_bus: EventBus,
        logger: Optional[logging.Logger] = None,
    ):
        self.worker_id = worker_id
        self.work = work
        self.cancel = cancel
        self.acks = acks
        self.task = task
        self.event_bus = event_bus
        self.logger = logger or logging.getLogger(__name__)
        self.jobs_processed = 0

    def listen(self) -> None:
        try:
            while True:
                job = self.work.get(self.cancel)
                if job is None:
                    break
                self._process(job)
            self.logger.debug(f"WORKER_EXIT: {self.worker_id} (jobs={self.jobs_processed})")
        finally:
            self.acks.acknowledge()

    def _process(self, path: str) -> None:
        job = ConversionJob(
            source_path=Path(path),
            status=JobStatus.PROCESSING,
            worker_id=self.worker_id,
        )
        self.event_bus.publish(JobStarted(job=job))
        start_time = time.monotonic()

        try:
            output_path = self.task.convert(path)
        except ConversionError as e:
            self._fail(job, path, str(e), start_time)
        except Exception as e:
            # Anything else is a bug in the task or transcoder; keep serving jobs.
            self.logger.exception(f"Unexpected error converting {path}")
            self._fail(job, path, f"unexpected error: {e}", start_time, log=False)
        else:
            job.output_path = Path(output_path)
            job.status = JobStatus.COMPLETED
            job.duration_seconds = time.monotonic() - start_time
            self.logger.debug(f"PROCESS_END: {path} status=completed elapsed={job.duration_seconds:.2f}s")
            self.event_bus.publish(JobCompleted(job=job))
        finally:
            self.jobs_processed += 1

    def _fail(self, job: ConversionJob, path: str, message: str, start_time: float, log: bool = True) -> None:
        if log:
            self.logger.error(f"Error converting {path}: {message}")
        job.status = JobStatus.FAILED
        job.error_message = message
        job.duration_seconds = time.monotonic() - start_time
        self.event_bus.publish(JobFailed(job=job, error_message=message))
