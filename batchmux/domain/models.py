import threading
from enum import Enum
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, PrivateAttr

class JobStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

class ConversionJob(BaseModel):
    source_path: Path
    output_path: Optional[Path] = None
    status: JobStatus = JobStatus.PENDING
    error_message: Optional[str] = None
    duration_seconds: Optional[float] = None
    worker_id: Optional[int] = None

class RunSummary(BaseModel):
    """Counters for one run; updated concurrently by worker threads."""

    workers: int = 1
    dispatched: int = 0
    completed: int = 0
    failed: int = 0

    _lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    def record_completed(self) -> None:
        with self._lock:
            self.completed += 1

    def record_failed(self) -> None:
        with self._lock:
            self.failed += 1
