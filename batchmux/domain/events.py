"""Domain events for the conversion pipeline.

Workers and the orchestrator publish these through the EventBus so that
bookkeeping (the run summary) stays out of the dispatch loop.

See `infrastructure/event_bus.py` for the pub/sub mechanism.
"""

from pydantic import BaseModel
from .models import ConversionJob


class Event(BaseModel):
    """Base class for all domain events.

    Events are validated Pydantic models. They are not frozen by default.
    """

    pass

class JobEvent(Event):
    """Base class for events related to a specific conversion job."""

    job: ConversionJob


class JobStarted(JobEvent):
    """Emitted when a worker picks a job off the dispatch queue."""

    pass


class JobCompleted(JobEvent):
    """Emitted when the output is written and the source removed."""

    pass


class JobFailed(JobEvent):
    """Emitted when transcoding or source removal fails."""

    error_message: str


class DispatchFinished(Event):
    """Emitted once the job source stops emitting (normally or not)."""

    jobs_dispatched: int


class ShutdownCompleted(Event):
    """Emitted after every worker has acknowledged shutdown."""

    workers: int
