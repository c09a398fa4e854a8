"""Exception hierarchy for batchmux.

Input and enumeration errors are fatal to a run and propagate out of the
orchestrator once every worker has shut down. Conversion errors are per job:
workers log them and move on to the next job.
"""

from typing import Optional


class BatchMuxError(Exception):
    """Base class for all batchmux errors."""


class InvalidInputError(BatchMuxError):
    """Missing or conflicting inputs, or a file without the required extension."""


class TargetNotFoundError(BatchMuxError):
    """Directory target does not exist."""


class TargetNotADirectoryError(BatchMuxError):
    """Directory target exists but is not a directory."""


class EnumerationError(BatchMuxError):
    """Listing a directory failed while walking the tree."""


class ConversionError(BatchMuxError):
    """Base class for errors scoped to a single job."""


class TranscodeError(ConversionError):
    """External transcoder failed to start or exited non-zero."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class RemovalError(ConversionError):
    """Source file could not be removed after a successful conversion."""
