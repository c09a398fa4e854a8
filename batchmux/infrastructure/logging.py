import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "batchmux"
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


class _BelowErrorFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.ERROR


def setup_logging(log_path: Optional[Path] = None, verbose: bool = False, debug: bool = False) -> logging.Logger:
    """
    Setup logging configuration for batchmux.

    Sinks:
      - log_path: every record appended to the file, one timestamped line each
      - verbose: info lines echoed to stdout
      - errors go to stderr unless a log file is configured, in which case
        they land in the file (and on stdout when verbose)

    Handlers are thread-safe, so workers share the returned logger freely.
    Calling this again replaces the previous handlers.

    Args:
        log_path: Optional path to a log file (created if missing, appended to)
        verbose: If True, echo log lines to stdout
        debug: If True, enable DEBUG level logging
    """
    logger = logging.getLogger(LOGGER_NAME)
    close_logging()

    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)

    if log_path is not None:
        log_file = Path(log_path)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    if verbose:
        stdout_handler = RichHandler(
            console=Console(file=sys.stdout),
            show_path=False,
            markup=False,
        )
        if log_path is None:
            stdout_handler.addFilter(_BelowErrorFilter())
        logger.addHandler(stdout_handler)

    if log_path is None:
        stderr_handler = RichHandler(
            console=Console(stderr=True),
            level=logging.ERROR,
            show_path=False,
            markup=False,
        )
        logger.addHandler(stderr_handler)

    logger.debug(f"Logging initialized: file={log_path} verbose={verbose} debug={debug}")
    return logger


def close_logging() -> None:
    """Flush, close and detach every batchmux handler.

    Only call once all workers have acknowledged shutdown.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        try:
            handler.flush()
        finally:
            handler.close()
            logger.removeHandler(handler)
