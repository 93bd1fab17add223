"""
Queue-based logging setup.

Log records are handed to a queue and written by a background thread so
slow terminals or disks never stall the event loop. Console output goes
to stderr, leaving stdout to the CLI dashboard.
"""

import logging
import sys
from datetime import datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from queue import Queue
from typing import TextIO

from goldtrackr.config.constants import LOG_DATE_FORMAT, LOG_FORMAT, MAX_LOG_QUEUE_SIZE


PACKAGE_LOGGER = "goldtrackr"

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ("aiohttp", "asyncio", "uvicorn.access", "httpx")


class MillisecondFormatter(logging.Formatter):
    """Formatter with millisecond timestamps."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        ct = datetime.fromtimestamp(record.created)
        return f"{ct.strftime(datefmt or LOG_DATE_FORMAT)}.{int(record.msecs):03d}"


class QueueLogger:
    """
    Non-blocking logger wiring.

    Attaches a QueueHandler to the package logger; a QueueListener thread
    drains the queue into the console and optional file handlers.
    """

    def __init__(
        self,
        name: str = PACKAGE_LOGGER,
        level: int = logging.INFO,
        log_file: Path | None = None,
        stream: TextIO | None = None,
    ) -> None:
        """
        Initialize queue logger.

        Args:
            name: Logger to attach to.
            level: Logging level.
            log_file: Optional file path; receives DEBUG and above.
            stream: Console stream (default: stderr).
        """
        self._name = name
        self._level = level
        self._log_file = log_file
        self._stream = stream or sys.stderr
        self._queue: Queue[logging.LogRecord] = Queue(maxsize=MAX_LOG_QUEUE_SIZE)
        self._queue_handler: QueueHandler | None = None
        self._listener: QueueListener | None = None
        self._logger = logging.getLogger(name)

    def start(self) -> None:
        """Start the background writer."""
        if self._listener is not None:
            return

        formatter = MillisecondFormatter(LOG_FORMAT, LOG_DATE_FORMAT)
        handlers: list[logging.Handler] = []

        console_handler = logging.StreamHandler(self._stream)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(self._level)
        handlers.append(console_handler)

        if self._log_file:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self._log_file, encoding="utf-8")
            file_handler.setFormatter(formatter)
            file_handler.setLevel(logging.DEBUG)
            handlers.append(file_handler)

        self._queue_handler = QueueHandler(self._queue)
        self._logger.addHandler(self._queue_handler)
        # File handler wants DEBUG even when the console does not
        self._logger.setLevel(logging.DEBUG if self._log_file else self._level)
        self._logger.propagate = False

        self._listener = QueueListener(self._queue, *handlers, respect_handler_level=True)
        self._listener.start()

    def stop(self) -> None:
        """Flush pending records and stop the writer."""
        if self._listener:
            self._listener.stop()
            self._listener = None
        if self._queue_handler:
            self._logger.removeHandler(self._queue_handler)
            self._queue_handler = None

    @property
    def logger(self) -> logging.Logger:
        """Get the underlying logger."""
        return self._logger

    @property
    def is_running(self) -> bool:
        return self._listener is not None

    def __enter__(self) -> "QueueLogger":
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> QueueLogger:
    """
    Set up application-wide logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional log file path.
        stream: Console stream (default: stderr).

    Returns:
        Started QueueLogger; call stop() on shutdown.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    queue_logger = QueueLogger(
        name=PACKAGE_LOGGER,
        level=numeric_level,
        log_file=log_file,
        stream=stream,
    )
    queue_logger.start()

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return queue_logger
