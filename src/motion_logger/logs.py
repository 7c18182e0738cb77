"""Append-only text log of normalized sensor records."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

from .errors import LogDeleteError, LogWriteError, MotionLoggerError
from .events import LogRecord
from .normalizer import format_timestamp

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "log.txt"


def format_line(record: LogRecord) -> str:
    """Render a record as ``<timestamp>, <CATEGORY>, <value>``."""
    return f"{format_timestamp(record.timestamp)}, {record.category.value}, {record.text}"


class LogAppender:
    """
    Writes one line per record to a single log file.

    The file is opened for each append and closed right after, so no handle
    is held between calls. All calls are expected to come from one execution
    context; the appender does no locking of its own.
    """

    def __init__(
        self,
        log_dir: Union[str, Path],
        file_name: str = DEFAULT_FILE_NAME,
        on_error: Optional[Callable[[MotionLoggerError], None]] = None,
    ) -> None:
        self.log_dir = Path(log_dir)
        self.file_name = file_name
        self.on_error = on_error

        self.write_count = 0
        self.failure_count = 0

    @property
    def path(self) -> Path:
        return self.log_dir / self.file_name

    def append(self, record: LogRecord) -> bool:
        """Append a record; return False if the write failed."""
        line = format_line(record) + "\n"

        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            self._report(LogWriteError(str(self.path), e))
            return False

        self.write_count += 1
        return True

    def reset(self) -> bool:
        """Delete the log file if present; return False if deletion failed."""
        if not self.path.exists():
            logger.info(f"Log file does not exist: {self.path}")
            return True

        try:
            self.path.unlink()
        except FileNotFoundError:
            return True
        except OSError as e:
            self._report(LogDeleteError(str(self.path), e))
            return False

        logger.debug(f"Removed log file {self.path}")
        return True

    def read_lines(self) -> List[str]:
        """Return the current log lines without line terminators."""
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as f:
            return f.read().splitlines()

    def _report(self, error: MotionLoggerError) -> None:
        self.failure_count += 1
        logger.error(str(error))
        if self.on_error:
            self.on_error(error)
