"""Error types for the motion logger.

None of these are fatal: sensor errors degrade the display to inert text and
log-file errors are reported and otherwise ignored.
"""

from __future__ import annotations


class MotionLoggerError(Exception):
    """Base class for motion logger errors."""


class SensorUnavailableError(MotionLoggerError):
    """A sensor stream is not supported by the source."""

    def __init__(self, stream: str) -> None:
        super().__init__(f"Sensor stream not available: {stream}")
        self.stream = stream


class AuthorizationDeniedError(MotionLoggerError):
    """Motion access has been denied on this source."""


class LogWriteError(MotionLoggerError):
    """Appending a line to the log file failed."""

    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(f"Error while writing {path}: {cause}")
        self.path = path
        self.cause = cause


class LogDeleteError(MotionLoggerError):
    """Deleting the log file failed."""

    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(f"Error while deleting {path}: {cause}")
        self.path = path
        self.cause = cause
