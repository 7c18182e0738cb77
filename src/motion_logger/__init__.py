"""Motion Logger - motion-sensor session logging."""

__version__ = "0.1.0"

from .app import MotionLoggerApp
from .config import AppConfig, load_config
from .logs import LogAppender
from .normalizer import normalize
from .session import SessionController

__all__ = [
    "AppConfig",
    "LogAppender",
    "MotionLoggerApp",
    "SessionController",
    "load_config",
    "normalize",
]
