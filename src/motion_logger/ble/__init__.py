"""BLE sensor sources."""

from .witmotion import WitMotionSource
from .wt901_parse import Wt901Frame, parse_wt901_frames

__all__ = ["WitMotionSource", "Wt901Frame", "parse_wt901_frames"]
