"""Sensor events, log records and the enums shared between them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union


class Category(str, Enum):
    """Record category; the value is the token written to the log line."""

    HEADING = "HEADING"
    ACCEL_MAGNITUDE = "ACCELMAGNITUDE"
    ACCEL_DIRECTION = "ACCELDIRECTION"
    ACTIVITY_TYPE = "ACTIVITYTYPE"
    STEP_COUNT = "STEPCOUNT"
    PEDOMETER_EVENT = "PEDOMETEREVENT"


class TransitionKind(str, Enum):
    """Pedometer transition reported by a step-event stream."""

    PAUSE = "pause"
    RESUME = "resume"
    UNKNOWN = "unknown"


class AuthorizationStatus(str, Enum):
    """Motion access authorization as reported by a sensor source."""

    NOT_DETERMINED = "not_determined"
    RESTRICTED = "restricted"
    DENIED = "denied"
    AUTHORIZED = "authorized"


class ReferenceFrame(str, Enum):
    """Attitude reference frame requested for device-motion updates."""

    X_ARBITRARY_Z_VERTICAL = "x_arbitrary_z_vertical"
    X_ARBITRARY_CORRECTED_Z_VERTICAL = "x_arbitrary_corrected_z_vertical"
    X_MAGNETIC_NORTH_Z_VERTICAL = "x_magnetic_north_z_vertical"
    X_TRUE_NORTH_Z_VERTICAL = "x_true_north_z_vertical"


@dataclass(frozen=True)
class AccelerationVector:
    """User acceleration in g."""

    x: float
    y: float
    z: float


@dataclass(frozen=True)
class ActivityEvent:
    """Activity classification flags; several may be set at once."""

    timestamp: datetime
    walking: bool = False
    stationary: bool = False
    running: bool = False
    automotive: bool = False


@dataclass(frozen=True)
class StepCountEvent:
    """Cumulative step count since the subscription start."""

    timestamp: datetime
    steps: int


@dataclass(frozen=True)
class StepTransitionEvent:
    """Pedometer paused or resumed counting."""

    timestamp: datetime
    kind: TransitionKind


@dataclass(frozen=True)
class MotionSample:
    """Device-motion sample: attitude in radians, heading in degrees."""

    timestamp: datetime
    roll: float
    pitch: float
    yaw: float
    heading: float
    acceleration: AccelerationVector = field(
        default_factory=lambda: AccelerationVector(0.0, 0.0, 0.0)
    )


SensorEvent = Union[ActivityEvent, StepCountEvent, StepTransitionEvent, MotionSample]


@dataclass(frozen=True)
class LogRecord:
    """A normalized reading; the only unit written to the log."""

    timestamp: datetime
    category: Category
    text: str
