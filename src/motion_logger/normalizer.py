"""Conversion of raw sensor events into log records."""

from __future__ import annotations

import math
from datetime import datetime
from typing import List

from .events import (
    ActivityEvent,
    Category,
    LogRecord,
    MotionSample,
    SensorEvent,
    StepCountEvent,
    StepTransitionEvent,
    TransitionKind,
)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def round2(value: float) -> float:
    """Round to 2 decimals, ties away from zero (0.005 -> 0.01)."""
    return math.copysign(math.floor(abs(value * 100) + 0.5), value) / 100


def acceleration_magnitude(x: float, y: float) -> float:
    """Horizontal acceleration magnitude, rounded to 2 decimals."""
    return round2(math.sqrt(x * x + y * y))


def acceleration_direction(x: float, y: float) -> float:
    """Horizontal acceleration direction in radians, rounded to 2 decimals."""
    return round2(math.atan2(y, x))


def classify_activity(event: ActivityEvent) -> str:
    """Return the single activity label, first matching flag wins."""
    if event.walking:
        return "Walking"
    if event.stationary:
        return "Stationary"
    if event.running:
        return "Running"
    if event.automotive:
        return "Automotive"
    return "Unknown"


def transition_label(kind: TransitionKind) -> str:
    if kind == TransitionKind.PAUSE:
        return "Pause"
    if kind == TransitionKind.RESUME:
        return "Resume"
    return "Unknown"


def format_timestamp(timestamp: datetime) -> str:
    """Format in local time; naive datetimes are taken as local already."""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone()
    return timestamp.strftime(TIMESTAMP_FORMAT)


def normalize(event: SensorEvent) -> List[LogRecord]:
    """
    Convert one sensor event into log records.

    A MotionSample yields heading, acceleration magnitude and acceleration
    direction records sharing the sample's timestamp; every other event
    yields exactly one record. The z axis is not recorded.

    Raises:
        TypeError: if ``event`` is not a known sensor event.
    """
    if not isinstance(event, (MotionSample, ActivityEvent, StepCountEvent, StepTransitionEvent)):
        raise TypeError(f"Unsupported sensor event: {type(event).__name__}")

    ts = event.timestamp

    if isinstance(event, MotionSample):
        accel = event.acceleration
        return [
            LogRecord(ts, Category.HEADING, str(event.heading)),
            LogRecord(ts, Category.ACCEL_MAGNITUDE, str(acceleration_magnitude(accel.x, accel.y))),
            LogRecord(ts, Category.ACCEL_DIRECTION, str(acceleration_direction(accel.x, accel.y))),
        ]

    if isinstance(event, ActivityEvent):
        return [LogRecord(ts, Category.ACTIVITY_TYPE, classify_activity(event))]

    if isinstance(event, StepCountEvent):
        return [LogRecord(ts, Category.STEP_COUNT, str(event.steps))]

    return [LogRecord(ts, Category.PEDOMETER_EVENT, transition_label(event.kind))]
