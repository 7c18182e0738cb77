"""Latest-value display of sensor readings."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterable, Protocol

from .events import Category, LogRecord

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "Not available"


class DisplayField(str, Enum):
    STEPS = "steps"
    ACTIVITY = "activity"
    HEADING = "heading"
    ACCELERATION = "acceleration"
    PEDOMETER_EVENT = "pedometer_event"


class DisplaySink(Protocol):
    """Anything that can show text in the five display fields."""

    def set_text(self, field: DisplayField, text: str) -> None:
        ...


class DisplayBoard:
    """In-memory display holding the latest text per field."""

    def __init__(self) -> None:
        self._fields: Dict[DisplayField, str] = {field: "" for field in DisplayField}

    def set_text(self, field: DisplayField, text: str) -> None:
        self._fields[field] = text
        logger.debug(f"display {field.value} = {text}")

    def get_text(self, field: DisplayField) -> str:
        return self._fields[field]

    def snapshot(self) -> Dict[str, str]:
        """Return field name to text, for status reporting."""
        return {field.value: text for field, text in self._fields.items()}


_FIELD_BY_CATEGORY = {
    Category.HEADING: DisplayField.HEADING,
    Category.ACTIVITY_TYPE: DisplayField.ACTIVITY,
    Category.STEP_COUNT: DisplayField.STEPS,
    Category.PEDOMETER_EVENT: DisplayField.PEDOMETER_EVENT,
}


def apply_records(display: DisplaySink, records: Iterable[LogRecord]) -> None:
    """
    Push records to the display.

    Magnitude and direction share the acceleration field as
    ``"<magnitude> <direction>"``, so they are combined per batch.
    """
    magnitude = direction = None

    for record in records:
        if record.category == Category.ACCEL_MAGNITUDE:
            magnitude = record.text
        elif record.category == Category.ACCEL_DIRECTION:
            direction = record.text
        else:
            display.set_text(_FIELD_BY_CATEGORY[record.category], record.text)

    if magnitude is not None or direction is not None:
        display.set_text(DisplayField.ACCELERATION, f"{magnitude or ''} {direction or ''}".strip())
