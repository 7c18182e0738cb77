"""Tracking session controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .display import NOT_AVAILABLE, DisplayField, DisplaySink
from .errors import MotionLoggerError
from .events import AuthorizationStatus, ReferenceFrame, SensorEvent
from .source import SensorSource

logger = logging.getLogger(__name__)

DEFAULT_MOTION_INTERVAL_SEC = 1.0 / 3.0


@dataclass
class SessionState:
    """Tracking flag and start time; ``started_at`` is set only while tracking."""

    is_tracking: bool = False
    started_at: Optional[datetime] = None

    def begin(self, now: datetime) -> None:
        self.is_tracking = True
        self.started_at = now

    def clear(self) -> None:
        self.is_tracking = False
        self.started_at = None


class SessionController:
    """
    Two-state (Idle / Tracking) toggle over the sensor subscriptions.

    ``on_event`` receives every event from every subscribed stream; in the
    application it is the pipeline's ``submit``. ``on_display`` receives
    display-only updates such as the refreshed step count.
    """

    def __init__(
        self,
        source: SensorSource,
        display: DisplaySink,
        on_event: Callable[[SensorEvent], None],
        on_display: Optional[Callable[[SensorEvent], None]] = None,
        motion_interval_sec: float = DEFAULT_MOTION_INTERVAL_SEC,
        reference_frame: ReferenceFrame = ReferenceFrame.X_MAGNETIC_NORTH_Z_VERTICAL,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.source = source
        self.display = display
        self.on_event = on_event
        self.on_display = on_display or on_event
        self.motion_interval_sec = motion_interval_sec
        self.reference_frame = reference_frame
        self.clock = clock

        self.state = SessionState()

    @property
    def is_tracking(self) -> bool:
        return self.state.is_tracking

    @property
    def started_at(self) -> Optional[datetime]:
        return self.state.started_at

    def toggle(self) -> bool:
        """Flip between Idle and Tracking; return the new tracking flag."""
        if self.state.is_tracking:
            self.stop()
        else:
            self.start()
        return self.state.is_tracking

    def start(self) -> None:
        """Begin tracking and subscribe to every available stream."""
        if self.state.is_tracking:
            return

        self.state.begin(self.clock())
        logger.info(f"Session started at {self.state.started_at:%Y-%m-%d %H:%M:%S}")

        if self.source.authorization_status() == AuthorizationStatus.DENIED:
            logger.warning("Motion authorization denied, stopping session")
            self.stop()
            self.display.set_text(DisplayField.ACTIVITY, NOT_AVAILABLE)
            self.display.set_text(DisplayField.STEPS, NOT_AVAILABLE)
            return

        self._subscribe_motion()
        self._subscribe_activity()
        self._subscribe_steps()

    def stop(self) -> None:
        """Stop tracking and cancel every subscription."""
        if not self.state.is_tracking:
            return

        self.state.clear()

        for stop in (
            self.source.stop_activity,
            self.source.stop_step_updates,
            self.source.stop_step_events,
            self.source.stop_motion,
        ):
            try:
                stop()
            except MotionLoggerError as e:
                logger.warning(f"Error stopping sensor updates: {e}")

        logger.info("Session stopped")

    def refresh_step_count(self) -> None:
        """Re-query the step count since the session start for the display."""
        if not self.state.is_tracking or not self.source.is_step_counting_available():
            return

        try:
            self.source.query_step_count(self.state.started_at, self.clock(), self.on_display)
        except MotionLoggerError as e:
            logger.warning(f"Step count query failed: {e}")

    def _subscribe_motion(self) -> None:
        if not self.source.is_motion_available():
            self._unavailable("motion", DisplayField.HEADING, DisplayField.ACCELERATION)
            return

        self._subscribe(
            "motion",
            lambda: self.source.subscribe_motion(
                self.motion_interval_sec, self.reference_frame, self.on_event
            ),
            DisplayField.HEADING,
            DisplayField.ACCELERATION,
        )

    def _subscribe_activity(self) -> None:
        if not self.source.is_activity_available():
            self._unavailable("activity", DisplayField.ACTIVITY)
            return

        self._subscribe(
            "activity",
            lambda: self.source.subscribe_activity(self.on_event),
            DisplayField.ACTIVITY,
        )

    def _subscribe_steps(self) -> None:
        if not self.source.is_step_counting_available():
            self._unavailable("step counting", DisplayField.STEPS)
            return

        since = self.state.started_at
        self._subscribe(
            "step counting",
            lambda: self.source.subscribe_step_updates(since, self.on_event),
            DisplayField.STEPS,
        )

        if not self.source.is_pedometer_event_available():
            self._unavailable("pedometer events", DisplayField.PEDOMETER_EVENT)
            return

        self._subscribe(
            "pedometer events",
            lambda: self.source.subscribe_step_events(self.on_event),
            DisplayField.PEDOMETER_EVENT,
        )

    def _subscribe(self, stream: str, subscribe: Callable[[], None], *fields: DisplayField) -> None:
        try:
            subscribe()
        except MotionLoggerError as e:
            logger.warning(f"Subscribing to {stream} failed: {e}")
            for field in fields:
                self.display.set_text(field, NOT_AVAILABLE)

    def _unavailable(self, stream: str, *fields: DisplayField) -> None:
        logger.info(f"Sensor stream not available: {stream}")
        for field in fields:
            self.display.set_text(field, NOT_AVAILABLE)
