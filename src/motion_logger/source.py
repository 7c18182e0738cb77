"""Sensor source contract and a simulated source."""

from __future__ import annotations

import asyncio
import logging
import math
import random
from datetime import datetime
from typing import Callable, List, Optional

from .errors import AuthorizationDeniedError, SensorUnavailableError
from .events import (
    AccelerationVector,
    ActivityEvent,
    AuthorizationStatus,
    MotionSample,
    ReferenceFrame,
    SensorEvent,
    StepCountEvent,
    StepTransitionEvent,
    TransitionKind,
)

logger = logging.getLogger(__name__)

EventCallback = Callable[[SensorEvent], None]


class SensorSource:
    """
    Producer of the four sensor streams.

    Subclasses deliver events by calling the subscribed callback, from any
    thread. ``stop_*`` methods must be safe to call when nothing is
    subscribed. The default implementation reports every stream as
    unavailable.
    """

    def authorization_status(self) -> AuthorizationStatus:
        return AuthorizationStatus.AUTHORIZED

    def is_activity_available(self) -> bool:
        return False

    def is_step_counting_available(self) -> bool:
        return False

    def is_pedometer_event_available(self) -> bool:
        return False

    def is_motion_available(self) -> bool:
        return False

    def subscribe_activity(self, callback: EventCallback) -> None:
        raise SensorUnavailableError("activity")

    def subscribe_step_updates(self, since: datetime, callback: EventCallback) -> None:
        raise SensorUnavailableError("step_count")

    def subscribe_step_events(self, callback: EventCallback) -> None:
        raise SensorUnavailableError("pedometer_event")

    def subscribe_motion(
        self,
        interval: float,
        reference_frame: ReferenceFrame,
        callback: EventCallback,
    ) -> None:
        raise SensorUnavailableError("motion")

    def query_step_count(self, since: datetime, until: datetime, callback: EventCallback) -> None:
        raise SensorUnavailableError("step_count")

    def stop_activity(self) -> None:
        pass

    def stop_step_updates(self) -> None:
        pass

    def stop_step_events(self) -> None:
        pass

    def stop_motion(self) -> None:
        pass

    async def aclose(self) -> None:
        """Release any background resources."""


class SimulatedSensorSource(SensorSource):
    """
    Synthesizes all four streams on the running event loop.

    Acceleration is a damped random walk, heading rotates slowly, the
    activity cycles through walking/running/stationary, steps accumulate while
    walking or running, and the pedometer pauses whenever the activity is
    stationary.
    """

    ACTIVITY_PERIOD_SEC = 10.0
    STEP_PERIOD_SEC = 2.5

    def __init__(
        self,
        authorization: AuthorizationStatus = AuthorizationStatus.AUTHORIZED,
        activity_available: bool = True,
        step_counting_available: bool = True,
        pedometer_event_available: bool = True,
        motion_available: bool = True,
        seed: Optional[int] = None,
    ) -> None:
        self.authorization = authorization
        self.activity_available = activity_available
        self.step_counting_available = step_counting_available
        self.pedometer_event_available = pedometer_event_available
        self.motion_available = motion_available

        self._rng = random.Random(seed)
        self._activity_task: Optional[asyncio.Task] = None
        self._step_task: Optional[asyncio.Task] = None
        self._motion_task: Optional[asyncio.Task] = None
        self._step_event_callback: Optional[EventCallback] = None
        self._tasks: List[asyncio.Task] = []

        # Simulated body state
        self._activity_index = 0
        self._steps = 0
        self._step_log: List[datetime] = []

    def authorization_status(self) -> AuthorizationStatus:
        return self.authorization

    def is_activity_available(self) -> bool:
        return self.activity_available

    def is_step_counting_available(self) -> bool:
        return self.step_counting_available

    def is_pedometer_event_available(self) -> bool:
        return self.pedometer_event_available

    def is_motion_available(self) -> bool:
        return self.motion_available

    @property
    def current_activity(self) -> str:
        return ("walking", "running", "stationary")[self._activity_index % 3]

    def subscribe_activity(self, callback: EventCallback) -> None:
        self._check("activity", self.activity_available)
        self.stop_activity()
        self._activity_task = self._spawn(self._activity_loop(callback))

    def subscribe_step_updates(self, since: datetime, callback: EventCallback) -> None:
        self._check("step_count", self.step_counting_available)
        self.stop_step_updates()
        self._steps = 0
        self._step_log = [ts for ts in self._step_log if ts >= since]
        self._step_task = self._spawn(self._step_loop(callback))

    def subscribe_step_events(self, callback: EventCallback) -> None:
        self._check("pedometer_event", self.pedometer_event_available)
        self._step_event_callback = callback

    def subscribe_motion(
        self,
        interval: float,
        reference_frame: ReferenceFrame,
        callback: EventCallback,
    ) -> None:
        self._check("motion", self.motion_available)
        self.stop_motion()
        logger.debug(f"Simulated motion at {interval:.3f}s in frame {reference_frame.value}")
        self._motion_task = self._spawn(self._motion_loop(interval, callback))

    def query_step_count(self, since: datetime, until: datetime, callback: EventCallback) -> None:
        self._check("step_count", self.step_counting_available)
        steps = sum(1 for ts in self._step_log if since <= ts <= until)
        callback(StepCountEvent(datetime.now(), steps))

    def stop_activity(self) -> None:
        self._activity_task = self._cancel(self._activity_task)

    def stop_step_updates(self) -> None:
        self._step_task = self._cancel(self._step_task)

    def stop_step_events(self) -> None:
        self._step_event_callback = None

    def stop_motion(self) -> None:
        self._motion_task = self._cancel(self._motion_task)

    async def aclose(self) -> None:
        tasks = self._tasks
        self._tasks = []
        self.stop_activity()
        self.stop_step_updates()
        self.stop_step_events()
        self.stop_motion()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _check(self, stream: str, available: bool) -> None:
        if not available:
            raise SensorUnavailableError(stream)
        if self.authorization == AuthorizationStatus.DENIED:
            raise AuthorizationDeniedError(f"Motion access denied for {stream}")

    def _spawn(self, coro) -> asyncio.Task:
        self._tasks = [t for t in self._tasks if not t.done()]
        task = asyncio.create_task(coro)
        self._tasks.append(task)
        return task

    @staticmethod
    def _cancel(task: Optional[asyncio.Task]) -> Optional[asyncio.Task]:
        if task and not task.done():
            task.cancel()
        return None

    async def _activity_loop(self, callback: EventCallback) -> None:
        while True:
            activity = self.current_activity
            callback(ActivityEvent(
                datetime.now(),
                walking=activity == "walking",
                running=activity == "running",
                stationary=activity == "stationary",
            ))

            await asyncio.sleep(self.ACTIVITY_PERIOD_SEC)

            previous = activity
            self._activity_index += 1
            self._emit_transition(previous, self.current_activity)

    def _emit_transition(self, previous: str, current: str) -> None:
        if not self._step_event_callback:
            return
        if current == "stationary":
            kind = TransitionKind.PAUSE
        elif previous == "stationary":
            kind = TransitionKind.RESUME
        else:
            return
        self._step_event_callback(StepTransitionEvent(datetime.now(), kind))

    async def _step_loop(self, callback: EventCallback) -> None:
        while True:
            await asyncio.sleep(self.STEP_PERIOD_SEC)

            activity = self.current_activity
            if activity == "stationary":
                continue

            cadence = 2.8 if activity == "running" else 1.8
            new_steps = int(cadence * self.STEP_PERIOD_SEC + self._rng.uniform(-1.0, 1.0))
            now = datetime.now()
            self._steps += max(new_steps, 0)
            self._step_log.extend([now] * max(new_steps, 0))
            callback(StepCountEvent(now, self._steps))

    async def _motion_loop(self, interval: float, callback: EventCallback) -> None:
        heading = self._rng.uniform(0.0, 360.0)
        ax = ay = az = 0.0

        while True:
            moving = self.current_activity != "stationary"
            spread = 0.15 if moving else 0.01

            # Damped random walk keeps the vector bounded
            ax = 0.7 * ax + self._rng.gauss(0.0, spread)
            ay = 0.7 * ay + self._rng.gauss(0.0, spread)
            az = 0.7 * az + self._rng.gauss(0.0, spread)
            heading = (heading + self._rng.uniform(-5.0, 5.0)) % 360.0

            yaw = math.radians((180.0 - heading) % 360.0 - 180.0)
            callback(MotionSample(
                datetime.now(),
                roll=self._rng.gauss(0.0, 0.05),
                pitch=self._rng.gauss(0.0, 0.05),
                yaw=yaw,
                heading=heading,
                acceleration=AccelerationVector(ax, ay, az),
            ))

            await asyncio.sleep(interval)
