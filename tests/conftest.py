"""Shared test helpers: a sensor source that records calls and emits on demand."""

from motion_logger.events import AuthorizationStatus, StepCountEvent
from motion_logger.source import SensorSource


class FakeSensorSource(SensorSource):
    """Sensor source driven by the test instead of hardware."""

    def __init__(self, authorization=AuthorizationStatus.AUTHORIZED, **available):
        self.authorization = authorization
        self.available = {
            "activity": True,
            "step_count": True,
            "pedometer_event": True,
            "motion": True,
        }
        self.available.update(available)
        self.calls = []
        self.callbacks = {}
        self.query_result = 0

    def authorization_status(self):
        return self.authorization

    def is_activity_available(self):
        return self.available["activity"]

    def is_step_counting_available(self):
        return self.available["step_count"]

    def is_pedometer_event_available(self):
        return self.available["pedometer_event"]

    def is_motion_available(self):
        return self.available["motion"]

    def subscribe_activity(self, callback):
        self.calls.append(("subscribe_activity",))
        self.callbacks["activity"] = callback

    def subscribe_step_updates(self, since, callback):
        self.calls.append(("subscribe_step_updates", since))
        self.callbacks["step_count"] = callback

    def subscribe_step_events(self, callback):
        self.calls.append(("subscribe_step_events",))
        self.callbacks["pedometer_event"] = callback

    def subscribe_motion(self, interval, reference_frame, callback):
        self.calls.append(("subscribe_motion", interval, reference_frame))
        self.callbacks["motion"] = callback

    def query_step_count(self, since, until, callback):
        self.calls.append(("query_step_count", since, until))
        callback(StepCountEvent(until, self.query_result))

    def stop_activity(self):
        self.calls.append(("stop_activity",))
        self.callbacks.pop("activity", None)

    def stop_step_updates(self):
        self.calls.append(("stop_step_updates",))
        self.callbacks.pop("step_count", None)

    def stop_step_events(self):
        self.calls.append(("stop_step_events",))
        self.callbacks.pop("pedometer_event", None)

    def stop_motion(self):
        self.calls.append(("stop_motion",))
        self.callbacks.pop("motion", None)

    def emit(self, stream, event):
        self.callbacks[stream](event)

    def call_names(self):
        return [call[0] for call in self.calls]

