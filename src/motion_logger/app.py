"""Application coordinator wiring source, session, pipeline and log."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from .config import AppConfig
from .display import DisplayBoard, DisplaySink
from .errors import MotionLoggerError
from .events import AuthorizationStatus, ReferenceFrame
from .logs import LogAppender
from .pipeline import EventPipeline
from .session import SessionController
from .source import SensorSource, SimulatedSensorSource

logger = logging.getLogger(__name__)


def build_source(config: AppConfig) -> SensorSource:
    """Create the sensor source named by ``config.source.kind``."""
    kind = config.source.kind

    if kind == "simulated":
        return SimulatedSensorSource(
            authorization=AuthorizationStatus(config.source.authorization),
            activity_available=config.source.activity_available,
            step_counting_available=config.source.step_counting_available,
            pedometer_event_available=config.source.pedometer_event_available,
            motion_available=config.source.motion_available,
            seed=config.source.seed,
        )

    if kind == "witmotion":
        from .ble.witmotion import WitMotionSource

        return WitMotionSource(
            mac_address=config.witmotion.mac,
            notify_uuid=config.witmotion.notify_uuid,
            adapter=config.witmotion.adapter,
            reconnect_initial_sec=config.witmotion.reconnect_initial_sec,
            reconnect_max_sec=config.witmotion.reconnect_max_sec,
            reconnect_jitter_sec=config.witmotion.reconnect_jitter_sec,
        )

    raise ValueError(f"Unknown sensor source: {kind}")


class MotionLoggerApp:
    """Owns one log, one display and one session over a sensor source."""

    def __init__(
        self,
        config: AppConfig,
        source: Optional[SensorSource] = None,
        display: Optional[DisplaySink] = None,
    ) -> None:
        self.config = config
        self.source = source or build_source(config)
        self.display = display or DisplayBoard()

        self.errors: List[MotionLoggerError] = []
        self.appender = LogAppender(
            config.log.dir,
            config.log.file_name,
            on_error=self.errors.append,
        )
        self.pipeline = EventPipeline(self.appender, self.display)
        self.session = SessionController(
            self.source,
            self.display,
            on_event=self.pipeline.submit,
            on_display=self.pipeline.show,
            motion_interval_sec=config.motion.update_interval_sec,
            reference_frame=ReferenceFrame(config.motion.reference_frame),
        )

        self._status_task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        """Clear the previous log and start consuming events."""
        self.appender.reset()
        await self.pipeline.start()
        self._status_task = asyncio.create_task(self._status_loop())
        logger.info(f"Motion logger ready, writing to {self.appender.path}")

    def toggle(self) -> bool:
        """Start or stop tracking; return whether tracking is now active."""
        return self.session.toggle()

    async def stop(self) -> None:
        """Stop tracking, flush pending events and release the source."""
        self.session.stop()

        if self._status_task:
            self._status_task.cancel()
            await asyncio.gather(self._status_task, return_exceptions=True)
            self._status_task = None

        await self.source.aclose()
        await self.pipeline.stop()

        logger.info(
            f"Motion logger stopped: {self.pipeline.processed_count} events, "
            f"{self.pipeline.record_count} records, {len(self.errors)} log errors"
        )

    def status(self) -> dict:
        status = {
            "tracking": self.session.is_tracking,
            "events": self.pipeline.processed_count,
            "records": self.pipeline.record_count,
            "log_errors": len(self.errors),
        }
        if isinstance(self.display, DisplayBoard):
            status["display"] = self.display.snapshot()
        return status

    async def _status_loop(self) -> None:
        """Periodic status reporting."""
        while True:
            await asyncio.sleep(self.config.status_interval_sec)
            self.session.refresh_step_count()
            logger.info(f"Status: {self.status()}")


async def run_app(config_path: str, duration: Optional[float] = None) -> None:
    """Run a tracking session until interrupted or ``duration`` elapses."""
    from .config import load_config, validate_config

    config = load_config(config_path)
    errors = validate_config(config)

    if errors:
        logger.error("Configuration validation failed:")
        for error in errors:
            logger.error(f"  - {error}")
        return

    app = MotionLoggerApp(config)

    try:
        await app.start()
        app.toggle()

        if duration is not None:
            await asyncio.sleep(duration)
        else:
            while True:
                await asyncio.sleep(1.0)

    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Received interrupt signal, stopping motion logger")
    finally:
        await app.stop()
