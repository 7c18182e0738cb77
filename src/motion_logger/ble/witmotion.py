"""WitMotion WT901BLE IMU as a device-motion source."""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from datetime import datetime
from typing import Optional

from bleak import BleakClient, BleakError

from ..events import AccelerationVector, MotionSample, ReferenceFrame
from ..source import EventCallback, SensorSource
from .wt901_parse import Wt901Frame, parse_wt901_frames

logger = logging.getLogger(__name__)

DEFAULT_NOTIFY_UUID = "0000ffe4-0000-1000-8000-00805f9a34fb"


class WitMotionSource(SensorSource):
    """
    Device-motion stream from a WT901BLE over BLE.

    Only motion is provided; activity and step streams report unavailable.
    The sensor streams faster than the requested interval, so frames are
    thinned to at most one sample per interval. Acceleration includes gravity.

    Each connection attempt owns its own ``BleakClient``, so a cancelled
    subscription can finish disconnecting while a new one connects.
    """

    def __init__(
        self,
        mac_address: str,
        notify_uuid: str = DEFAULT_NOTIFY_UUID,
        adapter: str = "hci0",
        reconnect_initial_sec: float = 0.5,
        reconnect_max_sec: float = 10.0,
        reconnect_jitter_sec: float = 0.5,
    ) -> None:
        self.mac_address = mac_address
        self.notify_uuid = notify_uuid
        self.adapter = adapter
        self.reconnect_initial_sec = reconnect_initial_sec
        self.reconnect_max_sec = reconnect_max_sec
        self.reconnect_jitter_sec = reconnect_jitter_sec

        self._task: Optional[asyncio.Task] = None
        self._callback: Optional[EventCallback] = None
        self._interval_ns = 0
        self._last_emit_ns: Optional[int] = None

    def is_motion_available(self) -> bool:
        return bool(self.mac_address)

    def subscribe_motion(
        self,
        interval: float,
        reference_frame: ReferenceFrame,
        callback: EventCallback,
    ) -> None:
        if not self.is_motion_available():
            super().subscribe_motion(interval, reference_frame, callback)

        if reference_frame != ReferenceFrame.X_MAGNETIC_NORTH_Z_VERTICAL:
            logger.warning(
                f"WT901 reports attitude against magnetic north, ignoring {reference_frame.value}"
            )

        self.stop_motion()
        self._callback = callback
        self._interval_ns = int(interval * 1_000_000_000)
        self._last_emit_ns = None
        self._task = asyncio.create_task(self._reconnect_loop(callback))

    def stop_motion(self) -> None:
        self._callback = None
        if self._task and not self._task.done():
            self._task.cancel()

    async def aclose(self) -> None:
        task = self._task
        self.stop_motion()
        if task:
            await asyncio.gather(task, return_exceptions=True)
        self._task = None

    async def _reconnect_loop(self, callback: EventCallback) -> None:
        """Connect and stay connected, backing off exponentially on failure."""
        retry_delay = self.reconnect_initial_sec

        while True:
            disconnected = asyncio.Event()
            client = BleakClient(
                self.mac_address,
                adapter=self.adapter,
                disconnected_callback=functools.partial(self._on_device_disconnect, disconnected),
            )

            try:
                await self._connect(client, callback)
                retry_delay = self.reconnect_initial_sec
                await disconnected.wait()
            except Exception as e:
                logger.warning(f"WT901 {self.mac_address} connection failed: {e}")
            finally:
                await self._disconnect(client)

            jitter = (time.monotonic() % 1.0) * self.reconnect_jitter_sec
            await asyncio.sleep(retry_delay + jitter)
            retry_delay = min(retry_delay * 2, self.reconnect_max_sec)

    async def _connect(self, client: BleakClient, callback: EventCallback) -> None:
        logger.info(f"Connecting to WT901 at {self.mac_address}")

        await client.connect()
        await client.start_notify(
            self.notify_uuid,
            functools.partial(self._handle_notification, callback),
        )
        logger.info(f"WT901 {self.mac_address} connected and notifications enabled")

    async def _disconnect(self, client: BleakClient) -> None:
        try:
            if client.is_connected:
                await client.disconnect()
        except BleakError as e:
            logger.warning(f"Error during WT901 disconnect: {e}")

    def _on_device_disconnect(self, disconnected: asyncio.Event, client: BleakClient) -> None:
        logger.warning(f"WT901 {self.mac_address} disconnected")
        disconnected.set()

    def _handle_notification(self, callback: EventCallback, sender, data: bytearray) -> None:
        frames = parse_wt901_frames(bytes(data))
        if not frames:
            logger.debug(f"WT901 notification without frames: {bytes(data).hex()}")
            return

        # Notifications from a cancelled subscription may still arrive
        if self._callback is not callback:
            return

        now_ns = time.monotonic_ns()
        if self._last_emit_ns is not None and now_ns - self._last_emit_ns < self._interval_ns:
            return

        frame = frames[-1]
        logger.debug(f"WT901 frame {frame.to_dict()}")

        self._last_emit_ns = now_ns
        callback(frame_to_sample(frame, datetime.now()))


def frame_to_sample(frame: Wt901Frame, timestamp: datetime) -> MotionSample:
    """Convert a decoded frame into a device-motion sample."""
    roll, pitch, yaw = frame.attitude_rad
    return MotionSample(
        timestamp,
        roll=roll,
        pitch=pitch,
        yaw=yaw,
        heading=frame.heading_deg,
        acceleration=AccelerationVector(frame.ax, frame.ay, frame.az),
    )
