"""Tests for the WT901BLE motion source against a fake BLE client."""

import asyncio
import struct

import pytest
from bleak import BleakError

from motion_logger.ble import witmotion
from motion_logger.ble.witmotion import WitMotionSource
from motion_logger.errors import SensorUnavailableError
from motion_logger.events import MotionSample, ReferenceFrame

MAGNETIC = ReferenceFrame.X_MAGNETIC_NORTH_Z_VERTICAL
MAC = "AA:BB:CC:DD:EE:FF"

# yaw of -8192 raw is -45 deg, so heading 45 deg
FRAME = bytearray(struct.pack("<BB9h", 0x55, 0x61, 2048, 0, 2048, 0, 0, 0, 0, 0, -8192))


class FakeBleakClient:
    """Stands in for bleak.BleakClient; records what the source does with it."""

    instances = []
    failures = 0

    def __init__(self, address, adapter=None, disconnected_callback=None):
        self.address = address
        self.adapter = adapter
        self.disconnected_callback = disconnected_callback
        self.connected = False
        self.handler = None
        self.disconnect_calls = 0
        FakeBleakClient.instances.append(self)

    @property
    def is_connected(self):
        return self.connected

    async def connect(self):
        if FakeBleakClient.failures > 0:
            FakeBleakClient.failures -= 1
            raise BleakError(f"Device with address {self.address} was not found")
        self.connected = True

    async def start_notify(self, uuid, handler):
        self.uuid = uuid
        self.handler = handler

    async def disconnect(self):
        self.disconnect_calls += 1
        self.connected = False

    def drop_link(self):
        self.connected = False
        self.disconnected_callback(self)


@pytest.fixture
def clients(monkeypatch):
    FakeBleakClient.instances = []
    FakeBleakClient.failures = 0
    monkeypatch.setattr(witmotion, "BleakClient", FakeBleakClient)
    return FakeBleakClient.instances


def make_source(mac=MAC):
    return WitMotionSource(
        mac,
        reconnect_initial_sec=0.01,
        reconnect_max_sec=0.05,
        reconnect_jitter_sec=0.0,
    )


async def wait_until(predicate):
    for _ in range(1000):
        if predicate():
            return
        await asyncio.sleep(0.001)
    raise AssertionError("condition not reached")


class TestWitMotionSource:
    """Test suite for WitMotionSource."""

    def test_restart_keeps_new_connection(self, clients):
        """Test that stopping and resubscribing leaves the new client connected."""
        first_samples, second_samples = [], []
        source = make_source()

        async def scenario():
            source.subscribe_motion(0.0, MAGNETIC, first_samples.append)
            await wait_until(lambda: clients and clients[0].handler)

            source.stop_motion()
            source.subscribe_motion(0.0, MAGNETIC, second_samples.append)
            await wait_until(lambda: len(clients) == 2 and clients[1].handler)

            first, second = clients
            assert first.disconnect_calls == 1
            assert not first.is_connected
            assert second.is_connected
            assert second.disconnect_calls == 0

            first.handler(None, FRAME)
            second.handler(None, FRAME)

            await source.aclose()
            assert second.disconnect_calls == 1

        asyncio.run(scenario())

        assert first_samples == []
        assert len(second_samples) == 1

    def test_samples_are_thinned_to_interval(self, clients):
        """Test that frames arriving faster than the interval yield one sample."""
        samples = []
        source = make_source()

        async def scenario():
            source.subscribe_motion(10.0, MAGNETIC, samples.append)
            await wait_until(lambda: clients and clients[0].handler)
            clients[0].handler(None, FRAME)
            clients[0].handler(None, FRAME)
            await source.aclose()

        asyncio.run(scenario())

        assert len(samples) == 1
        sample = samples[0]
        assert isinstance(sample, MotionSample)
        assert sample.heading == pytest.approx(45.0)
        assert sample.acceleration.x == pytest.approx(1.0)

    def test_notifications_after_stop_are_ignored(self, clients):
        """Test that late notifications from a stopped subscription are dropped."""
        samples = []
        source = make_source()

        async def scenario():
            source.subscribe_motion(0.0, MAGNETIC, samples.append)
            await wait_until(lambda: clients and clients[0].handler)
            source.stop_motion()
            clients[0].handler(None, FRAME)
            await source.aclose()

        asyncio.run(scenario())

        assert samples == []

    def test_notification_without_frames_is_ignored(self, clients):
        """Test that a payload with no complete frame emits nothing."""
        samples = []
        source = make_source()

        async def scenario():
            source.subscribe_motion(0.0, MAGNETIC, samples.append)
            await wait_until(lambda: clients and clients[0].handler)
            clients[0].handler(None, bytearray(b"\x00\x55\x61\x01"))
            await source.aclose()

        asyncio.run(scenario())

        assert samples == []

    def test_reconnects_after_connect_failure(self, clients):
        """Test that a failed connect is retried with a fresh client."""
        FakeBleakClient.failures = 1
        source = make_source()

        async def scenario():
            source.subscribe_motion(0.0, MAGNETIC, lambda event: None)
            await wait_until(lambda: len(clients) == 2 and clients[1].handler)
            await source.aclose()

        asyncio.run(scenario())

        assert clients[0].handler is None
        assert clients[0].disconnect_calls == 0
        assert clients[1].disconnect_calls == 1

    def test_reconnects_after_device_disconnect(self, clients):
        """Test that a dropped link triggers a new connection."""
        samples = []
        source = make_source()

        async def scenario():
            source.subscribe_motion(0.0, MAGNETIC, samples.append)
            await wait_until(lambda: clients and clients[0].handler)
            clients[0].drop_link()
            await wait_until(lambda: len(clients) == 2 and clients[1].handler)
            clients[1].handler(None, FRAME)
            await source.aclose()

        asyncio.run(scenario())

        assert len(samples) == 1
        assert all(client.address == MAC for client in clients)

    def test_only_motion_is_available(self):
        """Test that activity and step streams report unavailable."""
        source = make_source()

        assert source.is_motion_available()
        assert not source.is_activity_available()
        assert not source.is_step_counting_available()
        assert not source.is_pedometer_event_available()
        with pytest.raises(SensorUnavailableError):
            source.subscribe_activity(lambda event: None)

    def test_missing_mac_makes_motion_unavailable(self, clients):
        """Test that a source without an address refuses motion subscriptions."""
        source = make_source(mac="")

        assert not source.is_motion_available()
        with pytest.raises(SensorUnavailableError):
            source.subscribe_motion(0.0, MAGNETIC, lambda event: None)
        assert clients == []
