"""Shared fixtures: in-memory stand-ins for bleak and the puck."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from types import SimpleNamespace

import pytest

from z407.exceptions import NotificationSetupError, WriteFailureError
from z407.models.config import SessionConfig
from z407.protocol import SERVICE_UUID
from z407.session import SessionSupervisor
from z407.transport.adapter import BluetoothAdapter


@dataclass(frozen=True)
class FakeDevice:
    address: str
    name: str | None = None


def advertisement(*service_uuids: str, local_name: str | None = None) -> SimpleNamespace:
    return SimpleNamespace(service_uuids=list(service_uuids), local_name=local_name)


class FakeScanner:
    """BleakScanner replacement fed from a list of (device, advertisement)."""

    def __init__(
        self, advertisements, *, start_error=None, hang=False, start_hang=False, detection_callback=None, **kwargs
    ):
        self.advertisements = list(advertisements)
        self.start_error = start_error
        self.hang = hang
        self.start_hang = start_hang
        self.detection_callback = detection_callback
        self.kwargs = kwargs
        self.started = False
        self.stopped = False

    async def start(self) -> None:
        if self.start_error is not None:
            raise self.start_error
        if self.start_hang:
            await asyncio.Event().wait()
        self.started = True
        if self.detection_callback is not None:
            for device, adv in self.advertisements:
                self.detection_callback(device, adv)

    async def stop(self) -> None:
        self.stopped = True

    async def __aenter__(self) -> FakeScanner:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    async def advertisement_data(self):
        for device, adv in self.advertisements:
            yield device, adv
        if self.hang:
            await asyncio.Event().wait()


class FakeLink:
    """Connection double recording every frame written."""

    def __init__(self, *, connect_error=None, fail_writes_after=None, notify_error=False, replies=None):
        self.connect_error = connect_error
        self.fail_writes_after = fail_writes_after
        self.notify_error = notify_error
        self.replies = dict(replies or {})
        self.written: list[bytes] = []
        self.notification_callback = None
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.device = None
        self._lost = asyncio.Event()

    async def connect(self):
        self.connect_calls += 1
        self._lost = asyncio.Event()
        if self.connect_error is not None:
            raise self.connect_error
        return SimpleNamespace(command_characteristic="cmd", response_characteristic="resp")

    async def write_command(self, data: bytes) -> None:
        if self.fail_writes_after is not None and len(self.written) >= self.fail_writes_after:
            raise WriteFailureError("Write failed: link gone")
        self.written.append(bytes(data))
        reply = self.replies.get(bytes(data))
        if reply is not None and self.notification_callback is not None:
            self.notification_callback(reply)

    async def start_notifications(self, callback) -> None:
        if self.notify_error:
            raise NotificationSetupError("Failed to start notifications: unsupported")
        self.notification_callback = callback

    async def wait_disconnected(self) -> None:
        await self._lost.wait()

    def drop_link(self) -> None:
        self._lost.set()

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self._lost.set()


class FakeAdapterSession:
    def __init__(self, error=None):
        self.error = error
        self.calls = 0

    async def acquire(self) -> BluetoothAdapter:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return BluetoothAdapter()


class FakeDiscovery:
    def __init__(self, device=None, error=None, gate: asyncio.Event | None = None):
        self.device = device or FakeDevice("AA:BB:CC:DD:EE:FF", "Logitech Z407")
        self.error = error
        self.gate = gate
        self.timeouts: list[float] = []

    async def scan(self, timeout=10.0, adapter=None):
        self.timeouts.append(timeout)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.device


@pytest.fixture
def scanner_factory():
    """Build a BleakScanner-compatible factory; created scanners are kept in .created."""

    def make(advertisements=(), *, start_error=None, hang=False, start_hang=False):
        created: list[FakeScanner] = []

        def factory(**kwargs):
            scanner = FakeScanner(
                advertisements, start_error=start_error, hang=hang, start_hang=start_hang, **kwargs
            )
            created.append(scanner)
            return scanner

        factory.created = created
        return factory

    return make


@pytest.fixture
def fake_link() -> FakeLink:
    return FakeLink()


@pytest.fixture
def make_link():
    return FakeLink


@pytest.fixture
def make_supervisor():
    """Build a supervisor wired to fakes; returns (supervisor, link, discovery)."""

    def make(link=None, *, adapter_error=None, discovery=None, config=None):
        link = link or FakeLink()
        discovery = discovery or FakeDiscovery()

        def connection_factory(device):
            link.device = device
            return link

        supervisor = SessionSupervisor(
            config=config or SessionConfig(settle_interval=0.0),
            adapter_session=FakeAdapterSession(adapter_error),
            discovery=discovery,
            connection_factory=connection_factory,
        )
        return supervisor, link, discovery

    return make


@pytest.fixture
def make_discovery():
    return FakeDiscovery


@pytest.fixture
def wait_until():
    """Await a predicate on the running loop, failing after a deadline."""

    async def wait(predicate, timeout: float = 2.0) -> None:
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.01)

    return wait


@pytest.fixture
def service_advertisement():
    return advertisement(SERVICE_UUID)


@pytest.fixture
def make_advertisement():
    return advertisement


@pytest.fixture
def make_device():
    return FakeDevice
