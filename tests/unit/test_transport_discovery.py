"""Test puck discovery and adapter acquisition."""

from __future__ import annotations

import time

import pytest
from bleak.exc import BleakError

from z407.exceptions import AdapterUnavailableError, DeviceNotFoundError
from z407.protocol import SERVICE_UUID
from z407.transport.adapter import AdapterSession, BluetoothAdapter
from z407.transport.discovery import Discovery, advertises_service, discover_devices

OTHER_UUID = "0000180f-0000-1000-8000-00805f9b34fb"


class TestAdvertisesService:
    def test_match(self):
        assert advertises_service([OTHER_UUID, SERVICE_UUID])

    def test_match_is_case_insensitive(self):
        assert advertises_service([SERVICE_UUID.upper()])

    def test_no_match(self):
        assert not advertises_service([OTHER_UUID])
        assert not advertises_service([])


class TestDiscovery:
    @pytest.mark.asyncio
    async def test_returns_first_matching_device(
        self, scanner_factory, make_device, make_advertisement
    ) -> None:
        other = make_device("11:11:11:11:11:11", "Logitech Z407")
        puck = make_device("AA:BB:CC:DD:EE:FF", "Z407")
        second = make_device("22:22:22:22:22:22", "Z407")
        factory = scanner_factory([
            (other, make_advertisement(OTHER_UUID)),
            (puck, make_advertisement(SERVICE_UUID)),
            (second, make_advertisement(SERVICE_UUID)),
        ])

        device = await Discovery(factory).scan(timeout=1.0)

        assert device is puck
        assert factory.created[0].kwargs["service_uuids"] == [SERVICE_UUID]
        assert factory.created[0].stopped

    @pytest.mark.asyncio
    async def test_name_alone_does_not_match(
        self, scanner_factory, make_device, make_advertisement
    ) -> None:
        """A device named like the puck without the service is ignored."""
        factory = scanner_factory(
            [(make_device("11:11:11:11:11:11", "Logitech Z407"), make_advertisement(OTHER_UUID))],
            hang=True,
        )

        with pytest.raises(DeviceNotFoundError):
            await Discovery(factory).scan(timeout=0.05)

    @pytest.mark.asyncio
    async def test_timeout_is_wall_clock(self, scanner_factory) -> None:
        factory = scanner_factory([], hang=True)

        started = time.monotonic()
        with pytest.raises(DeviceNotFoundError, match="within"):
            await Discovery(factory).scan(timeout=0.05)

        assert time.monotonic() - started < 1.0
        assert factory.created[0].stopped

    @pytest.mark.asyncio
    async def test_timeout_covers_scanner_start(self, scanner_factory) -> None:
        """A scanner that never finishes starting still ends the scan."""
        factory = scanner_factory([], start_hang=True)

        started = time.monotonic()
        with pytest.raises(DeviceNotFoundError):
            await Discovery(factory).scan(timeout=0.05)

        assert time.monotonic() - started < 1.0

    @pytest.mark.asyncio
    async def test_stream_end_without_match(self, scanner_factory) -> None:
        factory = scanner_factory([])

        with pytest.raises(DeviceNotFoundError, match="ended"):
            await Discovery(factory).scan(timeout=1.0)

    @pytest.mark.asyncio
    async def test_scanner_failure_maps_to_adapter_error(self, scanner_factory) -> None:
        factory = scanner_factory([], start_error=BleakError("No Bluetooth adapters found."))

        with pytest.raises(AdapterUnavailableError):
            await Discovery(factory).scan(timeout=1.0)

    @pytest.mark.asyncio
    async def test_adapter_selection_passed_to_scanner(
        self, scanner_factory, make_device, service_advertisement
    ) -> None:
        factory = scanner_factory([(make_device("AA:BB:CC:DD:EE:FF"), service_advertisement)])

        await Discovery(factory).scan(timeout=1.0, adapter=BluetoothAdapter("hci1"))

        assert factory.created[0].kwargs["adapter"] == "hci1"


@pytest.mark.asyncio
async def test_discover_devices_collects_matches(
    scanner_factory, make_device, make_advertisement
) -> None:
    factory = scanner_factory([
        (make_device("AA:BB:CC:DD:EE:FF", None), make_advertisement(SERVICE_UUID, local_name="Z407")),
        (make_device("11:11:11:11:11:11", "Speaker"), make_advertisement(OTHER_UUID)),
        (make_device("22:22:22:22:22:22", "Logitech Z407"), make_advertisement(SERVICE_UUID)),
    ])

    found = await discover_devices(timeout=0.01, scanner_factory=factory)

    assert found == {
        "AA:BB:CC:DD:EE:FF": "Z407",
        "22:22:22:22:22:22": "Logitech Z407",
    }
    assert factory.created[0].stopped


class TestAdapterSession:
    @pytest.mark.asyncio
    async def test_acquire_ready_adapter(self, scanner_factory) -> None:
        factory = scanner_factory([])

        adapter = await AdapterSession(scanner_factory=factory).acquire()

        assert adapter == BluetoothAdapter()
        assert factory.created[0].started and factory.created[0].stopped

    @pytest.mark.asyncio
    async def test_acquire_named_adapter(self, scanner_factory) -> None:
        factory = scanner_factory([])

        adapter = await AdapterSession("hci1", scanner_factory=factory).acquire()

        assert adapter.name == "hci1"
        assert factory.created[0].kwargs == {"adapter": "hci1"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [BleakError("Bluetooth device is turned off"), OSError("no radio")])
    async def test_missing_adapter(self, scanner_factory, error) -> None:
        factory = scanner_factory([], start_error=error)

        with pytest.raises(AdapterUnavailableError, match="unavailable"):
            await AdapterSession(scanner_factory=factory).acquire()

    def test_scanner_kwargs(self):
        assert BluetoothAdapter().scanner_kwargs() == {}
        assert BluetoothAdapter("hci0").scanner_kwargs() == {"adapter": "hci0"}
