"""Discovery of Z407 pucks by advertised service."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from contextlib import aclosing
from typing import TYPE_CHECKING, Any

from bleak import BleakScanner
from bleak.exc import BleakError

from ..exceptions import AdapterUnavailableError, DeviceNotFoundError
from ..protocol import SERVICE_UUID
from .adapter import BluetoothAdapter

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)

DEFAULT_SCAN_TIMEOUT = 10.0


def advertises_service(service_uuids: Iterable[str], service_uuid: str = SERVICE_UUID) -> bool:
    """Check whether an advertisement lists the given service.

    Advertised names vary with locale and firmware, so the service UUID is
    the only match rule.
    """
    target = service_uuid.lower()
    return any(uuid.lower() == target for uuid in service_uuids)


class Discovery:
    """Scans for the first puck advertising the Z407 service."""

    def __init__(self, scanner_factory: Callable[..., BleakScanner] = BleakScanner):
        self._scanner_factory = scanner_factory

    async def scan(
            self,
            timeout: float = DEFAULT_SCAN_TIMEOUT,
            adapter: BluetoothAdapter | None = None,
    ) -> BLEDevice:
        """Scan until a puck is seen or the timeout elapses.

        The timeout is wall-clock from scan start, independent of how many
        advertisements arrive, and also bounds scanner start-up and shutdown.

        Args:
            timeout: Scan limit in seconds (default: 10)
            adapter: Adapter returned by AdapterSession.acquire()

        Returns:
            The first matching BLEDevice

        Raises:
            DeviceNotFoundError: If nothing matched within the timeout
            AdapterUnavailableError: If the scan could not run
        """
        kwargs = adapter.scanner_kwargs() if adapter else {}
        _LOGGER.info("Scanning for Z407 (service %s, timeout %.1fs)", SERVICE_UUID, timeout)

        try:
            device = await asyncio.wait_for(self._scan_once(kwargs), timeout)
        except asyncio.TimeoutError as e:
            raise DeviceNotFoundError(
                f"No Z407 found within {timeout}s"
            ) from e
        except BleakError as e:
            raise AdapterUnavailableError(f"Scan failed: {e}") from e

        if device is None:
            raise DeviceNotFoundError("Scan ended without a Z407 advertisement")

        _LOGGER.info("Found Z407 %s (%s)", device.name or "Unknown", device.address)
        return device

    async def _scan_once(self, kwargs: dict[str, Any]) -> BLEDevice | None:
        async with self._scanner_factory(service_uuids=[SERVICE_UUID], **kwargs) as scanner:
            return await self._first_match(scanner)

    @staticmethod
    async def _first_match(scanner: BleakScanner) -> BLEDevice | None:
        async with aclosing(scanner.advertisement_data()) as advertisements:
            async for device, advertisement in advertisements:
                _LOGGER.debug(
                    "Advertisement from %s services=%s",
                    device.address,
                    advertisement.service_uuids,
                )
                if advertises_service(advertisement.service_uuids):
                    return device
        return None


async def discover_devices(
        timeout: float = DEFAULT_SCAN_TIMEOUT,
        scanner_factory: Callable[..., BleakScanner] = BleakScanner,
) -> dict[str, str | None]:
    """Scan for the full timeout and collect every Z407 seen.

    Args:
        timeout: Scan duration in seconds (default: 10)
        scanner_factory: BleakScanner-compatible factory

    Returns:
        Mapping of address to advertised name (None if unnamed)
    """
    found: dict[str, str | None] = {}

    def callback(device, advertisement_data) -> None:
        if not advertises_service(advertisement_data.service_uuids):
            return
        if device.address not in found:
            _LOGGER.debug("Discovered %s", device.address)
        found[device.address] = device.name or advertisement_data.local_name

    scanner = scanner_factory(detection_callback=callback, service_uuids=[SERVICE_UUID])
    await scanner.start()
    try:
        await asyncio.sleep(timeout)
    finally:
        await scanner.stop()

    return found
