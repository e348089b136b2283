"""BLE connection management."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from bleak import BleakClient
from bleak_retry_connector import BleakClientWithServiceCache, establish_connection

from ..exceptions import (
    BLEConnectionError,
    NotificationSetupError,
    ServiceDiscoveryError,
    WriteFailureError,
)
from ..protocol import COMMAND_CHAR_UUID, RESPONSE_CHAR_UUID, SERVICE_UUID

if TYPE_CHECKING:
    from bleak.backends.characteristic import BleakGATTCharacteristic
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceEndpoints:
    """Characteristics resolved for one connection."""

    command_characteristic: BleakGATTCharacteristic
    response_characteristic: BleakGATTCharacteristic


class BLEConnection:
    """Manages the BLE link to one discovered puck.

    Features:
    - Automatic retry logic with bleak-retry-connector
    - Service caching for faster reconnections
    - Link-loss signalling for the session supervisor
    - Context manager for automatic cleanup

    A connection is single-use: after disconnect a fresh discovery is needed.
    """

    def __init__(
            self,
            device: BLEDevice,
            timeout: float = 10.0,
            max_attempts: int = 3,
            use_services_cache: bool = True,
    ):
        """Initialize BLE connection manager.

        Args:
            device: BLEDevice returned by discovery
            timeout: Connection timeout in seconds (default: 10)
            max_attempts: Maximum connection attempts for bleak-retry-connector (default: 3)
            use_services_cache: Enable GATT service caching for faster reconnections (default: True)
        """
        self.device = device
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.use_services_cache = use_services_cache

        self._client: BleakClient | None = None
        self._endpoints: ServiceEndpoints | None = None
        self._notifying = False
        self._disconnected = asyncio.Event()

    async def __aenter__(self) -> BLEConnection:
        """Connect to device (context manager entry)."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect from device (context manager exit)."""
        await self.disconnect()

    @property
    def address(self) -> str:
        return self.device.address

    @property
    def endpoints(self) -> ServiceEndpoints | None:
        return self._endpoints

    async def connect(self) -> ServiceEndpoints:
        """Establish BLE connection and resolve the Z407 characteristics.

        Returns:
            Resolved command/response characteristics

        Raises:
            BLEConnectionError: If the link cannot be established
            ServiceDiscoveryError: If the service or a characteristic is missing
        """
        if self.is_connected and self._endpoints:
            return self._endpoints  # Already connected

        self._disconnected.clear()

        try:
            _LOGGER.debug(
                "Connecting to %s with bleak-retry-connector (max_attempts=%d)",
                self.address,
                self.max_attempts
            )

            self._client = await establish_connection(
                client_class=BleakClientWithServiceCache,
                device=self.device,
                name=self.device.name or self.address,
                disconnected_callback=self._on_disconnected,
                max_attempts=self.max_attempts,
                use_services_cache=self.use_services_cache,
                timeout=self.timeout,
            )

        except asyncio.TimeoutError as e:
            raise BLEConnectionError(
                f"Connection timeout after {self.timeout}s"
            ) from e
        except Exception as e:
            raise BLEConnectionError(
                f"Failed to connect: {e}"
            ) from e

        _LOGGER.debug("Connected to %s, resolving services", self.address)

        try:
            self._endpoints = self._resolve_endpoints()
        except ServiceDiscoveryError:
            await self.disconnect()
            raise

        return self._endpoints

    def _resolve_endpoints(self) -> ServiceEndpoints:
        """Find the Z407 service and its two characteristics.

        Raises:
            ServiceDiscoveryError: If service/characteristic not found
        """
        if not self._client or not self._client.is_connected:
            raise BLEConnectionError("Not connected")

        service = self._client.services.get_service(SERVICE_UUID)
        if not service:
            raise ServiceDiscoveryError(
                f"Service {SERVICE_UUID} not found"
            )

        command_char = service.get_characteristic(COMMAND_CHAR_UUID)
        if not command_char:
            raise ServiceDiscoveryError(
                f"Command characteristic {COMMAND_CHAR_UUID} not found"
            )

        response_char = service.get_characteristic(RESPONSE_CHAR_UUID)
        if not response_char:
            raise ServiceDiscoveryError(
                f"Response characteristic {RESPONSE_CHAR_UUID} not found"
            )

        return ServiceEndpoints(
            command_characteristic=command_char,
            response_characteristic=response_char,
        )

    async def disconnect(self) -> None:
        """Disconnect from device."""
        client = self._client
        if client and client.is_connected:
            try:
                _LOGGER.debug("Disconnecting from %s", self.address)
                if self._notifying and self._endpoints:
                    await client.stop_notify(self._endpoints.response_characteristic)
                await client.disconnect()
            except Exception as e:
                _LOGGER.warning("Error during disconnect: %s", e)
        self._client = None
        self._endpoints = None
        self._notifying = False
        self._disconnected.set()

    def _on_disconnected(self, client: BleakClient) -> None:
        """Handle link loss reported by bleak."""
        _LOGGER.debug("Link to %s lost", self.address)
        self._disconnected.set()

    async def wait_disconnected(self) -> None:
        """Block until the link is gone."""
        await self._disconnected.wait()

    async def start_notifications(self, callback: Callable[[bytes], None]) -> None:
        """Subscribe to the response characteristic.

        Args:
            callback: Called with each notification payload

        Raises:
            NotificationSetupError: If the subscription fails
        """
        if not self.is_connected or not self._endpoints:
            raise NotificationSetupError("Not connected")

        def _notification_handler(sender, data: bytearray) -> None:
            callback(bytes(data))

        try:
            await self._client.start_notify(
                self._endpoints.response_characteristic,
                _notification_handler,
            )
        except Exception as e:
            raise NotificationSetupError(f"Failed to start notifications: {e}") from e

        self._notifying = True
        _LOGGER.debug("Notifications started")

    async def write_command(self, data: bytes) -> None:
        """Write command frame to device.

        Args:
            data: Command bytes to write

        Raises:
            WriteFailureError: If not connected or write fails
        """
        if not self.is_connected or not self._endpoints:
            raise WriteFailureError("Not connected")

        try:
            await self._client.write_gatt_char(
                self._endpoints.command_characteristic,
                data,
                response=True,  # Wait for write confirmation
            )
        except Exception as e:
            raise WriteFailureError(f"Write failed: {e}") from e

        _LOGGER.debug("Wrote %s", bytes(data).hex())

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to device."""
        return self._client is not None and self._client.is_connected
