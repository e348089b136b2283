"""Bluetooth adapter acquisition."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from bleak import BleakScanner
from bleak.exc import BleakError

from ..exceptions import AdapterUnavailableError

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BluetoothAdapter:
    """Handle for an adapter that has reported itself operational."""

    name: str | None = None

    def scanner_kwargs(self) -> dict[str, Any]:
        """Extra BleakScanner arguments selecting this adapter."""
        if self.name is None:
            return {}
        return {"adapter": self.name}


class AdapterSession:
    """Acquires the platform BLE adapter.

    bleak exposes no adapter object, so readiness is probed by starting and
    stopping a scanner: the backend suspends start() until the radio reports
    powered on, and fails if there is no radio at all.
    """

    def __init__(
            self,
            adapter: str | None = None,
            scanner_factory: Callable[..., BleakScanner] = BleakScanner,
    ):
        """Initialize adapter session.

        Args:
            adapter: Optional adapter name (BlueZ, e.g. "hci1")
            scanner_factory: BleakScanner-compatible factory used for the probe
        """
        self._adapter = BluetoothAdapter(adapter)
        self._scanner_factory = scanner_factory

    async def acquire(self) -> BluetoothAdapter:
        """Wait until the adapter is operational.

        Returns:
            Ready adapter handle

        Raises:
            AdapterUnavailableError: If no usable Bluetooth radio is present
        """
        _LOGGER.debug("Probing Bluetooth adapter %s", self._adapter.name or "<default>")
        try:
            scanner = self._scanner_factory(**self._adapter.scanner_kwargs())
            await scanner.start()
            await scanner.stop()
        except (BleakError, OSError) as e:
            raise AdapterUnavailableError(f"Bluetooth adapter unavailable: {e}") from e

        _LOGGER.debug("Bluetooth adapter ready")
        return self._adapter
