"""BLE transport: adapter, discovery and connection."""

from .adapter import AdapterSession, BluetoothAdapter
from .connection import BLEConnection, ServiceEndpoints
from .discovery import DEFAULT_SCAN_TIMEOUT, Discovery, advertises_service, discover_devices

__all__ = [
    "AdapterSession",
    "BluetoothAdapter",
    "BLEConnection",
    "ServiceEndpoints",
    "Discovery",
    "DEFAULT_SCAN_TIMEOUT",
    "advertises_service",
    "discover_devices",
]
