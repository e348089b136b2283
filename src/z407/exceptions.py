"""Exceptions raised by the Z407 BLE session core."""


class Z407Error(Exception):
    """Base exception for all Z407 errors."""


class AdapterUnavailableError(Z407Error):
    """No usable Bluetooth adapter (missing, powered off or stack unreachable)."""


class DeviceNotFoundError(Z407Error):
    """No puck advertising the Z407 service was seen before the scan timeout."""


class BLEConnectionError(Z407Error):
    """Link-layer connection to the puck could not be established."""


class ServiceDiscoveryError(BLEConnectionError):
    """Connected, but the Z407 service or one of its characteristics is missing."""


class HandshakeError(Z407Error):
    """A write failed during the vendor initialization sequence."""


class WriteFailureError(Z407Error):
    """A command write failed; treated as a disconnection."""


class NotificationSetupError(Z407Error):
    """Subscribing to the response characteristic failed.

    Non-fatal: the session continues without input-source feedback.
    """
