"""Z407 BLE Control Package.

  Pure Python package for controlling the Logitech Z407 speaker dock over BLE.
  """

from .device import Z407Puck
from .exceptions import (
    AdapterUnavailableError,
    BLEConnectionError,
    DeviceNotFoundError,
    HandshakeError,
    NotificationSetupError,
    ServiceDiscoveryError,
    WriteFailureError,
    Z407Error,
)
from .models import InputSource, PuckState, SessionConfig, SessionPhase, StateStore
from .protocol import (
    COMMAND_CHAR_UUID,
    RESPONSE_CHAR_UUID,
    SERVICE_UUID,
    Command,
    ResponseCode,
    decode_response,
)
from .session import CommandChannel, ResponseStream, SessionSupervisor
from .transport import discover_devices

__version__ = "0.1.0"

__all__ = [
    # Main API
    "Z407Puck",
    "SessionSupervisor",
    "discover_devices",
    # Session parts
    "CommandChannel",
    "ResponseStream",
    # Exceptions
    "Z407Error",
    "AdapterUnavailableError",
    "DeviceNotFoundError",
    "BLEConnectionError",
    "ServiceDiscoveryError",
    "HandshakeError",
    "WriteFailureError",
    "NotificationSetupError",
    # Models
    "PuckState",
    "StateStore",
    "SessionConfig",
    # Enums
    "InputSource",
    "SessionPhase",
    "ResponseCode",
    # Protocol
    "Command",
    "decode_response",
    # Constants
    "SERVICE_UUID",
    "COMMAND_CHAR_UUID",
    "RESPONSE_CHAR_UUID",
]
