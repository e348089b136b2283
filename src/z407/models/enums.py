from __future__ import annotations

from enum import Enum


class InputSource(Enum):
    """Audio input selected on the speaker."""
    BLUETOOTH = "Bluetooth"
    AUX = "AUX"
    USB = "USB"
    UNKNOWN = "Unknown"


class SessionPhase(Enum):
    """Supervisor state machine phases.

    IDLE -> SCANNING -> CONNECTING -> HANDSHAKING -> ACTIVE -> IDLE
    """
    IDLE = "idle"
    SCANNING = "scanning"
    CONNECTING = "connecting"
    HANDSHAKING = "handshaking"
    ACTIVE = "active"
