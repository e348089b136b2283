"""BLE protocol commands for the Z407 control puck."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Final

from ..models.enums import InputSource

# GATT profile
SERVICE_UUID = "0000fdc2-0000-1000-8000-00805f9b34fb"
COMMAND_CHAR_UUID = "c2e758b9-0e78-41e0-b0cb-98a593193fc5"   # write
RESPONSE_CHAR_UUID = "b84ac9c6-29c5-46d4-bba1-9d534784330f"  # notify

FRAME_SIZE = 2


class Opcode(IntEnum):
    """First byte of a command frame."""

    MEDIA = 0x80          # Volume, bass and transport controls
    INPUT = 0x81          # Input source selection
    PAIRING = 0x82        # Bluetooth pairing mode
    FACTORY_RESET = 0x83  # Restore factory settings
    SESSION = 0x84        # Handshake frames


@dataclass(frozen=True, slots=True)
class Command:
    """Two-byte command frame: [opcode, arg]."""

    opcode: int
    arg: int = 0

    def __post_init__(self) -> None:
        for name, value in (("opcode", self.opcode), ("arg", self.arg)):
            if not 0 <= value <= 0xFF:
                raise ValueError(f"{name} out of range: {value} (must be 0-255)")

    def to_bytes(self) -> bytes:
        """Serialize to the on-wire frame."""
        return bytes((self.opcode, self.arg))

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    @classmethod
    def from_bytes(cls, frame: bytes) -> Command:
        """Parse a frame captured from the wire.

        Raises:
            ValueError: If the frame is not exactly 2 bytes
        """
        if len(frame) != FRAME_SIZE:
            raise ValueError(
                f"Command frame must be {FRAME_SIZE} bytes, got {len(frame)}"
            )
        return cls(opcode=frame[0], arg=frame[1])


# Handshake
INITIATE: Final = Command(Opcode.SESSION, 0x05)
ACKNOWLEDGE: Final = Command(Opcode.SESSION, 0x00)

# Levels
BASS_UP: Final = Command(Opcode.MEDIA, 0x00)
BASS_DOWN: Final = Command(Opcode.MEDIA, 0x01)
VOLUME_UP: Final = Command(Opcode.MEDIA, 0x02)
VOLUME_DOWN: Final = Command(Opcode.MEDIA, 0x03)

# Transport
PLAY_PAUSE: Final = Command(Opcode.MEDIA, 0x04)
NEXT_TRACK: Final = Command(Opcode.MEDIA, 0x05)
PREV_TRACK: Final = Command(Opcode.MEDIA, 0x06)

# Maintenance
ENTER_PAIRING: Final = Command(Opcode.PAIRING, 0x00)
FACTORY_RESET: Final = Command(Opcode.FACTORY_RESET, 0x00)

_INPUT_ARGS: Final[dict[InputSource, int]] = {
    InputSource.BLUETOOTH: 0x01,
    InputSource.AUX: 0x02,
    InputSource.USB: 0x03,
}


def build_switch_input_command(source: InputSource) -> Command:
    """Build command to switch the active input source.

    Args:
        source: Target input (BLUETOOTH, AUX or USB)

    Returns:
        Command: 0x81 + input id

    Raises:
        ValueError: If source has no selectable input (UNKNOWN)
    """
    try:
        arg = _INPUT_ARGS[InputSource(source)]
    except (ValueError, KeyError):
        raise ValueError(f"Cannot switch to input source: {source!r}") from None
    return Command(Opcode.INPUT, arg)
