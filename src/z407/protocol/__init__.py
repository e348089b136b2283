"""BLE protocol implementation."""

from .commands import (
    ACKNOWLEDGE,
    BASS_DOWN,
    BASS_UP,
    COMMAND_CHAR_UUID,
    ENTER_PAIRING,
    FACTORY_RESET,
    FRAME_SIZE,
    INITIATE,
    NEXT_TRACK,
    PLAY_PAUSE,
    PREV_TRACK,
    RESPONSE_CHAR_UUID,
    SERVICE_UUID,
    VOLUME_DOWN,
    VOLUME_UP,
    Command,
    Opcode,
    build_switch_input_command,
)
from .handshake import DEFAULT_SETTLE_INTERVAL, perform_handshake
from .responses import ResponseCode, decode_response, input_source_for

__all__ = [
    "Command",
    "Opcode",
    "SERVICE_UUID",
    "COMMAND_CHAR_UUID",
    "RESPONSE_CHAR_UUID",
    "FRAME_SIZE",
    "INITIATE",
    "ACKNOWLEDGE",
    "VOLUME_UP",
    "VOLUME_DOWN",
    "BASS_UP",
    "BASS_DOWN",
    "PLAY_PAUSE",
    "NEXT_TRACK",
    "PREV_TRACK",
    "ENTER_PAIRING",
    "FACTORY_RESET",
    "build_switch_input_command",
    "DEFAULT_SETTLE_INTERVAL",
    "perform_handshake",
    "ResponseCode",
    "decode_response",
    "input_source_for",
]
