"""BLE notification decoding."""

from __future__ import annotations

from enum import Enum
from typing import Final

from ..models.enums import InputSource


class ResponseCode(Enum):
    """Known notification frames, keyed by their hex encoding.

    Anything else the puck sends decodes to UNRECOGNIZED and is ignored.
    """

    INPUT_BLUETOOTH = "c101"
    INPUT_AUX = "c102"
    INPUT_USB = "c103"
    UNRECOGNIZED = ""


_INPUT_FOR_CODE: Final[dict[ResponseCode, InputSource]] = {
    ResponseCode.INPUT_BLUETOOTH: InputSource.BLUETOOTH,
    ResponseCode.INPUT_AUX: InputSource.AUX,
    ResponseCode.INPUT_USB: InputSource.USB,
}


def decode_response(data: bytes | bytearray) -> ResponseCode:
    """Decode one notification frame.

    Matching is on the complete frame, so trailing bytes make a frame
    unrecognized.

    Args:
        data: Raw notification payload

    Returns:
        Matching ResponseCode, or UNRECOGNIZED
    """
    encoded = bytes(data).hex()
    if not encoded:
        return ResponseCode.UNRECOGNIZED
    try:
        return ResponseCode(encoded)
    except ValueError:
        return ResponseCode.UNRECOGNIZED


def input_source_for(code: ResponseCode) -> InputSource | None:
    """Input source reported by a response, or None if it carries no input."""
    return _INPUT_FOR_CODE.get(code)
