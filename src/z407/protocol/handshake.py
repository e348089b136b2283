"""Vendor initialization sequence."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from ..exceptions import HandshakeError, WriteFailureError
from .commands import ACKNOWLEDGE, INITIATE

if TYPE_CHECKING:
    from ..transport.base import FrameWriter

_LOGGER = logging.getLogger(__name__)

DEFAULT_SETTLE_INTERVAL = 0.2


async def perform_handshake(
        writer: FrameWriter,
        settle_interval: float = DEFAULT_SETTLE_INTERVAL,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> None:
    """Run the two-step handshake the puck requires before commands.

    Writes INITIATE (84 05), waits, writes ACKNOWLEDGE (84 00), waits.
    The puck sends no reliable ready frame, so completion is timing based.

    Args:
        writer: Connection with resolved endpoints
        settle_interval: Delay after each frame in seconds (default: 0.2)
        sleep: Awaitable delay function

    Raises:
        HandshakeError: If either write fails
    """
    for step in (INITIATE, ACKNOWLEDGE):
        frame = step.to_bytes()
        try:
            await writer.write_command(frame)
        except WriteFailureError as e:
            raise HandshakeError(f"Handshake frame {frame.hex()} failed: {e}") from e
        await sleep(settle_interval)

    _LOGGER.info("Handshake complete")
