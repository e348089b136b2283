"""Transport interfaces."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol


class FrameWriter(Protocol):
    async def write_command(self, data: bytes) -> None:
        """Write one command frame to the puck."""


class SessionLink(FrameWriter, Protocol):
    """What the session supervisor needs from a connection."""

    async def connect(self) -> object:
        """Establish the link and resolve the service endpoints."""

    async def start_notifications(self, callback: Callable[[bytes], None]) -> None:
        """Subscribe to response frames."""

    async def wait_disconnected(self) -> None:
        """Return once the link has been lost."""

    async def disconnect(self) -> None:
        """Tear the link down."""
