"""Main Z407 puck class used by UI collaborators."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable

from .models.config import SessionConfig
from .models.enums import InputSource
from .models.state import PuckState, StateListener
from .protocol import (
    BASS_DOWN,
    BASS_UP,
    ENTER_PAIRING,
    FACTORY_RESET,
    NEXT_TRACK,
    PLAY_PAUSE,
    PREV_TRACK,
    VOLUME_DOWN,
    VOLUME_UP,
    Command,
    build_switch_input_command,
)
from .session import SessionSupervisor

_LOGGER = logging.getLogger(__name__)


class Z407Puck:
    """Logitech Z407 control puck.

    Runs the BLE session on a dedicated worker thread with its own event
    loop, so every method here is safe to call from a UI thread and never
    blocks on Bluetooth I/O.

    Usage:
        with Z407Puck() as puck:
            puck.request_connect()
            ...
            if puck.state.connected:
                puck.volume_up()

    Command methods return False when the command was discarded because no
    session is connected. Commands are never queued for a later session.
    """

    def __init__(
            self,
            config: SessionConfig | None = None,
            *,
            supervisor: SessionSupervisor | None = None,
            connect_on_start: bool = False,
    ):
        """Initialize Z407 puck.

        Args:
            config: Session tunables (ignored when supervisor is given)
            supervisor: Pre-built supervisor (default: built from config)
            connect_on_start: Request a connection as soon as start() runs
        """
        self._supervisor = supervisor or SessionSupervisor(config=config)
        self._connect_on_start = connect_on_start
        self._thread: threading.Thread | None = None

    def __enter__(self) -> Z407Puck:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    @property
    def state(self) -> PuckState:
        """Consistent snapshot of the session state."""
        return self._supervisor.store.snapshot()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the BLE worker thread."""
        if self.is_running:
            return

        self._thread = threading.Thread(
            target=self._run_worker,
            name="z407-ble",
            daemon=True,
        )
        self._thread.start()
        _LOGGER.debug("BLE worker started")

        if self._connect_on_start:
            self.request_connect()

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the worker, disconnecting any live session.

        Args:
            timeout: Seconds to wait for the worker thread (default: 5)
        """
        thread = self._thread
        if thread is None:
            return

        self._supervisor.stop()
        thread.join(timeout)
        if thread.is_alive():
            _LOGGER.warning("BLE worker did not stop within %.1fs", timeout)
        else:
            _LOGGER.debug("BLE worker stopped")
        self._thread = None

    def _run_worker(self) -> None:
        try:
            asyncio.run(self._supervisor.run())
        except Exception:
            _LOGGER.exception("BLE worker crashed")

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register a callback for state changes (runs on the changing thread)."""
        return self._supervisor.store.add_listener(listener)

    def request_connect(self) -> None:
        """Ask the worker to scan and connect."""
        _LOGGER.debug("Connect requested")
        self._supervisor.request_connect()

    def set_levels(self, volume: float | None = None, bass: float | None = None) -> PuckState:
        """Echo slider positions into the shared state (clamped to 0-100)."""
        return self._supervisor.store.set_levels(volume=volume, bass=bass)

    def send(self, command: Command) -> bool:
        """Queue a command for the connected puck.

        Returns:
            True if queued, False if discarded while disconnected
        """
        if not self.state.connected:
            _LOGGER.debug("Discarding %s while disconnected", command.to_bytes().hex())
            return False
        return self._supervisor.submit(command)

    def volume_up(self) -> bool:
        return self.send(VOLUME_UP)

    def volume_down(self) -> bool:
        return self.send(VOLUME_DOWN)

    def bass_up(self) -> bool:
        return self.send(BASS_UP)

    def bass_down(self) -> bool:
        return self.send(BASS_DOWN)

    def play_pause(self) -> bool:
        return self.send(PLAY_PAUSE)

    def next_track(self) -> bool:
        return self.send(NEXT_TRACK)

    def prev_track(self) -> bool:
        return self.send(PREV_TRACK)

    def switch_input(self, source: InputSource) -> bool:
        """Switch the speaker input.

        Raises:
            ValueError: If source is InputSource.UNKNOWN
        """
        return self.send(build_switch_input_command(source))

    def enter_pairing(self) -> bool:
        return self.send(ENTER_PAIRING)

    def factory_reset(self) -> bool:
        return self.send(FACTORY_RESET)
