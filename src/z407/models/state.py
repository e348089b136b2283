"""Shared session state published to the UI collaborator."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace

from .enums import InputSource, SessionPhase

_LOGGER = logging.getLogger(__name__)

LEVEL_MIN = 0.0
LEVEL_MAX = 100.0

StateListener = Callable[["PuckState"], None]


def _clamp_level(value: float) -> float:
    return max(LEVEL_MIN, min(LEVEL_MAX, float(value)))


@dataclass(frozen=True, slots=True)
class PuckState:
    """Immutable snapshot of the session as seen by the UI.

    Attributes:
        connected: A handshaken session is live
        volume: Echoed volume slider position (0-100)
        bass: Echoed bass slider position (0-100)
        current_input: Last input source reported or assumed
        connect_requested: A connect attempt is pending
        phase: Current supervisor phase
        notifications_active: False when input-source feedback is unavailable
    """

    connected: bool = False
    volume: float = 0.0
    bass: float = 0.0
    current_input: InputSource = InputSource.UNKNOWN
    connect_requested: bool = False
    phase: SessionPhase = SessionPhase.IDLE
    notifications_active: bool = False


class StateStore:
    """Owner of the current PuckState.

    Every write swaps in a new snapshot under a lock, so readers on any
    thread always get a consistent view. The session worker publishes
    connection fields via publish(); the UI side only uses request_connect()
    and set_levels().
    """

    def __init__(self, initial: PuckState | None = None) -> None:
        self._lock = threading.Lock()
        self._state = initial or PuckState()
        self._listeners: list[StateListener] = []

    def snapshot(self) -> PuckState:
        """Return the current snapshot."""
        with self._lock:
            return self._state

    def publish(self, **changes) -> PuckState:
        """Replace fields of the current snapshot (session worker only).

        Returns:
            The new snapshot
        """
        if "volume" in changes:
            changes["volume"] = _clamp_level(changes["volume"])
        if "bass" in changes:
            changes["bass"] = _clamp_level(changes["bass"])
        with self._lock:
            previous = self._state
            self._state = replace(previous, **changes)
            current = self._state
        if current != previous:
            self._notify(current)
        return current

    def request_connect(self) -> PuckState:
        """Flag that the UI wants a new session."""
        return self.publish(connect_requested=True)

    def set_levels(self, volume: float | None = None, bass: float | None = None) -> PuckState:
        """Store echoed slider positions from the UI (clamped to 0-100)."""
        changes = {}
        if volume is not None:
            changes["volume"] = volume
        if bass is not None:
            changes["bass"] = bass
        return self.publish(**changes)

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register a callback invoked with every changed snapshot.

        Listeners run on the thread that made the change.

        Returns:
            Function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def _remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _remove

    def _notify(self, state: PuckState) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception:
                _LOGGER.exception("State listener failed")
