"""Data models for the Z407 session."""

from .config import SessionConfig
from .enums import InputSource, SessionPhase
from .state import LEVEL_MAX, LEVEL_MIN, PuckState, StateStore

__all__ = [
    "InputSource",
    "LEVEL_MAX",
    "LEVEL_MIN",
    "PuckState",
    "SessionConfig",
    "SessionPhase",
    "StateStore",
]
