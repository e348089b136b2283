"""Session configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Tunables for one BLE session.

    Attributes:
        scan_timeout: Hard wall-clock limit for discovery in seconds (default: 10)
        settle_interval: Delay after each handshake frame in seconds (default: 0.2)
        connect_timeout: Per-attempt link timeout in seconds (default: 10)
        max_attempts: Connection attempts for bleak-retry-connector (default: 3)
        use_services_cache: Enable GATT service caching for faster reconnections
        adapter: Local adapter name such as "hci0" (BlueZ only, default: system default)
    """

    scan_timeout: float = 10.0
    settle_interval: float = 0.2
    connect_timeout: float = 10.0
    max_attempts: int = 3
    use_services_cache: bool = True
    adapter: str | None = None

    def __post_init__(self) -> None:
        if self.scan_timeout <= 0:
            raise ValueError(f"scan_timeout must be positive, got {self.scan_timeout}")
        if self.connect_timeout <= 0:
            raise ValueError(
                f"connect_timeout must be positive, got {self.connect_timeout}"
            )
        if self.settle_interval < 0:
            raise ValueError(
                f"settle_interval must not be negative, got {self.settle_interval}"
            )
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
