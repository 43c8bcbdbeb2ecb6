"""Configuration for the interface statistics sender."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

SCHEDULERS: tuple[str, ...] = ("paced", "timer")


@dataclass
class CollectorConfig:
    """Runtime configuration for the interface statistics sender."""

    # ZeroMQ endpoint the publisher connects to, e.g. tcp://collector:5556
    server: str

    # Only interfaces whose name starts with this prefix are reported
    iface_pattern: str

    # Nominal sampling period in seconds
    interval: float = 1.0

    # "paced" (self-paced loop) or "timer" (periodic timer thread)
    scheduler: str = "paced"

    # Maximum run duration in seconds (0 = unlimited)
    duration: int = 0

    # Reset peak values when a slot is rebound to a different interface
    reset_peaks_on_churn: bool = False

    # Host identifier in snapshots (None = socket.gethostname())
    hostname: str | None = None

    # Base path of the network class directory in sysfs
    sysfs_root: Path = field(default_factory=lambda: Path("/sys/class/net"))

    # ZeroMQ send high-water mark
    send_hwm: int = 1

    # Niceness increment applied at startup (0 = leave priority alone)
    nice: int = 15

    # Also log to the local syslog daemon
    syslog: bool = False

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.sysfs_root = Path(self.sysfs_root)
        if self.interval <= 0:
            raise ValueError(f"interval must be positive, got {self.interval}")
        if self.scheduler not in SCHEDULERS:
            raise ValueError(
                f"Unknown scheduler {self.scheduler!r}: expected one of {SCHEDULERS}"
            )
