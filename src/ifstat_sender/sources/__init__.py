"""Counter sources: where raw per-interface counters come from."""

from .base import (
    CounterSource,
    CounterSourceError,
    InterfaceCounters,
    SlotNotFoundError,
)
from .sysfs import SysfsCounterSource

__all__ = [
    "CounterSource",
    "CounterSourceError",
    "InterfaceCounters",
    "SlotNotFoundError",
    "SysfsCounterSource",
]
