"""Counter source protocol and the values it returns."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class CounterSourceError(Exception):
    """Raised when the counter source cannot answer a query."""


class SlotNotFoundError(CounterSourceError):
    """Raised when an interface slot no longer exists."""

    def __init__(self, slot_id: int) -> None:
        super().__init__(f"Interface slot {slot_id} not found")
        self.slot_id = slot_id


@dataclass(frozen=True)
class InterfaceCounters:
    """Cumulative counters of one interface, read in a single pass."""

    name: str
    in_bytes: int
    out_bytes: int
    in_packets: int
    out_packets: int


class CounterSource(Protocol):
    """Protocol for anything that can enumerate slots and read counters."""

    def list_slot_ids(self) -> list[int]: ...

    def get_counters(self, slot_id: int) -> InterfaceCounters: ...

    def get_description(self, slot_id: int) -> str: ...
