"""Shared fixtures: an in-memory counter source and a controllable clock."""

from __future__ import annotations

from dataclasses import dataclass, replace

import pytest

from ifstat_sender.sources.base import (
    CounterSourceError,
    InterfaceCounters,
    SlotNotFoundError,
)


@dataclass
class _FakeInterface:
    counters: InterfaceCounters
    description: str


class FakeCounterSource:
    """Counter source backed by a dict, with switchable failures."""

    def __init__(self) -> None:
        self.interfaces: dict[int, _FakeInterface] = {}
        self.fail_enumeration = False
        self.fail_description: set[int] = set()

    def add(
        self,
        slot_id: int,
        name: str,
        description: str = "",
        in_bytes: int = 0,
        out_bytes: int = 0,
        in_packets: int = 0,
        out_packets: int = 0,
    ) -> None:
        counters = InterfaceCounters(
            name=name,
            in_bytes=in_bytes,
            out_bytes=out_bytes,
            in_packets=in_packets,
            out_packets=out_packets,
        )
        self.interfaces[slot_id] = _FakeInterface(counters, description)

    def set_counters(self, slot_id: int, **values: int | str) -> None:
        iface = self.interfaces[slot_id]
        iface.counters = replace(iface.counters, **values)  # type: ignore[arg-type]

    def set_description(self, slot_id: int, description: str) -> None:
        self.interfaces[slot_id].description = description

    def remove(self, slot_id: int) -> None:
        del self.interfaces[slot_id]

    def list_slot_ids(self) -> list[int]:
        if self.fail_enumeration:
            raise CounterSourceError("enumeration failed")
        return sorted(self.interfaces)

    def get_counters(self, slot_id: int) -> InterfaceCounters:
        iface = self.interfaces.get(slot_id)
        if iface is None:
            raise SlotNotFoundError(slot_id)
        return iface.counters

    def get_description(self, slot_id: int) -> str:
        if slot_id in self.fail_description:
            raise CounterSourceError("description failed")
        iface = self.interfaces.get(slot_id)
        if iface is None:
            raise SlotNotFoundError(slot_id)
        return iface.description


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def source() -> FakeCounterSource:
    return FakeCounterSource()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
