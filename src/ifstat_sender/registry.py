"""Tracked interfaces, keyed by their OS-assigned slot id."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass
class InterfaceRecord:
    """Counter history and derived metrics of one interface slot.

    Raw counters are the latest absolute values from the counter source.
    Rates are per-second deltas between the last two samples, peaks are
    the running maxima of the rates. Rates are only meaningful once
    ``is_baseline`` is False.
    """

    slot_id: int
    name: str = ""
    description: str = ""
    last_sample_time: float = 0.0

    raw_in_bytes: int = 0
    raw_out_bytes: int = 0
    raw_in_packets: int = 0
    raw_out_packets: int = 0

    rate_in_bytes: int = 0
    rate_out_bytes: int = 0
    rate_in_packets: int = 0
    rate_out_packets: int = 0

    peak_in_bytes: int = 0
    peak_out_bytes: int = 0
    peak_in_packets: int = 0
    peak_out_packets: int = 0

    is_baseline: bool = True

    def reset_peaks(self) -> None:
        self.peak_in_bytes = 0
        self.peak_out_bytes = 0
        self.peak_in_packets = 0
        self.peak_out_packets = 0


class InterfaceRegistry:
    """The set of tracked interfaces.

    Membership only grows here; records are removed by the sampler when a
    slot disappears, fails the name filter, or loses its description.
    """

    def __init__(self) -> None:
        self._records: dict[int, InterfaceRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, slot_id: object) -> bool:
        return slot_id in self._records

    def refresh_membership(
        self, known_slot_ids: Iterable[int], now: float
    ) -> list[InterfaceRecord]:
        """Add a baseline record for every slot id not tracked yet.

        Args:
            known_slot_ids: Slot ids currently enumerable at the source.
            now: Creation time, used as the first ``last_sample_time``.

        Returns:
            The newly created records.
        """
        added: list[InterfaceRecord] = []
        for slot_id in known_slot_ids:
            if slot_id in self._records:
                continue
            record = InterfaceRecord(slot_id=slot_id, last_sample_time=now)
            self._records[slot_id] = record
            added.append(record)
        return added

    def get(self, slot_id: int) -> InterfaceRecord | None:
        return self._records.get(slot_id)

    def get_all(self) -> list[InterfaceRecord]:
        """Return the current records in insertion order.

        The list is a copy, so callers may remove records while iterating.
        """
        return list(self._records.values())

    def remove(self, slot_id: int) -> InterfaceRecord | None:
        return self._records.pop(slot_id, None)

    def clear(self) -> None:
        """Release every record."""
        self._records.clear()
