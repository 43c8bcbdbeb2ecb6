"""Advance every tracked interface by one sampling cycle.

For each record the sampler fetches fresh counters, applies the name
filter, checks the description for churn (a different interface bound to
the same slot), derives per-second rates from the previous sample, and
updates the running peaks. Records whose slot vanished, whose name no
longer matches, or whose description is empty are evicted.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from .registry import InterfaceRecord, InterfaceRegistry
from .sources.base import CounterSourceError, InterfaceCounters, SlotNotFoundError

if TYPE_CHECKING:
    from .sources.base import CounterSource

log = logging.getLogger(__name__)


def compute_rate(new: int, old: int, elapsed: float) -> int:
    """Return the per-second rate between two counter readings.

    A counter that went backwards (driver reset, 32-bit wrap) yields 0.
    """
    delta = new - old
    if delta <= 0:
        return 0
    return int(delta / elapsed)


class Sampler:
    """Run sampling cycles over an :class:`InterfaceRegistry`.

    Args:
        source: Where slot ids, counters and descriptions come from.
        registry: The tracked records; mutated in place.
        iface_pattern: Interface name prefix a record must match.
        reset_peaks_on_churn: Zero the peaks when a slot is rebound to a
            different interface. By default peaks survive a rebind.
        clock: Time source for rate normalisation.
    """

    def __init__(
        self,
        source: CounterSource,
        registry: InterfaceRegistry,
        iface_pattern: str,
        reset_peaks_on_churn: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._registry = registry
        self._pattern = iface_pattern
        self._reset_peaks_on_churn = reset_peaks_on_churn
        self._clock = clock

    @property
    def registry(self) -> InterfaceRegistry:
        return self._registry

    def refresh(self) -> None:
        """Add baseline records for slots that appeared since last cycle.

        A failure to enumerate slots skips the refresh for this cycle and
        leaves the existing records untouched.
        """
        try:
            slot_ids = self._source.list_slot_ids()
        except CounterSourceError as exc:
            log.error("Error enumerating interface slots: %s", exc)
            return

        added = self._registry.refresh_membership(slot_ids, self._clock())
        if added:
            log.debug("Tracking new slots: %s", [r.slot_id for r in added])

    def run_cycle(self) -> list[InterfaceRecord]:
        """Refresh membership and sample every record once.

        Returns:
            The records to report this cycle, in registry order. Records
            that were baseline on entry and records evicted this cycle are
            not included.
        """
        self.refresh()

        included: list[InterfaceRecord] = []
        for record in self._registry.get_all():
            if self.sample_record(record):
                included.append(record)
        return included

    def _evict(self, record: InterfaceRecord, reason: str) -> None:
        log.debug("Dropping slot %d (%s): %s", record.slot_id, record.name, reason)
        self._registry.remove(record.slot_id)

    def sample_record(self, record: InterfaceRecord) -> bool:
        """Advance one record by a cycle.

        Returns:
            True if the record belongs in this cycle's snapshot.
        """
        now = self._clock()

        try:
            counters = self._source.get_counters(record.slot_id)
        except SlotNotFoundError:
            self._evict(record, "slot vanished")
            return False
        except CounterSourceError as exc:
            self._evict(record, f"counter fetch failed: {exc}")
            return False

        if not counters.name.startswith(self._pattern):
            self._evict(record, f"{counters.name!r} does not match {self._pattern!r}")
            return False

        try:
            description = self._source.get_description(record.slot_id)
        except CounterSourceError as exc:
            self._evict(record, f"description fetch failed: {exc}")
            return False

        if not description:
            self._evict(record, "empty description")
            return False

        if description != record.description:
            self._rebind(record, counters, description)

        elapsed = now - record.last_sample_time
        if elapsed > 0:
            self._update_rates(record, counters, elapsed)
        elif not record.is_baseline:
            log.warning(
                "Non-positive elapsed time %.6fs on slot %d, keeping previous rates",
                elapsed,
                record.slot_id,
            )

        record.last_sample_time = now
        record.raw_in_bytes = counters.in_bytes
        record.raw_out_bytes = counters.out_bytes
        record.raw_in_packets = counters.in_packets
        record.raw_out_packets = counters.out_packets

        if record.is_baseline:
            record.is_baseline = False
            return False
        return True

    def _rebind(
        self,
        record: InterfaceRecord,
        counters: InterfaceCounters,
        description: str,
    ) -> None:
        """Bind the record to a new interface seen behind the same slot."""
        if record.description:
            log.info(
                "Slot %d rebound: %r (%s) -> %r (%s)",
                record.slot_id,
                record.description,
                record.name,
                description,
                counters.name,
            )
        record.name = counters.name
        record.description = description

        # The fresh counters become the reference point for the next delta
        record.raw_in_bytes = counters.in_bytes
        record.raw_out_bytes = counters.out_bytes
        record.raw_in_packets = counters.in_packets
        record.raw_out_packets = counters.out_packets
        record.rate_in_bytes = 0
        record.rate_out_bytes = 0
        record.rate_in_packets = 0
        record.rate_out_packets = 0
        record.is_baseline = True

        if self._reset_peaks_on_churn:
            record.reset_peaks()

    @staticmethod
    def _update_rates(
        record: InterfaceRecord,
        counters: InterfaceCounters,
        elapsed: float,
    ) -> None:
        record.rate_in_bytes = compute_rate(
            counters.in_bytes, record.raw_in_bytes, elapsed
        )
        record.rate_out_bytes = compute_rate(
            counters.out_bytes, record.raw_out_bytes, elapsed
        )
        record.rate_in_packets = compute_rate(
            counters.in_packets, record.raw_in_packets, elapsed
        )
        record.rate_out_packets = compute_rate(
            counters.out_packets, record.raw_out_packets, elapsed
        )

        record.peak_in_bytes = max(record.peak_in_bytes, record.rate_in_bytes)
        record.peak_out_bytes = max(record.peak_out_bytes, record.rate_out_bytes)
        record.peak_in_packets = max(record.peak_in_packets, record.rate_in_packets)
        record.peak_out_packets = max(record.peak_out_packets, record.rate_out_packets)
