"""Tests for the interface registry."""

from __future__ import annotations

from ifstat_sender.registry import InterfaceRecord, InterfaceRegistry


class TestRefreshMembership:
    """Tests for InterfaceRegistry.refresh_membership()."""

    def test_adds_baseline_records(self) -> None:
        registry = InterfaceRegistry()
        added = registry.refresh_membership([3, 1, 2], now=50.0)

        assert [r.slot_id for r in added] == [3, 1, 2]
        assert len(registry) == 3
        for record in added:
            assert record.is_baseline is True
            assert record.last_sample_time == 50.0
            assert record.description == ""

    def test_existing_records_untouched(self) -> None:
        registry = InterfaceRegistry()
        registry.refresh_membership([1], now=1.0)
        original = registry.get(1)
        assert original is not None
        original.description = "customer-1"

        added = registry.refresh_membership([1, 2], now=2.0)

        assert [r.slot_id for r in added] == [2]
        assert registry.get(1) is original
        assert original.last_sample_time == 1.0

    def test_never_removes(self) -> None:
        registry = InterfaceRegistry()
        registry.refresh_membership([1, 2], now=1.0)
        registry.refresh_membership([], now=2.0)
        assert len(registry) == 2

    def test_duplicate_ids_added_once(self) -> None:
        registry = InterfaceRegistry()
        added = registry.refresh_membership([4, 4, 4], now=1.0)
        assert len(added) == 1
        assert len(registry) == 1


class TestLookupAndRemoval:
    """Tests for get(), get_all(), remove() and clear()."""

    def test_get_missing_returns_none(self) -> None:
        assert InterfaceRegistry().get(9) is None

    def test_contains(self) -> None:
        registry = InterfaceRegistry()
        registry.refresh_membership([7], now=0.0)
        assert 7 in registry
        assert 8 not in registry

    def test_get_all_insertion_order(self) -> None:
        registry = InterfaceRegistry()
        registry.refresh_membership([5, 2], now=0.0)
        registry.refresh_membership([9], now=0.0)
        assert [r.slot_id for r in registry.get_all()] == [5, 2, 9]

    def test_remove_during_iteration(self) -> None:
        registry = InterfaceRegistry()
        registry.refresh_membership([1, 2, 3], now=0.0)
        for record in registry.get_all():
            if record.slot_id != 2:
                registry.remove(record.slot_id)
        assert [r.slot_id for r in registry.get_all()] == [2]

    def test_remove_returns_record(self) -> None:
        registry = InterfaceRegistry()
        registry.refresh_membership([1], now=0.0)
        removed = registry.remove(1)
        assert isinstance(removed, InterfaceRecord)
        assert registry.remove(1) is None

    def test_clear(self) -> None:
        registry = InterfaceRegistry()
        registry.refresh_membership([1, 2], now=0.0)
        registry.clear()
        assert len(registry) == 0
        assert registry.get_all() == []


class TestInterfaceRecord:
    """Tests for InterfaceRecord defaults and reset_peaks()."""

    def test_defaults(self) -> None:
        record = InterfaceRecord(slot_id=1)
        assert record.is_baseline is True
        assert record.rate_in_bytes == 0
        assert record.peak_out_packets == 0

    def test_reset_peaks(self) -> None:
        record = InterfaceRecord(
            slot_id=1,
            peak_in_bytes=10,
            peak_out_bytes=20,
            peak_in_packets=3,
            peak_out_packets=4,
            rate_in_bytes=10,
        )
        record.reset_peaks()
        assert record.peak_in_bytes == 0
        assert record.peak_out_bytes == 0
        assert record.peak_in_packets == 0
        assert record.peak_out_packets == 0
        assert record.rate_in_bytes == 10
