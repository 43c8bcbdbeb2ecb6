"""Network interface counters from sysfs.

Each directory under /sys/class/net/ is one interface. Its ``ifindex``
file gives the slot id, ``statistics/`` holds the cumulative byte and
packet counters, and ``ifalias`` holds the operator-assigned description
(set with ``ip link set <iface> alias <text>``).
"""

from __future__ import annotations

import logging
from pathlib import Path

from .base import CounterSourceError, InterfaceCounters, SlotNotFoundError

log = logging.getLogger(__name__)

# Statistics files, in InterfaceCounters field order
_STAT_FILES: list[str] = [
    "rx_bytes",
    "tx_bytes",
    "rx_packets",
    "tx_packets",
]


def _read_int(path: Path) -> int:
    return int(path.read_text().strip())


class SysfsCounterSource:
    """Read interface slots, counters and descriptions from sysfs.

    :meth:`list_slot_ids` builds the ifindex-to-name map once per cycle.
    Counter and description lookups reuse it and only re-read the
    interface's own ``ifindex`` to confirm the slot still belongs to it.
    """

    def __init__(self, sysfs_root: str | Path = "/sys/class/net") -> None:
        self._root = Path(sysfs_root)
        # ifindex -> interface name from the last successful enumeration
        self._slots: dict[int, str] = {}
        self._rescanned = False

    @property
    def root(self) -> Path:
        """Base path of the network class directory."""
        return self._root

    def _scan(self) -> dict[int, str]:
        """Map every enumerable ifindex to its interface name."""
        if not self._root.is_dir():
            raise CounterSourceError(f"{self._root} is not a directory")

        try:
            entries = sorted(self._root.iterdir())
        except OSError as exc:
            raise CounterSourceError(f"Cannot list {self._root}: {exc}") from exc

        slots: dict[int, str] = {}
        for entry in entries:
            try:
                ifindex = _read_int(entry / "ifindex")
            except (OSError, ValueError):
                # Half torn-down interface, or not an interface at all
                continue
            slots[ifindex] = entry.name
        return slots

    def _owns(self, name: str, slot_id: int) -> bool:
        try:
            return _read_int(self._root / name / "ifindex") == slot_id
        except (OSError, ValueError):
            return False

    def _name_for(self, slot_id: int) -> str:
        name = self._slots.get(slot_id)
        if name is not None and self._owns(name, slot_id):
            return name

        # Unknown or renamed since the last enumeration; rescan at most
        # once per enumeration so a burst of vanished slots stays linear
        if not self._rescanned:
            self._rescanned = True
            try:
                self._slots = self._scan()
            except CounterSourceError as exc:
                raise SlotNotFoundError(slot_id) from exc
            name = self._slots.get(slot_id)
            if name is not None:
                return name
        raise SlotNotFoundError(slot_id)

    def list_slot_ids(self) -> list[int]:
        """Return the sorted slot ids of all interfaces present in sysfs.

        On failure the map from the previous enumeration is kept, so
        tracked interfaces can still be read this cycle.

        Raises:
            CounterSourceError: If the sysfs directory cannot be listed.
        """
        self._slots = self._scan()
        self._rescanned = False
        return sorted(self._slots)

    def get_counters(self, slot_id: int) -> InterfaceCounters:
        """Read the four cumulative counters of ``slot_id``.

        Raises:
            SlotNotFoundError: If no interface owns ``slot_id`` or its
                statistics cannot be read.
        """
        name = self._name_for(slot_id)
        stats_dir = self._root / name / "statistics"
        try:
            values = [_read_int(stats_dir / stat) for stat in _STAT_FILES]
        except (OSError, ValueError) as exc:
            log.debug("Cannot read statistics of %s: %s", name, exc)
            raise SlotNotFoundError(slot_id) from exc

        in_bytes, out_bytes, in_packets, out_packets = values
        return InterfaceCounters(
            name=name,
            in_bytes=in_bytes,
            out_bytes=out_bytes,
            in_packets=in_packets,
            out_packets=out_packets,
        )

    def get_description(self, slot_id: int) -> str:
        """Return the ifalias of ``slot_id`` (empty string when unset).

        The kernel stores the alias as raw bytes; invalid UTF-8 is
        replaced rather than rejected.

        Raises:
            CounterSourceError: If the alias cannot be read.
        """
        name = self._name_for(slot_id)
        try:
            raw = (self._root / name / "ifalias").read_bytes()
        except OSError as exc:
            raise CounterSourceError(
                f"Cannot read description of {name}: {exc}"
            ) from exc
        return raw.decode("utf-8", errors="replace").strip()
