"""Render a sampling cycle into the JSON snapshot sent to subscribers.

Wire format::

    {"apiversion":1,"hostname":"gw1","time":1626700000,
     "csv":["customer-42,1000,2000,...",...],"count":1}

Each ``csv`` entry joins the eleven :data:`CSV_FIELDS` with commas.
"""

from __future__ import annotations

import json
import time
from collections.abc import Sequence
from typing import Any

from .registry import InterfaceRecord

API_VERSION = 1

# Column order of every csv entry
CSV_FIELDS: list[str] = [
    "description",
    "rate_in_bytes",
    "rate_out_bytes",
    "peak_in_bytes",
    "peak_out_bytes",
    "total_in_bytes",
    "total_out_bytes",
    "rate_in_packets",
    "rate_out_packets",
    "peak_in_packets",
    "peak_out_packets",
]


def format_csv_row(record: InterfaceRecord) -> str:
    """Join one record's reported values in :data:`CSV_FIELDS` order."""
    values = [
        record.description,
        record.rate_in_bytes,
        record.rate_out_bytes,
        record.peak_in_bytes,
        record.peak_out_bytes,
        record.raw_in_bytes,
        record.raw_out_bytes,
        record.rate_in_packets,
        record.rate_out_packets,
        record.peak_in_packets,
        record.peak_out_packets,
    ]
    return ",".join(str(v) for v in values)


def build_snapshot(
    records: Sequence[InterfaceRecord],
    hostname: str,
    timestamp: int | None = None,
) -> dict[str, Any]:
    """Build a fresh snapshot dict for one cycle.

    Args:
        records: Records to report, already filtered by the sampler.
        hostname: Host identifier of this collector.
        timestamp: Unix seconds of the cycle; defaults to now.
    """
    if timestamp is None:
        timestamp = int(time.time())
    rows = [format_csv_row(r) for r in records]
    return {
        "apiversion": API_VERSION,
        "hostname": hostname,
        "time": timestamp,
        "csv": rows,
        "count": len(rows),
    }


def encode_snapshot(snapshot: dict[str, Any]) -> bytes:
    """Serialize a snapshot to compact UTF-8 JSON."""
    return json.dumps(snapshot, separators=(",", ":"), ensure_ascii=False).encode(
        "utf-8"
    )
