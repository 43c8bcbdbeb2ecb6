"""Collector context and the main run loop.

Wires the counter source, registry, sampler, serializer and publisher
into one explicitly owned context, runs it under the configured
scheduler, and tears everything down on SIGTERM/SIGINT.
"""

from __future__ import annotations

import logging
import os
import socket
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from .publisher import ZmqPublisher
from .registry import InterfaceRegistry
from .sampler import Sampler
from .scheduler import PacedScheduler, ShutdownSignal, TimerScheduler
from .snapshot import build_snapshot, encode_snapshot
from .sources.sysfs import SysfsCounterSource

if TYPE_CHECKING:
    from .config import CollectorConfig
    from .sources.base import CounterSource

log = logging.getLogger(__name__)


class CollectorContext:
    """Everything one collector process owns, created at startup.

    Args:
        config: Runtime configuration.
        source: Counter source; defaults to sysfs under ``config.sysfs_root``.
        publisher: Publish sink; defaults to a ZeroMQ PUB socket.
        clock: Monotonic time source for rate normalisation.
        wall_clock: Unix time source for snapshot timestamps.
    """

    def __init__(
        self,
        config: CollectorConfig,
        source: CounterSource | None = None,
        publisher: ZmqPublisher | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.hostname = config.hostname or socket.gethostname()
        self.source = source if source is not None else SysfsCounterSource(
            config.sysfs_root
        )
        self.publisher = publisher if publisher is not None else ZmqPublisher(
            config.server, send_hwm=config.send_hwm
        )
        self.registry = InterfaceRegistry()
        self.sampler = Sampler(
            self.source,
            self.registry,
            config.iface_pattern,
            reset_peaks_on_churn=config.reset_peaks_on_churn,
            clock=clock,
        )
        self._wall_clock = wall_clock

    def sample(self) -> bytes:
        """Run one sampling cycle and return the encoded snapshot."""
        records = self.sampler.run_cycle()
        snapshot = build_snapshot(
            records, self.hostname, timestamp=int(self._wall_clock())
        )
        log.debug(
            "Cycle: %d tracked, %d reported", len(self.registry), snapshot["count"]
        )
        return encode_snapshot(snapshot)

    def publish(self, payload: bytes) -> bool:
        return self.publisher.send(payload)

    def make_scheduler(
        self,
        shutdown: ShutdownSignal,
        max_cycles: int | None = None,
    ) -> PacedScheduler | TimerScheduler:
        """Build the scheduler selected by ``config.scheduler``."""
        scheduler_cls = (
            TimerScheduler if self.config.scheduler == "timer" else PacedScheduler
        )
        return scheduler_cls(
            self.sample,
            self.publish,
            self.config.interval,
            shutdown,
            max_cycles=max_cycles,
            duration=self.config.duration,
            on_shutdown=self.close,
        )

    def close(self) -> None:
        """Release every record and close the publisher."""
        self.registry.clear()
        self.publisher.close()


def lower_priority(increment: int) -> None:
    """Renice this process; failure is logged and otherwise ignored."""
    if increment == 0:
        return
    try:
        os.nice(increment)
    except OSError as exc:
        log.error("Error: nice: %s", exc)


def run_collector(
    config: CollectorConfig,
    source: CounterSource | None = None,
    publisher: ZmqPublisher | None = None,
    shutdown: ShutdownSignal | None = None,
    max_cycles: int | None = None,
) -> None:
    """Run the main collection loop until shutdown.

    Raises:
        PublisherError: If the publish transport cannot be established.
    """
    log.info("System started, initializing...")
    lower_priority(config.nice)

    context = CollectorContext(config, source=source, publisher=publisher)
    context.publisher.connect()

    install_handlers = shutdown is None
    if install_handlers:
        shutdown = ShutdownSignal()
        shutdown.install()

    scheduler = context.make_scheduler(shutdown, max_cycles=max_cycles)
    log.info(
        "Sending statistics for %s* to %s every %.3fs (%s scheduler)",
        config.iface_pattern,
        config.server,
        config.interval,
        config.scheduler,
    )
    start_mono = time.monotonic()
    try:
        scheduler.run()
    finally:
        if install_handlers:
            shutdown.restore()
        log.info(
            "Exiting after %d cycles in %.1fs",
            scheduler.cycles,
            time.monotonic() - start_mono,
        )
