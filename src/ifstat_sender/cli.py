"""Command-line interface for the interface statistics sender."""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import sys
from pathlib import Path

from .config import SCHEDULERS, CollectorConfig

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_SYSLOG_FORMAT = "ifstat-sender[%(process)d]: %(levelname)s %(message)s"
_SYSLOG_ADDRESS = "/dev/log"


def parse_args(argv: list[str] | None = None) -> CollectorConfig:
    """Parse command-line arguments and return a CollectorConfig."""
    parser = argparse.ArgumentParser(
        prog="ifstat-sender",
        description=(
            "Publish per-interface throughput, packet rates and peaks "
            "over ZeroMQ once per interval"
        ),
    )
    parser.add_argument(
        "-s",
        "--server",
        required=True,
        help="ZeroMQ endpoint to publish to (e.g. tcp://collector:5556)",
    )
    parser.add_argument(
        "-i",
        "--iface-pattern",
        required=True,
        help="Only report interfaces whose name starts with this prefix",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=1.0,
        help="Sampling interval in seconds (default: 1.0)",
    )
    parser.add_argument(
        "--scheduler",
        choices=SCHEDULERS,
        default="paced",
        help="Cycle scheduling strategy (default: paced)",
    )
    parser.add_argument(
        "-d",
        "--duration",
        type=int,
        default=0,
        help="Run duration in seconds, 0 for unlimited (default: 0)",
    )
    parser.add_argument(
        "--reset-peaks-on-churn",
        action="store_true",
        help="Reset peak values when a slot is rebound to another interface",
    )
    parser.add_argument(
        "--hostname",
        default=None,
        help="Host identifier in snapshots (default: system hostname)",
    )
    parser.add_argument(
        "--sysfs-root",
        type=Path,
        default=Path("/sys/class/net"),
        help="Network class directory in sysfs (default: /sys/class/net)",
    )
    parser.add_argument(
        "--hwm",
        type=int,
        default=1,
        help="ZeroMQ send high-water mark (default: 1)",
    )
    parser.add_argument(
        "--nice",
        type=int,
        default=15,
        help="Niceness increment applied at startup, 0 to skip (default: 15)",
    )
    parser.add_argument(
        "--syslog",
        action="store_true",
        help="Also log to syslog (facility LOCAL0)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    args = parser.parse_args(argv)

    try:
        return CollectorConfig(
            server=args.server,
            iface_pattern=args.iface_pattern,
            interval=args.interval,
            scheduler=args.scheduler,
            duration=args.duration,
            reset_peaks_on_churn=args.reset_peaks_on_churn,
            hostname=args.hostname,
            sysfs_root=args.sysfs_root,
            send_hwm=args.hwm,
            nice=args.nice,
            syslog=args.syslog,
            log_level=args.log_level,
        )
    except ValueError as exc:
        parser.error(str(exc))


def setup_logging(config: CollectorConfig) -> None:
    """Log to stderr, and to syslog when requested."""
    logging.basicConfig(level=getattr(logging, config.log_level), format=_LOG_FORMAT)

    if config.syslog:
        try:
            handler = logging.handlers.SysLogHandler(
                address=_SYSLOG_ADDRESS,
                facility=logging.handlers.SysLogHandler.LOG_LOCAL0,
            )
        except OSError as exc:
            logging.getLogger(__name__).error("Cannot open syslog: %s", exc)
            return
        handler.setFormatter(logging.Formatter(_SYSLOG_FORMAT))
        logging.getLogger().addHandler(handler)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ifstat-sender CLI."""
    config = parse_args(argv)
    setup_logging(config)

    # Import here so --help works without pyzmq installed
    from .collector import run_collector
    from .publisher import PublisherError

    try:
        run_collector(config)
    except PublisherError as exc:
        logging.getLogger(__name__).error("Error: %s", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(0)
