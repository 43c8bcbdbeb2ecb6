"""Tests for CollectorConfig validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from ifstat_sender.config import CollectorConfig


class TestCollectorConfig:
    def test_defaults(self) -> None:
        config = CollectorConfig(server="tcp://h:1", iface_pattern="ppp")
        assert config.interval == 1.0
        assert config.scheduler == "paced"
        assert config.duration == 0
        assert config.hostname is None
        assert config.nice == 15
        assert config.sysfs_root == Path("/sys/class/net")

    def test_sysfs_root_string_converted(self) -> None:
        config = CollectorConfig(
            server="tcp://h:1", iface_pattern="ppp", sysfs_root="/tmp/net"
        )
        assert isinstance(config.sysfs_root, Path)

    @pytest.mark.parametrize("interval", [0, -1.0])
    def test_non_positive_interval(self, interval: float) -> None:
        with pytest.raises(ValueError, match="interval must be positive"):
            CollectorConfig(server="tcp://h:1", iface_pattern="ppp", interval=interval)

    def test_unknown_scheduler(self) -> None:
        with pytest.raises(ValueError, match="Unknown scheduler"):
            CollectorConfig(server="tcp://h:1", iface_pattern="ppp", scheduler="cron")
