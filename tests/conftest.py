"""Shared fixtures for matricx tests."""

import pytest

from matricx.models import (
    BatteryStatus,
    CpuLoad,
    MemoryReading,
    NetworkCounters,
    OsIdentity,
    ProcessSnapshot,
    Snapshot,
)
from matricx.monitor import MetricSource


def build_snapshot(**overrides) -> Snapshot:
    """Snapshot with plausible values, any field overridable."""
    fields = {
        "cpu": CpuLoad(total=25.0, per_core=(10.0, 20.0, 30.0, 40.0)),
        "memory": MemoryReading(total=16_000_000_000, used=12_000_000_000, active=8_000_000_000),
        "network": (NetworkCounters(name="eth0", rx_bytes=1000, tx_bytes=2000),),
        "processes": (
            ProcessSnapshot(pid=100, name="python", cpu_percent=12.5, memory_rss=50_000_000),
            ProcessSnapshot(pid=200, name="postgres", cpu_percent=3.0, memory_rss=80_000_000),
        ),
        "os_identity": OsIdentity(distro="Ubuntu", release="24.04", kernel="6.8.0"),
        "uptime_seconds": 90061.0,
        "load_avg": (0.5, 1.25, 2.0),
        "battery": BatteryStatus(present=False),
        "taken_at": 100.0,
    }
    fields.update(overrides)
    return Snapshot(**fields)


class FakeSource(MetricSource):
    """MetricSource returning canned readings instead of querying the host."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.fail_with = fail_with
        self.calls = 0

    def current_load(self) -> CpuLoad:
        self.calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        return CpuLoad(total=50.0, per_core=(50.0, 50.0))

    def memory(self) -> MemoryReading:
        return MemoryReading(total=8_000_000_000, used=4_000_000_000)

    def network_counters(self) -> list[NetworkCounters]:
        return [
            NetworkCounters(name="lo", rx_bytes=0, tx_bytes=0),
            NetworkCounters(name="eth0", rx_bytes=1000 * self.calls, tx_bytes=500 * self.calls),
        ]

    def process_list(self) -> list[ProcessSnapshot]:
        return [ProcessSnapshot(pid=42, name="redis-server", cpu_percent=1.5, memory_rss=10_000_000)]

    def os_identity(self) -> OsIdentity:
        return OsIdentity(distro="TestOS", release="1.0", kernel="test")

    def uptime_seconds(self) -> float:
        return 3600.0

    def load_average(self) -> tuple[float, float, float]:
        return (0.1, 0.2, 0.3)

    def battery_status(self) -> BatteryStatus:
        raise RuntimeError("no battery driver")


@pytest.fixture
def snapshot() -> Snapshot:
    return build_snapshot()


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource()
