"""Data models for matricx."""

import math
from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class CpuLoad:
    """Overall and per-core CPU load, in percent."""

    total: float
    per_core: tuple[float, ...] = ()


@dataclass(slots=True, frozen=True)
class MemoryReading:
    """Physical memory totals in bytes."""

    total: int
    used: int
    active: int = 0  # 0 where the platform does not report it

    @property
    def in_use(self) -> int:
        """Active memory when reported, otherwise used memory."""
        return self.active or self.used


@dataclass(slots=True, frozen=True)
class NetworkCounters:
    """Cumulative byte counters of one network interface."""

    name: str
    rx_bytes: int
    tx_bytes: int
    rx_rate: float | None = None  # bytes/sec, when the source reports it
    tx_rate: float | None = None


@dataclass(slots=True, frozen=True)
class ProcessSnapshot:
    """Immutable snapshot of a process state."""

    pid: int
    name: str
    cpu_percent: float  # 0.0 - 100.0 * core_count
    memory_rss: int  # Bytes


@dataclass(slots=True, frozen=True)
class OsIdentity:
    """Operating system identity strings."""

    distro: str
    release: str
    kernel: str


@dataclass(slots=True, frozen=True)
class BatteryStatus:
    """Battery presence and charge."""

    present: bool
    percent: float | None = None


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Raw metrics fetched once per tick. Never mutated after construction."""

    cpu: CpuLoad
    memory: MemoryReading
    network: tuple[NetworkCounters, ...]
    processes: tuple[ProcessSnapshot, ...]
    os_identity: OsIdentity
    uptime_seconds: float
    load_avg: tuple[float, float, float]
    battery: BatteryStatus
    taken_at: float  # time.monotonic() seconds


@dataclass(slots=True, frozen=True)
class TickFailure:
    """Placeholder queued in place of a snapshot when a tick fails."""

    message: str


@dataclass(slots=True, frozen=True)
class CounterSample:
    """Byte counters of the primary interface at a point in time."""

    rx: float
    tx: float
    at: float  # seconds


@dataclass(slots=True, frozen=True)
class RateState:
    """
    Network smoothing state carried from one tick to the next.

    observed_max is a decaying ceiling used to normalise throughput gauges;
    it never drops below 1.
    """

    last: CounterSample | None = None
    observed_max: float = 1.0


@dataclass(slots=True, frozen=True)
class RateSample:
    """Throughput of the primary interface for one tick, in bytes/sec."""

    rx: float = 0.0
    tx: float = 0.0
    observed_max: float = 1.0


@dataclass(slots=True, frozen=True)
class GaugeSpec:
    """A gauge to draw: fill fraction, width in columns and colour."""

    fraction: float
    width: int
    color: str = "green"

    def __post_init__(self) -> None:
        fraction = self.fraction if math.isfinite(self.fraction) else 0.0
        object.__setattr__(self, "fraction", min(1.0, max(0.0, fraction)))
        object.__setattr__(self, "width", max(0, int(self.width)))


@dataclass(slots=True, frozen=True)
class ServiceCatalogEntry:
    """A known background service and the process-name substrings that identify it."""

    name: str
    matches: tuple[str, ...] = field(default_factory=tuple)


@dataclass(slots=True, frozen=True)
class ServiceStatus:
    """Whether a catalogued service is running on this tick."""

    entry: ServiceCatalogEntry
    running: bool
    pid: int | None = None
    cpu_percent: float | None = None
