"""Sampling engine for matricx."""

import logging
import platform
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from queue import Queue

import psutil

from matricx.formatting import safe_num
from matricx.models import (
    BatteryStatus,
    CpuLoad,
    MemoryReading,
    NetworkCounters,
    OsIdentity,
    ProcessSnapshot,
    Snapshot,
    TickFailure,
)

logger = logging.getLogger(__name__)
logging.getLogger("matricx").addHandler(logging.NullHandler())

TickResult = Snapshot | TickFailure


class MetricSource:
    """
    Host metrics read through psutil.

    Each method queries one metric domain and may be called from any thread.
    Processes that disappear or deny access mid-scan are skipped.
    """

    def __init__(self) -> None:
        """Prime the CPU counters; the first psutil call always reports 0.0."""
        psutil.cpu_percent()
        psutil.cpu_percent(percpu=True)

    def current_load(self) -> CpuLoad:
        total = psutil.cpu_percent()
        per_core = psutil.cpu_percent(percpu=True)
        return CpuLoad(
            total=safe_num(total),
            per_core=tuple(safe_num(load) for load in per_core),
        )

    def memory(self) -> MemoryReading:
        mem = psutil.virtual_memory()
        return MemoryReading(
            total=int(mem.total),
            used=int(mem.used),
            active=int(getattr(mem, "active", 0) or 0),
        )

    def network_counters(self) -> list[NetworkCounters]:
        counters = psutil.net_io_counters(pernic=True) or {}
        return [
            NetworkCounters(name=name, rx_bytes=nic.bytes_recv, tx_bytes=nic.bytes_sent)
            for name, nic in counters.items()
        ]

    def process_list(self) -> list[ProcessSnapshot]:
        """
        Collect snapshots of all running processes.

        Handles AccessDenied and ZombieProcess errors gracefully.
        """
        processes: list[ProcessSnapshot] = []

        for proc in psutil.process_iter(attrs=["pid", "name", "cpu_percent", "memory_info"]):
            try:
                info = proc.info
                mem_info = info.get("memory_info")
                processes.append(
                    ProcessSnapshot(
                        pid=info.get("pid", 0),
                        name=info.get("name") or "",
                        cpu_percent=safe_num(info.get("cpu_percent")),
                        memory_rss=mem_info.rss if mem_info else 0,
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                logger.debug("Skipping process %s", proc.pid)
                continue

        return processes

    def os_identity(self) -> OsIdentity:
        kernel = platform.release()
        try:
            release = platform.freedesktop_os_release()
        except OSError:
            return OsIdentity(distro=platform.system(), release=platform.version(), kernel=kernel)
        return OsIdentity(
            distro=release.get("NAME", platform.system()),
            release=release.get("VERSION_ID", ""),
            kernel=kernel,
        )

    def uptime_seconds(self) -> float:
        return time.time() - psutil.boot_time()

    def load_average(self) -> tuple[float, float, float]:
        one, five, fifteen = psutil.getloadavg()
        return (safe_num(one), safe_num(five), safe_num(fifteen))

    def battery_status(self) -> BatteryStatus:
        battery = psutil.sensors_battery()
        if battery is None:
            return BatteryStatus(present=False)
        return BatteryStatus(present=True, percent=safe_num(battery.percent))


def _tolerant_battery(source: MetricSource) -> BatteryStatus:
    try:
        return source.battery_status()
    except Exception as exc:
        logger.debug("Battery status unavailable: %s", exc)
        return BatteryStatus(present=False)


def collect_snapshot(source: MetricSource, executor: ThreadPoolExecutor) -> Snapshot:
    """
    Query every metric domain concurrently and join the results.

    Any failing query other than the battery propagates to the caller and
    abandons the whole snapshot.
    """
    load = executor.submit(source.current_load)
    memory = executor.submit(source.memory)
    network = executor.submit(source.network_counters)
    processes = executor.submit(source.process_list)
    identity = executor.submit(source.os_identity)
    uptime = executor.submit(source.uptime_seconds)
    load_avg = executor.submit(source.load_average)
    battery = executor.submit(_tolerant_battery, source)

    return Snapshot(
        cpu=load.result(),
        memory=memory.result(),
        network=tuple(network.result()),
        processes=tuple(processes.result()),
        os_identity=identity.result(),
        uptime_seconds=safe_num(uptime.result()),
        load_avg=load_avg.result(),
        battery=battery.result(),
        taken_at=time.monotonic(),
    )


class SystemMonitor:
    """
    Samples the host on a fixed period in a daemon thread.

    Pushes one Snapshot per tick to a thread-safe Queue, or a TickFailure
    when the tick's collection raised.
    """

    def __init__(
        self,
        update_queue: Queue[TickResult],
        poll_rate: float = 1.0,
        source: MetricSource | None = None,
    ) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            update_queue: Thread-safe queue to push tick results to.
            poll_rate: How often to poll the system (in seconds). Default 1.0s.
            source: Metric source to sample. Defaults to the psutil source.
        """
        self._queue = update_queue
        self._poll_rate = max(0.1, poll_rate)
        self._source = source if source is not None else MetricSource()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._executor: ThreadPoolExecutor | None = None

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix="metric")
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="SystemMonitor",
        )
        self._thread.start()
        logger.info("System monitor started (period %.2fs)", self._poll_rate)

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            logger.info("System monitor stopped")
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def sample(self) -> Snapshot:
        """Collect one snapshot synchronously."""
        executor = self._executor
        if executor is not None:
            return collect_snapshot(self._source, executor)
        with ThreadPoolExecutor(max_workers=8, thread_name_prefix="metric") as executor:
            return collect_snapshot(self._source, executor)

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        next_tick = time.monotonic()
        while not self._stop_event.is_set():
            try:
                self._queue.put(self.sample())
            except Exception as exc:
                logger.error("Metric collection failed: %s", exc)
                self._queue.put(TickFailure(message=str(exc) or type(exc).__name__))

            # Ticks are spaced from their start, not from the end of collection.
            # A tick that overruns the period starts the next one straight away.
            next_tick = max(next_tick + self._poll_rate, time.monotonic())
            self._stop_event.wait(timeout=max(0.0, next_tick - time.monotonic()))


def snapshot_once(settle: float = 0.5, source: MetricSource | None = None) -> Snapshot:
    """
    Collect a single snapshot outside the sampling loop.

    CPU percentages are measured against the previous call, so the counters
    are primed and given ``settle`` seconds before the real sample.
    """
    source = source if source is not None else MetricSource()
    source.process_list()
    time.sleep(max(0.0, settle))
    with ThreadPoolExecutor(max_workers=8, thread_name_prefix="metric") as executor:
        return collect_snapshot(source, executor)
