"""Panel layout: turns one Snapshot into the text of every dashboard panel."""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from rich.markup import escape

from matricx.formatting import (
    colored,
    format_bytes,
    format_rate,
    format_uptime,
    pad_left,
    pad_right,
    safe_num,
    truncate_middle,
)
from matricx.gauges import (
    GlyphStyle,
    aligned_line,
    clamp_fraction,
    pct_color,
    rate_color,
    render_mini_bar,
    space_evenly,
)
from matricx.models import (
    BatteryStatus,
    CpuLoad,
    MemoryReading,
    OsIdentity,
    ProcessSnapshot,
    RateSample,
    Snapshot,
)
from matricx.rates import gauge_fraction
from matricx.services import format_service_status, match_services

TITLE = "Matricx"
SEPARATOR = "  |  "

# Rows above the process panel (header 1, CPU 6, memory 4, network 4) and
# below it (services 3, footer 3).
PROCESS_TOP = 15
RESERVED_BOTTOM = 6
MIN_PROCESS_HEIGHT = 5
MIN_PROCESS_ROWS = 5
PROCESS_OVERHEAD = 3  # two border rows and the column heading

PID_WIDTH = 6
CPU_WIDTH = 6
RSS_WIDTH = 10
COLUMN_GAP = 2


def inner_width(terminal_width: int) -> int:
    """Columns available inside a full-width bordered panel."""
    return max(0, terminal_width - 2)


def header_panel(error: str | None = None) -> str:
    """Title line, replaced by the error text when the last tick failed."""
    if error is None:
        return TITLE
    return escape(f"{TITLE} (error: {error})")


def cpu_panel(cpu: CpuLoad, width: int, style: GlyphStyle = GlyphStyle.BLOCKS) -> str:
    """Overall load bar plus two rows of per-core mini bars."""
    total = safe_num(cpu.total)
    cores = []
    for index, load in enumerate(cpu.per_core, start=1):
        pct = safe_num(load)
        bar = render_mini_bar(clamp_fraction(pct / 100), color=pct_color(pct))
        cores.append(f"C{index}:{bar} {math.floor(pct + 0.5):02d}%")

    half = (len(cores) + 1) // 2
    overall = aligned_line(
        width,
        clamp_fraction(total / 100),
        f"{total:.1f}% | cores: {len(cores)}",
        color=pct_color(total),
        style=style,
    )
    return "\n".join(
        [overall, space_evenly(cores[:half], width), space_evenly(cores[half:], width)]
    )


def memory_fraction(memory: MemoryReading) -> float:
    """Share of physical memory in use."""
    total = safe_num(memory.total)
    if total <= 0:
        return 0.0
    return clamp_fraction(safe_num(memory.in_use) / total)


def memory_panel(
    memory: MemoryReading, width: int, style: GlyphStyle = GlyphStyle.BLOCKS
) -> str:
    fraction = memory_fraction(memory)
    pct = fraction * 100
    bar = aligned_line(width, fraction, f"{pct:.1f}%", color=pct_color(pct), style=style)
    used = format_bytes(memory.in_use)
    total = format_bytes(memory.total)
    return f"{bar}\n {used} / {total} ({pct:.1f}%)"


def network_panel(
    rates: RateSample, width: int, style: GlyphStyle = GlyphStyle.BLOCKS
) -> str:
    down = aligned_line(
        width,
        gauge_fraction(rates.rx, rates.observed_max),
        format_rate(rates.rx),
        label="Down",
        color=rate_color(rates.rx),
        style=style,
    )
    up = aligned_line(
        width,
        gauge_fraction(rates.tx, rates.observed_max),
        format_rate(rates.tx),
        label="Up  ",
        color=rate_color(rates.tx),
        style=style,
    )
    return f"{down}\n{up}"


def rank_processes(processes: Iterable[ProcessSnapshot]) -> list[ProcessSnapshot]:
    """Order by CPU% descending, then resident memory descending; stable."""
    return sorted(
        processes,
        key=lambda p: (-safe_num(p.cpu_percent), -safe_num(p.memory_rss)),
    )


def process_rows(terminal_height: int) -> int:
    """How many process rows fit below the fixed panels."""
    height = max(MIN_PROCESS_HEIGHT, terminal_height - PROCESS_TOP - RESERVED_BOTTOM)
    return max(MIN_PROCESS_ROWS, height - PROCESS_OVERHEAD)


def _process_line(name: str, pid: str, cpu: str, rss: str, name_width: int) -> str:
    gap = " " * COLUMN_GAP
    name_cell = pad_right(escape(truncate_middle(name, name_width)), name_width)
    return (
        f"{name_cell}{gap}{pad_left(pid, PID_WIDTH)}{gap}"
        f"{pad_left(cpu, CPU_WIDTH)}{gap}{pad_left(rss, RSS_WIDTH)}"
    )


def process_panel(
    processes: Iterable[ProcessSnapshot], width: int, terminal_height: int
) -> str:
    """
    Column heading plus the busiest processes.

    Always produces the heading and exactly process_rows() lines below it,
    padding with blank lines when there are fewer processes, so the panel
    keeps the same height from tick to tick.
    """
    rows = process_rows(terminal_height)
    name_width = max(0, width - PID_WIDTH - CPU_WIDTH - RSS_WIDTH - COLUMN_GAP * 3)

    lines = [_process_line("NAME", "PID", "CPU%", "RSS", name_width)]
    for proc in rank_processes(processes)[:rows]:
        lines.append(
            _process_line(
                proc.name,
                str(proc.pid),
                f"{safe_num(proc.cpu_percent):.1f}",
                format_bytes(proc.memory_rss),
                name_width,
            )
        )
    lines.extend("" for _ in range(rows + 1 - len(lines)))
    return "\n".join(lines)


def services_panel(processes: Iterable[ProcessSnapshot]) -> str:
    """All catalogued services on one line."""
    return SEPARATOR.join(format_service_status(s) for s in match_services(processes))


def _battery_text(battery: BatteryStatus) -> str:
    if battery.present and battery.percent is not None:
        return f"Battery: {safe_num(battery.percent):.0f}%"
    return "Battery: N/A"


def _os_text(identity: OsIdentity) -> str:
    return f"{identity.distro} {identity.release} ({identity.kernel})"


def footer_panel(snapshot: Snapshot, now: datetime) -> str:
    """OS identity, uptime, load average, battery and clock."""
    load = ", ".join(f"{safe_num(value):.2f}" for value in snapshot.load_avg)
    segments = [
        colored(_os_text(snapshot.os_identity), "green"),
        colored(f"Uptime: {format_uptime(snapshot.uptime_seconds)}", "cyan"),
        colored(f"Load Avg: {load}", "yellow"),
        colored(_battery_text(snapshot.battery), "magenta"),
        colored(now.strftime("%x, %X"), "white"),
    ]
    return SEPARATOR.join(segments)


@dataclass(slots=True, frozen=True)
class Dashboard:
    """Rendered text of every data panel for one tick."""

    cpu: str
    memory: str
    network: str
    processes: str
    services: str
    footer: str


def render_dashboard(
    snapshot: Snapshot,
    rates: RateSample,
    terminal_width: int,
    terminal_height: int,
    style: GlyphStyle = GlyphStyle.BLOCKS,
    now: datetime | None = None,
) -> Dashboard:
    """Lay out every panel for the given terminal size."""
    width = inner_width(terminal_width)
    return Dashboard(
        cpu=cpu_panel(snapshot.cpu, width, style),
        memory=memory_panel(snapshot.memory, width, style),
        network=network_panel(rates, width, style),
        processes=process_panel(snapshot.processes, width, terminal_height),
        services=services_panel(snapshot.processes),
        footer=footer_panel(snapshot, now or datetime.now()),
    )
