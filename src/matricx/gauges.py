"""Bar gauges: full-width bars, per-core mini bars and aligned readout lines."""

import math
from enum import Enum

from matricx.formatting import safe_num, visible_len
from matricx.models import GaugeSpec

MINI_BAR_WIDTH = 6
MINI_BAR_GLYPH = "|"
MIN_GAP = 1

MEBIBYTE = 1024 * 1024


class GlyphStyle(Enum):
    """Character sets for the filled and empty part of a bar."""

    BLOCKS = "blocks"
    SHADED = "shaded"
    ASCII = "ascii"

    @property
    def fill(self) -> str:
        return _GLYPHS[self][0]

    @property
    def empty(self) -> str:
        return _GLYPHS[self][1]


_GLYPHS: dict[GlyphStyle, tuple[str, str]] = {
    GlyphStyle.BLOCKS: ("█", " "),
    GlyphStyle.SHADED: ("▓", "░"),
    GlyphStyle.ASCII: ("#", "-"),
}


def clamp_fraction(fraction: float) -> float:
    """Clamp a fraction into [0, 1], mapping non-finite input to 0."""
    return min(1.0, max(0.0, safe_num(fraction)))


def filled_count(fraction: float, width: int) -> int:
    """Number of filled columns for a bar, always within [0, width]."""
    width = max(0, width)
    filled = math.floor(width * clamp_fraction(fraction) + 0.5)
    return max(0, min(width, filled))


def pct_color(pct: float) -> str:
    """Colour for a percentage reading."""
    if pct >= 80:
        return "red"
    if pct >= 50:
        return "yellow"
    return "green"


def rate_color(bytes_per_sec: float) -> str:
    """Colour for a throughput reading: red from 5 MiB/s, yellow from 1 MiB/s."""
    mib = abs(safe_num(bytes_per_sec)) / MEBIBYTE
    if mib >= 5:
        return "red"
    if mib >= 1:
        return "yellow"
    return "green"


def render_gauge(gauge: GaugeSpec, style: GlyphStyle = GlyphStyle.BLOCKS) -> str:
    """Render a GaugeSpec as markup exactly gauge.width columns wide."""
    filled = filled_count(gauge.fraction, gauge.width)
    empty = gauge.width - filled
    return f"[{gauge.color}]{style.fill * filled}[/{gauge.color}]" + style.empty * empty


def render_bar(
    fraction: float,
    width: int,
    color: str = "green",
    style: GlyphStyle = GlyphStyle.BLOCKS,
) -> str:
    """Render a bar of the given width filled to fraction."""
    return render_gauge(GaugeSpec(clamp_fraction(fraction), width, color), style)


def render_mini_bar(
    fraction: float,
    width: int = MINI_BAR_WIDTH,
    color: str = "green",
) -> str:
    """Render a compact '|' bar for side-by-side per-core gauges."""
    width = max(0, width)
    filled = filled_count(fraction, width)
    return f"[{color}]{MINI_BAR_GLYPH * filled}[/{color}]" + " " * (width - filled)


def aligned_line(
    inner_width: int,
    fraction: float,
    readout: str,
    label: str = "",
    color: str = "green",
    style: GlyphStyle = GlyphStyle.BLOCKS,
) -> str:
    """
    Compose ``label bar   readout`` with the readout flush to the right edge.

    The bar takes whatever the label, the readout and a one-column gap leave
    of inner_width. Readout may contain markup; only its visible length
    counts.
    """
    label_text = f"{label} " if label else ""
    label_len = visible_len(label_text)
    readout_len = visible_len(readout)

    bar_width = max(0, inner_width - label_len - readout_len - MIN_GAP)
    bar = render_bar(fraction, bar_width, color, style)
    gap = max(MIN_GAP, inner_width - label_len - bar_width - readout_len)
    return f"{label_text}{bar}{' ' * gap}{readout}"


def space_evenly(items: list[str], width: int) -> str:
    """Join items with equal gaps so the row spreads across width."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    total = sum(visible_len(item) for item in items)
    space = max(1, (width - total) // (len(items) - 1))
    return (" " * space).join(items)
