"""Text formatting primitives shared by the panels."""

import math

from rich.cells import cell_len, set_cell_size
from rich.markup import escape
from rich.text import Text

_BYTE_UNITS = ["B", "kB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def safe_num(value: object) -> float:
    """Coerce a raw reading to a finite float, defaulting to 0."""
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def format_bytes(size: float) -> str:
    """
    Format a byte count as a human-readable string with decimal units.

    Three significant digits, trailing zeros dropped: 8 GB, 5.24 MB, 512 B.
    """
    size = safe_num(size)
    sign = "-" if size < 0 else ""
    size = abs(size)
    if size < 1:
        return f"{sign}{size:g} B"

    exponent = min(int(math.log10(size) // 3), len(_BYTE_UNITS) - 1)
    value = float(f"{size / 1000**exponent:.3g}")
    return f"{sign}{value:g} {_BYTE_UNITS[exponent]}"


def format_rate(bytes_per_sec: float) -> str:
    """Format a throughput value."""
    return f"{format_bytes(bytes_per_sec)}/s"


def format_uptime(seconds: float) -> str:
    """Decompose uptime into days, hours and minutes."""
    seconds = max(0.0, safe_num(seconds))
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    return f"{days}d {hours}h {minutes}m"


def truncate_middle(text: str, max_len: int) -> str:
    """
    Shorten text to max_len columns by replacing its middle with an ellipsis.

    Width is counted in terminal cells, so wide characters take two. The
    suffix kept is (max_len - 3) // 2 cells; the prefix takes the rest so
    the result is exactly max_len columns. Limits of 3 or less cut.
    """
    max_len = max(0, max_len)
    if cell_len(text) <= max_len:
        return text
    if max_len <= 3:
        return set_cell_size(text, max_len)
    half = (max_len - 3) // 2
    head = set_cell_size(text, max_len - 3 - half)
    tail = set_cell_size(text[::-1], half)[::-1]
    return f"{head}...{tail}"


def strip_markup(markup: str) -> str:
    """Remove console markup tags, returning the displayed text."""
    return Text.from_markup(markup).plain


def visible_len(markup: str) -> int:
    """Number of terminal columns the markup occupies once rendered."""
    return cell_len(strip_markup(markup))


def pad_right(markup: str, width: int) -> str:
    """Pad markup with spaces on the right to a visible width."""
    return markup + " " * max(0, width - visible_len(markup))


def pad_left(markup: str, width: int) -> str:
    """Pad markup with spaces on the left to a visible width."""
    return " " * max(0, width - visible_len(markup)) + markup


def colored(text: str, color: str) -> str:
    """Wrap plain text in a colour tag, escaping any markup it contains."""
    return f"[{color}]{escape(text)}[/{color}]"
