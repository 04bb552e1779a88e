"""Tests for the formatting primitives."""

import pytest
from rich.cells import cell_len

from matricx.formatting import (
    colored,
    format_bytes,
    format_rate,
    format_uptime,
    pad_left,
    pad_right,
    safe_num,
    strip_markup,
    truncate_middle,
    visible_len,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, "0 B"),
        (512, "512 B"),
        (1000, "1 kB"),
        (1337, "1.34 kB"),
        (5_242_880, "5.24 MB"),
        (8_000_000_000, "8 GB"),
        (16_000_000_000, "16 GB"),
        (-1500, "-1.5 kB"),
    ],
)
def test_format_bytes(value, expected):
    """Test format_bytes uses decimal units with three significant digits."""
    assert format_bytes(value) == expected


def test_format_bytes_non_finite():
    """Test format_bytes treats NaN and infinity as zero."""
    assert format_bytes(float("nan")) == "0 B"
    assert format_bytes(float("inf")) == "0 B"


def test_format_rate():
    """Test format_rate appends per-second suffix."""
    assert format_rate(1_048_576) == "1.05 MB/s"


class TestSafeNum:
    """Tests for safe_num coercion."""

    def test_passes_finite_numbers(self):
        assert safe_num(3) == 3.0
        assert safe_num(-2.5) == -2.5
        assert safe_num("7.5") == 7.5

    @pytest.mark.parametrize("value", [None, float("nan"), float("inf"), float("-inf"), "abc", object()])
    def test_defaults_to_zero(self, value):
        assert safe_num(value) == 0.0


class TestTruncateMiddle:
    """Tests for middle truncation of long names."""

    def test_short_string_unchanged(self):
        assert truncate_middle("bash", 10) == "bash"

    def test_exact_length_unchanged(self):
        assert truncate_middle("abcdef", 6) == "abcdef"

    @pytest.mark.parametrize("max_len", range(4, 30))
    def test_length_and_kept_ends(self, max_len):
        """Output is exactly max_len and keeps both ends of the original."""
        text = "com.example.very-long-process-name-with-a-suffix"
        result = truncate_middle(text, max_len)
        keep = (max_len - 3) // 2

        assert len(result) == max_len
        assert "..." in result
        assert result.startswith(text[:keep])
        assert result.endswith(text[len(text) - keep :])

    def test_example(self):
        assert truncate_middle("abcdefghijklmnopqrstuvwxyz", 10) == "abcd...xyz"

    @pytest.mark.parametrize("max_len", [3, 4, 9, 10, 25])
    def test_wide_characters_measured_in_cells(self, max_len):
        result = truncate_middle("数据库服务进程" * 4, max_len)
        assert cell_len(result) == max_len

    def test_wide_characters_keep_both_ends(self):
        result = truncate_middle("数据库服务进程" * 4, 11)
        assert result == "数据...进程"

    def test_wide_short_string_unchanged(self):
        assert truncate_middle("数据库", 6) == "数据库"

    def test_tiny_limit_cuts(self):
        assert truncate_middle("abcdefgh", 3) == "abc"
        assert truncate_middle("abcdefgh", 0) == ""
        assert truncate_middle("abcdefgh", -4) == ""


class TestMarkup:
    """Tests for markup-aware length helpers."""

    def test_strip_markup(self):
        assert strip_markup("[green]███[/green]   ") == "███   "

    def test_visible_len_ignores_tags(self):
        assert visible_len("[red]||[/red]    ") == 6
        assert visible_len("plain") == 5

    def test_pad_right_and_left(self):
        assert visible_len(pad_right("[cyan]ab[/cyan]", 6)) == 6
        assert pad_left("ab", 5) == "   ab"
        assert pad_right("abcdef", 3) == "abcdef"

    def test_colored_escapes_brackets(self):
        markup = colored("[kworker/0:1]", "green")
        assert strip_markup(markup) == "[kworker/0:1]"


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0, "0d 0h 0m"),
        (59, "0d 0h 0m"),
        (3600, "0d 1h 0m"),
        (90061, "1d 1h 1m"),
        (float("nan"), "0d 0h 0m"),
    ],
)
def test_format_uptime(seconds, expected):
    """Test uptime decomposes into days, hours and minutes."""
    assert format_uptime(seconds) == expected
