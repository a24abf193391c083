# tests/test_core/test_line_renderer.py
"""LineRenderer Tests
=====================

Tab expansion, rendered/raw column mapping and the incremental
:class:`RenderedBuffer` cache, including window slicing and clipping of
highlight ranges.
"""

import pytest

from kilo.core.LineRenderer import (
    TAB_STOP,
    RenderedBuffer,
    col_for_raw_index,
    raw_index_at_col,
    raw_index_for_col,
    render_line,
)
from kilo.core.SyntaxHighlighter import Highlight, HighlightStyle
from kilo.core.TextStorage import Location, TextStorage


STYLE_A = HighlightStyle(foreground="aaaaaa")
STYLE_B = HighlightStyle(foreground="bbbbbb", bold=True)


class ChunkHighlighter:
    """Stub highlighter: alternating styles in chunks of three columns."""

    language = "chunks"

    def highlight_line(self, line):
        ranges = []
        for start in range(0, len(line), 3):
            style = STYLE_A if (start // 3) % 2 == 0 else STYLE_B
            ranges.append(Highlight(style, start, min(start + 3, len(line))))
        return ranges

    def highlight(self, lines):
        return [self.highlight_line(line) for line in lines]


# ==================== render_line ====================


def test_single_tab_renders_as_full_stop() -> None:
    assert TAB_STOP == 8
    assert render_line("\t") == " " * 8


def test_tab_after_text_goes_to_next_stop() -> None:
    assert render_line("a\tb") == "a" + " " * 7 + "b"


def test_consecutive_tabs_use_rendered_width() -> None:
    assert render_line("ab\t\tc") == "ab" + " " * 6 + " " * 8 + "c"
    assert render_line("12345678\tx") == "12345678" + " " * 8 + "x"


def test_line_without_tabs_is_unchanged() -> None:
    assert render_line("plain text") == "plain text"
    assert render_line("") == ""


# ==================== column mapping ====================


def test_col_for_raw_index() -> None:
    line = "a\tbc"
    assert [col_for_raw_index(line, i) for i in range(len(line) + 1)] == [0, 1, 8, 9, 10]


def test_raw_index_for_col_rounds_up_inside_tab() -> None:
    line = "a\tbc"
    assert raw_index_for_col(line, 0) == 0
    assert raw_index_for_col(line, 1) == 1
    assert raw_index_for_col(line, 4) == 2
    assert raw_index_for_col(line, 8) == 2
    assert raw_index_for_col(line, 10) == 4
    assert raw_index_for_col(line, 50) == 4


def test_raw_index_at_col_finds_covering_char() -> None:
    line = "a\tbc"
    assert raw_index_at_col(line, 0) == 0
    assert raw_index_at_col(line, 1) == 1
    assert raw_index_at_col(line, 7) == 1
    assert raw_index_at_col(line, 8) == 2
    assert raw_index_at_col(line, 10) == 4


# ==================== RenderedBuffer ====================


def test_rendered_buffer_mirrors_storage_edits() -> None:
    storage = TextStorage(["a\tb", "xyz"])
    rendered = RenderedBuffer(storage)
    assert list(rendered.lines()) == ["a       b", "xyz"]
    assert rendered.get_window(0, 0, 20, 2)[1] is None

    storage.insert_char(Location(1, 0), "\t")
    rendered.update_line(1, storage)
    storage.insert_line(2)
    rendered.insert_line(2, storage)
    assert list(rendered.lines()) == ["a       b", "        xyz", ""]

    storage.join_lines(0)
    rendered.remove_line(1)
    rendered.update_line(0, storage)
    assert list(rendered.lines()) == ["a       b       xyz", ""]
    assert rendered.line_count == storage.line_count == 2


def test_eol_and_last_col() -> None:
    rendered = RenderedBuffer(TextStorage(["abc", "", "\t"]))
    assert rendered.eol_col(0) == 3
    assert rendered.last_col(0) == 2
    assert rendered.eol_col(1) == 0
    assert rendered.last_col(1) == 0
    assert rendered.eol_col(2) == 8
    assert rendered.last_line == 2


def test_get_window_slices_by_character() -> None:
    rendered = RenderedBuffer(TextStorage(["0123456789", "ab", "漢字かな交じり"]))

    rows, highlights = rendered.get_window(0, 2, 4, 10)

    assert rows == ["2345", "", "かな交じ"]
    assert highlights is None


def test_get_window_stops_at_buffer_end() -> None:
    rendered = RenderedBuffer(TextStorage(["a", "b", "c"]))
    rows, _ = rendered.get_window(1, 0, 5, 10)
    assert rows == ["b", "c"]


def test_get_window_clips_highlights_to_visible_columns() -> None:
    rendered = RenderedBuffer(TextStorage(["abcdefghij", "xy"]), ChunkHighlighter())

    rows, highlights = rendered.get_window(0, 2, 5, 2)

    assert rows == ["cdefg", ""]
    assert highlights == [
        [Highlight(STYLE_A, 0, 1), Highlight(STYLE_B, 1, 4), Highlight(STYLE_A, 4, 5)],
        [],
    ]


def test_last_visible_range_ends_at_row_edge() -> None:
    rendered = RenderedBuffer(TextStorage(["abcdefghij"]), ChunkHighlighter())

    rows, highlights = rendered.get_window(0, 0, 7, 1)

    assert rows == ["abcdefg"]
    assert highlights[0][-1].end == len(rows[0])
    starts_and_ends = [(h.start, h.end) for h in highlights[0]]
    assert starts_and_ends == [(0, 3), (3, 6), (6, 7)]


def test_highlights_follow_incremental_updates() -> None:
    storage = TextStorage(["abc"])
    rendered = RenderedBuffer(storage, ChunkHighlighter())

    storage.insert_char(Location(0, 3), "d")
    rendered.update_line(0, storage)
    storage.insert_line(1)
    rendered.insert_line(1, storage)

    assert rendered.get_highlights(0) == [Highlight(STYLE_A, 0, 3), Highlight(STYLE_B, 3, 4)]
    assert rendered.get_highlights(1) == []

    rendered.remove_line(1)
    assert rendered.line_count == 1


@pytest.mark.parametrize("line", ["", "x", "\t\t", "a\tb\tc", "tab at end\t"])
def test_highlight_ranges_cover_rendered_line(line: str) -> None:
    rendered = RenderedBuffer(TextStorage([line]), ChunkHighlighter())
    ranges = rendered.get_highlights(0)
    expected_len = len(render_line(line))

    if expected_len == 0:
        assert ranges == []
    else:
        assert ranges[0].start == 0
        assert ranges[-1].end == expected_len
        for left, right in zip(ranges, ranges[1:]):
            assert left.end == right.start
