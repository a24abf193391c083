# src/kilo/core/LineRenderer.py
"""
kilo.core.LineRenderer
======================

Tab expansion and the rendered-line cache.

Every tab expands to spaces up to the next multiple of :data:`TAB_STOP`,
measured on the rendered output so far (so ``"a\\tb"`` renders as ``"a"``,
seven spaces, ``"b"``). The cursor lives in rendered columns; the helpers
:func:`col_for_raw_index`, :func:`raw_index_for_col` and :func:`raw_index_at_col`
translate between rendered columns and raw character indices of a stored line.

:class:`RenderedBuffer` keeps one rendered line (and optionally its highlight
ranges) per storage line and is updated line by line, mirroring each storage
edit, instead of being rebuilt.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional

from kilo.core.SyntaxHighlighter import Highlight, SyntaxHighlighter
from kilo.core.TextStorage import TextStorage


TAB_STOP = 8


# ==================== Pure rendering helpers ====================


def _char_width(char: str, col: int) -> int:
    return TAB_STOP - (col % TAB_STOP) if char == "\t" else 1


def render_line(line: str) -> str:
    """Returns ``line`` with tabs expanded to the next tab stop."""
    if "\t" not in line:
        return line
    parts: list[str] = []
    col = 0
    for char in line:
        width = _char_width(char, col)
        parts.append(" " * width if char == "\t" else char)
        col += width
    return "".join(parts)


def col_for_raw_index(line: str, index: int) -> int:
    """Rendered column at which the character ``line[index]`` starts."""
    col = 0
    for char in line[:index]:
        col += _char_width(char, col)
    return col


def raw_index_for_col(line: str, col: int) -> int:
    """Raw index of the first character starting at or after rendered ``col``.

    Used to address insertions and splits. A column inside a tab's expansion
    maps to the position after the tab; a column at or past the end of the
    line maps to ``len(line)``.
    """
    start = 0
    for index, char in enumerate(line):
        if start >= col:
            return index
        start += _char_width(char, start)
    return len(line)


def raw_index_at_col(line: str, col: int) -> int:
    """Raw index of the character whose rendered cells contain ``col``.

    Used to address deletions. Returns ``len(line)`` when ``col`` is at or past
    the end of the rendered line.
    """
    start = 0
    for index, char in enumerate(line):
        end = start + _char_width(char, start)
        if start <= col < end:
            return index
        start = end
    return len(line)


# ==================== RenderedBuffer ====================


class RenderedBuffer:
    """
    Class RenderedBuffer
    ====================
    Cache of rendered lines, 1:1 and in order with a :class:`TextStorage`.

    Attributes:
        highlighter (Optional[SyntaxHighlighter]): When set, every rendered
            line also carries its list of :class:`Highlight` ranges.

    Methods:
        update_line(i, storage) / insert_line(i, storage) / remove_line(i):
            Mirror a storage edit for exactly one line index.
        get_window(first_line, first_col, width, height):
            Visible slice of rendered rows and clipped highlight ranges.
        eol_col(i) / last_col(i) / line_count / last_line:
            Rendered geometry queries used by the editor.
    """

    def __init__(
        self, storage: TextStorage, highlighter: Optional[SyntaxHighlighter] = None
    ) -> None:
        self.highlighter = highlighter
        self._lines: list[str] = [render_line(line) for line in storage.lines()]
        self._highlights: Optional[list[list[Highlight]]] = (
            highlighter.highlight(self._lines) if highlighter else None
        )
        logging.debug(
            f"RenderedBuffer built: {len(self._lines)} lines, "
            f"highlighting {'on' if highlighter else 'off'}"
        )

    # ---------- incremental updates ----------

    def update_line(self, index: int, storage: TextStorage) -> None:
        rendered = render_line(storage.get_line(index))
        self._lines[index] = rendered
        if self._highlights is not None and self.highlighter is not None:
            self._highlights[index] = self.highlighter.highlight_line(rendered)

    def insert_line(self, index: int, storage: TextStorage) -> None:
        rendered = render_line(storage.get_line(index))
        self._lines.insert(index, rendered)
        if self._highlights is not None and self.highlighter is not None:
            self._highlights.insert(index, self.highlighter.highlight_line(rendered))

    def remove_line(self, index: int) -> None:
        del self._lines[index]
        if self._highlights is not None:
            del self._highlights[index]

    # ---------- queries ----------

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def last_line(self) -> int:
        return max(len(self._lines) - 1, 0)

    def get_line(self, index: int) -> str:
        return self._lines[index]

    def get_highlights(self, index: int) -> Optional[list[Highlight]]:
        return self._highlights[index] if self._highlights is not None else None

    def lines(self) -> Iterator[str]:
        return iter(self._lines)

    def eol_col(self, index: int) -> int:
        """Column one past the last rendered character of line ``index``."""
        return len(self._lines[index])

    def last_col(self, index: int) -> int:
        """Column of the last rendered character (0 for an empty line)."""
        return max(len(self._lines[index]) - 1, 0)

    def get_window(
        self, first_line: int, first_col: int, width: int, height: int
    ) -> tuple[list[str], Optional[list[list[Highlight]]]]:
        """Returns the visible rows and, when highlighting, their style ranges.

        Rows are sliced by character. Style ranges are shifted to window
        coordinates and clipped to the visible columns; the last range of a row
        ends exactly at the row's right edge. Rows past the end of the buffer
        are not returned.
        """
        end_line = min(first_line + height, len(self._lines))
        last = first_col + width
        rows = [self._lines[i][first_col:last] for i in range(first_line, end_line)]
        if self._highlights is None:
            return rows, None

        styled_rows: list[list[Highlight]] = []
        for offset, row in enumerate(rows):
            clipped: list[Highlight] = []
            for h in self._highlights[first_line + offset]:
                if h.end <= first_col or h.start >= last:
                    continue
                start = max(h.start, first_col) - first_col
                end = min(h.end, last) - first_col
                clipped.append(Highlight(h.style, start, end))
            if clipped:
                clipped[-1].end = len(row)
            styled_rows.append(clipped)
        return rows, styled_rows
