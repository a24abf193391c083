# src/kilo/core/SearchEngine.py
"""
kilo.core.SearchEngine
======================

Incremental substring search support.

:class:`SearchState` is the snapshot held by the editor while a search session
is active. :func:`find_in_lines` is the matcher: a cyclic scan over the buffer
split into three bounded passes.

1. The start line ahead of the start column in the search direction. Forward
   a match must begin after the start column; backward it must end at or
   before it.
2. Every other line in wraparound order. Forward visits the lines below the
   start line and then the lines above it; backward visits the lines above
   (nearest first) and then the lines below (bottom first).
3. The start line again, this time the segment behind the start column.

The character at the start column is left out of every pass, so stepping
through results never re-matches the occurrence under the cursor. A pattern
whose only occurrence is at the start therefore yields no match.

Columns are raw character indices into the stored lines.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from kilo.core.TextStorage import Location, Span
from kilo.core.ViewGeometry import ViewGeometry


@dataclass
class SearchState:
    """
    Class SearchState
    =================
    State of one search session.

    Attributes:
        initial_cursor (Location): Cursor when the session started; every new
            pattern is searched from here, and cancel restores it.
        initial_view (ViewGeometry): Viewport when the session started.
        pattern (Optional[str]): Current pattern, None until the first keystroke.
        forward (bool): Search direction.
    """

    initial_cursor: Location
    initial_view: ViewGeometry
    pattern: Optional[str] = None
    forward: bool = True


def _wraparound_order(line_count: int, start_line: int, forward: bool) -> Iterator[int]:
    if forward:
        yield from range(start_line + 1, line_count)
        yield from range(0, start_line)
    else:
        yield from range(start_line - 1, -1, -1)
        yield from range(line_count - 1, start_line, -1)


def _find_in_line(line: str, pattern: str, forward: bool) -> int:
    return line.find(pattern) if forward else line.rfind(pattern)


def find_in_lines(
    lines: Sequence[str], pattern: Optional[str], forward: bool, start: Location
) -> Optional[Span]:
    """Returns the span of the first match of ``pattern`` from ``start``.

    Args:
        lines: Buffer lines.
        pattern: Substring to look for. None or "" never matches.
        forward: Scan direction.
        start: Raw location the scan starts from.

    Returns:
        The matching span, or None when the pattern occurs nowhere.
    """
    if not pattern:
        return None

    size = len(pattern)
    line = lines[start.line]
    col = start.col

    def span_at(line_index: int, index: int) -> Span:
        return Span(Location(line_index, index), Location(line_index, index + size))

    # Pass 1: the start line ahead of the start column, which is never included.
    if forward:
        index = line.find(pattern, col + 1)
    else:
        index = line.rfind(pattern, 0, col)
    if index != -1:
        logging.debug(f"Search '{pattern}': hit on start line {start.line} at {index}")
        return span_at(start.line, index)

    # Pass 2: all other lines, wrapping around the buffer edge.
    for line_index in _wraparound_order(len(lines), start.line, forward):
        index = _find_in_line(lines[line_index], pattern, forward)
        if index != -1:
            logging.debug(f"Search '{pattern}': hit on line {line_index} at {index}")
            return span_at(line_index, index)

    # Pass 3: back on the start line, the segment behind the start column.
    if forward:
        index = line.find(pattern, 0, col)
    else:
        index = line.rfind(pattern, col + 1)
    if index != -1:
        logging.debug(f"Search '{pattern}': wrapped back to line {start.line} at {index}")
        return span_at(start.line, index)

    logging.debug(f"Search '{pattern}': no match")
    return None
