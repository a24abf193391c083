# src/kilo/core/Editor.py
"""
kilo.core.Editor
================

The editing core: owns the text storage, the rendered-line cache, the cursor,
the viewport and the optional search session, and keeps them consistent.

Coordinates
-----------
The cursor column is a *rendered* column (tabs expanded). It is authoritative
for movement, scrolling and display. Storage edits convert it to a raw index
with :func:`raw_index_for_col` / :func:`raw_index_at_col`; search hits found in
raw text are converted back with :func:`col_for_raw_index`.

Invariants held after every public call:

- ``0 <= cursor.line < line_count``
- ``0 <= cursor.col <= eol_col(cursor.line)``
- ``view.first_line <= cursor.line <= view.last_line()``
- ``view.first_col <= cursor.col <= view.last_col()``

Scrolling is by exactly one line or column when the cursor leaves the viewport
through the edge it was sitting on; whole-buffer and page moves reposition the
viewport origin directly.
"""

from __future__ import annotations

import logging
from typing import Optional

from kilo.core.LineRenderer import (
    RenderedBuffer,
    col_for_raw_index,
    raw_index_at_col,
    raw_index_for_col,
)
from kilo.core.SearchEngine import SearchState, find_in_lines
from kilo.core.SyntaxHighlighter import DEFAULT_THEME, Highlight, SyntaxHighlighter
from kilo.core.TextStorage import Location, TextStorage
from kilo.core.ViewGeometry import ViewGeometry


class EditorStateError(RuntimeError):
    """Raised when an operation is called in a state that does not allow it."""


class Editor:
    """
    Class Editor
    ============
    Cursor/viewport coordinator. One public method per user action.

    Attributes:
        buffer (TextStorage): The text being edited.
        rendered_buffer (RenderedBuffer): Tab-expanded (and highlighted) lines.
        cursor (Location): Cursor in buffer coordinates (rendered columns).
        view (ViewGeometry): Visible window over the rendered buffer.
        search_state (Optional[SearchState]): Active search session, if any.

    Methods:
        Movement: move_cursor_up/down/left/right, move_cursor_to_line_start/end,
            move_one_view_up/down, move_cursor_to_buffer_top/bottom.
        Editing: insert_char, insert_line, remove_char_behind, remove_char_in_front.
        Search: start_search, set_search_pattern, set_search_direction,
            next_search_result, finish_search, cancel_search.
        Files: open_file, new_buffer, save_file, save_file_as.
        Queries: get_view_contents, get_view_cursor, get_buffer_cursor, ...
    """

    def __init__(
        self,
        width: int,
        height: int,
        highlighting: bool = False,
        theme: str = DEFAULT_THEME,
    ) -> None:
        self.highlighting = highlighting
        self.theme = theme
        self.buffer = TextStorage()
        self.rendered_buffer = RenderedBuffer(self.buffer, self._make_highlighter(None))
        self.cursor = Location(0, 0)
        self.view = ViewGeometry(0, 0, max(width, 1), max(height, 1))
        self.search_state: Optional[SearchState] = None
        logging.debug(f"Editor created: view {self.view.width}x{self.view.height}")

    def _make_highlighter(self, file_path: Optional[str]) -> Optional[SyntaxHighlighter]:
        if not self.highlighting:
            return None
        return SyntaxHighlighter.for_file(file_path, self.theme)

    # ==================== Files ====================

    def open_file(self, file_path: str) -> None:
        """Replaces the buffer with the content of ``file_path``.

        Raises:
            BufferIOError: The file cannot be read. Nothing is changed.
        """
        storage = TextStorage.load(file_path)
        self._replace_buffer(storage)
        logging.info(f"Opened '{file_path}'")

    def new_buffer(self, file_path: Optional[str] = None) -> None:
        """Starts an empty buffer, optionally bound to a not-yet-existing path."""
        self._replace_buffer(TextStorage(file_path=file_path))
        logging.info(f"New buffer {file_path or '[Scratch]'}")

    def _replace_buffer(self, storage: TextStorage) -> None:
        rendered = RenderedBuffer(storage, self._make_highlighter(storage.file_path))
        self.buffer = storage
        self.rendered_buffer = rendered
        self.cursor = Location(0, 0)
        self.view.first_line = 0
        self.view.first_col = 0
        self.search_state = None

    def save_file(self) -> None:
        """Saves to the associated path.

        Raises:
            NoFilePathError: The buffer has no path (use :meth:`save_file_as`).
            BufferIOError: Writing failed; the buffer stays dirty.
        """
        self.buffer.save()

    def save_file_as(self, file_path: str) -> None:
        """Saves to ``file_path`` and re-picks the syntax for the new name."""
        previous_path = self.buffer.file_path
        self.buffer.save_as(file_path)
        if self.highlighting and previous_path != file_path:
            self.rendered_buffer = RenderedBuffer(self.buffer, self._make_highlighter(file_path))

    # ==================== Queries ====================

    def get_view_contents(self) -> tuple[list[str], Optional[list[list[Highlight]]]]:
        return self.rendered_buffer.get_window(
            self.view.first_line, self.view.first_col, self.view.width, self.view.height
        )

    def get_view_cursor(self) -> Location:
        return Location(
            self.cursor.line - self.view.first_line, self.cursor.col - self.view.first_col
        )

    def get_buffer_cursor(self) -> Location:
        return self.cursor.copy()

    def get_buffer_line_count(self) -> int:
        return self.rendered_buffer.line_count

    def get_view_width(self) -> int:
        return self.view.width

    def get_view_height(self) -> int:
        return self.view.height

    def get_file_name(self) -> Optional[str]:
        return self.buffer.get_file_name()

    def get_file_path(self) -> Optional[str]:
        return self.buffer.file_path

    def get_language(self) -> Optional[str]:
        highlighter = self.rendered_buffer.highlighter
        return highlighter.language if highlighter else None

    def is_buffer_dirty(self) -> bool:
        return self.buffer.is_dirty()

    def resize(self, width: int, height: int) -> None:
        """Changes the viewport size and scrolls so the cursor stays visible."""
        self.view.width = max(width, 1)
        self.view.height = max(height, 1)
        self._scroll_view_to_cursor()
        logging.debug(f"Editor view resized to {self.view.width}x{self.view.height}")

    # ==================== Cursor/view predicates ====================

    def _is_cursor_at_buffer_top(self) -> bool:
        return self.cursor.line == 0

    def _is_cursor_at_buffer_bottom(self) -> bool:
        return self.cursor.line == self.rendered_buffer.last_line

    def _is_cursor_at_view_top(self) -> bool:
        return self.cursor.line == self.view.first_line

    def _is_cursor_at_view_bottom(self) -> bool:
        return self.cursor.line == self.view.last_line()

    def _is_cursor_at_view_left(self) -> bool:
        return self.cursor.col == self.view.first_col

    def _is_cursor_at_view_right(self) -> bool:
        return self.cursor.col == self.view.last_col()

    def _is_cursor_at_line_start(self) -> bool:
        return self.cursor.col == 0

    def _is_cursor_at_eol(self) -> bool:
        return self.cursor.col == self.rendered_buffer.eol_col(self.cursor.line)

    def _bottom_most_view_line(self) -> int:
        return max(self.rendered_buffer.line_count - self.view.height, 0)

    def _scroll_view_to_cursor(self) -> None:
        """Moves the viewport by the minimum needed to show the cursor."""
        if self.cursor.line < self.view.first_line:
            self.view.first_line = self.cursor.line
        elif self.cursor.line > self.view.last_line():
            self.view.first_line = self.cursor.line - self.view.height + 1
        if self.cursor.col < self.view.first_col:
            self.view.first_col = self.cursor.col
        elif self.cursor.col > self.view.last_col():
            self.view.first_col = self.cursor.col - self.view.width + 1

    def _adjust_cursor_past_eol(self) -> None:
        eol = self.rendered_buffer.eol_col(self.cursor.line)
        if self.cursor.col > eol:
            self.cursor.col = eol
        self._scroll_view_to_cursor()

    # ==================== Movement ====================

    def move_cursor_up(self) -> None:
        if self._is_cursor_at_buffer_top():
            return
        if self._is_cursor_at_view_top():
            self.view.first_line -= 1
        self.cursor.line -= 1
        self._adjust_cursor_past_eol()

    def move_cursor_down(self) -> None:
        if self._is_cursor_at_buffer_bottom():
            return
        if self._is_cursor_at_view_bottom():
            self.view.first_line += 1
        self.cursor.line += 1
        self._adjust_cursor_past_eol()

    def move_cursor_left(self) -> None:
        if self._is_cursor_at_line_start():
            if not self._is_cursor_at_buffer_top():
                self.move_cursor_up()
                self.cursor.col = self.rendered_buffer.eol_col(self.cursor.line)
                self._scroll_view_to_cursor()
            return
        if self._is_cursor_at_view_left():
            self.view.first_col -= 1
        self.cursor.col -= 1

    def move_cursor_right(self) -> None:
        if self._is_cursor_at_eol():
            if not self._is_cursor_at_buffer_bottom():
                self.move_cursor_down()
                self.move_cursor_to_line_start()
            return
        if self._is_cursor_at_view_right():
            self.view.first_col += 1
        self.cursor.col += 1

    def move_cursor_to_line_start(self) -> None:
        self.cursor.col = 0
        self._scroll_view_to_cursor()

    def move_cursor_to_line_end(self) -> None:
        self.cursor.col = self.rendered_buffer.last_col(self.cursor.line)
        self._scroll_view_to_cursor()

    def move_one_view_up(self) -> None:
        offset = self.cursor.line - self.view.first_line
        self.view.first_line = max(self.view.first_line - self.view.height, 0)
        self.cursor.line = self.view.first_line + offset
        self._adjust_cursor_past_eol()

    def move_one_view_down(self) -> None:
        offset = self.cursor.line - self.view.first_line
        self.view.first_line = min(
            self.view.first_line + self.view.height, self._bottom_most_view_line()
        )
        self.cursor.line = min(self.view.first_line + offset, self.rendered_buffer.last_line)
        self._adjust_cursor_past_eol()

    def move_cursor_to_buffer_top(self) -> None:
        self.view.first_line = 0
        self.cursor.line = 0
        self._adjust_cursor_past_eol()

    def move_cursor_to_buffer_bottom(self) -> None:
        self.view.first_line = self._bottom_most_view_line()
        self.cursor.line = self.rendered_buffer.last_line
        self._adjust_cursor_past_eol()

    def move_cursor_to_location(self, location: Location) -> None:
        """Puts the cursor on ``location`` (rendered coordinates).

        A line outside the viewport brings the viewport's first line to it
        (no further than the last full page); a column outside the viewport
        becomes its first column.
        """
        if not self.view.contains_line(location.line):
            self.view.first_line = min(location.line, self._bottom_most_view_line())
        if not self.view.contains_col(location.col):
            self.view.first_col = location.col
        self.cursor.line = location.line
        self.cursor.col = location.col
        self._scroll_view_to_cursor()

    # ==================== Editing ====================

    def insert_char(self, char: str) -> None:
        """Inserts ``char`` at the cursor and moves the cursor past it."""
        if char in ("\n", "\r"):
            self.insert_line()
            return
        line_index = self.cursor.line
        index = raw_index_for_col(self.buffer.get_line(line_index), self.cursor.col)
        self.buffer.insert_char(Location(line_index, index), char)
        self.rendered_buffer.update_line(line_index, self.buffer)
        self.cursor.col = col_for_raw_index(self.buffer.get_line(line_index), index + 1)
        self._scroll_view_to_cursor()
        logging.debug(f"insert_char {char!r} at line {line_index}, raw index {index}")

    def insert_line(self) -> None:
        """Breaks the line at the cursor; the cursor moves to the new line's start.

        At column 0 a blank line is inserted above, at end of line a blank line
        is inserted below, anywhere else the line is split in two.
        """
        line_index = self.cursor.line
        should_move_view = self._is_cursor_at_view_bottom()

        if self._is_cursor_at_line_start():
            self.buffer.insert_line(line_index)
            self.rendered_buffer.insert_line(line_index, self.buffer)
        elif self._is_cursor_at_eol():
            self.buffer.insert_line(line_index + 1)
            self.rendered_buffer.insert_line(line_index + 1, self.buffer)
        else:
            index = raw_index_for_col(self.buffer.get_line(line_index), self.cursor.col)
            self.buffer.split_line(Location(line_index, index))
            self.rendered_buffer.update_line(line_index, self.buffer)
            self.rendered_buffer.insert_line(line_index + 1, self.buffer)

        if should_move_view:
            self.view.first_line += 1
        self.cursor.line = line_index + 1
        self.cursor.col = 0
        self._scroll_view_to_cursor()
        logging.debug(f"insert_line: cursor now at line {self.cursor.line}")

    def remove_char_behind(self) -> None:
        """Backspace. At column 0 joins the line onto the previous one."""
        line_index = self.cursor.line
        if self._is_cursor_at_line_start():
            if self._is_cursor_at_buffer_top():
                return
            previous = line_index - 1
            join_col = self.rendered_buffer.eol_col(previous)
            if self._is_cursor_at_view_top():
                self.view.first_line -= 1
            self.buffer.join_lines(previous)
            self.rendered_buffer.remove_line(line_index)
            self.rendered_buffer.update_line(previous, self.buffer)
            self.cursor.line = previous
            self.cursor.col = join_col
            self._scroll_view_to_cursor()
            logging.debug(f"remove_char_behind: joined line {line_index} into {previous}")
            return

        line = self.buffer.get_line(line_index)
        index = raw_index_at_col(line, self.cursor.col - 1)
        self.buffer.remove_char(Location(line_index, index))
        self.rendered_buffer.update_line(line_index, self.buffer)
        self.cursor.col = col_for_raw_index(line, index)
        self._scroll_view_to_cursor()

    def remove_char_in_front(self) -> None:
        """Delete. At end of line joins the next line onto this one."""
        line_index = self.cursor.line
        if self._is_cursor_at_eol():
            if self._is_cursor_at_buffer_bottom():
                return
            self.buffer.join_lines(line_index)
            self.rendered_buffer.remove_line(line_index + 1)
            self.rendered_buffer.update_line(line_index, self.buffer)
            logging.debug(f"remove_char_in_front: joined line {line_index + 1} into {line_index}")
            return

        line = self.buffer.get_line(line_index)
        index = raw_index_at_col(line, self.cursor.col)
        self.buffer.remove_char(Location(line_index, index))
        self.rendered_buffer.update_line(line_index, self.buffer)
        self.cursor.col = col_for_raw_index(line, index)
        self._scroll_view_to_cursor()

    # ==================== Search ====================

    def is_search_mode_active(self) -> bool:
        return self.search_state is not None

    def _require_search(self) -> SearchState:
        if self.search_state is None:
            raise EditorStateError("No search is active")
        return self.search_state

    def start_search(self) -> None:
        """Opens a search session, snapshotting cursor and viewport."""
        self.search_state = SearchState(
            initial_cursor=self.cursor.copy(), initial_view=self.view.copy()
        )
        logging.debug(f"Search started at {self.cursor}")

    def set_search_pattern(self, pattern: Optional[str]) -> bool:
        """Sets the pattern and searches from where the session started.

        Returns:
            bool: True if a match was found and the cursor moved to it.
        """
        state = self._require_search()
        state.pattern = pattern
        return self._search_from(state.initial_cursor, state)

    def set_search_direction(self, forward: bool) -> None:
        self._require_search().forward = forward

    def next_search_result(self) -> bool:
        """Searches again from the current cursor position."""
        state = self._require_search()
        return self._search_from(self.cursor, state)

    def finish_search(self) -> None:
        """Ends the session, keeping the cursor where the last match put it."""
        self._require_search()
        self.search_state = None
        logging.debug(f"Search finished at {self.cursor}")

    def cancel_search(self) -> None:
        """Ends the session, restoring the cursor and scroll offsets from the snapshot.

        The viewport keeps its current size, since the terminal may have been
        resized while the search prompt was open.
        """
        state = self._require_search()
        self.cursor = state.initial_cursor.copy()
        self.view.first_line = state.initial_view.first_line
        self.view.first_col = state.initial_view.first_col
        self._scroll_view_to_cursor()
        self.search_state = None
        logging.debug("Search cancelled, cursor and scroll position restored")

    def _search_from(self, origin: Location, state: SearchState) -> bool:
        if not state.pattern:
            return False
        line = self.buffer.get_line(origin.line)
        start = Location(origin.line, raw_index_for_col(line, origin.col))
        span = find_in_lines(list(self.buffer.lines()), state.pattern, state.forward, start)
        if span is None:
            return False
        match_line = self.buffer.get_line(span.start.line)
        self.move_cursor_to_location(
            Location(span.start.line, col_for_raw_index(match_line, span.start.col))
        )
        return True
