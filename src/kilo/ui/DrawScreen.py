# kilo/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen renders the editor with curses.

Screen layout (top to bottom):

- text area: the rows returned by ``Editor.get_view_contents()``, styled with
  the highlight ranges when highlighting is on, padded with ``~`` rows up to
  the view height;
- status bar (reverse video): file name, dirty marker, language on the left,
  ``line/count`` on the right;
- message line: the active prompt, or the dispatcher's status message.

All curses errors are caught and logged so a failed paint never takes the
editor down. Widths are measured in terminal cells with wcwidth, so wide
characters are never split at the right edge.
"""

import curses
import logging
from typing import TYPE_CHECKING, Any, Optional

from wcwidth import wcwidth

from kilo.core.SyntaxHighlighter import Highlight, HighlightStyle
from kilo.ui.Dispatcher import Focus
from kilo.utils.utils import hex_to_xterm


if TYPE_CHECKING:
    from kilo.core.Editor import Editor
    from kilo.ui.Dispatcher import Dispatcher


STATUS_ROWS = 2
FILLER = "~"


def char_width(ch: str) -> int:
    """Cells taken by ``ch``; non-printables count as one."""
    w = wcwidth(ch)
    return 1 if w < 0 else w


def truncate_string(s: str, max_width: int) -> str:
    """Return `s` clipped to visual width `max_width`."""
    result: list[str] = []
    consumed = 0
    for ch in s:
        w = char_width(ch)
        if consumed + w > max_width:
            break
        result.append(ch)
        consumed += w
    return "".join(result)


def string_width(s: str) -> int:
    return sum(char_width(ch) for ch in s)


## ================= class DrawScreen ==============================
class DrawScreen:
    """DrawScreen Class
    =========================
    Paints the editor state onto a curses window.

    Attributes:
        stdscr (curses.window): Target window.
        editor (Editor): Source of rows, highlights and the cursor.
        dispatcher (Dispatcher): Source of focus, prompt and status message.
        config (dict): Application configuration.

    Methods:
        draw(): Paint everything and place the cursor.
        attr_for_style(style): curses attribute for a highlight style.
    """

    def __init__(
        self,
        stdscr: "curses.window",
        editor: "Editor",
        dispatcher: "Dispatcher",
        config: dict[str, Any],
    ) -> None:
        self.stdscr = stdscr
        self.editor = editor
        self.dispatcher = dispatcher
        self.config = config
        self._pair_cache: dict[tuple[int, int], int] = {}
        self._next_pair = 1
        self._colors_enabled = self._init_colors()

    def _init_colors(self) -> bool:
        try:
            if not curses.has_colors():
                return False
            curses.start_color()
            try:
                curses.use_default_colors()  # allow -1 as the default background
            except curses.error:
                pass
        except curses.error as e:
            logging.warning(f"Colour initialisation failed: {e}")
            return False
        return True

    # ---------- styles ----------

    def _color_index(self, hex_color: Optional[str]) -> int:
        if not hex_color:
            return -1
        if curses.COLORS >= 256:
            return hex_to_xterm(hex_color)
        return -1

    def attr_for_style(self, style: HighlightStyle) -> int:
        """Returns the curses attribute for ``style``, allocating a pair if needed."""
        attr = curses.A_NORMAL
        if style.bold:
            attr |= curses.A_BOLD
        if style.underline:
            attr |= curses.A_UNDERLINE
        if style.italic:
            attr |= getattr(curses, "A_ITALIC", 0)
        if not self._colors_enabled:
            return attr

        key = (self._color_index(style.foreground), self._color_index(style.background))
        if key == (-1, -1):
            return attr
        pair = self._pair_cache.get(key)
        if pair is None:
            if self._next_pair >= curses.COLOR_PAIRS:
                return attr
            try:
                curses.init_pair(self._next_pair, *key)
            except curses.error as e:
                logging.debug(f"init_pair{key} failed: {e}")
                return attr
            pair = self._next_pair
            self._pair_cache[key] = pair
            self._next_pair += 1
        return attr | curses.color_pair(pair)

    # ---------- drawing ----------

    def draw(self) -> None:
        """The main screen drawing method."""
        try:
            height, width = self.stdscr.getmaxyx()
            self.stdscr.erase()
            if height <= STATUS_ROWS or width <= 0:
                self.stdscr.refresh()
                return

            self._draw_text_area(width)
            self._draw_status_bar(height - STATUS_ROWS, width)
            self._draw_message_line(height - 1, width)
            self._position_cursor(height, width)
            self.stdscr.refresh()
        except curses.error as e:
            logging.error(f"Curses error in DrawScreen.draw(): {e}", exc_info=True)

    def _draw_text_area(self, width: int) -> None:
        rows, highlights = self.editor.get_view_contents()
        for y in range(self.editor.get_view_height()):
            if y >= len(rows):
                self._addstr(y, 0, FILLER, curses.A_DIM)
            elif highlights is None:
                self._addstr(y, 0, truncate_string(rows[y], width), curses.A_NORMAL)
            else:
                self._draw_styled_row(y, rows[y], highlights[y], width)

    def _draw_styled_row(self, y: int, row: str, ranges: list[Highlight], width: int) -> None:
        x = 0
        for h in ranges:
            segment = row[h.start : h.end]
            if not segment:
                continue
            text = truncate_string(segment, width - x)
            if text:
                self._addstr(y, x, text, self.attr_for_style(h.style))
                x += string_width(text)
            if x >= width or len(text) < len(segment):
                break

    def _draw_status_bar(self, y: int, width: int) -> None:
        name = self.editor.get_file_name() or "[Scratch]"
        dirty = " [+]" if self.editor.is_buffer_dirty() else ""
        language = self.editor.get_language()
        left = f" {name}{dirty}" + (f" - {language}" if language else "")
        cursor = self.editor.get_buffer_cursor()
        right = f"{cursor.line + 1}/{self.editor.get_buffer_line_count()} "

        space = width - string_width(right)
        left = truncate_string(left, max(space - 1, 0))
        line = left + " " * max(space - string_width(left), 0) + right
        self._addstr(y, 0, truncate_string(line, width), curses.A_REVERSE)

    def _draw_message_line(self, y: int, width: int) -> None:
        if self.dispatcher.focus is Focus.TEXT_AREA:
            text = self.dispatcher.status_message
        else:
            text = self.dispatcher.prompt_label + self.dispatcher.prompt_text
        # The bottom-right cell cannot be written without scrolling.
        self._addstr(y, 0, truncate_string(text, width - 1), curses.A_NORMAL)

    def _position_cursor(self, height: int, width: int) -> None:
        if self.dispatcher.focus is Focus.TEXT_AREA:
            view_cursor = self.editor.get_view_cursor()
            rows, _ = self.editor.get_view_contents()
            row = rows[view_cursor.line] if view_cursor.line < len(rows) else ""
            y = view_cursor.line
            x = string_width(row[: view_cursor.col]) + max(view_cursor.col - len(row), 0)
        else:
            y = height - 1
            x = string_width(self.dispatcher.prompt_label + self.dispatcher.prompt_text)
        try:
            self.stdscr.move(y, min(x, width - 1))
        except curses.error as e:
            logging.warning(f"Curses error positioning cursor at ({y}, {x}): {e}")

    def _addstr(self, y: int, x: int, text: str, attr: int) -> None:
        if not text:
            return
        try:
            self.stdscr.addstr(y, x, text, attr)
        except curses.error as e:
            logging.debug(f"addstr failed at ({y},{x}): {e}")
