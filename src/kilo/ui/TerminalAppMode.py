# src/kilo/ui/TerminalAppMode.py
from __future__ import annotations

import curses
import logging
from types import TracebackType
from typing import Optional, Type


# ESC must be told apart from the start of an arrow-key sequence quickly.
EDITOR_ESCDELAY_MS = 35


class TerminalAppMode:
    """
    Scoped terminal mode for one editing session.

    On enter:
    - alternate screen (smcup) and application keypad (smkx);
    - raw input so Ctrl+S, Ctrl+Q and Ctrl+Z reach the key binder (cbreak if
      raw is refused), no echo, keypad decoding;
    - a visible cursor and a short ESC delay.

    On exit every one of these is undone and the previous cursor visibility
    and ESC delay are put back, whether the session ended normally or by an
    exception:

        with TerminalAppMode(stdscr):
            app_loop()
    """

    def __init__(self, stdscr: "curses.window") -> None:
        self._stdscr = stdscr
        self._entered = False
        self._saved_cursor: Optional[int] = None
        self._saved_escdelay: Optional[int] = None

    def __enter__(self) -> "TerminalAppMode":
        self.enter()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.exit()

    # ---------- session ----------

    def enter(self) -> None:
        if self._entered:
            return
        try:
            curses.setupterm()
        except curses.error as e:
            logging.debug("setupterm() failed or not required: %r", e)

        self._tputs("smcup")
        self._tputs("smkx")
        self._set_input_modes()
        self._saved_cursor = self._swap_cursor_visibility(1)
        self._saved_escdelay = self._swap_escdelay(EDITOR_ESCDELAY_MS)

        self._stdscr.scrollok(False)
        self._stdscr.clearok(True)
        self._stdscr.erase()
        self._stdscr.refresh()

        self._entered = True
        logging.debug("TerminalAppMode: session started (alternate screen, raw input).")

    def exit(self) -> None:
        if not self._entered:
            return
        self._restore_input_modes()
        if self._saved_cursor is not None:
            self._swap_cursor_visibility(self._saved_cursor)
        if self._saved_escdelay is not None:
            self._swap_escdelay(self._saved_escdelay)

        self._tputs("rmkx")
        self._tputs("rmcup")

        self._entered = False
        logging.debug("TerminalAppMode: session ended, terminal restored.")

    # ---------- helpers ----------

    def _set_input_modes(self) -> None:
        try:
            curses.raw()
        except curses.error:
            logging.warning("raw mode unavailable, falling back to cbreak")
            curses.cbreak()
        curses.noecho()
        self._stdscr.keypad(True)

    def _restore_input_modes(self) -> None:
        try:
            self._stdscr.keypad(False)
        except curses.error:
            pass
        try:
            curses.noraw()
        except curses.error:
            curses.nocbreak()
        try:
            curses.echo()
        except curses.error:
            pass

    def _swap_cursor_visibility(self, visibility: int) -> Optional[int]:
        """Sets cursor visibility; returns the previous one (None if unsupported)."""
        try:
            return curses.curs_set(visibility)
        except curses.error:
            logging.debug(f"curs_set({visibility}) not supported by this terminal")
            return None

    def _swap_escdelay(self, delay_ms: int) -> Optional[int]:
        try:
            previous = curses.get_escdelay()
            curses.set_escdelay(delay_ms)
        except (curses.error, AttributeError):
            return None
        return previous

    def _tputs(self, capname: str) -> None:
        try:
            s = curses.tigetstr(capname)
            if s:
                curses.putp(s)
        except curses.error as e:
            # Capability missing on this terminal.
            logging.debug("tputs(%s) skipped: %r", capname, e)
