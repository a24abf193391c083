# src/kilo/ui/App.py
"""
kilo.ui.App
===========

Event loop of the terminal editor: read a key, turn it into a command, let the
dispatcher drain the command queue, redraw.
"""

from __future__ import annotations

import curses
import logging
from typing import Any, Optional

from kilo.core.Editor import Editor
from kilo.core.SyntaxHighlighter import DEFAULT_THEME
from kilo.ui.Dispatcher import Command, Dispatcher
from kilo.ui.DrawScreen import STATUS_ROWS, DrawScreen
from kilo.ui.KeyBinder import KeyBinder
from kilo.ui.TerminalAppMode import TerminalAppMode


class App:
    """
    Class App
    =========
    Wires the editor core to curses input and output.

    Attributes:
        stdscr (curses.window): Main window.
        config (dict): Application configuration.
        editor (Editor): The editing core.
        dispatcher (Dispatcher): Focus and command routing.
        keybinder (KeyBinder): Key to command translation.
        drawer (DrawScreen): Renderer.
    """

    def __init__(self, stdscr: "curses.window", config: dict[str, Any]) -> None:
        self.stdscr = stdscr
        self.config = config
        editor_config = config.get("editor", {})
        width, height = self._text_area_size()
        self.editor = Editor(
            width,
            height,
            highlighting=bool(editor_config.get("highlighting", True)),
            theme=editor_config.get("theme", DEFAULT_THEME),
        )
        self.dispatcher = Dispatcher(self.editor)
        self.keybinder = KeyBinder(config, stdscr)
        self.drawer = DrawScreen(stdscr, self.editor, self.dispatcher, config)

    def _text_area_size(self) -> tuple[int, int]:
        height, width = self.stdscr.getmaxyx()
        return max(width, 1), max(height - STATUS_ROWS, 1)

    def open(self, path: Optional[str]) -> None:
        if path:
            self.dispatcher.open_path(path)

    def handle_key(self, key: int | str) -> bool:
        """Queues the command for ``key`` and drains the queue.

        Returns:
            bool: True if something was dispatched (a redraw is needed).
        """
        command = self.keybinder.command_for_key(key)
        if command is None:
            return False
        if command.action == "resize":
            command = Command("resize", self._text_area_size())
        self.dispatcher.submit(command)
        return self.dispatcher.process_queue()

    def run(self) -> None:
        """Runs until the dispatcher stops; terminal modes are always restored."""
        logging.info("Editor main loop started.")
        with TerminalAppMode(self.stdscr):
            self.drawer.draw()
            while self.dispatcher.running:
                try:
                    key = self.keybinder.get_key_input()
                    if self.handle_key(key) and self.dispatcher.running:
                        self.drawer.draw()
                except KeyboardInterrupt:
                    logging.info("Main loop interrupted by KeyboardInterrupt.")
                    break
        logging.info("Editor main loop finished.")
