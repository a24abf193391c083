# src/kilo/ui/Dispatcher.py
"""
kilo.ui.Dispatcher
==================

Routes abstract commands to the editor core according to the current focus.

The UI state is explicit: a :class:`Focus` value says which component handles
the next command (the text area or one of the two prompts), and commands wait
in a FIFO :class:`CommandQueue` until the event loop drains it. The editor core
stays a plain object driven by method calls; everything about prompts, status
messages and quitting lives here.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional

from kilo.core.Editor import Editor
from kilo.core.TextStorage import BufferIOError, NoFilePathError


class Focus(Enum):
    TEXT_AREA = auto()
    SAVE_PROMPT = auto()
    SEARCH_PROMPT = auto()


@dataclass(frozen=True)
class Command:
    """One user action; ``argument`` carries the character or size if any."""

    action: str
    argument: Any = None


class CommandQueue:
    """FIFO of pending commands."""

    def __init__(self) -> None:
        self._items: deque[Command] = deque()

    def push(self, command: Command) -> None:
        self._items.append(command)

    def pop(self) -> Optional[Command]:
        return self._items.popleft() if self._items else None

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


PROMPT_LABELS: dict[Focus, str] = {
    Focus.SAVE_PROMPT: "Save as: ",
    Focus.SEARCH_PROMPT: "Search: ",
}

DEFAULT_STATUS = "Ctrl+S save | Ctrl+F find | Ctrl+Q quit"


# ==================== Dispatcher ====================
class Dispatcher:
    """
    Class Dispatcher
    ================
    Finite-state command router between the key binder and the editor core.

    Attributes:
        editor (Editor): The editing core being driven.
        focus (Focus): Component that receives the next command.
        queue (CommandQueue): Commands waiting to be dispatched.
        prompt_text (str): Text typed into the active prompt.
        status_message (str): Transient message shown under the status bar.
        running (bool): False once the user has quit.

    Methods:
        submit(command): Enqueue a command.
        process_queue(): Dispatch every queued command, in order.
        dispatch(command): Handle a single command for the current focus.
        open_path(path): Open a file, or start a new buffer bound to it.
    """

    def __init__(self, editor: Editor) -> None:
        self.editor = editor
        self.focus = Focus.TEXT_AREA
        self.queue = CommandQueue()
        self.prompt_text = ""
        self.status_message = DEFAULT_STATUS
        self.running = True
        self._quit_pending = False

        self._text_area_actions: dict[str, Callable[[], Any]] = {
            "move_up": editor.move_cursor_up,
            "move_down": editor.move_cursor_down,
            "move_left": editor.move_cursor_left,
            "move_right": editor.move_cursor_right,
            "line_start": editor.move_cursor_to_line_start,
            "line_end": editor.move_cursor_to_line_end,
            "page_up": editor.move_one_view_up,
            "page_down": editor.move_one_view_down,
            "buffer_top": editor.move_cursor_to_buffer_top,
            "buffer_bottom": editor.move_cursor_to_buffer_bottom,
            "backspace": editor.remove_char_behind,
            "delete": editor.remove_char_in_front,
            "insert_line": editor.insert_line,
            "tab": lambda: editor.insert_char("\t"),
            "save": self._save,
            "save_as": self._open_save_prompt,
            "find": self._open_search_prompt,
            "cancel": self._clear_status,
        }

    @property
    def prompt_label(self) -> str:
        return PROMPT_LABELS.get(self.focus, "")

    # ---------- queue ----------

    def submit(self, command: Command) -> None:
        self.queue.push(command)

    def process_queue(self) -> bool:
        """Dispatches all queued commands. Returns True if any were handled."""
        handled = False
        while self.running:
            command = self.queue.pop()
            if command is None:
                break
            self.dispatch(command)
            handled = True
        if not self.running:
            self.queue.clear()
        return handled

    # ---------- dispatch ----------

    def dispatch(self, command: Command) -> None:
        logging.debug(f"Dispatch {command} (focus {self.focus.name})")

        if command.action == "resize":
            width, height = command.argument
            self.editor.resize(width, height)
            return
        if command.action == "quit":
            self._quit()
            return
        self._quit_pending = False

        if self.focus is Focus.TEXT_AREA:
            self._dispatch_text_area(command)
        else:
            self._dispatch_prompt(command)

    def _dispatch_text_area(self, command: Command) -> None:
        if command.action == "insert_char":
            self.editor.insert_char(command.argument)
            return
        handler = self._text_area_actions.get(command.action)
        if handler is None:
            logging.debug(f"No text-area handler for action '{command.action}'")
            return
        handler()

    def _dispatch_prompt(self, command: Command) -> None:
        action = command.action
        searching = self.focus is Focus.SEARCH_PROMPT

        if action == "insert_char":
            self.prompt_text += command.argument
            if searching:
                self._search_pattern_changed()
        elif action == "backspace":
            if self.prompt_text:
                self.prompt_text = self.prompt_text[:-1]
                if searching:
                    self._search_pattern_changed()
        elif action in ("insert_line", "save"):
            self._commit_prompt()
        elif action == "cancel":
            self._cancel_prompt()
        elif searching and action in ("move_up", "move_left", "move_down", "move_right"):
            forward = action in ("move_down", "move_right")
            self.editor.set_search_direction(forward)
            if not self.editor.next_search_result():
                self._no_match()
        else:
            logging.debug(f"Action '{action}' ignored while prompting")

    # ---------- text-area actions ----------

    def _save(self) -> None:
        try:
            self.editor.save_file()
        except NoFilePathError:
            self._open_save_prompt()
            return
        except BufferIOError as e:
            self._report_io_error(e)
            return
        self._report_saved()

    def _open_save_prompt(self) -> None:
        self.focus = Focus.SAVE_PROMPT
        self.prompt_text = self.editor.get_file_path() or ""
        self.status_message = "Enter to save, Esc to cancel"

    def _open_search_prompt(self) -> None:
        self.editor.start_search()
        self.focus = Focus.SEARCH_PROMPT
        self.prompt_text = ""
        self.status_message = "Arrows: previous/next match | Enter: accept | Esc: cancel"

    def _clear_status(self) -> None:
        self.status_message = DEFAULT_STATUS

    def _quit(self) -> None:
        if self.editor.is_buffer_dirty() and not self._quit_pending:
            self._quit_pending = True
            self.status_message = "Unsaved changes! Press quit again to discard them."
            return
        logging.info("Quit requested")
        if self.editor.is_search_mode_active():
            self.editor.cancel_search()
        self.running = False

    # ---------- prompt actions ----------

    def _search_pattern_changed(self) -> None:
        if not self.editor.set_search_pattern(self.prompt_text) and self.prompt_text:
            self._no_match()
        else:
            self.status_message = ""

    def _no_match(self) -> None:
        self.status_message = f"No match for '{self.prompt_text}'"

    def _commit_prompt(self) -> None:
        if self.focus is Focus.SEARCH_PROMPT:
            self.editor.finish_search()
            self._close_prompt(DEFAULT_STATUS)
            return

        path = self.prompt_text.strip()
        if not path:
            self.status_message = "Save aborted: no file name"
            return
        try:
            self.editor.save_file_as(path)
        except BufferIOError as e:
            self._report_io_error(e)
            return
        self._close_prompt("")
        self._report_saved()

    def _cancel_prompt(self) -> None:
        if self.focus is Focus.SEARCH_PROMPT:
            self.editor.cancel_search()
            self._close_prompt("Search cancelled")
        else:
            self._close_prompt("Save cancelled")

    def _close_prompt(self, message: str) -> None:
        self.focus = Focus.TEXT_AREA
        self.prompt_text = ""
        self.status_message = message

    # ---------- files ----------

    def open_path(self, path: str) -> None:
        """Opens ``path``; a path that does not exist yet starts a new buffer."""
        if not os.path.exists(path):
            self.editor.new_buffer(path)
            self.status_message = f"New file: {path}"
            return
        try:
            self.editor.open_file(path)
        except BufferIOError as e:
            self._report_io_error(e)
            return
        self.status_message = DEFAULT_STATUS

    def _report_saved(self) -> None:
        name = self.editor.get_file_name()
        count = self.editor.get_buffer_line_count()
        self.status_message = f"Saved '{name}' ({count} lines)"

    def _report_io_error(self, error: BufferIOError) -> None:
        logging.error(f"I/O error: {error}")
        self.status_message = f"Error: {error}"
