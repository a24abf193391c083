# tests/ui/test_dispatcher.py
"""Dispatcher Tests
===================

Focus transitions and prompt handling of :class:`kilo.ui.Dispatcher.Dispatcher`,
driven against a real :class:`Editor` so the whole command path is covered.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from kilo.core.Editor import Editor
from kilo.core.TextStorage import BufferIOError
from kilo.ui.Dispatcher import DEFAULT_STATUS, Command, CommandQueue, Dispatcher, Focus


def type_text(dispatcher: Dispatcher, text: str) -> None:
    for char in text:
        dispatcher.dispatch(Command("insert_char", char))


@pytest.fixture
def dispatcher(make_editor) -> Dispatcher:
    return Dispatcher(make_editor(["alpha", "beta", "alphabet"]))


# ==================== queue ====================


def test_command_queue_is_fifo() -> None:
    queue = CommandQueue()
    queue.push(Command("a"))
    queue.push(Command("b"))
    assert len(queue) == 2
    assert queue.pop() == Command("a")
    assert queue.pop() == Command("b")
    assert queue.pop() is None


def test_process_queue_dispatches_in_order(dispatcher: Dispatcher) -> None:
    dispatcher.submit(Command("move_down"))
    dispatcher.submit(Command("insert_char", "X"))

    assert dispatcher.process_queue()

    assert dispatcher.editor.buffer.get_line(1) == "Xbeta"
    assert not dispatcher.process_queue()


def test_queue_is_dropped_after_quit() -> None:
    dispatcher = Dispatcher(Editor(80, 24))
    dispatcher.submit(Command("quit"))
    dispatcher.submit(Command("insert_char", "x"))

    dispatcher.process_queue()

    assert not dispatcher.running
    assert len(dispatcher.queue) == 0
    assert not dispatcher.editor.is_buffer_dirty()


# ==================== text area ====================


def test_text_area_commands_reach_editor(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("line_end"))
    dispatcher.dispatch(Command("move_right"))
    dispatcher.dispatch(Command("tab"))
    dispatcher.dispatch(Command("insert_line"))

    assert list(dispatcher.editor.buffer.lines()) == ["alpha\t", "", "beta", "alphabet"]
    assert dispatcher.focus is Focus.TEXT_AREA


def test_unknown_action_is_ignored(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("no_such_action"))
    assert not dispatcher.editor.is_buffer_dirty()


def test_resize_is_handled_in_any_focus(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("find"))
    dispatcher.dispatch(Command("resize", (40, 10)))

    assert dispatcher.editor.get_view_width() == 40
    assert dispatcher.editor.get_view_height() == 10
    assert dispatcher.focus is Focus.SEARCH_PROMPT


# ==================== quit ====================


def test_quit_clean_buffer_stops_immediately(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("quit"))
    assert not dispatcher.running


def test_quit_dirty_buffer_needs_confirmation(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("insert_char", "x"))

    dispatcher.dispatch(Command("quit"))
    assert dispatcher.running
    assert "Unsaved changes" in dispatcher.status_message

    dispatcher.dispatch(Command("quit"))
    assert not dispatcher.running


def test_other_command_resets_quit_confirmation(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("insert_char", "x"))
    dispatcher.dispatch(Command("quit"))
    dispatcher.dispatch(Command("move_down"))

    dispatcher.dispatch(Command("quit"))

    assert dispatcher.running


def test_quit_during_search_cancels_it(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("find"))
    type_text(dispatcher, "al")

    dispatcher.dispatch(Command("quit"))

    assert not dispatcher.running
    assert not dispatcher.editor.is_search_mode_active()


# ==================== search prompt ====================


def test_search_prompt_moves_cursor_incrementally(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("find"))
    assert dispatcher.focus is Focus.SEARCH_PROMPT
    assert dispatcher.prompt_label == "Search: "

    type_text(dispatcher, "al")
    cursor = dispatcher.editor.get_buffer_cursor()
    assert (cursor.line, cursor.col) == (2, 0)
    assert dispatcher.prompt_text == "al"

    dispatcher.dispatch(Command("backspace"))
    cursor = dispatcher.editor.get_buffer_cursor()
    assert (cursor.line, cursor.col) == (0, 4)


def test_search_arrows_choose_direction(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("find"))
    type_text(dispatcher, "al")

    dispatcher.dispatch(Command("move_down"))
    cursor = dispatcher.editor.get_buffer_cursor()
    assert (cursor.line, cursor.col) == (0, 0)

    dispatcher.dispatch(Command("move_up"))
    cursor = dispatcher.editor.get_buffer_cursor()
    assert (cursor.line, cursor.col) == (2, 0)


def test_search_accept_keeps_cursor(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("find"))
    type_text(dispatcher, "beta")

    dispatcher.dispatch(Command("insert_line"))

    assert dispatcher.focus is Focus.TEXT_AREA
    assert not dispatcher.editor.is_search_mode_active()
    assert dispatcher.editor.get_buffer_cursor().line == 1
    assert list(dispatcher.editor.buffer.lines()) == ["alpha", "beta", "alphabet"]


def test_search_cancel_restores_cursor(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("move_right"))
    dispatcher.dispatch(Command("find"))
    type_text(dispatcher, "bet")

    dispatcher.dispatch(Command("cancel"))

    cursor = dispatcher.editor.get_buffer_cursor()
    assert (cursor.line, cursor.col) == (0, 1)
    assert dispatcher.focus is Focus.TEXT_AREA
    assert dispatcher.status_message == "Search cancelled"


def test_search_without_match_reports_it(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("find"))
    type_text(dispatcher, "zz")
    assert dispatcher.status_message == "No match for 'zz'"

    dispatcher.dispatch(Command("move_right"))
    assert dispatcher.status_message == "No match for 'zz'"


def test_stepping_past_single_match_reports_no_match(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("find"))
    type_text(dispatcher, "beta")
    assert dispatcher.status_message == ""

    dispatcher.dispatch(Command("move_down"))

    assert dispatcher.status_message == "No match for 'beta'"
    assert dispatcher.editor.get_buffer_cursor().line == 1


def test_cancel_after_resize_keeps_new_view_size(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("find"))
    dispatcher.dispatch(Command("resize", (40, 2)))

    dispatcher.dispatch(Command("cancel"))

    assert dispatcher.editor.get_view_height() == 2
    assert dispatcher.editor.get_view_width() == 40


def test_prompt_ignores_text_area_only_actions(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("find"))
    dispatcher.dispatch(Command("page_down"))
    dispatcher.dispatch(Command("delete"))

    assert dispatcher.focus is Focus.SEARCH_PROMPT
    assert not dispatcher.editor.is_buffer_dirty()


# ==================== save prompt ====================


def test_save_with_path_writes_file(make_editor) -> None:
    dispatcher = Dispatcher(make_editor(["abc"]))
    dispatcher.dispatch(Command("insert_char", "x"))

    dispatcher.dispatch(Command("save"))

    assert not dispatcher.editor.is_buffer_dirty()
    assert dispatcher.status_message == "Saved 'buffer.txt' (1 lines)"
    assert Path(dispatcher.editor.get_file_path()).read_text(encoding="utf-8") == "xabc"


def test_save_without_path_opens_prompt(tmp_path: Path) -> None:
    dispatcher = Dispatcher(Editor(80, 24))
    type_text(dispatcher, "hi")

    dispatcher.dispatch(Command("save"))
    assert dispatcher.focus is Focus.SAVE_PROMPT
    assert dispatcher.prompt_label == "Save as: "
    assert dispatcher.prompt_text == ""

    target = tmp_path / "out.txt"
    type_text(dispatcher, str(target))
    dispatcher.dispatch(Command("insert_line"))

    assert dispatcher.focus is Focus.TEXT_AREA
    assert target.read_text(encoding="utf-8") == "hi"
    assert dispatcher.status_message == "Saved 'out.txt' (1 lines)"
    assert list(dispatcher.editor.buffer.lines()) == ["hi"]


def test_save_as_prefills_current_path(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("save_as"))
    assert dispatcher.prompt_text == dispatcher.editor.get_file_path()


def test_empty_save_path_keeps_prompt_open() -> None:
    dispatcher = Dispatcher(Editor(80, 24))
    dispatcher.dispatch(Command("save_as"))
    type_text(dispatcher, "   ")

    dispatcher.dispatch(Command("insert_line"))

    assert dispatcher.focus is Focus.SAVE_PROMPT
    assert dispatcher.status_message == "Save aborted: no file name"


def test_save_prompt_cancel(dispatcher: Dispatcher) -> None:
    dispatcher.dispatch(Command("save_as"))
    dispatcher.dispatch(Command("cancel"))

    assert dispatcher.focus is Focus.TEXT_AREA
    assert dispatcher.prompt_text == ""
    assert dispatcher.status_message == "Save cancelled"


def test_save_failure_is_reported(dispatcher: Dispatcher) -> None:
    with patch.object(
        dispatcher.editor, "save_file", side_effect=BufferIOError("disk full", "x")
    ):
        dispatcher.dispatch(Command("save"))

    assert dispatcher.status_message == "Error: disk full"
    assert dispatcher.focus is Focus.TEXT_AREA


def test_failed_save_as_keeps_prompt(tmp_path: Path) -> None:
    dispatcher = Dispatcher(Editor(80, 24))
    dispatcher.dispatch(Command("save_as"))
    type_text(dispatcher, str(tmp_path / "missing" / "f.txt"))

    dispatcher.dispatch(Command("save"))

    assert dispatcher.focus is Focus.SAVE_PROMPT
    assert dispatcher.status_message.startswith("Error: ")


# ==================== open_path ====================


def test_open_path_missing_file_starts_new_buffer(tmp_path: Path) -> None:
    dispatcher = Dispatcher(Editor(80, 24))
    target = tmp_path / "new.txt"

    dispatcher.open_path(str(target))

    assert dispatcher.editor.get_file_path() == str(target)
    assert dispatcher.status_message == f"New file: {target}"
    assert not target.exists()


def test_open_path_existing_file(tmp_path: Path) -> None:
    target = tmp_path / "there.txt"
    target.write_text("content", encoding="utf-8")
    dispatcher = Dispatcher(Editor(80, 24))

    dispatcher.open_path(str(target))

    assert dispatcher.editor.get_view_contents()[0] == ["content"]
    assert dispatcher.status_message == DEFAULT_STATUS


def test_open_path_directory_reports_error(tmp_path: Path) -> None:
    dispatcher = Dispatcher(Editor(80, 24))

    dispatcher.open_path(str(tmp_path))

    assert dispatcher.status_message.startswith("Error: ")
    assert dispatcher.editor.get_file_path() is None
