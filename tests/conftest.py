# tests/conftest.py
"""Pytest configuration with shared fixtures for the kilo editor tests.

Fixtures:
    make_editor: builds an :class:`Editor` over given lines (written to a
        temporary file and opened, so the real load path is exercised).
    check_invariants: asserts the cursor/viewport invariants of an editor.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Sequence

import pytest

from kilo.core import Editor


@pytest.fixture
def make_editor(tmp_path: Path) -> Callable[..., Editor]:
    """Factory fixture: ``make_editor(lines, width=80, height=24, ...)``."""

    def _make(
        lines: Sequence[str],
        width: int = 80,
        height: int = 24,
        highlighting: bool = False,
        name: str = "buffer.txt",
    ) -> Editor:
        path = tmp_path / name
        path.write_text("\n".join(lines), encoding="utf-8")
        editor = Editor(width, height, highlighting=highlighting)
        editor.open_file(str(path))
        return editor

    return _make


@pytest.fixture
def check_invariants() -> Callable[[Editor], None]:
    """Returns a function asserting the editor's coordinate invariants."""

    def _check(editor: Editor, context: Optional[str] = None) -> None:
        cursor = editor.get_buffer_cursor()
        view = editor.view
        where = f" after {context}" if context else ""
        line_count = editor.get_buffer_line_count()
        assert line_count == editor.buffer.line_count, f"renderer out of sync{where}"
        assert 0 <= cursor.line < line_count, f"cursor line out of buffer{where}"
        eol = editor.rendered_buffer.eol_col(cursor.line)
        assert 0 <= cursor.col <= eol, f"cursor col past EOL{where}"
        assert view.first_line <= cursor.line <= view.last_line(), f"cursor line outside view{where}"
        assert view.first_col <= cursor.col <= view.last_col(), f"cursor col outside view{where}"

    return _check
