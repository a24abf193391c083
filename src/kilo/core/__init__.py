# src/kilo/core/__init__.py
"""Public facade for kilo.core: re-export main classes from CamelCase modules.

Keeps one-class-per-file module names (Editor.py, TextStorage.py, ...),
but provides flat imports for convenience and stability.
"""

from .Editor import Editor, EditorStateError  # noqa: F401
from .LineRenderer import TAB_STOP, RenderedBuffer, render_line  # noqa: F401
from .SearchEngine import SearchState, find_in_lines  # noqa: F401
from .SyntaxHighlighter import Highlight, HighlightStyle, SyntaxHighlighter  # noqa: F401
from .TextStorage import (  # noqa: F401
    BufferIOError,
    Location,
    NoFilePathError,
    Span,
    TextStorage,
)
from .ViewGeometry import ViewGeometry  # noqa: F401


__all__ = [
    "Editor",
    "EditorStateError",
    "TAB_STOP",
    "RenderedBuffer",
    "render_line",
    "SearchState",
    "find_in_lines",
    "Highlight",
    "HighlightStyle",
    "SyntaxHighlighter",
    "BufferIOError",
    "Location",
    "NoFilePathError",
    "Span",
    "TextStorage",
    "ViewGeometry",
]
