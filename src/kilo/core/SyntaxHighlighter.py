# src/kilo/core/SyntaxHighlighter.py
"""
kilo.core.SyntaxHighlighter
===========================

Pygments-backed highlighting of rendered lines.

The highlighter turns a line into an ordered list of :class:`Highlight` ranges
that do not overlap, leave no gaps and cover the whole line. Styles come from
a Pygments style class (``monokai`` unless configured otherwise).

Two entry points exist:

- :meth:`SyntaxHighlighter.highlight` lexes a whole buffer in one pass, so
  multi-line constructs (block comments, triple-quoted strings) are coloured
  correctly when a file is opened.
- :meth:`SyntaxHighlighter.highlight_line` lexes one line in isolation and is
  used after single-line edits. Lexer state from earlier lines is not carried
  into it, so an edited line inside a multi-line construct may be coloured as
  if it stood alone until the file is reopened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.token import Token, _TokenType
from pygments.util import ClassNotFound


DEFAULT_THEME = "monokai"

# The lexer must not add or strip newlines: token lengths have to add up to
# the exact length of the text handed in.
LEXER_OPTIONS: dict[str, Any] = {"stripnl": False, "ensurenl": False}


@dataclass(frozen=True)
class HighlightStyle:
    """Colours as ``rrggbb`` hex strings (None means terminal default)."""

    foreground: Optional[str] = None
    background: Optional[str] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False


@dataclass
class Highlight:
    """A styled half-open column range ``[start, end)`` of one rendered line."""

    style: HighlightStyle
    start: int
    end: int


class SyntaxHighlighter:
    """
    Class SyntaxHighlighter
    =======================
    Maps rendered lines to style ranges using a Pygments lexer and style.

    Attributes:
        lexer (Lexer): Pygments lexer chosen for the file.
        style_name (str): Name of the Pygments style in use.

    Methods:
        for_file(file_path, style_name): Picks a lexer from the file name.
        highlight(lines): Highlights a whole buffer in one pass.
        highlight_line(line): Highlights a single line.
    """

    def __init__(self, lexer: Lexer, style_name: str = DEFAULT_THEME) -> None:
        self.lexer = lexer
        try:
            self._style = get_style_by_name(style_name)
            self.style_name = style_name
        except ClassNotFound:
            logging.warning(f"Unknown highlighting theme '{style_name}', using '{DEFAULT_THEME}'")
            self._style = get_style_by_name(DEFAULT_THEME)
            self.style_name = DEFAULT_THEME
        self._style_cache: dict[_TokenType, HighlightStyle] = {}
        self.default_style = self.style_for_token(Token.Text)

    @classmethod
    def for_file(
        cls, file_path: Optional[str], style_name: str = DEFAULT_THEME
    ) -> "SyntaxHighlighter":
        """Builds a highlighter for ``file_path``, plain text if unrecognised."""
        lexer: Lexer
        if file_path:
            try:
                lexer = get_lexer_for_filename(file_path, **LEXER_OPTIONS)
            except ClassNotFound:
                logging.debug(f"No lexer for '{file_path}', using plain text")
                lexer = TextLexer(**LEXER_OPTIONS)
        else:
            lexer = TextLexer(**LEXER_OPTIONS)
        logging.debug(f"Highlighter: lexer '{lexer.name}', style '{style_name}'")
        return cls(lexer, style_name)

    @property
    def language(self) -> str:
        return self.lexer.name

    def style_for_token(self, token_type: _TokenType) -> HighlightStyle:
        cached = self._style_cache.get(token_type)
        if cached is not None:
            return cached
        info = self._style.style_for_token(token_type)
        style = HighlightStyle(
            foreground=info.get("color") or None,
            background=info.get("bgcolor") or None,
            bold=bool(info.get("bold")),
            italic=bool(info.get("italic")),
            underline=bool(info.get("underline")),
        )
        self._style_cache[token_type] = style
        return style

    # ---------- highlighting ----------

    def highlight_line(self, line: str) -> list[Highlight]:
        """Returns gap-free style ranges covering ``line`` (empty list for "")."""
        if not line:
            return []
        ranges: list[Highlight] = []
        pos = 0
        try:
            for token_type, value in self.lexer.get_tokens(line):
                if not value:
                    continue
                self._append_range(ranges, token_type, pos, pos + len(value))
                pos += len(value)
        except Exception as e:
            logging.error(f"Lexer '{self.lexer.name}' failed on line: {e}", exc_info=True)
            pos = -1

        if pos != len(line):
            # The lexer rewrote the text (e.g. "\r"); colour the line plainly.
            return [Highlight(self.default_style, 0, len(line))]
        return ranges

    def highlight(self, lines: Iterable[str]) -> list[list[Highlight]]:
        """Highlights all ``lines`` with lexer state carried across lines."""
        lines = list(lines)
        result: list[list[Highlight]] = [[] for _ in lines]
        if not lines:
            return result
        if any("\r" in line for line in lines):
            # Pygments turns "\r" into "\n", which would shift every later row.
            return [self.highlight_line(line) for line in lines]

        text = "\n".join(lines)
        row, col = 0, 0
        try:
            for token_type, value in self.lexer.get_tokens(text):
                for i, part in enumerate(value.split("\n")):
                    if i > 0:
                        row, col = row + 1, 0
                    if part and row < len(lines):
                        self._append_range(result[row], token_type, col, col + len(part))
                        col += len(part)
        except Exception as e:
            logging.error(f"Lexer '{self.lexer.name}' failed on buffer: {e}", exc_info=True)
            return [self.highlight_line(line) for line in lines]

        # Fall back per line wherever the token stream did not line up.
        for index, line in enumerate(lines):
            ranges = result[index]
            covered = ranges[-1].end if ranges else 0
            if covered != len(line):
                result[index] = self.highlight_line(line)
        return result

    def _append_range(
        self, ranges: list[Highlight], token_type: _TokenType, start: int, end: int
    ) -> None:
        style = self.style_for_token(token_type)
        if ranges and ranges[-1].style == style and ranges[-1].end == start:
            ranges[-1].end = end
        else:
            ranges.append(Highlight(style, start, end))
