# src/kilo/core/TextStorage.py
"""
kilo.core.TextStorage
=====================

Line-oriented text storage for the editor core.

A :class:`TextStorage` owns an ordered list of lines (Python ``str`` objects,
so indices are Unicode scalar values, never bytes), an optional associated file
path and a dirty flag. It always holds at least one line: an empty buffer is a
single empty line.

All column arguments accepted here are *raw* character indices into the stored
line. Conversion from the rendered (tab-expanded) columns the cursor lives in
is the job of :mod:`kilo.core.LineRenderer`; the storage knows nothing about
tabs or the screen.

Index arguments are validated by the caller. An out-of-range location is a
programming error and surfaces as :class:`IndexError`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Iterator, Optional, Sequence

import chardet


logger = logging.getLogger("kilo")

# Encodings guessed by chardet below this confidence are ignored.
MIN_CHARDET_CONFIDENCE = 0.75
# Only the head of a file is handed to chardet.
CHARDET_SAMPLE_SIZE = 64 * 1024


# ==================== Errors ====================


class BufferIOError(OSError):
    """Raised when a buffer cannot be loaded from or saved to disk."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class NoFilePathError(BufferIOError):
    """Raised by :meth:`TextStorage.save` when the buffer has no file path."""


# ==================== Positions ====================


@dataclass
class Location:
    """A (line, col) position. Mutable: the editor moves its cursor in place."""

    line: int = 0
    col: int = 0

    def copy(self) -> "Location":
        return replace(self)


@dataclass(frozen=True)
class Span:
    """Half-open range of a match: ``start`` inclusive, ``end`` exclusive."""

    start: Location
    end: Location


# ==================== Decoding helpers ====================


def decode_bytes(raw: bytes) -> tuple[str, str]:
    """Decodes file content, returning ``(text, encoding)``.

    UTF-8 is tried first. If that fails, chardet guesses an encoding; a guess
    below :data:`MIN_CHARDET_CONFIDENCE` (or one that cannot decode the data)
    falls back to latin-1, which maps every byte and therefore never fails.
    """
    try:
        return raw.decode("utf-8"), "utf-8"
    except UnicodeDecodeError:
        pass

    guess = chardet.detect(raw[:CHARDET_SAMPLE_SIZE])
    encoding = guess.get("encoding")
    confidence = guess.get("confidence") or 0.0
    logger.debug(f"chardet guess: {encoding} (confidence {confidence:.2f})")

    if encoding and confidence >= MIN_CHARDET_CONFIDENCE:
        try:
            return raw.decode(encoding), encoding
        except (UnicodeDecodeError, LookupError) as e:
            logger.warning(f"Decoding with detected encoding '{encoding}' failed: {e}")

    return raw.decode("latin-1"), "latin-1"


def split_lines(text: str) -> list[str]:
    """Splits text on ``\\n`` without keeping the terminator.

    A trailing ``\\r`` (CRLF files) is dropped from every line and a final
    newline does not produce an extra empty line. Other characters that
    ``str.splitlines`` treats as boundaries (form feed, ``\\u2028``...) stay
    inside the line.
    """
    lines = text.split("\n")
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


# ==================== TextStorage ====================


class TextStorage:
    """
    Class TextStorage
    =================
    Ordered, never-empty list of text lines with mutation primitives and file
    load/save.

    Attributes:
        file_path (Optional[str]): Path the buffer is saved to by :meth:`save`.
        encoding (str): Encoding used for saving; remembered from the last load.
        dirty (bool): True after any mutation, cleared by a successful save.

    Methods:
        load(path): Class method reading a file into a new storage.
        save() / save_as(path): Write the lines joined with ``"\\n"``.
        insert_char, remove_char, insert_line, remove_line, join_lines,
        split_line:
            Mutations addressed in raw character indices.
    """

    def __init__(
        self,
        lines: Optional[Sequence[str]] = None,
        file_path: Optional[str] = None,
        encoding: str = "utf-8",
    ) -> None:
        self._lines: list[str] = list(lines) if lines else [""]
        self.file_path = file_path
        self.encoding = encoding
        self.dirty = False

    # ---------- loading / saving ----------

    @classmethod
    def load(cls, file_path: str) -> "TextStorage":
        """Reads ``file_path`` into a new storage.

        Raises:
            BufferIOError: The path is a directory, cannot be read, or does not
                exist. The caller's current buffer is never touched.
        """
        if os.path.isdir(file_path):
            raise BufferIOError(f"'{file_path}' is a directory", file_path)
        try:
            with open(file_path, "rb") as f:
                raw = f.read()
        except OSError as e:
            logger.error(f"Failed to read '{file_path}': {e}")
            raise BufferIOError(f"Cannot open '{file_path}': {e.strerror or e}", file_path) from e

        text, encoding = decode_bytes(raw)
        storage = cls(split_lines(text), file_path=file_path, encoding=encoding)
        logger.info(
            f"Loaded '{file_path}' ({storage.line_count} lines, encoding {encoding})"
        )
        return storage

    def save(self) -> None:
        """Saves to the associated path.

        Raises:
            NoFilePathError: No path is associated with the buffer yet.
            BufferIOError: Writing failed; the dirty flag is left unchanged.
        """
        if not self.file_path:
            raise NoFilePathError("No file name")
        self._write(self.file_path)

    def save_as(self, file_path: str) -> None:
        """Saves to ``file_path`` and adopts it as the associated path."""
        self._write(file_path)
        self.file_path = file_path

    def _write(self, file_path: str) -> None:
        content = "\n".join(self._lines)
        try:
            data = content.encode(self.encoding)
        except UnicodeEncodeError:
            logger.warning(
                f"Content cannot be encoded as {self.encoding}; saving as utf-8 instead"
            )
            data = content.encode("utf-8")
            encoding = "utf-8"
        else:
            encoding = self.encoding

        try:
            with open(file_path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Failed to write '{file_path}': {e}")
            raise BufferIOError(f"Cannot save '{file_path}': {e.strerror or e}", file_path) from e

        self.encoding = encoding
        self.dirty = False
        logger.info(f"Saved {len(data)} bytes to '{file_path}'")

    # ---------- accessors ----------

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def lines(self) -> Iterator[str]:
        return iter(self._lines)

    def get_line(self, index: int) -> str:
        self._check_line(index)
        return self._lines[index]

    def get_file_name(self) -> Optional[str]:
        """Returns the base name of the associated path, if any."""
        return os.path.basename(self.file_path) if self.file_path else None

    def is_dirty(self) -> bool:
        return self.dirty

    # ---------- mutations ----------

    def insert_char(self, location: Location, char: str) -> None:
        line = self._line_for_edit(location, allow_eol=True)
        self._lines[location.line] = line[: location.col] + char + line[location.col :]
        self.dirty = True

    def remove_char(self, location: Location) -> None:
        line = self._line_for_edit(location, allow_eol=False)
        self._lines[location.line] = line[: location.col] + line[location.col + 1 :]
        self.dirty = True

    def insert_line(self, index: int) -> None:
        """Inserts an empty line so that it ends up at ``index``."""
        if not 0 <= index <= len(self._lines):
            raise IndexError(f"line index {index} out of range for insert")
        self._lines.insert(index, "")
        self.dirty = True

    def remove_line(self, index: int) -> None:
        """Removes line ``index``; removing the only line leaves one empty line."""
        self._check_line(index)
        if len(self._lines) == 1:
            self._lines[0] = ""
        else:
            del self._lines[index]
        self.dirty = True

    def join_lines(self, first_index: int) -> None:
        """Appends line ``first_index + 1`` onto ``first_index`` and removes it."""
        self._check_line(first_index)
        self._check_line(first_index + 1)
        self._lines[first_index] += self._lines.pop(first_index + 1)
        self.dirty = True

    def split_line(self, location: Location) -> None:
        """Cuts the line at ``location.col`` into two consecutive lines."""
        line = self._line_for_edit(location, allow_eol=True)
        self._lines[location.line : location.line + 1] = [
            line[: location.col],
            line[location.col :],
        ]
        self.dirty = True

    # ---------- validation ----------

    def _check_line(self, index: int) -> None:
        if not 0 <= index < len(self._lines):
            raise IndexError(f"line index {index} out of range (0..{len(self._lines) - 1})")

    def _line_for_edit(self, location: Location, allow_eol: bool) -> str:
        self._check_line(location.line)
        line = self._lines[location.line]
        limit = len(line) if allow_eol else len(line) - 1
        if not 0 <= location.col <= limit:
            raise IndexError(f"column {location.col} out of range on line {location.line}")
        return line
