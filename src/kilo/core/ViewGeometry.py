# src/kilo/core/ViewGeometry.py
"""
kilo.core.ViewGeometry
======================

The viewport: the visible rectangle of the rendered buffer.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass
class ViewGeometry:
    """
    Class ViewGeometry
    ==================
    Origin (first visible line/column) plus size of the viewport, in rendered
    coordinates. All fields are non-negative.

    ``last_line()`` / ``last_col()`` use saturating arithmetic: a zero-sized
    viewport reports its origin as the last line/column instead of going
    negative.
    """

    first_line: int = 0
    first_col: int = 0
    width: int = 1
    height: int = 1

    def last_line(self) -> int:
        return self.first_line + max(self.height - 1, 0)

    def last_col(self) -> int:
        return self.first_col + max(self.width - 1, 0)

    def contains_line(self, line: int) -> bool:
        return self.first_line <= line <= self.last_line()

    def contains_col(self, col: int) -> bool:
        return self.first_col <= col <= self.last_col()

    def copy(self) -> "ViewGeometry":
        return replace(self)
