"""Bordered flat cell buffer backing a Maze.

The buffer is sized ``(height + 2) * (width + 2)`` so every maze carries a
one-cell wall ring. ``x`` is the row and ``y`` the column; interior cells are
1-indexed (``1 <= x <= height``, ``1 <= y <= width``).
"""

from __future__ import annotations

from typing import Iterator, List, Tuple

from .tiles import CELL_TYPES, WALL

Coord2D = Tuple[int, int]


class Grid:
    __slots__ = ("height", "width", "cells")

    def __init__(self, height: int, width: int, fill: str = WALL):
        self.height = height
        self.width = width
        self.cells: List[str] = [fill] * ((height + 2) * (width + 2))

    def _index(self, x: int, y: int) -> int:
        return x * (self.width + 2) + y

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.height + 2 and 0 <= y < self.width + 2

    def in_interior(self, x: int, y: int) -> bool:
        return 1 <= x <= self.height and 1 <= y <= self.width

    def get(self, x: int, y: int) -> str:
        """Cell at (x, y); anything outside the buffer reads as WALL."""
        if not self.in_bounds(x, y):
            return WALL
        return self.cells[self._index(x, y)]

    def set(self, x: int, y: int, cell: str) -> bool:
        """Write a cell. Returns False (and leaves the buffer untouched) when
        (x, y) is outside the buffer or ``cell`` is not a known tag."""
        if cell not in CELL_TYPES or not self.in_bounds(x, y):
            return False
        self.cells[self._index(x, y)] = cell
        return True

    def __getitem__(self, xy: Coord2D) -> str:
        return self.get(xy[0], xy[1])

    def rows(self) -> List[str]:
        stride = self.width + 2
        return ["".join(self.cells[r * stride:(r + 1) * stride]) for r in range(self.height + 2)]

    def positions(self, cell: str) -> Iterator[Coord2D]:
        for x in range(1, self.height + 1):
            for y in range(1, self.width + 1):
                if self.cells[self._index(x, y)] == cell:
                    yield x, y

    def count(self, cell: str) -> int:
        return sum(1 for _ in self.positions(cell))

    def copy(self) -> "Grid":
        clone = Grid(self.height, self.width)
        clone.cells = list(self.cells)
        return clone

    @classmethod
    def from_rows(cls, rows: List[str]) -> "Grid":
        """Rebuild a grid from ``rows()`` output (border included)."""
        if len(rows) < 2 or any(len(r) != len(rows[0]) for r in rows):
            raise ValueError("grid rows must be a non-empty rectangle with a border")
        grid = cls(len(rows) - 2, len(rows[0]) - 2)
        flat = "".join(rows)
        unknown = set(flat) - CELL_TYPES
        if unknown:
            raise ValueError(f"unknown cell tags: {sorted(unknown)}")
        grid.cells = list(flat)
        return grid

    def __repr__(self):
        return f"<Grid {self.height}x{self.width}>"
