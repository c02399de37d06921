from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Position:
    """A cell inside a specific maze. Equality/hash cover all three fields."""

    maze_id: str
    x: int
    y: int

    def distance(self, other: "Position") -> int:
        """Manhattan distance; only meaningful inside one maze."""
        if other.maze_id != self.maze_id:
            raise ValueError(f"positions belong to different mazes: {self.maze_id!r} vs {other.maze_id!r}")
        return abs(self.x - other.x) + abs(self.y - other.y)

    def is_adjacent(self, other: "Position") -> bool:
        return other.maze_id == self.maze_id and abs(self.x - other.x) + abs(self.y - other.y) == 1

    def to_dict(self) -> Dict[str, Any]:
        return {"maze_id": self.maze_id, "x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Position":
        # camelCase mazeID is accepted as an alias.
        maze_id = data.get("maze_id", data.get("mazeID"))
        if maze_id is None or "x" not in data or "y" not in data:
            raise ValueError(f"position needs maze_id, x and y: {data!r}")
        return cls(str(maze_id), int(data["x"]), int(data["y"]))

    def __str__(self):
        return f"{self.maze_id}({self.x},{self.y})"
