"""Portal and Task records.

Both store coordinates only (never references to mazes), so a World can own
every Maze by id without aliasing.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..puzzles import Puzzle, generate_puzzle
from .position import Position


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Portal:
    from_pos: Position
    to_pos: Position
    id: str = field(default_factory=new_id)

    def reversed(self) -> "Portal":
        return Portal(from_pos=self.to_pos, to_pos=self.from_pos)

    def is_reverse_of(self, other: "Portal") -> bool:
        return self.from_pos == other.to_pos and self.to_pos == other.from_pos

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "from": self.from_pos.to_dict(), "to": self.to_pos.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Portal":
        return cls(
            from_pos=Position.from_dict(data["from"]),
            to_pos=Position.from_dict(data["to"]),
            id=str(data.get("id") or new_id()),
        )


@dataclass
class Task:
    position: Position
    score: int
    id: str = field(default_factory=new_id)
    # Ephemeral: regenerated on every landing, never serialized.
    puzzle: Optional[Puzzle] = field(default=None, compare=False, repr=False)

    def generate_question(self, rng: Optional[random.Random] = None) -> Puzzle:
        self.puzzle = generate_puzzle(self.score, rng)
        return self.puzzle

    def clear_question(self) -> None:
        self.puzzle = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "score": self.score, "position": self.position.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            position=Position.from_dict(data["position"]),
            score=int(data.get("score", 0)),
            id=str(data.get("id") or new_id()),
        )


__all__ = ["Portal", "Task", "new_id"]
