"""Maze: a generated grid plus its portal, task and exit overlays.

Public contract consumed elsewhere:
    Maze(maze_id, maze_type=NORMAL|TASK, height=15, width=15, method="dfs", required_score=0, seed=None)
    Attributes: id, type, height, width, method, seed, grid, portals, tasks, exit_cell, required_score, metrics
    maze[x, y] -> cell tag (out of range reads as WALL)

Overlay invariants (maintained by every mutator):
    * PORTAL cells == {portal.from_pos for portal in portals}
    * TASK cells == {task.position for task in tasks} for task mazes, none for normal mazes
    * EXIT cell == exit_cell (when set)
"""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Tuple

from ..logging_utils import get_logger
from .entities import Portal, Task
from .generator import DFS, GEN_METHODS, MazeGenerator, stamp_overlays
from .grid import Grid
from .metrics import init_metrics
from .position import Position
from .tiles import EXIT, PATH, WALL

log = get_logger("maze")

NORMAL = "normal"
TASK_MAZE = "task"
MAZE_TYPES = (NORMAL, TASK_MAZE)

# Authoring lower bound; the generator itself accepts anything >= 1.
MIN_AUTHORED_SIZE = 15
# Upper bound for anything built from untrusted configs or exports.
MAX_MAZE_SIZE = 201


class Maze:
    def __init__(
        self,
        maze_id: str,
        *,
        maze_type: str = NORMAL,
        height: int = MIN_AUTHORED_SIZE,
        width: int = MIN_AUTHORED_SIZE,
        method: str = DFS,
        required_score: int = 0,
        seed: Optional[int] = None,
        portals: Optional[List[Portal]] = None,
        tasks: Optional[List[Task]] = None,
        exit_cell: Optional[Tuple[int, int]] = None,
        generate: bool = True,
    ):
        if maze_type not in MAZE_TYPES:
            raise ValueError(f"unknown maze type: {maze_type}")
        if method not in GEN_METHODS:
            raise ValueError(f"unknown generation method: {method}")
        self.id = maze_id
        self.type = maze_type
        self.height = height
        self.width = width
        self.method = method
        self.required_score = required_score if maze_type == TASK_MAZE else 0
        self.seed = seed if seed is not None else random.randint(0, 2**31 - 1)
        self.portals: List[Portal] = list(portals or [])
        self.tasks: List[Task] = list(tasks or [])
        self.exit_cell = exit_cell
        self.grid = Grid(height, width)
        self.metrics: Dict[str, Any] = init_metrics()
        if generate:
            self.generate()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    def generate(self, method: Optional[str] = None, seed: Optional[int] = None) -> None:
        """Discard the grid and rebuild it, then re-apply overlays."""
        if method is not None:
            self.method = method
        if seed is not None:
            self.seed = seed
        outputs = MazeGenerator(self.height, self.width, self.method, self.seed).run()
        self.grid = outputs.grid
        self.metrics = outputs.metrics
        self._stamp(self.grid)
        log.info(
            event="maze_generated",
            maze_id=self.id,
            method=self.method,
            seed=self.seed,
            size=f"{self.height}x{self.width}",
            sites=self.metrics["sites"],
            runtime_ms=self.metrics["runtime_ms"],
        )

    def _stamp(self, grid: Grid) -> None:
        portal_cells = [(p.from_pos.x, p.from_pos.y) for p in self.portals]
        task_cells = [(t.position.x, t.position.y) for t in self.tasks] if self.type == TASK_MAZE else []
        stamp_overlays(grid, portal_cells, task_cells, self.exit_cell, self.metrics)

    def resize(self, height: int, width: int) -> None:
        self.height = height
        self.width = width
        self.generate()

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------
    def __getitem__(self, xy: Tuple[int, int]) -> str:
        return self.grid.get(xy[0], xy[1])

    def cell_at(self, pos: Position) -> str:
        if pos.maze_id != self.id:
            return WALL
        return self.grid.get(pos.x, pos.y)

    def contains(self, pos: Position) -> bool:
        return pos.maze_id == self.id and self.grid.in_interior(pos.x, pos.y)

    def position(self, x: int, y: int) -> Position:
        return Position(self.id, x, y)

    def clamp(self, pos: Position) -> Position:
        """Rehome ``pos`` into this maze; off-interior coordinates fall back to (1,1)."""
        if self.grid.in_interior(pos.x, pos.y):
            return Position(self.id, pos.x, pos.y)
        return Position(self.id, 1, 1)

    def portal_at(self, pos: Position) -> Optional[Portal]:
        return next((p for p in self.portals if p.from_pos == pos), None)

    def task_at(self, pos: Position) -> Optional[Task]:
        if self.type != TASK_MAZE:
            return None
        return next((t for t in self.tasks if t.position == pos), None)

    def find_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def find_portal(self, portal_id: str) -> Optional[Portal]:
        return next((p for p in self.portals if p.id == portal_id), None)

    def is_exit(self, pos: Position) -> bool:
        return self.exit_cell is not None and pos.maze_id == self.id and (pos.x, pos.y) == self.exit_cell

    # ------------------------------------------------------------------
    # Authoring mutations
    # ------------------------------------------------------------------
    def _restore(self, x: int, y: int) -> None:
        """Recompute the tag of one cell after an overlay was removed."""
        pos = self.position(x, y)
        if self.is_exit(pos):
            return
        if self.portal_at(pos) is not None:
            return
        if self.task_at(pos) is not None:
            return
        # Overlays sit on carved cells or on walls; regenerate the base tag.
        base = MazeGenerator(self.height, self.width, self.method, self.seed).run().grid.get(x, y)
        self.grid.set(x, y, base)

    def add_portal(self, portal: Portal) -> bool:
        if not self.contains(portal.from_pos):
            return False
        self.portals.append(portal)
        self._stamp(self.grid)
        return True

    def remove_portal(self, portal_id: str) -> Optional[Portal]:
        portal = self.find_portal(portal_id)
        if portal is None:
            return None
        self.portals.remove(portal)
        self._restore(portal.from_pos.x, portal.from_pos.y)
        return portal

    def add_task(self, task: Task) -> bool:
        if not self.contains(task.position):
            return False
        self.tasks.append(task)
        self._stamp(self.grid)
        return True

    def remove_task(self, task_id: str) -> Optional[Task]:
        task = self.find_task(task_id)
        if task is None:
            return None
        self.tasks.remove(task)
        if self.type == TASK_MAZE:
            x, y = task.position.x, task.position.y
            pos = self.position(x, y)
            if self.portal_at(pos) is None and not self.is_exit(pos):
                # a completed task leaves a walkable cell behind
                self.grid.set(x, y, PATH)
        return task

    def set_exit(self, x: int, y: int) -> bool:
        if not self.grid.in_interior(x, y):
            return False
        self.exit_cell = (x, y)
        return self.grid.set(x, y, EXIT)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "height": self.height,
            "width": self.width,
            "method": self.method,
            "seed": self.seed,
            "score": self.required_score,
            "portals": [p.to_dict() for p in self.portals],
            "tasks": [t.to_dict() for t in self.tasks],
            "exit": list(self.exit_cell) if self.exit_cell else None,
            "cells": self.grid.rows(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Maze":
        height, width = int(data["height"]), int(data["width"])
        if not (1 <= height <= MAX_MAZE_SIZE and 1 <= width <= MAX_MAZE_SIZE):
            raise ValueError(
                f"maze {data.get('id')}: dimensions must be between 1 and {MAX_MAZE_SIZE}, got {height}x{width}"
            )
        exit_cell = data.get("exit")
        maze = cls(
            str(data["id"]),
            maze_type=data.get("type", NORMAL),
            height=height,
            width=width,
            method=data.get("method", DFS),
            required_score=int(data.get("score", 0)),
            seed=data.get("seed"),
            portals=[Portal.from_dict(p) for p in data.get("portals", [])],
            tasks=[Task.from_dict(t) for t in data.get("tasks", [])],
            exit_cell=tuple(exit_cell) if exit_cell else None,
            generate=False,
        )
        rows = data.get("cells")
        if rows:
            grid = Grid.from_rows(rows)
            if (grid.height, grid.width) != (maze.height, maze.width):
                raise ValueError(f"maze {maze.id}: cells do not match {maze.height}x{maze.width}")
            maze.grid = grid
        else:
            maze.generate()
        return maze

    def __repr__(self):
        return f"<Maze {self.id} {self.type} {self.height}x{self.width} {self.method}>"


__all__ = ["Maze", "NORMAL", "TASK_MAZE", "MAZE_TYPES", "MIN_AUTHORED_SIZE", "MAX_MAZE_SIZE"]
