"""Gameplay settings resolved from the environment and Flask config.

Precedence (highest first): Flask ``app.config`` keys, environment variables,
dataclass defaults. Keys share names across both sources:

    MAZE_MOVE_SPEED      float in [0.1, 1.0]; step delay is 1.1 - speed seconds
    MAZE_PATH_METHOD     astar | bidir | jps | dijkstra
    MAZE_AUTO_PATH       1 to treat every move request as auto-path
    MAZE_DEFAULT_METHOD  dfs | prim | kruskal (preview / CLI default)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .maze import DFS, GEN_METHODS, PATH_METHODS

MIN_SPEED = 0.1
MAX_SPEED = 1.0

_TRUTHY = ("1", "true", "yes", "on")


def clamp_speed(speed: float) -> float:
    return max(MIN_SPEED, min(MAX_SPEED, float(speed)))


@dataclass
class GameSettings:
    move_speed: float = 0.5
    path_method: str = "astar"
    auto_path: bool = False
    default_method: str = DFS

    def __post_init__(self):
        self.move_speed = clamp_speed(self.move_speed)
        if self.path_method not in PATH_METHODS:
            raise ValueError(f"unknown pathfinding method: {self.path_method}")
        if self.default_method not in GEN_METHODS:
            raise ValueError(f"unknown generation method: {self.default_method}")

    @property
    def step_delay(self) -> float:
        """Seconds between a step and its arrival evaluation."""
        return round(1.1 - self.move_speed, 6)


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def load_settings(app_config: Optional[Mapping[str, Any]] = None) -> GameSettings:
    cfg = app_config or {}

    def pick(key: str, default: Any) -> Any:
        if key in cfg and cfg[key] is not None:
            return cfg[key]
        return os.getenv(key, default)

    return GameSettings(
        move_speed=float(pick("MAZE_MOVE_SPEED", 0.5)),
        path_method=str(pick("MAZE_PATH_METHOD", "astar")).lower(),
        auto_path=_as_bool(pick("MAZE_AUTO_PATH", "0")),
        default_method=str(pick("MAZE_DEFAULT_METHOD", DFS)).lower(),
    )


__all__ = ["GameSettings", "load_settings", "clamp_speed", "MIN_SPEED", "MAX_SPEED"]
