"""Public maze package interface.

Grid and cell model, generator, pathfinder and the Maze container.
"""

from .entities import Portal, Task, new_id
from .generator import DFS, GEN_METHODS, KRUSKAL, PRIM, MazeGenerator
from .grid import Grid
from .maze import MAX_MAZE_SIZE, MAZE_TYPES, MIN_AUTHORED_SIZE, NORMAL, TASK_MAZE, Maze
from .pathfinder import (
    ASTAR,
    BIDIR,
    DIJKSTRA,
    JPS,
    PATH_METHODS,
    InvalidRouteRequest,
    find_path,
)
from .position import Position
from .tiles import EXIT, PATH, PORTAL, TASK, WALL, is_walkable  # noqa: F401

__all__ = [
    "Grid",
    "Maze",
    "MazeGenerator",
    "Portal",
    "Position",
    "Task",
    "InvalidRouteRequest",
    "find_path",
    "new_id",
    "is_walkable",
    "WALL",
    "PATH",
    "TASK",
    "PORTAL",
    "EXIT",
    "NORMAL",
    "TASK_MAZE",
    "MAZE_TYPES",
    "MIN_AUTHORED_SIZE",
    "MAX_MAZE_SIZE",
    "DFS",
    "PRIM",
    "KRUSKAL",
    "GEN_METHODS",
    "ASTAR",
    "BIDIR",
    "JPS",
    "DIJKSTRA",
    "PATH_METHODS",
]
