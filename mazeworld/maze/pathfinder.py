"""Route search over one maze.

Strategies (``method`` argument of ``find_path``):
    astar     A* with the Manhattan heuristic
    bidir     bidirectional A*, one frontier from each end
    jps       jump point search for 4-connected grids
    dijkstra  A* without the heuristic

Shared rules:
    * moves are 4-directional and clipped to the interior [1,height] x [1,width]
    * a cell is enterable when ``is_walkable(cell)`` holds; only the requested
      start and end cells get the endpoint exception, so a route can finish on
      a portal or the exit but never pass through one
    * every edge costs 1; all strategies return routes of the same length

Returns the route start..end inclusive, or None when the two cells are not
connected. Positions outside the searched maze raise InvalidRouteRequest.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, Dict, List, Optional, Tuple

from ..logging_utils import get_logger
from .position import Position
from .tiles import is_walkable

log = get_logger("maze.pathfinder")

Coord2D = Tuple[int, int]
Heuristic = Callable[[Coord2D], int]

ASTAR = "astar"
BIDIR = "bidir"
JPS = "jps"
DIJKSTRA = "dijkstra"
PATH_METHODS = (ASTAR, BIDIR, JPS, DIJKSTRA)

_STEPS: List[Coord2D] = [(1, 0), (-1, 0), (0, 1), (0, -1)]


class InvalidRouteRequest(ValueError):
    """Start or end does not belong to the maze being searched."""


class _Board:
    """Walkability view of one maze for a single start/end request."""

    def __init__(self, maze, start: Coord2D, end: Coord2D):
        self.grid = maze.grid
        self.height = maze.height
        self.width = maze.width
        self.start = start
        self.end = end

    def enterable(self, x: int, y: int) -> bool:
        if not (1 <= x <= self.height and 1 <= y <= self.width):
            return False
        endpoint = (x, y) == self.start or (x, y) == self.end
        return is_walkable(self.grid.get(x, y), as_endpoint=endpoint)

    def neighbors(self, node: Coord2D):
        x, y = node
        for dx, dy in _STEPS:
            nx, ny = x + dx, y + dy
            if self.enterable(nx, ny):
                yield nx, ny


def _manhattan(a: Coord2D, b: Coord2D) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def _walk_back(came_from: Dict[Coord2D, Coord2D], node: Coord2D) -> List[Coord2D]:
    path = [node]
    while node in came_from:
        node = came_from[node]
        path.append(node)
    path.reverse()
    return path


# ---------------------------------------------------------------------------
# A* / Dijkstra
# ---------------------------------------------------------------------------
def _best_first(board: _Board, heuristic: Heuristic) -> Optional[List[Coord2D]]:
    start, end = board.start, board.end
    counter = itertools.count()
    g_score: Dict[Coord2D, int] = {start: 0}
    came_from: Dict[Coord2D, Coord2D] = {}
    closed = set()
    open_heap = [(heuristic(start), next(counter), start)]
    while open_heap:
        _f, _tie, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if current == end:
            return _walk_back(came_from, current)
        closed.add(current)
        g_next = g_score[current] + 1
        for nb in board.neighbors(current):
            if nb in closed:
                continue
            if g_next < g_score.get(nb, 1 << 60):
                g_score[nb] = g_next
                came_from[nb] = current
                heapq.heappush(open_heap, (g_next + heuristic(nb), next(counter), nb))
    return None


def _astar(board: _Board) -> Optional[List[Coord2D]]:
    end = board.end
    return _best_first(board, lambda n: _manhattan(n, end))


def _dijkstra(board: _Board) -> Optional[List[Coord2D]]:
    return _best_first(board, lambda n: 0)


# ---------------------------------------------------------------------------
# Bidirectional A*
# ---------------------------------------------------------------------------
class _Frontier:
    def __init__(self, root: Coord2D, target: Coord2D):
        self.target = target
        self.counter = itertools.count()
        self.g: Dict[Coord2D, int] = {root: 0}
        self.came_from: Dict[Coord2D, Coord2D] = {}
        self.closed = set()
        self.heap = [(_manhattan(root, target), next(self.counter), root)]

    def top_f(self) -> float:
        # drop stale entries so the head is a live lower bound
        while self.heap and self.heap[0][2] in self.closed:
            heapq.heappop(self.heap)
        return self.heap[0][0] if self.heap else float("inf")

    def expand(self, board: _Board, other: "_Frontier", best: List) -> None:
        _f, _tie, current = heapq.heappop(self.heap)
        self.closed.add(current)
        g_next = self.g[current] + 1
        for nb in board.neighbors(current):
            if nb in self.closed:
                continue
            if g_next < self.g.get(nb, 1 << 60):
                self.g[nb] = g_next
                self.came_from[nb] = current
                heapq.heappush(self.heap, (g_next + _manhattan(nb, self.target), next(self.counter), nb))
                if nb in other.g and g_next + other.g[nb] < best[0]:
                    best[0], best[1] = g_next + other.g[nb], nb


def _bidirectional(board: _Board) -> Optional[List[Coord2D]]:
    start, end = board.start, board.end
    if start == end:
        return [start]
    forward = _Frontier(start, end)
    backward = _Frontier(end, start)
    best = [float("inf"), None]  # [cost, meeting cell]
    while True:
        f_top, b_top = forward.top_f(), backward.top_f()
        # No unexplored route can beat the best splice once either bound reaches it.
        if best[1] is not None and best[0] <= max(f_top, b_top):
            break
        if f_top == float("inf") or b_top == float("inf"):
            break
        forward.expand(board, backward, best)
        if backward.top_f() != float("inf"):
            backward.expand(board, forward, best)
    meeting = best[1]
    if meeting is None:
        return None
    head = _walk_back(forward.came_from, meeting)
    tail = _walk_back(backward.came_from, meeting)
    tail.reverse()
    return head + tail[1:]


# ---------------------------------------------------------------------------
# Jump point search (4-connected)
# ---------------------------------------------------------------------------
def _jump_horizontal(board: _Board, x: int, y: int, dy: int) -> Optional[Coord2D]:
    while True:
        y += dy
        if not board.enterable(x, y):
            return None
        if (x, y) == board.end:
            return x, y
        # forced neighbour: an open cell beside us whose cell behind is blocked
        for side in (1, -1):
            if board.enterable(x + side, y) and not board.enterable(x + side, y - dy):
                return x, y


def _jump_vertical(board: _Board, x: int, y: int, dx: int) -> Optional[Coord2D]:
    while True:
        x += dx
        if not board.enterable(x, y):
            return None
        if (x, y) == board.end:
            return x, y
        for side in (1, -1):
            if board.enterable(x, y + side) and not board.enterable(x - dx, y + side):
                return x, y
        # a vertical run must stop wherever a horizontal scan finds something
        if _jump_horizontal(board, x, y, 1) or _jump_horizontal(board, x, y, -1):
            return x, y


def _jump(board: _Board, node: Coord2D, dx: int, dy: int) -> Optional[Coord2D]:
    if dx == 0:
        return _jump_horizontal(board, node[0], node[1], dy)
    return _jump_vertical(board, node[0], node[1], dx)


def _expand_segments(points: List[Coord2D]) -> List[Coord2D]:
    """Turn a jump point chain (straight segments) into single steps."""
    cells = [points[0]]
    for (x1, y1), (x2, y2) in zip(points, points[1:]):
        dx = (x2 > x1) - (x2 < x1)
        dy = (y2 > y1) - (y2 < y1)
        x, y = x1, y1
        while (x, y) != (x2, y2):
            x, y = x + dx, y + dy
            cells.append((x, y))
    return cells


def _jps(board: _Board) -> Optional[List[Coord2D]]:
    start, end = board.start, board.end
    counter = itertools.count()
    g_score: Dict[Coord2D, int] = {start: 0}
    came_from: Dict[Coord2D, Coord2D] = {}
    closed = set()
    open_heap = [(_manhattan(start, end), next(counter), start)]
    while open_heap:
        _f, _tie, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if current == end:
            return _expand_segments(_walk_back(came_from, current))
        closed.add(current)
        for dx, dy in _STEPS:
            point = _jump(board, current, dx, dy)
            if point is None or point in closed:
                continue
            g_next = g_score[current] + _manhattan(current, point)
            if g_next < g_score.get(point, 1 << 60):
                g_score[point] = g_next
                came_from[point] = current
                heapq.heappush(open_heap, (g_next + _manhattan(point, end), next(counter), point))
    return None


_STRATEGIES: Dict[str, Callable[[_Board], Optional[List[Coord2D]]]] = {
    ASTAR: _astar,
    BIDIR: _bidirectional,
    JPS: _jps,
    DIJKSTRA: _dijkstra,
}


def find_path(maze, start: Position, end: Position, method: str = ASTAR) -> Optional[List[Position]]:
    if method not in _STRATEGIES:
        raise ValueError(f"unknown pathfinding method: {method}")
    for label, pos in (("start", start), ("end", end)):
        if not maze.contains(pos):
            raise InvalidRouteRequest(f"{label} {pos} is not inside maze {maze.id}")
    board = _Board(maze, (start.x, start.y), (end.x, end.y))
    if not board.enterable(start.x, start.y) or not board.enterable(end.x, end.y):
        log.debug(event="route_endpoint_blocked", maze_id=maze.id, start=str(start), end=str(end))
        return None
    cells = _STRATEGIES[method](board)
    if cells is None:
        log.debug(event="route_not_found", maze_id=maze.id, method=method, start=str(start), end=str(end))
        return None
    return [Position(maze.id, x, y) for x, y in cells]


__all__ = ["find_path", "InvalidRouteRequest", "PATH_METHODS", "ASTAR", "BIDIR", "JPS", "DIJKSTRA"]
