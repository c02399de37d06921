"""Maze carving: randomized DFS, randomized Prim and randomized Kruskal.

Sites live at odd (x, y) offsets; the cell between two neighbouring sites is
the wall that carving knocks down. All three methods yield a spanning tree
over the sites (a perfect maze), so ``site_edges == sites - 1``.

Overlays (portal, task and exit markers) are stamped afterwards from the
maze's current records; they are never generated here.
"""

from __future__ import annotations

import random
import time
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

from ..logging_utils import get_logger
from .grid import Grid
from .metrics import init_metrics
from .tiles import EXIT, PATH, PORTAL, TASK

log = get_logger("maze.generator")

Coord2D = Tuple[int, int]
Carved = List[List[bool]]

DFS = "dfs"
PRIM = "prim"
KRUSKAL = "kruskal"
GEN_METHODS = (DFS, PRIM, KRUSKAL)

DIRECTIONS: List[Coord2D] = [(-1, 0), (0, 1), (1, 0), (0, -1)]


class GenerationOutputs(NamedTuple):
    grid: Grid
    sites: List[Coord2D]
    metrics: Dict


class MazeGenerator:
    def __init__(self, height: int, width: int, method: str = DFS, seed: Optional[int] = None):
        if height < 1 or width < 1:
            raise ValueError(f"maze dimensions must be >= 1, got {height}x{width}")
        if method not in GEN_METHODS:
            raise ValueError(f"unknown generation method: {method}")
        self.height = height
        self.width = width
        self.method = method
        self.seed = seed
        # Local RNG so external random usage does not affect generation
        self._rng = random.Random(seed)

    def is_site(self, x: int, y: int) -> bool:
        return 1 <= x <= self.height and 1 <= y <= self.width and x % 2 == 1 and y % 2 == 1

    def sites(self) -> List[Coord2D]:
        return [(x, y) for x in range(1, self.height + 1, 2) for y in range(1, self.width + 1, 2)]

    def init_carved(self) -> Carved:
        return [[False] * (self.width + 2) for _ in range(self.height + 2)]

    def _shuffled_directions(self) -> List[Coord2D]:
        dirs = list(DIRECTIONS)
        self._rng.shuffle(dirs)
        return dirs

    # ------------------------------------------------------------------
    # Carvers: each returns the number of site-to-site edges it opened
    # ------------------------------------------------------------------
    def carve_dfs(self, carved: Carved) -> int:
        """Depth-first walk from (1,1).

        An explicit stack of per-site direction iterators replaces recursion;
        visiting order matches the recursive walk for the same RNG stream.
        """
        edges = 0
        carved[1][1] = True
        stack = [(1, 1, iter(self._shuffled_directions()))]
        while stack:
            x, y, pending = stack[-1]
            for dx, dy in pending:
                nx, ny = x + dx * 2, y + dy * 2
                if self.is_site(nx, ny) and not carved[nx][ny]:
                    carved[x + dx][y + dy] = True
                    carved[nx][ny] = True
                    edges += 1
                    stack.append((nx, ny, iter(self._shuffled_directions())))
                    break
            else:
                stack.pop()
        return edges

    def carve_prim(self, carved: Carved) -> int:
        edges = 0
        frontier: List[Tuple[int, int, int, int]] = []

        def push_walls(x: int, y: int):
            for dx, dy in DIRECTIONS:
                sx, sy = x + dx * 2, y + dy * 2
                if self.is_site(sx, sy) and not carved[sx][sy]:
                    frontier.append((x + dx, y + dy, sx, sy))

        carved[1][1] = True
        push_walls(1, 1)
        while frontier:
            i = self._rng.randrange(len(frontier))
            frontier[i], frontier[-1] = frontier[-1], frontier[i]
            wx, wy, sx, sy = frontier.pop()
            if carved[sx][sy]:
                continue  # far site already reached: wall stays
            carved[wx][wy] = True
            carved[sx][sy] = True
            edges += 1
            push_walls(sx, sy)
        return edges

    def carve_kruskal(self, carved: Carved) -> int:
        sites = self.sites()
        index = {s: i for i, s in enumerate(sites)}
        parent = list(range(len(sites)))

        def find(i: int) -> int:
            root = i
            while parent[root] != root:
                root = parent[root]
            while parent[i] != root:
                parent[i], i = root, parent[i]
            return root

        walls: List[Tuple[int, int, Coord2D, Coord2D]] = []
        for x in range(1, self.height + 1):
            for y in range(1, self.width + 1):
                if x % 2 == 0 and y % 2 == 1 and x + 1 <= self.height:
                    walls.append((x, y, (x - 1, y), (x + 1, y)))
                elif x % 2 == 1 and y % 2 == 0 and y + 1 <= self.width:
                    walls.append((x, y, (x, y - 1), (x, y + 1)))
        self._rng.shuffle(walls)

        for sx, sy in sites:
            carved[sx][sy] = True
        edges = 0
        for wx, wy, a, b in walls:
            ra, rb = find(index[a]), find(index[b])
            if ra != rb:
                parent[rb] = ra
                carved[wx][wy] = True
                edges += 1
        return edges

    def run(self) -> GenerationOutputs:
        start = time.perf_counter()
        carvers: Dict[str, Callable[[Carved], int]] = {
            DFS: self.carve_dfs,
            PRIM: self.carve_prim,
            KRUSKAL: self.carve_kruskal,
        }
        carved = self.init_carved()
        edges = carvers[self.method](carved)
        grid = Grid(self.height, self.width)
        for x in range(1, self.height + 1):
            row = carved[x]
            for y in range(1, self.width + 1):
                if row[y]:
                    grid.set(x, y, PATH)
        sites = self.sites()
        metrics = init_metrics()
        metrics.update(
            method=self.method,
            seed=self.seed,
            sites=len(sites),
            site_edges=edges,
            carved_cells=grid.count(PATH),
            runtime_ms=round((time.perf_counter() - start) * 1000, 3),
        )
        return GenerationOutputs(grid, sites, metrics)


def stamp_overlays(
    grid: Grid,
    portal_cells: Iterable[Coord2D],
    task_cells: Iterable[Coord2D],
    exit_cell: Optional[Coord2D],
    metrics: Dict,
) -> None:
    """Stamp Portal, then Task, then Exit markers. Callers pass task cells
    only for task-type mazes. Cells outside the interior are counted and
    skipped."""

    def _stamp(cell: Coord2D, tag: str) -> bool:
        x, y = cell
        if not grid.in_interior(x, y):
            metrics["overlays_skipped"] += 1
            log.warn(event="overlay_out_of_bounds", tag=tag, x=x, y=y)
            return False
        return grid.set(x, y, tag)

    for cell in portal_cells:
        if _stamp(cell, PORTAL):
            metrics["portals_stamped"] += 1
    for cell in task_cells:
        if _stamp(cell, TASK):
            metrics["tasks_stamped"] += 1
    if exit_cell is not None:
        _stamp(exit_cell, EXIT)


__all__ = ["MazeGenerator", "GenerationOutputs", "GEN_METHODS", "DFS", "PRIM", "KRUSKAL", "stamp_overlays"]
