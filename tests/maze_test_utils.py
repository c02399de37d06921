from collections import deque

from mazeworld.maze import Grid, Maze
from mazeworld.maze.tiles import PATH, WALL

# Plain carved cells; overlays are checked separately.
WALKABLE = {"P", "T"}


def bfs_reachable(grid, start, walkable=WALKABLE):
    """Return set of (x,y) interior cells reachable from start over walkable tags."""
    if grid.get(*start) not in walkable:
        return set()
    q = deque([start])
    vis = {start}
    while q:
        x, y = q.popleft()
        for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
            nx, ny = x + dx, y + dy
            if grid.in_interior(nx, ny) and (nx, ny) not in vis and grid.get(nx, ny) in walkable:
                vis.add((nx, ny))
                q.append((nx, ny))
    return vis


def bfs_distance(grid, start, end, walkable=WALKABLE):
    """Shortest step count between two cells, treating start/end as enterable."""
    endpoints = {start, end}
    q = deque([(start, 0)])
    vis = {start}
    while q:
        (x, y), d = q.popleft()
        if (x, y) == end:
            return d
        for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
            nx, ny = x + dx, y + dy
            if not grid.in_interior(nx, ny) or (nx, ny) in vis:
                continue
            if grid.get(nx, ny) in walkable or (nx, ny) in endpoints:
                vis.add((nx, ny))
                q.append(((nx, ny), d + 1))
    return None


def open_edge_count(grid):
    """Number of 4-adjacent carved cell pairs (each pair once)."""
    edges = 0
    for x, y in grid.positions(PATH):
        if grid.get(x + 1, y) == PATH:
            edges += 1
        if grid.get(x, y + 1) == PATH:
            edges += 1
    return edges


def maze_from_rows(maze_id, rows, maze_type="normal"):
    """Build a Maze around hand-drawn interior rows ('#' wall, '.' path, letters as tags)."""
    tag = {"#": WALL, ".": PATH, "T": "T", "O": "O", "E": "E"}
    height, width = len(rows), len(rows[0])
    grid = Grid(height, width)
    for x, row in enumerate(rows, start=1):
        for y, ch in enumerate(row, start=1):
            grid.set(x, y, tag[ch])
    maze = Maze(maze_id, maze_type=maze_type, height=height, width=width, generate=False)
    maze.grid = grid
    return maze


def assert_valid_route(maze, route, start, end):
    assert route[0] == start and route[-1] == end
    for a, b in zip(route, route[1:]):
        assert a.is_adjacent(b), f"non-adjacent step {a} -> {b}"
    for p in route[1:-1]:
        assert maze.cell_at(p) in WALKABLE, f"route passes through {maze.cell_at(p)} at {p}"


def world_from_mazes(mazes, start, end=None):
    """Wrap prepared Maze objects in a World with the agent at ``start``."""
    from mazeworld.world import Agent, World

    by_id = {m.id: m for m in mazes}
    return World(
        mazes=by_id,
        active_maze_id=start.maze_id,
        agent=Agent(position=start),
        start=start,
        end=end or start,
        maze_scores={mid: 0 for mid in by_id},
    )
