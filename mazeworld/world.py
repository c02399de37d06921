"""Multi-maze world: assembly from an authored config plus the persistence boundary.

Config shape (dict / parsed JSON):

    {
      "seed": 1234,                                  # optional world seed
      "metadata": {"name": "...", "author": "..."},  # optional, carried verbatim
      "mazes": [
        {"id": "A", "type": "normal", "height": 15, "width": 15, "method": "dfs",
         "score": 0, "seed": 7,
         "portals": [{"id": "p1", "from": {"maze_id": "A", "x": 3, "y": 3},
                                   "to":   {"maze_id": "B", "x": 1, "y": 1}}],
         "tasks":   [{"id": "t1", "score": 10, "position": {"maze_id": "A", "x": 5, "y": 5}}]}
      ],
      "start": {"maze_id": "A", "x": 1, "y": 1},
      "end":   {"maze_id": "B", "x": 15, "y": 15}
    }

``assemble_world`` validates the whole config before building anything and
raises ``WorldAssemblyError`` listing every problem; it never hands back a
half-built World. Portals are authored once; the reverse edge is added to the
destination maze unless an exact reverse is already declared.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .logging_utils import get_logger
from .maze import (
    DFS,
    GEN_METHODS,
    MAX_MAZE_SIZE,
    MAZE_TYPES,
    MIN_AUTHORED_SIZE,
    NORMAL,
    Maze,
    Portal,
    Position,
    Task,
    new_id,
)

log = get_logger("world")

DEFAULT_MARKER = "@"


class WorldAssemblyError(ValueError):
    """Raised when a world config (or exported world) cannot be built."""

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))


@dataclass
class Agent:
    position: Position
    score: int = 0
    marker: str = DEFAULT_MARKER

    def to_dict(self) -> Dict[str, Any]:
        return {"position": self.position.to_dict(), "score": self.score, "marker": self.marker}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Agent":
        return cls(
            position=Position.from_dict(data["position"]),
            score=int(data.get("score", 0)),
            marker=str(data.get("marker", DEFAULT_MARKER)),
        )


@dataclass
class World:
    mazes: Dict[str, Maze]
    active_maze_id: str
    agent: Agent
    start: Position
    end: Position
    maze_scores: Dict[str, int] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    seed: Optional[int] = None
    id: str = field(default_factory=new_id)
    timestamp: float = field(default_factory=time.time)

    @property
    def active_maze(self) -> Maze:
        return self.mazes[self.active_maze_id]

    def maze_score(self, maze_id: str) -> int:
        return self.maze_scores.get(maze_id, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "seed": self.seed,
            "metadata": dict(self.metadata),
            "mazes": [m.to_dict() for m in self.mazes.values()],
            "active_maze_id": self.active_maze_id,
            "agent": self.agent.to_dict(),
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "maze_scores": dict(self.maze_scores),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "World":
        """Rebuild an exported world (cells included, no puzzle content)."""
        try:
            mazes = {}
            for raw in data["mazes"]:
                maze = Maze.from_dict(raw)
                mazes[maze.id] = maze
            world = cls(
                mazes=mazes,
                active_maze_id=str(data["active_maze_id"]),
                agent=Agent.from_dict(data["agent"]),
                start=Position.from_dict(data["start"]),
                end=Position.from_dict(data["end"]),
                maze_scores={str(k): int(v) for k, v in (data.get("maze_scores") or {}).items()},
                metadata=dict(data.get("metadata") or {}),
                seed=data.get("seed"),
                id=str(data.get("id") or new_id()),
                timestamp=float(data.get("timestamp") or time.time()),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise WorldAssemblyError(f"malformed world export: {e}") from e
        missing = [mid for mid in (world.active_maze_id, world.agent.position.maze_id) if mid not in mazes]
        if missing:
            raise WorldAssemblyError([f"maze not found: {mid}" for mid in missing])
        return world


# ---------------------------------------------------------------------------
# Config parsing
# ---------------------------------------------------------------------------
@dataclass
class MazeConfig:
    id: str
    type: str = NORMAL
    height: int = MIN_AUTHORED_SIZE
    width: int = MIN_AUTHORED_SIZE
    method: str = DFS
    score: int = 0
    seed: Optional[int] = None
    portals: List[Portal] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)


@dataclass
class WorldConfig:
    mazes: List[MazeConfig]
    start: Position
    end: Position
    metadata: Dict[str, Any] = field(default_factory=dict)
    seed: Optional[int] = None


def _parse_maze(raw: Mapping[str, Any], index: int, errors: List[str]) -> Optional[MazeConfig]:
    if not isinstance(raw, Mapping):
        errors.append(f"mazes[{index}]: expected an object")
        return None
    maze_id = raw.get("id")
    if maze_id in (None, ""):
        errors.append(f"mazes[{index}]: missing id")
        return None
    maze_id = str(maze_id)
    try:
        cfg = MazeConfig(
            id=maze_id,
            type=str(raw.get("type", NORMAL)),
            height=int(raw.get("height", MIN_AUTHORED_SIZE)),
            width=int(raw.get("width", MIN_AUTHORED_SIZE)),
            method=str(raw.get("method", DFS)),
            score=int(raw.get("score", 0)),
            seed=None if raw.get("seed") is None else int(raw["seed"]),
        )
    except (TypeError, ValueError) as e:
        errors.append(f"maze {maze_id}: {e}")
        return None
    if cfg.type not in MAZE_TYPES:
        errors.append(f"maze {maze_id}: unknown type {cfg.type!r}")
    if cfg.method not in GEN_METHODS:
        errors.append(f"maze {maze_id}: unknown generation method {cfg.method!r}")
    if not (1 <= cfg.height <= MAX_MAZE_SIZE and 1 <= cfg.width <= MAX_MAZE_SIZE):
        errors.append(f"maze {maze_id}: dimensions must be between 1 and {MAX_MAZE_SIZE}, got {cfg.height}x{cfg.width}")
    for i, p in enumerate(raw.get("portals") or []):
        try:
            cfg.portals.append(Portal.from_dict(p))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            errors.append(f"maze {maze_id}: portals[{i}] malformed ({e})")
    for i, t in enumerate(raw.get("tasks") or []):
        try:
            cfg.tasks.append(Task.from_dict(t))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            errors.append(f"maze {maze_id}: tasks[{i}] malformed ({e})")
    return cfg


def parse_world_config(data: Mapping[str, Any]) -> WorldConfig:
    """Structural parse plus cross-reference validation. Raises WorldAssemblyError."""
    errors: List[str] = []
    if not isinstance(data, Mapping):
        raise WorldAssemblyError("world config must be an object")
    raw_mazes = data.get("mazes")
    if not isinstance(raw_mazes, list) or not raw_mazes:
        raise WorldAssemblyError("world config needs a non-empty 'mazes' list")

    mazes: List[MazeConfig] = []
    seen = set()
    for i, raw in enumerate(raw_mazes):
        cfg = _parse_maze(raw, i, errors)
        if cfg is None:
            continue
        if cfg.id in seen:
            errors.append(f"duplicate maze id: {cfg.id}")
            continue
        seen.add(cfg.id)
        mazes.append(cfg)
    by_id = {m.id: m for m in mazes}

    def _inside(pos: Position, cfg: MazeConfig) -> bool:
        return 1 <= pos.x <= cfg.height and 1 <= pos.y <= cfg.width

    endpoints: Dict[str, Optional[Position]] = {}
    for key in ("start", "end"):
        endpoints[key] = None
        raw = data.get(key)
        if raw is None:
            errors.append(f"missing {key} position")
            continue
        try:
            pos = Position.from_dict(raw)
        except (TypeError, ValueError, AttributeError) as e:
            errors.append(f"{key}: {e}")
            continue
        owner = by_id.get(pos.maze_id)
        if owner is None:
            errors.append(f"{key}: maze not found: {pos.maze_id}")
        elif not _inside(pos, owner):
            errors.append(f"{key}: {pos} is outside maze {owner.id} ({owner.height}x{owner.width})")
        endpoints[key] = pos

    portal_ids = set()
    for cfg in mazes:
        occupied: Dict[Position, str] = {}
        for p in cfg.portals:
            if p.from_pos in occupied:
                errors.append(f"maze {cfg.id}: portals {occupied[p.from_pos]} and {p.id} share the cell {p.from_pos}")
            occupied.setdefault(p.from_pos, p.id)
            if p.id in portal_ids:
                errors.append(f"maze {cfg.id}: duplicate portal id {p.id}")
            portal_ids.add(p.id)
            if p.from_pos.maze_id != cfg.id or not _inside(p.from_pos, cfg):
                errors.append(f"maze {cfg.id}: portal {p.id} starts outside its maze ({p.from_pos})")
            if p.to_pos.maze_id not in by_id:
                errors.append(f"maze {cfg.id}: portal {p.id} leads to unknown maze: maze not found: {p.to_pos.maze_id}")
        for t in cfg.tasks:
            if t.position.maze_id != cfg.id or not _inside(t.position, cfg):
                errors.append(f"maze {cfg.id}: task {t.id} is not inside its maze ({t.position})")

    if errors:
        raise WorldAssemblyError(errors)
    return WorldConfig(
        mazes=mazes,
        start=endpoints["start"],
        end=endpoints["end"],
        metadata=dict(data.get("metadata") or {}),
        seed=None if data.get("seed") is None else int(data["seed"]),
    )


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------
def _with_reverse_portals(mazes: List[MazeConfig]) -> Dict[str, List[Portal]]:
    """Per-maze portal lists including one synthesized reverse per authored edge."""
    dims = {m.id: (m.height, m.width) for m in mazes}
    portals: Dict[str, List[Portal]] = {m.id: list(m.portals) for m in mazes}
    for cfg in mazes:
        for p in cfg.portals:
            dest = p.to_pos.maze_id
            if any(q.is_reverse_of(p) for q in portals[dest]):
                continue
            back = p.reversed()
            h, w = dims[dest]
            if not (1 <= back.from_pos.x <= h and 1 <= back.from_pos.y <= w):
                # arrival is clamped to (1,1); the way back sits where the agent lands
                back.from_pos = Position(dest, 1, 1)
            taken = next((q for q in portals[dest] if q.from_pos == back.from_pos), None)
            if taken is not None:
                # one portal per cell; the first one stamped there keeps it
                log.warn(
                    event="reverse_portal_skipped",
                    maze_id=dest,
                    portal_id=p.id,
                    cell=str(back.from_pos),
                    kept=taken.id,
                )
                continue
            portals[dest].append(back)
            log.debug(event="reverse_portal_added", maze_id=dest, portal_id=back.id, to=str(back.to_pos))
    return portals


def assemble_world(data: Mapping[str, Any]) -> World:
    cfg = parse_world_config(data)
    world_rng = random.Random(cfg.seed)
    portals = _with_reverse_portals(cfg.mazes)

    mazes: Dict[str, Maze] = {}
    for mc in cfg.mazes:
        # draw for every maze so one maze's explicit seed does not shift the others
        drawn = world_rng.randrange(2**31)
        exit_cell = (cfg.end.x, cfg.end.y) if cfg.end.maze_id == mc.id else None
        mazes[mc.id] = Maze(
            mc.id,
            maze_type=mc.type,
            height=mc.height,
            width=mc.width,
            method=mc.method,
            required_score=mc.score,
            seed=mc.seed if mc.seed is not None else drawn,
            portals=portals[mc.id],
            tasks=list(mc.tasks),
            exit_cell=exit_cell,
        )

    world = World(
        mazes=mazes,
        active_maze_id=cfg.start.maze_id,
        agent=Agent(position=cfg.start),
        start=cfg.start,
        end=cfg.end,
        maze_scores={mid: 0 for mid in mazes},
        metadata=cfg.metadata,
        seed=cfg.seed,
    )
    log.info(
        event="world_assembled",
        world_id=world.id,
        mazes=len(mazes),
        portals=sum(len(m.portals) for m in mazes.values()),
        tasks=sum(len(m.tasks) for m in mazes.values()),
        start=str(world.start),
        end=str(world.end),
    )
    return world


__all__ = [
    "Agent",
    "World",
    "WorldAssemblyError",
    "MazeConfig",
    "WorldConfig",
    "parse_world_config",
    "assemble_world",
]
