"""Whole-game walkthroughs: assembly, movement, tasks, portals and the exit."""

import copy
import random

from mazeworld.config import GameSettings
from mazeworld.game import (
    AWAITING_PORTAL_DECISION,
    AWAITING_TASK_ANSWER,
    END_REACHED,
    GAME_OVER,
    IDLE,
    INSUFFICIENT_SCORE,
    GameController,
    StepScheduler,
)
from mazeworld.maze import Maze, Portal, Position, Task, find_path
from mazeworld.world import assemble_world
from tests.maze_test_utils import maze_from_rows, world_from_mazes


def _controller(world):
    return GameController(
        world,
        settings=GameSettings(move_speed=1.0),
        scheduler=StepScheduler(lambda: 0.0),
        rng=random.Random(5),
    )


def _solve(c):
    return c.submit_task_answer(c.active_task.puzzle.answer)


def test_task_maze_walk_to_exit_collects_every_reward():
    seed = 2024
    probe = Maze("A", maze_type="task", height=15, width=15, method="dfs", seed=seed)
    route = find_path(probe, probe.position(1, 1), probe.position(15, 15))
    assert route is not None
    picks = [route[len(route) // 3], route[2 * len(route) // 3]]
    rewards = (15, 25)

    world = assemble_world(
        {
            "mazes": [
                {
                    "id": "A",
                    "type": "task",
                    "height": 15,
                    "width": 15,
                    "method": "dfs",
                    "seed": seed,
                    "tasks": [
                        {"id": f"t{i}", "score": s, "position": p.to_dict()}
                        for i, (p, s) in enumerate(zip(picks, rewards))
                    ],
                }
            ],
            "start": {"maze_id": "A", "x": 1, "y": 1},
            "end": {"maze_id": "A", "x": 15, "y": 15},
        }
    )
    c = _controller(world)

    # two cells along the route is never a single step
    assert not c.request_move(route[2], "manual")
    assert c.request_move(route[1], "manual")
    c.drain()
    assert c.state == IDLE and c.agent_position == route[1]

    assert c.request_move(Position("A", 15, 15), "auto")
    solved = 0
    for _ in range(len(rewards) + 1):
        c.drain()
        if c.state != AWAITING_TASK_ANSWER:
            break
        assert c.agent_position in picks
        assert _solve(c)
        solved += 1

    assert solved == len(rewards)
    assert c.state == GAME_OVER
    assert c.notification == END_REACHED
    assert c.final_score == sum(rewards)
    assert world.maze_scores["A"] == sum(rewards)
    assert world.active_maze.tasks == []


def test_portal_opens_once_maze_score_reaches_threshold():
    t = maze_from_rows("T", [".....O", ".#.###"], maze_type="task")
    t.required_score = 30
    t.add_task(Task(Position("T", 2, 1), 10, id="small"))
    t.add_task(Task(Position("T", 2, 3), 20, id="big"))
    t.add_portal(Portal(Position("T", 1, 6), Position("B", 1, 1), id="t-to-b"))
    b = maze_from_rows("B", ["..."])
    world = world_from_mazes([t, b], Position("T", 1, 1))
    c = _controller(world)
    portal = Position("T", 1, 6)

    assert c.request_move(Position("T", 2, 3), "auto")
    c.drain()
    assert c.active_task.id == "big"
    assert _solve(c)
    assert world.maze_score("T") == 20

    assert c.request_move(portal, "auto")
    c.drain()
    assert c.notification == INSUFFICIENT_SCORE
    assert c.state == IDLE
    assert c.agent_position == portal
    assert world.active_maze_id == "T"

    assert c.request_move(Position("T", 2, 1), "auto")
    assert c.notification is None
    c.drain()
    assert c.active_task.id == "small"
    assert _solve(c)
    assert world.maze_score("T") == 30

    assert c.request_move(portal, "auto")
    c.drain()
    assert c.state == AWAITING_PORTAL_DECISION
    assert c.confirm_portal()
    assert world.active_maze_id == "B"
    assert c.agent_position == Position("B", 1, 1)
    assert world.agent.score == 30


def _step_off_and_back(c, maze_id):
    """Leave the portal cell for a carved neighbour, then return onto it."""
    here = c.agent_position
    maze = c.world.mazes[maze_id]
    neighbours = (Position(maze_id, here.x, here.y + 1), Position(maze_id, here.x + 1, here.y))
    side = next(p for p in neighbours if maze.cell_at(p) in ("P", "T"))
    assert c.request_move(side, "manual")
    c.drain()
    assert c.state == IDLE
    assert c.request_move(here, "manual")
    c.drain()


def _round_trip(two_maze_config, landing):
    cfg = copy.deepcopy(two_maze_config)
    cfg["mazes"][1]["score"] = 0
    cfg["mazes"][0]["portals"][0]["to"] = landing
    world = assemble_world(cfg)
    c = _controller(world)

    assert c.request_move(Position("A", 15, 15), "auto")
    c.drain()
    assert c.state == AWAITING_PORTAL_DECISION
    assert c.confirm_portal()
    assert world.active_maze_id == "B"
    assert c.agent_position == Position("B", 1, 1)

    _step_off_and_back(c, "B")
    assert c.state == AWAITING_PORTAL_DECISION
    assert c.active_portal.to_pos == world.mazes["A"].portals[0].from_pos
    assert c.confirm_portal()
    assert world.active_maze_id == "A"
    assert c.agent_position == Position("A", 15, 15)


def test_reverse_portal_leads_back_to_authored_entrance(two_maze_config):
    _round_trip(two_maze_config, {"maze_id": "B", "x": 1, "y": 1})


def test_reverse_portal_of_clamped_landing_leads_back(two_maze_config):
    _round_trip(two_maze_config, {"maze_id": "B", "x": 40, "y": 40})
