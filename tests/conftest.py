import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from mazeworld import create_app  # noqa: E402
from mazeworld.routes.game_api import _games, _games_lock  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    app = create_app({"TESTING": True, "MAZE_MOVE_SPEED": 1.0, "MAZE_PATH_METHOD": "astar"})
    return app


@pytest.fixture()
def client(test_app):
    with _games_lock:
        _games.clear()
    return test_app.test_client()


@pytest.fixture()
def two_maze_config():
    """A normal start maze linked to a task maze that holds the exit."""
    return {
        "seed": 99,
        "metadata": {"name": "two rooms", "author": "tests"},
        "mazes": [
            {
                "id": "A",
                "type": "normal",
                "height": 15,
                "width": 15,
                "method": "dfs",
                "seed": 11,
                "portals": [
                    {"id": "a-to-b", "from": {"maze_id": "A", "x": 15, "y": 15}, "to": {"maze_id": "B", "x": 1, "y": 1}}
                ],
            },
            {
                "id": "B",
                "type": "task",
                "height": 15,
                "width": 15,
                "method": "prim",
                "score": 10,
                "seed": 12,
                "tasks": [{"id": "t1", "score": 10, "position": {"maze_id": "B", "x": 1, "y": 3}}],
            },
        ],
        "start": {"maze_id": "A", "x": 1, "y": 1},
        "end": {"maze_id": "B", "x": 15, "y": 15},
    }
