"""
project: Maze World
module: game_api.py
License: MIT

Game session and maze preview API routes.

Sessions live in an in-process registry keyed by world id. Every request
first fires the arrivals that fell due since the last call, so polling
``GET /api/games/<id>`` is enough to watch an auto route play out. Commands
answer with ``accepted`` plus a fresh snapshot; pass ``"instant": true`` to
fast-forward all pending steps before the snapshot is taken.
"""

import random
import threading
from collections import OrderedDict

from flask import Blueprint, current_app, jsonify, request

from ..config import load_settings
from ..game import AWAITING_TASK_ANSWER, MOVE_MODES, GameController
from ..logging_utils import get_logger
from ..maze import DFS, GEN_METHODS, MAX_MAZE_SIZE, PATH_METHODS, Maze, MazeGenerator, Position
from ..maze.grid import Grid
from ..maze.pathfinder import find_path
from ..maze.tiles import PATH
from ..world import World, WorldAssemblyError, assemble_world

bp_game = Blueprint("game", __name__)
log = get_logger("routes.game_api")

# Small in-process registry (world id -> controller). One lock serializes
# registry access and controller commands since Flask may serve threads.
_games: "OrderedDict[str, GameController]" = OrderedDict()
_games_lock = threading.Lock()
_GAMES_MAX = 64  # oldest session dropped beyond this


def _register(controller: GameController) -> str:
    gid = controller.world.id
    with _games_lock:
        _games[gid] = controller
        while len(_games) > _GAMES_MAX:
            dropped, _ = _games.popitem(last=False)
            log.info(event="game_evicted", game_id=dropped)
    return gid


def _new_controller(world: World) -> GameController:
    settings = load_settings(current_app.config)
    return GameController(world, settings=settings, rng=random.Random(world.seed))


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _not_found():
    return jsonify({"error": "game not found"}), 404


def _run_command(game_id: str, command):
    """Pump due steps, apply ``command(controller, body)`` and snapshot, all under the lock."""
    body = _body()
    with _games_lock:
        controller = _games.get(game_id)
        if controller is None:
            return _not_found()
        controller.pump()
        try:
            result = command(controller, body)
        except (TypeError, ValueError) as e:
            return jsonify({"error": str(e)}), 400
        if body.get("instant"):
            controller.drain()
        payload = dict(result)
        payload.update(controller.snapshot())
    return jsonify(payload)


@bp_game.route("/api/games", methods=["POST"])
def create_game():
    try:
        world = assemble_world(_body())
    except WorldAssemblyError as e:
        return jsonify({"error": str(e), "details": e.errors}), 400
    controller = _new_controller(world)
    gid = _register(controller)
    payload = {"game_id": gid}
    payload.update(controller.snapshot())
    return jsonify(payload), 201


@bp_game.route("/api/games/import", methods=["POST"])
def import_game():
    try:
        world = World.from_dict(_body())
    except WorldAssemblyError as e:
        return jsonify({"error": str(e), "details": e.errors}), 400
    controller = _new_controller(world)
    gid = _register(controller)
    payload = {"game_id": gid}
    payload.update(controller.snapshot())
    return jsonify(payload), 201


@bp_game.route("/api/games/<game_id>", methods=["GET"])
def game_state(game_id):
    with _games_lock:
        controller = _games.get(game_id)
        if controller is None:
            return _not_found()
        controller.pump()
        snap = controller.snapshot()
    return jsonify(snap)


@bp_game.route("/api/games/<game_id>/export", methods=["GET"])
def export_game(game_id):
    with _games_lock:
        controller = _games.get(game_id)
        if controller is None:
            return _not_found()
        data = controller.world.to_dict()
    return jsonify(data)


@bp_game.route("/api/games/<game_id>", methods=["DELETE"])
def delete_game(game_id):
    with _games_lock:
        if _games.pop(game_id, None) is None:
            return _not_found()
    return jsonify({"deleted": game_id})


def _move(controller: GameController, body: dict) -> dict:
    mode = body.get("mode")
    if mode is not None and mode not in MOVE_MODES:
        raise ValueError(f"mode must be one of {', '.join(MOVE_MODES)}")
    try:
        x, y = int(body["x"]), int(body["y"])
    except KeyError:
        raise ValueError("x and y are required")
    target = Position(controller.world.active_maze_id, x, y)
    return {"accepted": controller.request_move(target, mode)}


def _answer(controller: GameController, body: dict) -> dict:
    answer = body.get("answer")
    if answer is None:
        raise ValueError("answer is required")
    awaiting = controller.state == AWAITING_TASK_ANSWER
    correct = controller.submit_task_answer(str(answer))
    return {"accepted": awaiting, "correct": correct}


def _portal(controller: GameController, body: dict) -> dict:
    confirm = body.get("confirm")
    if not isinstance(confirm, bool):
        raise ValueError("confirm must be a boolean")
    return {"accepted": controller.confirm_portal() if confirm else controller.decline_portal()}


@bp_game.route("/api/games/<game_id>/move", methods=["POST"])
def move(game_id):
    return _run_command(game_id, _move)


@bp_game.route("/api/games/<game_id>/stop", methods=["POST"])
def stop(game_id):
    return _run_command(game_id, lambda c, b: {"accepted": c.stop_movement()})


@bp_game.route("/api/games/<game_id>/task", methods=["POST"])
def answer_task(game_id):
    return _run_command(game_id, _answer)


@bp_game.route("/api/games/<game_id>/task/cancel", methods=["POST"])
def cancel_task(game_id):
    return _run_command(game_id, lambda c, b: {"accepted": c.cancel_task()})


@bp_game.route("/api/games/<game_id>/portal", methods=["POST"])
def portal_decision(game_id):
    return _run_command(game_id, _portal)


@bp_game.route("/api/games/<game_id>/notification/dismiss", methods=["POST"])
def dismiss_notification(game_id):
    return _run_command(game_id, lambda c, b: {"accepted": c.dismiss_notification()})


@bp_game.route("/api/mazes/preview", methods=["POST"])
def preview_maze():
    """Generate a bare maze (no overlays) for the designer; optional route overlay."""
    data = _body()
    settings = load_settings(current_app.config)
    try:
        height = int(data.get("height", 15))
        width = int(data.get("width", 15))
        method = str(data.get("method") or settings.default_method or DFS)
        seed = data.get("seed")
        seed = None if seed is None else int(seed)
    except (TypeError, ValueError):
        return jsonify({"error": "height, width and seed must be integers"}), 400
    if method not in GEN_METHODS:
        return jsonify({"error": f"method must be one of {', '.join(GEN_METHODS)}"}), 400
    if not (1 <= height <= MAX_MAZE_SIZE and 1 <= width <= MAX_MAZE_SIZE):
        return jsonify({"error": f"height and width must be between 1 and {MAX_MAZE_SIZE}"}), 400
    route_method = data.get("route")
    if route_method is not None and route_method not in PATH_METHODS:
        return jsonify({"error": f"route must be one of {', '.join(PATH_METHODS)}"}), 400

    outputs = MazeGenerator(height, width, method, seed).run()
    payload = {
        "height": height,
        "width": width,
        "method": method,
        "seed": seed,
        "cells": outputs.grid.rows(),
        "metrics": outputs.metrics,
    }
    if route_method:
        payload["route"] = _preview_route(outputs.grid, outputs.sites, route_method)
    return jsonify(payload)


def _preview_route(grid: Grid, sites, method: str):
    maze = Maze("preview", height=grid.height, width=grid.width, generate=False)
    maze.grid = grid
    start, end = sites[0], sites[-1]
    if grid.get(*start) != PATH or grid.get(*end) != PATH:
        return None
    route = find_path(maze, maze.position(*start), maze.position(*end), method)
    return [[p.x, p.y] for p in route] if route else None


__all__ = ["bp_game"]
