"""Movement / encounter state machine for one agent in a World.

States
    idle                      waiting for a command
    stepping_manual           one adjacent step in flight
    stepping_auto             following a queued route
    awaiting_task_answer      a puzzle is shown for the task under the agent
    awaiting_portal_decision  confirm or decline the portal under the agent
    game_over                 exit reached; terminal, every command is refused

Arrival order on each step: exit, task, portal, plain cell.

Notifications are flags beside the state (path_not_found, insufficient_score,
end_reached). They never block commands and are cleared by
``dismiss_notification`` or by the next accepted move.

Timing is owned by a StepScheduler: a step moves the agent immediately and
schedules its arrival evaluation ``settings.step_delay`` seconds later. Call
``pump()`` to fire due arrivals or ``drain()`` to fast-forward.
"""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional

from ..config import GameSettings
from ..logging_utils import get_logger
from ..maze import TASK_MAZE, WALL, Position, find_path
from ..puzzles import check_answer
from ..world import World
from .scheduler import StepScheduler

log = get_logger("game.controller")

IDLE = "idle"
STEPPING_MANUAL = "stepping_manual"
STEPPING_AUTO = "stepping_auto"
AWAITING_TASK_ANSWER = "awaiting_task_answer"
AWAITING_PORTAL_DECISION = "awaiting_portal_decision"
GAME_OVER = "game_over"
STATES = (IDLE, STEPPING_MANUAL, STEPPING_AUTO, AWAITING_TASK_ANSWER, AWAITING_PORTAL_DECISION, GAME_OVER)

PATH_NOT_FOUND = "path_not_found"
INSUFFICIENT_SCORE = "insufficient_score"
END_REACHED = "end_reached"

MANUAL = "manual"
AUTO = "auto"
MOVE_MODES = (MANUAL, AUTO)


class GameController:
    def __init__(
        self,
        world: World,
        settings: Optional[GameSettings] = None,
        scheduler: Optional[StepScheduler] = None,
        rng: Optional[random.Random] = None,
    ):
        self.world = world
        self.settings = settings or GameSettings()
        self.scheduler = scheduler or StepScheduler()
        self.rng = rng or random.Random()
        self.state = IDLE
        self.notification: Optional[str] = None
        self.pending_path: List[Position] = []
        self.last_valid_position: Position = world.agent.position
        self.final_score: Optional[int] = None
        self._task_id: Optional[str] = None
        self._portal_id: Optional[str] = None

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------
    @property
    def is_moving(self) -> bool:
        return self.state in (STEPPING_MANUAL, STEPPING_AUTO)

    @property
    def agent_position(self) -> Position:
        return self.world.agent.position

    @property
    def active_task(self):
        if self._task_id is None:
            return None
        return self.world.active_maze.find_task(self._task_id)

    @property
    def active_portal(self):
        if self._portal_id is None:
            return None
        return self.world.active_maze.find_portal(self._portal_id)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def request_move(self, target: Position, mode: Optional[str] = None) -> bool:
        """Start a manual step or an auto route toward ``target``.

        Returns False, leaving every piece of state untouched, when the
        controller is busy or the target is not a legal destination. An
        unreachable auto target also returns False but raises the
        path_not_found notification.
        """
        if mode is None:
            mode = AUTO if self.settings.auto_path else MANUAL
        if mode not in MOVE_MODES:
            raise ValueError(f"unknown move mode: {mode}")
        if self.state != IDLE:
            log.debug(event="move_rejected", reason="busy", state=self.state)
            return False
        maze = self.world.active_maze
        if not maze.contains(target):
            log.debug(event="move_rejected", reason="out_of_maze", target=str(target))
            return False
        here = self.agent_position
        if target == here:
            self.notification = None
            self._evaluate(here)
            return True
        if maze.cell_at(target) == WALL:
            log.debug(event="move_rejected", reason="wall", target=str(target))
            return False

        if mode == MANUAL:
            if not here.is_adjacent(target):
                log.debug(event="move_rejected", reason="not_adjacent", target=str(target))
                return False
            self.notification = None
            self.state = STEPPING_MANUAL
            self.pending_path = []
            self._step_to(target)
            return True

        route = find_path(maze, here, target, self.settings.path_method)
        if route is None:
            self.notification = PATH_NOT_FOUND
            log.info(event="path_not_found", maze_id=maze.id, start=str(here), target=str(target))
            return False
        self.notification = None
        self.state = STEPPING_AUTO
        self.pending_path = route[1:]
        log.debug(event="auto_route", maze_id=maze.id, steps=len(self.pending_path), method=self.settings.path_method)
        self._advance()
        return True

    def stop_movement(self) -> bool:
        """Halt stepping where the agent stands.

        The agent already occupies the cell of the in-flight step, so its
        pending arrival is replaced by one immediate evaluation: stopping on
        the exit still ends the game and stopping on a task still asks it.
        """
        if not self.is_moving:
            return False
        in_flight = self.scheduler.pending
        self.scheduler.cancel()
        self.pending_path = []
        log.debug(event="movement_stopped", at=str(self.agent_position))
        if in_flight:
            self._evaluate(self.agent_position)
        else:
            self.state = IDLE
        return True

    def submit_task_answer(self, answer: str) -> bool:
        """Resolve the pending task. Returns True only for a correct answer."""
        if self.state != AWAITING_TASK_ANSWER:
            return False
        maze = self.world.active_maze
        task = self.active_task
        if task is None or task.puzzle is None:
            self._rollback()
            return False
        if not check_answer(task.puzzle.answer, answer):
            log.info(event="task_failed", task_id=task.id, maze_id=maze.id)
            self._rollback()
            return False

        self.world.agent.score += task.score
        self.world.maze_scores[maze.id] = self.world.maze_score(maze.id) + task.score
        task.clear_question()
        maze.remove_task(task.id)
        self._task_id = None
        log.info(
            event="task_solved",
            task_id=task.id,
            maze_id=maze.id,
            reward=task.score,
            score=self.world.agent.score,
            maze_score=self.world.maze_scores[maze.id],
        )
        if self.pending_path:
            self.state = STEPPING_AUTO
            self._advance()
        else:
            self.state = IDLE
        return True

    def cancel_task(self) -> bool:
        if self.state != AWAITING_TASK_ANSWER:
            return False
        self._rollback()
        return True

    def confirm_portal(self) -> bool:
        if self.state != AWAITING_PORTAL_DECISION:
            return False
        portal = self.active_portal
        self._portal_id = None
        self.state = IDLE
        if portal is None:
            return False
        dest_maze = self.world.mazes.get(portal.to_pos.maze_id)
        if dest_maze is None:
            log.warn(event="portal_dangling", portal_id=portal.id, to=str(portal.to_pos))
            return False
        dest = dest_maze.clamp(portal.to_pos)
        self.world.active_maze_id = dest_maze.id
        self.world.agent.position = dest
        self.last_valid_position = dest
        log.info(event="portal_used", portal_id=portal.id, frm=str(portal.from_pos), to=str(dest))
        return True

    def decline_portal(self) -> bool:
        if self.state != AWAITING_PORTAL_DECISION:
            return False
        self._portal_id = None
        self.state = IDLE
        return True

    def dismiss_notification(self) -> bool:
        if self.state == GAME_OVER or self.notification is None:
            return False
        self.notification = None
        return True

    def pump(self, now: Optional[float] = None) -> int:
        """Fire every arrival that is due; returns how many fired."""
        return self.scheduler.run_due(now)

    def drain(self) -> int:
        return self.scheduler.drain()

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------
    def _step_to(self, target: Position) -> None:
        here = self.agent_position
        if self.world.active_maze.task_at(here) is None:
            self.last_valid_position = here
        self.world.agent.position = target
        self.scheduler.schedule(self.settings.step_delay, self._arrive)

    def _advance(self) -> None:
        if not self.pending_path:
            self.state = IDLE
            return
        self._step_to(self.pending_path.pop(0))

    def _arrive(self) -> None:
        if self.state not in (STEPPING_MANUAL, STEPPING_AUTO):
            return
        self._evaluate(self.agent_position)

    def _evaluate(self, pos: Position) -> None:
        maze = self.world.active_maze
        if maze.is_exit(pos):
            self.scheduler.cancel()
            self.pending_path = []
            self.final_score = self.world.agent.score
            self.notification = END_REACHED
            self.state = GAME_OVER
            log.info(event="game_over", world_id=self.world.id, final_score=self.final_score)
            return

        task = maze.task_at(pos)
        if task is not None:
            puzzle = task.generate_question(self.rng)
            self._task_id = task.id
            self.state = AWAITING_TASK_ANSWER
            log.info(event="task_triggered", task_id=task.id, category=puzzle.category, difficulty=puzzle.difficulty)
            return

        portal = maze.portal_at(pos)
        if portal is not None:
            self.pending_path = []
            if maze.type == TASK_MAZE and self.world.maze_score(maze.id) < maze.required_score:
                self.notification = INSUFFICIENT_SCORE
                self.state = IDLE
                log.info(
                    event="portal_blocked",
                    portal_id=portal.id,
                    maze_score=self.world.maze_score(maze.id),
                    required=maze.required_score,
                )
                return
            self._portal_id = portal.id
            self.state = AWAITING_PORTAL_DECISION
            return

        if self.state == STEPPING_AUTO and self.pending_path:
            self._advance()
        else:
            self.pending_path = []
            self.state = IDLE

    def _rollback(self) -> None:
        task = self.active_task
        if task is not None:
            task.clear_question()
        self._task_id = None
        self.scheduler.cancel()
        self.pending_path = []
        self.world.agent.position = self.last_valid_position
        self.state = IDLE
        log.debug(event="rollback", to=str(self.last_valid_position))

    # ------------------------------------------------------------------
    # Query surface
    # ------------------------------------------------------------------
    def snapshot(self) -> Dict[str, Any]:
        maze = self.world.active_maze
        task = self.active_task if self.state == AWAITING_TASK_ANSWER else None
        question = None
        if task is not None and task.puzzle is not None:
            question = {
                "task_id": task.id,
                "question": task.puzzle.question,
                "category": task.puzzle.category,
                "difficulty": task.puzzle.difficulty,
                "reward": task.score,
            }
        portal = self.active_portal if self.state == AWAITING_PORTAL_DECISION else None
        return {
            "world_id": self.world.id,
            "state": self.state,
            "notification": self.notification,
            "active_maze_id": maze.id,
            "maze_type": maze.type,
            "height": maze.height,
            "width": maze.width,
            "cells": maze.grid.rows(),
            "agent": self.world.agent.to_dict(),
            "score": self.world.agent.score,
            "maze_score": self.world.maze_score(maze.id),
            "required_score": maze.required_score,
            "pending_path": [p.to_dict() for p in self.pending_path],
            "question": question,
            "portal": portal.to_dict() if portal is not None else None,
            "final_score": self.final_score,
        }


__all__ = [
    "GameController",
    "STATES",
    "IDLE",
    "STEPPING_MANUAL",
    "STEPPING_AUTO",
    "AWAITING_TASK_ANSWER",
    "AWAITING_PORTAL_DECISION",
    "GAME_OVER",
    "PATH_NOT_FOUND",
    "INSUFFICIENT_SCORE",
    "END_REACHED",
    "MANUAL",
    "AUTO",
    "MOVE_MODES",
]
