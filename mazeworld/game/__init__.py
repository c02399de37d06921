from .controller import (  # noqa: F401
    AUTO,
    AWAITING_PORTAL_DECISION,
    AWAITING_TASK_ANSWER,
    END_REACHED,
    GAME_OVER,
    IDLE,
    INSUFFICIENT_SCORE,
    MANUAL,
    MOVE_MODES,
    PATH_NOT_FOUND,
    STATES,
    STEPPING_AUTO,
    STEPPING_MANUAL,
    GameController,
)
from .scheduler import StepScheduler  # noqa: F401

__all__ = [
    "GameController",
    "StepScheduler",
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
