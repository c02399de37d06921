"""Structured event logging for the game core.

Each record is one line: key=value pairs, or a compact JSON object when JSON
output is on. Every line carries ``level``, ``ts`` and ``logger``; fields set
to None are left out. Errors go to stderr, everything else to stdout.

Usage:
    from mazeworld.logging_utils import get_logger
    log = get_logger("maze.generator")
    log.info(event="maze_generated", maze_id="A", method="dfs")

Output settings start from ``MAZE_LOG_LEVEL`` (debug|info|warn|error) and
``MAZE_LOG_JSON``; ``configure()`` changes them at runtime for every logger.
"""

from __future__ import annotations

import json
import os
import sys
import time
from dataclasses import dataclass
from typing import Optional

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}
ROOT_NAME = "mazeworld"

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class LogSettings:
    threshold: int = LEVELS["info"]
    json_lines: bool = False

    @classmethod
    def from_env(cls) -> "LogSettings":
        return cls(
            threshold=LEVELS.get(os.getenv("MAZE_LOG_LEVEL", "info").lower(), LEVELS["info"]),
            json_lines=os.getenv("MAZE_LOG_JSON", "0").lower() in _TRUTHY,
        )


settings = LogSettings.from_env()


def configure(level: Optional[str] = None, json_lines: Optional[bool] = None) -> LogSettings:
    """Adjust output for all loggers. Unknown level names leave the threshold as is."""
    if level is not None:
        settings.threshold = LEVELS.get(level.lower(), settings.threshold)
    if json_lines is not None:
        settings.json_lines = bool(json_lines)
    return settings


def _format(fields: dict) -> str:
    if settings.json_lines:
        return json.dumps(fields, separators=(",", ":"), default=str)
    parts = []
    for k, v in fields.items():
        if isinstance(v, (int, float)):
            parts.append(f"{k}={v}")
        else:
            parts.append(f"{k}={str(v).replace(' ', '_')}")
    return " ".join(parts)


class EventLogger:
    def __init__(self, name: str):
        self.name = name

    def enabled(self, level: str) -> bool:
        return LEVELS[level] >= settings.threshold

    def _emit(self, level: str, fields: dict):
        if not self.enabled(level):
            return
        record = {"level": level, "ts": int(time.time()), "logger": self.name}
        record.update((k, v) for k, v in fields.items() if v is not None and k not in record)
        print(_format(record), file=sys.stderr if level == "error" else sys.stdout)

    def debug(self, **fields):
        self._emit("debug", fields)

    def info(self, **fields):
        self._emit("info", fields)

    def warn(self, **fields):
        self._emit("warn", fields)

    def error(self, **fields):
        self._emit("error", fields)


_LOGGERS = {}


def get_logger(name: Optional[str] = None) -> EventLogger:
    """Named child of the ``mazeworld`` logger, created once per name."""
    full = f"{ROOT_NAME}.{name}" if name else ROOT_NAME
    if full not in _LOGGERS:
        _LOGGERS[full] = EventLogger(full)
    return _LOGGERS[full]


__all__ = ["get_logger", "configure", "settings", "LogSettings", "EventLogger", "LEVELS"]
