"""Single-slot cooperative scheduler for step continuations.

At most one continuation is pending at a time. Scheduling a new one cancels
whatever was pending, so two arrival evaluations can never fire for
overlapping moves. Nothing runs on its own: the owner calls ``run_due(now)``
(HTTP polling, CLI loop, tests) or ``drain()`` to fire everything at once.

Catch-up: when a continuation schedules its successor while firing, the new
deadline is based on the fired deadline rather than the wall clock, so a late
``run_due`` replays every step that should have happened by ``now``.
"""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass
from typing import Callable, Optional

Continuation = Callable[[], None]


@dataclass
class _Pending:
    token: int
    deadline: float
    callback: Continuation


class StepScheduler:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._tokens = itertools.count(1)
        self._pending: Optional[_Pending] = None
        self._firing_deadline: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    @property
    def deadline(self) -> Optional[float]:
        return self._pending.deadline if self._pending else None

    @property
    def token(self) -> Optional[int]:
        return self._pending.token if self._pending else None

    def schedule(self, delay: float, callback: Continuation) -> int:
        base = self._firing_deadline if self._firing_deadline is not None else self.clock()
        token = next(self._tokens)
        self._pending = _Pending(token, base + max(0.0, delay), callback)
        return token

    def cancel(self, token: Optional[int] = None) -> bool:
        """Drop the pending continuation (only if it matches ``token`` when given)."""
        if self._pending is None:
            return False
        if token is not None and self._pending.token != token:
            return False
        self._pending = None
        return True

    def _fire(self) -> None:
        job = self._pending
        self._pending = None
        self._firing_deadline = job.deadline
        try:
            job.callback()
        finally:
            self._firing_deadline = None

    def run_due(self, now: Optional[float] = None) -> int:
        now = self.clock() if now is None else now
        fired = 0
        while self._pending is not None and self._pending.deadline <= now:
            self._fire()
            fired += 1
        return fired

    def drain(self, limit: int = 1_000_000) -> int:
        fired = 0
        while self._pending is not None:
            if fired >= limit:
                raise RuntimeError(f"scheduler did not settle after {limit} continuations")
            self._fire()
            fired += 1
        return fired


__all__ = ["StepScheduler"]
