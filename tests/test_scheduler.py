import pytest

from mazeworld.game import StepScheduler


class FakeClock:
    def __init__(self, t=0.0):
        self.t = t

    def __call__(self):
        return self.t


def test_fires_only_when_due():
    clock = FakeClock()
    s = StepScheduler(clock)
    fired = []
    s.schedule(0.5, lambda: fired.append("a"))
    assert s.pending and s.deadline == 0.5
    assert s.run_due(0.4) == 0
    assert s.run_due(0.5) == 1
    assert fired == ["a"]
    assert not s.pending


def test_new_schedule_replaces_pending():
    s = StepScheduler(FakeClock())
    fired = []
    first = s.schedule(1.0, lambda: fired.append("first"))
    second = s.schedule(1.0, lambda: fired.append("second"))
    assert first != second
    assert s.token == second
    s.run_due(5)
    assert fired == ["second"]


def test_cancel_with_stale_token_is_ignored():
    s = StepScheduler(FakeClock())
    fired = []
    old = s.schedule(1.0, lambda: fired.append("old"))
    s.schedule(1.0, lambda: fired.append("new"))
    assert s.cancel(old) is False
    assert s.pending
    assert s.cancel() is True
    assert s.cancel() is False
    assert s.run_due(10) == 0
    assert fired == []


def test_chained_steps_catch_up_from_fired_deadline():
    clock = FakeClock(100.0)
    s = StepScheduler(clock)
    fired = []

    def step():
        fired.append(len(fired))
        if len(fired) < 10:
            s.schedule(1.0, step)

    s.schedule(1.0, step)
    # wall clock has not moved, yet three deadlines (101, 102, 103) are due at 103.5
    assert s.run_due(103.5) == 3
    assert s.deadline == 104.0
    assert s.run_due(103.9) == 0


def test_drain_runs_chain_to_completion():
    s = StepScheduler(FakeClock())
    fired = []

    def step():
        fired.append(1)
        if len(fired) < 5:
            s.schedule(0.3, step)

    s.schedule(0.3, step)
    assert s.drain() == 5
    assert not s.pending


def test_drain_limit_guards_runaway_chain():
    s = StepScheduler(FakeClock())

    def forever():
        s.schedule(0.1, forever)

    s.schedule(0.1, forever)
    with pytest.raises(RuntimeError):
        s.drain(limit=50)


def test_negative_delay_is_due_immediately():
    s = StepScheduler(FakeClock(3.0))
    s.schedule(-1, lambda: None)
    assert s.deadline == 3.0
    assert s.run_due() == 1
