import pytest

from mazeworld.config import GameSettings, clamp_speed, load_settings


@pytest.mark.parametrize("speed,delay", [(1.0, 0.1), (0.5, 0.6), (0.1, 1.0), (5, 0.1), (0, 1.0), (-3, 1.0)])
def test_speed_is_clamped_and_maps_to_delay(speed, delay):
    s = GameSettings(move_speed=speed)
    assert 0.1 <= s.move_speed <= 1.0
    assert s.step_delay == delay


def test_clamp_speed_bounds():
    assert clamp_speed(0.05) == 0.1
    assert clamp_speed(0.7) == 0.7
    assert clamp_speed("2") == 1.0


def test_unknown_methods_rejected():
    with pytest.raises(ValueError):
        GameSettings(path_method="greedy")
    with pytest.raises(ValueError):
        GameSettings(default_method="wilson")


def test_defaults_without_env(monkeypatch):
    for key in ("MAZE_MOVE_SPEED", "MAZE_PATH_METHOD", "MAZE_AUTO_PATH", "MAZE_DEFAULT_METHOD"):
        monkeypatch.delenv(key, raising=False)
    s = load_settings()
    assert s == GameSettings()


def test_env_then_app_config_precedence(monkeypatch):
    monkeypatch.setenv("MAZE_MOVE_SPEED", "0.3")
    monkeypatch.setenv("MAZE_PATH_METHOD", "JPS")
    monkeypatch.setenv("MAZE_AUTO_PATH", "yes")
    s = load_settings()
    assert s.move_speed == 0.3 and s.path_method == "jps" and s.auto_path is True

    s = load_settings({"MAZE_PATH_METHOD": "bidir", "MAZE_AUTO_PATH": False, "MAZE_MOVE_SPEED": None})
    assert s.path_method == "bidir"
    assert s.auto_path is False
    assert s.move_speed == 0.3


def test_app_factory_copies_env_and_overrides(monkeypatch):
    from mazeworld import create_app

    monkeypatch.setenv("MAZE_DEFAULT_METHOD", "prim")
    app = create_app({"MAZE_PATH_METHOD": "dijkstra"})
    s = load_settings(app.config)
    assert s.default_method == "prim"
    assert s.path_method == "dijkstra"
