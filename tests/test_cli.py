import importlib
import sys

import pytest

from mazeworld import __version__


@pytest.fixture()
def run_module():
    if "run" in sys.modules:
        del sys.modules["run"]
    return importlib.import_module("run")


@pytest.fixture()
def fake_server(monkeypatch):
    calls = {}

    def fake_start_server(host, port, debug):
        calls.update(host=host, port=port, debug=debug)

    import mazeworld.server as server_mod

    monkeypatch.setattr(server_mod, "start_server", fake_start_server)
    return calls


def test_version_flag_outputs_version(run_module, capsys):
    with pytest.raises(SystemExit) as exc:
        run_module.parse_args(["--version"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert __version__ in out
    assert "Maze World" in out


def test_default_command_is_server(run_module):
    assert run_module.parse_args([]).command == "server"


def test_server_main_reads_env(monkeypatch, run_module, fake_server):
    monkeypatch.setenv("PORT", "5555")
    monkeypatch.setenv("HOST", "127.0.0.1")
    assert run_module.main(["server"]) == 0
    assert fake_server == {"host": "127.0.0.1", "port": 5555, "debug": False}


def test_server_flags_beat_env(monkeypatch, run_module, fake_server):
    monkeypatch.setenv("PORT", "5555")
    run_module.main(["server", "--port", "6100", "--debug"])
    assert fake_server["port"] == 6100
    assert fake_server["debug"] is True


def test_env_file_argument(monkeypatch, tmp_path, run_module, fake_server):
    # recorded so the value loaded from the file is undone afterwards
    monkeypatch.setenv("PORT", "unset")
    monkeypatch.delenv("PORT")
    env_file = tmp_path / ".env"
    env_file.write_text("PORT=6001\n")
    run_module.main(["--env-file", str(env_file), "server"])
    assert fake_server["port"] == 6001


def test_generate_prints_maze_and_route(run_module, capsys):
    code = run_module.main(["generate", "--height", "7", "--width", "9", "--seed", "3", "--route", "astar", "--metrics"])
    assert code == 0
    # structured log lines share stdout with the drawing
    out = [line for line in capsys.readouterr().out.splitlines() if not line.startswith(("level=", "{"))]
    grid = out[:9]
    assert all(len(line) == 11 for line in grid)
    assert grid[0] == "#" * 11
    assert grid[1][1] == "." and grid[7][9] == "."
    assert any(line.startswith("route: astar") for line in out)
    assert any("sites" in line for line in out)


def test_generate_rejects_bad_size(run_module, capsys):
    assert run_module.main(["generate", "--height", "0"]) == 1
    assert "[ERROR]" in capsys.readouterr().out


def test_render_rows_marks_route(run_module):
    rows = ["WWWW", "WPPW", "WWWW"]
    assert run_module.render_rows(rows, [(1, 1), (1, 2)])[1] == "#..#"
    assert run_module.render_rows(rows)[1] == "#  #"
