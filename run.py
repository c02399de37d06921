"""Maze World CLI entry point.

Provides subcommands for running the HTTP game server and for printing a
generated maze (optionally with a solved route) to the terminal. Accepts
configuration via flags and environment variables, with optional .env
loading.

Run `python run.py --help` for details.
"""

import argparse
import os
import signal
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()
# Disable colors if output is not a real terminal (e.g., during pytest capture)
_COLOR_ENABLED = sys.stdout.isatty()

GLYPHS = {"W": "#", "P": " ", "T": "?", "O": "@", "E": "X"}
ROUTE_GLYPH = "."


def parse_args(argv: list[str]) -> argparse.Namespace:
    from mazeworld import __version__
    from mazeworld.maze import GEN_METHODS, PATH_METHODS

    description = """
    Maze World

    Run the HTTP game server or print a generated maze. Configuration can be
    provided via CLI flags or environment variables. If both are present, CLI
    flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                 Bind address for the web server (default: 0.0.0.0)
          PORT                 Port for the web server (default: 5000)
          MAZE_MOVE_SPEED      Step speed 0.1-1.0 (delay = 1.1 - speed seconds)
          MAZE_PATH_METHOD     astar | bidir | jps | dijkstra
          MAZE_DEFAULT_METHOD  dfs | prim | kruskal
          MAZE_LOG_LEVEL       debug | info | warn | error

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Print a 21x41 Prim maze with a bidirectional A* route overlaid
          python run.py generate --height 21 --width 41 --method prim --seed 7 --route bidir
        """
    )

    parser = argparse.ArgumentParser(
        prog="mazeworld",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Maze World {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    server_parser = subparsers.add_parser(
        "server",
        help="Run the HTTP game server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask development server with the game API",
    )
    server_parser.add_argument("--host", default=None, help="Host interface to bind (default: env HOST or 0.0.0.0)")
    server_parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: env PORT or 5000)")
    server_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    server_parser.set_defaults(command="server")

    gen_parser = subparsers.add_parser(
        "generate",
        help="Print a generated maze as text",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Generate one maze and print it ('#' wall, '.' route).",
    )
    gen_parser.add_argument("--height", type=int, default=15)
    gen_parser.add_argument("--width", type=int, default=15)
    gen_parser.add_argument("--method", choices=GEN_METHODS, default=None, help="default: env MAZE_DEFAULT_METHOD or dfs")
    gen_parser.add_argument("--seed", type=int, default=None)
    gen_parser.add_argument(
        "--route",
        choices=PATH_METHODS,
        default=None,
        help="Overlay a route from (1,1) to the far corner site",
    )
    gen_parser.add_argument("--metrics", action="store_true", help="Print generation metrics")
    gen_parser.set_defaults(command="generate")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]

    return parser.parse_args(argv)


def render_rows(rows: list[str], route=None) -> list[str]:
    marks = set(route or [])
    out = []
    for x, row in enumerate(rows):
        line = []
        for y, ch in enumerate(row):
            glyph = ROUTE_GLYPH if (x, y) in marks and ch != "W" else GLYPHS.get(ch, "#")
            if _COLOR_ENABLED and glyph == ROUTE_GLYPH:
                glyph = f"{Fore.GREEN}{glyph}{Style.RESET_ALL}"
            line.append(glyph)
        out.append("".join(line))
    return out


def cmd_generate(args: argparse.Namespace) -> int:
    from mazeworld.config import load_settings
    from mazeworld.maze import Maze, find_path

    method = args.method or load_settings().default_method
    try:
        maze = Maze("cli", height=args.height, width=args.width, method=method, seed=args.seed)
    except ValueError as e:
        print(f"[ERROR] {e}")
        return 1
    route = None
    if args.route:
        far = (args.height if args.height % 2 else args.height - 1, args.width if args.width % 2 else args.width - 1)
        path = find_path(maze, maze.position(1, 1), maze.position(*far), args.route)
        if path is None:
            print(f"[WARN] no route between (1,1) and {far}")
        else:
            route = [(p.x, p.y) for p in path]
    print("\n".join(render_rows(maze.grid.rows(), route)))
    if route:
        print(f"route: {args.route}, {len(route) - 1} steps")
    if args.metrics:
        for key, val in maze.metrics.items():
            print(f"  {key:18} {val}")
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()
    if mode == "generate":
        return cmd_generate(args)

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    from mazeworld.logging_utils import get_logger
    from mazeworld.server import start_server

    title = f"{Fore.CYAN}{Style.BRIGHT}Maze World Server{Style.RESET_ALL}" if _COLOR_ENABLED else "Maze World Server"

    def label(text: str) -> str:
        return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text

    def value(val: str | int) -> str:
        return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)

    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    lines = [
        divider,
        f"  {title}",
        divider,
        f"  {label('Host:'):12} {value(host)}",
        f"  {label('Port:'):12} {value(port)}",
        f"  {label('Route:'):12} {value(os.getenv('MAZE_PATH_METHOD', 'astar'))}",
        divider,
        "",
    ]
    print("\n".join(lines))
    get_logger("cli").info(event="startup", mode=mode, host=host, port=port)
    start_server(host=host, port=port, debug=getattr(args, "debug", False))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
