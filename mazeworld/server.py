"""
project: Maze World
module: server.py
License: MIT

Server bootstrap: logging setup and the development server entry point.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from flask import Flask

from . import create_app
from .logging_utils import get_logger

log = get_logger("server")


def start_server(host="0.0.0.0", port=5000, debug: bool = False, app: Flask | None = None):  # pragma: no cover
    """Configure logging and run the Flask development server until Ctrl+C."""
    app = app or create_app()
    configure_logging(app)
    log.info(event="server_start", host=host, port=port, debug=debug)
    try:
        app.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)


def configure_logging(app: Flask) -> str:
    """Send stdlib logging to the console and a rotating file in instance/.

    The file path is instance/mazeworld.log with a few backups retained.
    Returns the log file path.
    """
    log_dir = app.instance_path
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        pass
    log_path = os.path.join(log_dir, "mazeworld.log")

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(fmt)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(fmt)

    # Avoid duplicate handlers if reconfigured
    for h in list(root.handlers):
        root.removeHandler(h)

    root.addHandler(file_handler)
    root.addHandler(console)
    return log_path


__all__ = ["start_server", "configure_logging"]
