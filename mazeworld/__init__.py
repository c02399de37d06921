"""
project: Maze World
module: __init__.py
License: MIT

Flask application factory.

Wires the game blueprint onto a Flask app. Configuration comes from
environment variables (optionally via a local .env) with development
defaults; gameplay knobs are resolved per request by ``config.load_settings``
so tests can override them through ``app.config``. A local `instance/`
directory holds runtime files such as the server log.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify

__version__ = "0.1.0"

# Load .env if present so SECRET_KEY, MAZE_* and friends can be supplied
# without exporting shell variables during development.
load_dotenv()


def create_app(config: dict | None = None) -> Flask:
    """Build a configured Flask app. ``config`` entries override env values."""
    app = Flask(__name__, instance_relative_config=True)

    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        # read-only checkouts still serve requests; only the file log needs it
        pass

    app.config.update(
        SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
    )
    for key in ("MAZE_MOVE_SPEED", "MAZE_PATH_METHOD", "MAZE_AUTO_PATH", "MAZE_DEFAULT_METHOD"):
        if os.getenv(key) is not None:
            app.config[key] = os.getenv(key)
    if config:
        app.config.update(config)

    from .routes.game_api import bp_game

    app.register_blueprint(bp_game)

    @app.errorhandler(500)
    def internal_error(e):
        error_id = uuid.uuid4().hex[:8]
        logging.exception("Unhandled exception (id=%s)", error_id)
        return jsonify({"error": "internal error", "error_id": error_id}), 500

    return app


__all__ = ["create_app", "__version__"]
