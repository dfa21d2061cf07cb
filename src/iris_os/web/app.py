"""Flask application factory for the IrisOS web terminal.

The ``create_app`` function boots a system, creates a shell, and
returns a Flask app with three endpoints:

- ``GET /`` — render the terminal HTML page with the welcome banner.
- ``POST /api/execute`` — execute a command and return JSON.
- ``GET /api/status`` — return running state, uptime and cwd.

One app serves one session: every request talks to the same shell and
file system.
"""

from __future__ import annotations

from flask import Flask, Response, jsonify, render_template, request

from iris_os.config import SystemConfig, load_config
from iris_os.repl import format_welcome
from iris_os.shell import Shell
from iris_os.system import System, SystemState

_HTTP_BAD_REQUEST = 400


def create_app(config: SystemConfig | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: System configuration (defaults when omitted).

    Returns:
        A configured Flask application ready to serve.

    """
    system = System(config)
    system.boot()
    shell = Shell(system=system)

    welcome = format_welcome(system.config, system.dmesg())

    app = Flask(__name__)

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the terminal HTML page."""
        return render_template(
            "index.html",
            welcome=welcome,
            hostname=system.config.hostname,
            username=system.config.username,
            cwd=shell.cwd,
        )

    @app.route("/api/execute", methods=["POST"])
    def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Execute a shell command and return JSON output.

        Expects JSON body: ``{"command": "..."}``

        Returns:
            JSON with ``output``, ``halted`` and ``cwd`` fields.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("command"), str):
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        if system.state is not SystemState.RUNNING:
            return jsonify({"output": "System halted.", "halted": True, "cwd": shell.cwd})

        result = shell.execute(data["command"])
        if result == Shell.EXIT_SENTINEL:
            return jsonify({"output": "System halted.", "halted": True, "cwd": shell.cwd})

        return jsonify({"output": result, "halted": False, "cwd": shell.cwd})

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return system status for polling.

        Returns:
            JSON with ``running``, ``uptime`` and ``cwd`` fields.

        """
        return jsonify(
            {
                "running": system.state is SystemState.RUNNING,
                "uptime": round(system.uptime, 1),
                "cwd": shell.cwd,
            }
        )

    return app


def main() -> None:
    """Run the web terminal development server.

    This is the ``iris-os-web`` console entry point.  Configuration
    comes from ``load_config`` (defaults plus the ``IRISOS_*`` flags).
    The server runs single-threaded so only one request touches the
    file system at a time.
    """
    app = create_app(load_config())
    app.run(debug=True, port=8080, threaded=False)
