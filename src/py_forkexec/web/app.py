"""Flask application factory for the simulator's HTTP API.

The ``create_app`` function takes a machine configuration and returns
a Flask app with three endpoints:

- ``GET /`` — a short HTML page describing the machine and the API.
- ``GET /api/config`` — the machine tables as JSON.
- ``POST /api/simulate`` — run a trace and return both logs as JSON.

Every simulate request gets a fresh ``Simulator``, so PIDs and memory
partitions never leak between requests.
"""

from __future__ import annotations

import argparse
import random
from pathlib import Path
from typing import TYPE_CHECKING, Any

from flask import Flask, Response, jsonify, render_template_string, request

from py_forkexec.cli import add_machine_arguments, load_config_from_args
from py_forkexec.output import format_status
from py_forkexec.simulator import Simulator
from py_forkexec.sources import DirectoryTraceSource, MappingTraceSource

if TYPE_CHECKING:
    from py_forkexec.config import MachineConfig
    from py_forkexec.sources import TraceSource

_HTTP_BAD_REQUEST = 400

_INDEX_TEMPLATE = """<!doctype html>
<html>
<head><title>py-forkexec</title></head>
<body>
<h1>py-forkexec</h1>
<p>Interrupt, fork, and exec simulator.</p>
<p>{{ vectors }} interrupt vectors, {{ programs|length }} external programs.</p>
<ul>
{% for name, size in programs.items() %}<li>{{ name }}: {{ size }} Mb</li>
{% endfor %}</ul>
<p>POST a JSON body <code>{"trace": [...]}</code> to <code>/api/simulate</code>.</p>
</body>
</html>
"""


def _string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def create_app(config: MachineConfig, trace_source: TraceSource | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: The machine every request simulates.
        trace_source: Where EXEC finds program traces when a request
            does not supply its own.

    Returns:
        A configured Flask application ready to serve.

    """
    default_source: TraceSource = trace_source if trace_source is not None else MappingTraceSource()
    app = Flask(__name__)

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the landing page."""
        return render_template_string(
            _INDEX_TEMPLATE,
            vectors=len(config.vectors),
            programs=config.programs,
        )

    @app.route("/api/config")
    def machine() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the machine tables."""
        return jsonify(
            {
                "vectors": list(config.vectors.addresses),
                "delays": list(config.delays),
                "programs": dict(config.programs),
                "partitions": list(config.partitions),
            }
        )

    @app.route("/api/simulate", methods=["POST"])
    def simulate() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Run a trace and return both logs.

        Expects JSON body: ``{"trace": [...], "seed": 1, "programs": {...}}``
        where ``seed`` and ``programs`` are optional.

        Returns:
            JSON with ``execution``, ``status``, ``final_time`` and
            ``errors`` fields.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not _string_list(data.get("trace")):
            return jsonify({"error": "Expected 'trace' as a list of strings"}), _HTTP_BAD_REQUEST

        programs = data.get("programs")
        source = default_source
        if programs is not None:
            if not isinstance(programs, dict) or not all(_string_list(v) for v in programs.values()):
                msg = "Expected 'programs' as an object of string lists"
                return jsonify({"error": msg}), _HTTP_BAD_REQUEST
            source = MappingTraceSource(programs)

        seed = data.get("seed")
        if seed is not None and not isinstance(seed, int):
            return jsonify({"error": "Expected 'seed' as an integer"}), _HTTP_BAD_REQUEST

        simulator = Simulator(config, trace_source=source, rng=random.Random(seed))  # noqa: S311
        result = simulator.run(data["trace"])
        return jsonify(
            {
                "execution": [str(r) for r in result.execution],
                "status": format_status(result.status),
                "final_time": result.final_time,
                "errors": [str(e) for e in result.errors],
            }
        )

    return app


def main() -> None:
    """Run the API development server.

    This is the ``py-forkexec-web`` console entry point.
    """
    parser = argparse.ArgumentParser(prog="py-forkexec-web")
    add_machine_arguments(parser)
    parser.add_argument(
        "--programs", type=Path, default=None, help="directory of <program>.txt traces"
    )
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args()

    source = DirectoryTraceSource(args.programs) if args.programs is not None else None
    app = create_app(load_config_from_args(args), source)
    app.run(debug=True, port=args.port)
