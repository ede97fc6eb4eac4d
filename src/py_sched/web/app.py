"""Flask application factory for the py-sched trace viewer.

The ``create_app`` function returns a Flask app with four endpoints:

- ``GET /`` — render the trace table of a built-in scenario
  (``?scenario=<name>``, default the first one).
- ``GET /api/scenarios`` — list built-in scenarios.
- ``GET /api/trace/<name>`` — return a built-in scenario's trace.
- ``POST /api/simulate`` — simulate a scenario posted as JSON, in the
  same shape as a scenario file, plus optional ``quantum_expiry`` and
  ``block_resume`` fields.

Traces are computed on demand; a simulation is deterministic, so the
same scenario always yields the same table.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import Flask, Response, jsonify, render_template, request

from py_sched import trace
from py_sched.persistence import scenario_from_dict
from py_sched.process.scheduler import QuantumExpiry
from py_sched.programs import ScenarioError
from py_sched.scenarios import BUILTIN_SCENARIOS, Scenario
from py_sched.simulation import BlockResume, Simulation

if TYPE_CHECKING:
    from collections.abc import Sequence

_HTTP_BAD_REQUEST = 400
_HTTP_NOT_FOUND = 404


def _trace_payload(scenario: Scenario, simulation: Simulation) -> dict[str, object]:
    """Build the JSON body describing one simulated scenario."""
    rows = simulation.trace
    return {
        "name": scenario.name,
        "header": trace.header(len(rows[0].slots)) if rows else "",
        "rows": [row.to_dict() for row in rows],
        "text": simulation.render(),
    }


def create_app(scenarios: Sequence[Scenario] = BUILTIN_SCENARIOS) -> Flask:
    """Create and configure the Flask application.

    Args:
        scenarios: The scenarios offered by name (defaults to the
            built-in ones).

    Returns:
        A configured Flask application ready to serve.

    """
    by_name = {scenario.name: scenario for scenario in scenarios}
    app = Flask(__name__)

    @app.route("/")
    def index() -> tuple[str, int] | str:  # pyright: ignore[reportUnusedFunction]
        """Render the trace table page."""
        name = request.args.get("scenario") or next(iter(by_name), "")
        scenario = by_name.get(name)
        if scenario is None:
            return f"Unknown scenario {name!r}", _HTTP_NOT_FOUND
        simulation = Simulation(scenario.programs)
        simulation.run()
        rows = simulation.trace
        return render_template(
            "index.html",
            scenarios=list(by_name.values()),
            scenario=scenario,
            columns=[f"proc{n}" for n in range(1, len(rows[0].slots) + 1)],
            rows=rows,
        )

    @app.route("/api/scenarios")
    def list_scenarios() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the available scenarios."""
        return jsonify([scenario.to_dict() for scenario in by_name.values()])

    @app.route("/api/trace/<name>")
    def scenario_trace(name: str) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Return the trace of a named scenario."""
        scenario = by_name.get(name)
        if scenario is None:
            return jsonify({"error": f"Unknown scenario {name!r}"}), _HTTP_NOT_FOUND
        simulation = Simulation(scenario.programs)
        simulation.run()
        return jsonify(_trace_payload(scenario, simulation))

    @app.route("/api/simulate", methods=["POST"])
    def simulate() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Simulate a posted scenario and return its trace.

        Expects a JSON body shaped like a scenario file entry.

        Returns:
            JSON with ``name``, ``header``, ``rows``, and ``text``.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "Expected a JSON object"}), _HTTP_BAD_REQUEST
        try:
            expiry = QuantumExpiry(data.pop("quantum_expiry", QuantumExpiry.PREEMPT.value))
            resume = BlockResume(data.pop("block_resume", BlockResume.RETRY.value))
        except ValueError as e:
            return jsonify({"error": str(e)}), _HTTP_BAD_REQUEST
        try:
            scenario = scenario_from_dict(data, default_name="posted")
            simulation = Simulation(scenario.programs, expiry=expiry, resume=resume)
        except ScenarioError as e:
            return jsonify({"error": str(e)}), _HTTP_BAD_REQUEST
        simulation.run()
        return jsonify(_trace_payload(scenario, simulation))

    return app


def main() -> None:
    """Run the web UI development server.

    This is the ``py-sched-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
