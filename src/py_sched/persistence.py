"""Scenario files and trace files.

Scenarios are stored as **JSON**.  A file holds one scenario object or
a list of them.  A scenario is given either in the column-wise table
format or as explicit per-program lists::

    {"name": "demo", "rows": [[201, 0], [0, 0]], "row_count": 2}
    {"name": "demo", "programs": [[201, 0], [0]]}

Traces are written as the rendered text table, one file per scenario
(``output00.out``, ``output01.out``, ...).

    - ``load_scenarios(path)`` / ``dump_scenarios(scenarios, path)``
    - ``dump_trace(rows, path)``

Anything malformed in a scenario file raises ``ScenarioError`` so the
caller can skip that file and carry on with the rest.
"""

import json
from collections.abc import Iterable
from pathlib import Path

from py_sched import trace
from py_sched.programs import ProgramTable, ScenarioError
from py_sched.scenarios import Scenario
from py_sched.trace import TraceRow


def output_name(index: int) -> str:
    """Return the trace file name for the ``index``-th scenario."""
    return f"output{index:02d}.out"


def scenario_from_dict(data: object, *, default_name: str) -> Scenario:
    """Build a scenario from its JSON representation.

    Args:
        data: A decoded JSON object.
        default_name: Name to use when the object has none.

    Raises:
        ScenarioError: If the object is not a valid scenario.

    """
    if not isinstance(data, dict):
        msg = f"Scenario must be a JSON object, got {type(data).__name__}"
        raise ScenarioError(msg)
    name = data.get("name", default_name)
    if not isinstance(name, str) or not name:
        msg = f"Scenario name must be a non-empty string, got {name!r}"
        raise ScenarioError(msg)
    description = data.get("description", "")

    has_rows = "rows" in data
    has_programs = "programs" in data
    if has_rows == has_programs:
        msg = f"Scenario {name!r} needs exactly one of 'rows' or 'programs'"
        raise ScenarioError(msg)

    if has_rows:
        rows = data["rows"]
        if not isinstance(rows, list):
            msg = f"Scenario {name!r}: 'rows' must be a list"
            raise ScenarioError(msg)
        programs = ProgramTable.from_rows(rows, data.get("row_count"))
    else:
        raw = data["programs"]
        if not isinstance(raw, list):
            msg = f"Scenario {name!r}: 'programs' must be a list"
            raise ScenarioError(msg)
        programs = ProgramTable(raw)
    return Scenario(name=name, programs=programs, description=str(description))


def load_scenarios(path: Path) -> list[Scenario]:
    """Load every scenario in a JSON file.

    Raises:
        ScenarioError: If the file cannot be read or holds an invalid
            scenario.

    """
    try:
        data = json.loads(path.read_text())
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        msg = f"Cannot read scenario file {path}: {e}"
        raise ScenarioError(msg) from e

    items = data if isinstance(data, list) else [data]
    if not items:
        msg = f"Scenario file {path} is empty"
        raise ScenarioError(msg)
    return [
        scenario_from_dict(item, default_name=path.stem if len(items) == 1 else f"{path.stem}-{i}")
        for i, item in enumerate(items)
    ]


def dump_scenarios(scenarios: Iterable[Scenario], path: Path) -> None:
    """Save scenarios to a JSON file (explicit program lists)."""
    data = [scenario.to_dict() for scenario in scenarios]
    path.write_text(json.dumps(data, indent=2))


def dump_trace(rows: Iterable[TraceRow], path: Path) -> None:
    """Write a rendered trace table to ``path``."""
    path.write_text(trace.render(rows))
