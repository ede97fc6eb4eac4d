"""Command-line driver — simulate scenarios and write their traces.

The driver runs each scenario once, for the full horizon, and writes
its trace to ``outputNN.out`` (``NN`` counts scenarios from 00 in the
order given).  With no scenario files it runs the built-in scenarios::

    py-sched                          # all built-ins, into the current dir
    py-sched demo.json -o traces/     # scenarios from a file
    py-sched --builtin fork-flood --stdout --log-level info

A scenario that cannot be loaded or set up is reported on stderr and
skipped; the others still run.  The exit status is 1 if any scenario
was skipped, else 0.

The helpers (``build_parser``, ``collect_scenarios``, ``run_scenario``)
are pure and testable; ``main`` is the I/O entry point.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from py_sched.logging import Logger, LogLevel
from py_sched.persistence import dump_trace, load_scenarios, output_name
from py_sched.process.scheduler import QuantumExpiry
from py_sched.programs import ScenarioError
from py_sched.scenarios import BUILTIN_SCENARIOS, Scenario, builtin
from py_sched.simulation import BlockResume, Simulation

if TYPE_CHECKING:
    from collections.abc import Sequence

_LOG_LEVELS = {level.name.lower(): level for level in LogLevel}


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``py-sched``."""
    parser = argparse.ArgumentParser(
        prog="py-sched",
        description="Simulate process scheduling scenarios and write per-tick traces.",
    )
    parser.add_argument("files", nargs="*", type=Path, help="JSON scenario files")
    parser.add_argument(
        "-b",
        "--builtin",
        action="append",
        default=[],
        metavar="NAME",
        help="run a built-in scenario (repeatable)",
    )
    parser.add_argument("--list", action="store_true", help="list built-in scenarios and exit")
    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=Path(),
        help="directory for outputNN.out files (default: current directory)",
    )
    target.add_argument("--stdout", action="store_true", help="print traces instead of writing files")
    parser.add_argument(
        "--quantum-expiry",
        choices=[e.value for e in QuantumExpiry],
        default=QuantumExpiry.PREEMPT.value,
        help="what an exhausted quantum does (default: preempt)",
    )
    parser.add_argument(
        "--block-resume",
        choices=[r.value for r in BlockResume],
        default=BlockResume.RETRY.value,
        help="where a woken process continues (default: retry the blocking instruction)",
    )
    parser.add_argument(
        "--log-level",
        choices=list(_LOG_LEVELS),
        default=None,
        help="echo simulation events at or above this level to stderr",
    )
    return parser


def collect_scenarios(files: Sequence[Path], names: Sequence[str]) -> tuple[list[Scenario], list[str]]:
    """Gather the scenarios to run.

    Returns:
        The scenarios in run order, and an error message for each file
        or name that could not be loaded.

    """
    if not files and not names:
        return list(BUILTIN_SCENARIOS), []

    scenarios: list[Scenario] = []
    errors: list[str] = []
    for path in files:
        try:
            scenarios.extend(load_scenarios(path))
        except ScenarioError as e:
            errors.append(str(e))
    for name in names:
        try:
            scenarios.append(builtin(name))
        except KeyError as e:
            errors.append(str(e.args[0]))
    return scenarios, errors


def run_scenario(
    scenario: Scenario,
    *,
    expiry: QuantumExpiry = QuantumExpiry.PREEMPT,
    resume: BlockResume = BlockResume.RETRY,
    logger: Logger | None = None,
) -> Simulation:
    """Simulate one scenario for the full horizon.

    Raises:
        ScenarioError: If the scenario cannot be set up.

    """
    simulation = Simulation(scenario.programs, expiry=expiry, resume=resume, logger=logger)
    simulation.run()
    return simulation


def main(argv: Sequence[str] | None = None) -> int:
    """Run the driver.  This is the ``py-sched`` console entry point."""
    args = build_parser().parse_args(argv)

    if args.list:
        for scenario in BUILTIN_SCENARIOS:
            print(f"{scenario.name:<16} {scenario.description}")  # noqa: T201
        return 0

    scenarios, errors = collect_scenarios(args.files, args.builtin)
    for error in errors:
        print(f"py-sched: {error}", file=sys.stderr)  # noqa: T201

    if not args.stdout:
        args.output_dir.mkdir(parents=True, exist_ok=True)

    expiry = QuantumExpiry(args.quantum_expiry)
    resume = BlockResume(args.block_resume)
    failed = bool(errors)
    for index, scenario in enumerate(scenarios):
        logger = Logger()
        try:
            simulation = run_scenario(scenario, expiry=expiry, resume=resume, logger=logger)
        except ScenarioError as e:
            print(f"py-sched: scenario {scenario.name!r} skipped: {e}", file=sys.stderr)  # noqa: T201
            failed = True
            continue

        if args.log_level is not None:
            for entry in logger.filter(min_level=_LOG_LEVELS[args.log_level]):
                print(f"{scenario.name}: {entry}", file=sys.stderr)  # noqa: T201

        if args.stdout:
            print(f"== {scenario.name}")  # noqa: T201
            print(simulation.render(), end="")  # noqa: T201
        else:
            path = args.output_dir / output_name(index)
            dump_trace(simulation.trace, path)
            print(f"{scenario.name} -> {path}")  # noqa: T201

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
