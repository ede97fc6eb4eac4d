"""Built-in scenarios.

A scenario is a named program table.  These are small, hand-checkable
workloads that exercise one mechanism each; the driver runs all of
them when no scenario files are given.

Every scenario starts the same way: one process of program 0.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from py_sched.programs import ProgramTable


@dataclass(frozen=True)
class Scenario:
    """A named program table ready to simulate."""

    name: str
    programs: ProgramTable
    description: str = field(default="", compare=False)

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-friendly dict (explicit program lists)."""
        return {
            "name": self.name,
            "description": self.description,
            "programs": self.programs.to_lists(),
        }


BUILTIN_SCENARIOS: tuple[Scenario, ...] = (
    Scenario(
        name="spawn-and-halt",
        description="Program 0 spawns program 1 and halts; program 1 halts at once.",
        programs=ProgramTable([[201, 0], [0]]),
    ),
    Scenario(
        name="block-and-wake",
        description="A single process that waits three ticks on I/O.",
        programs=ProgramTable([[-3, 0]]),
    ),
    Scenario(
        name="round-robin",
        description="Three CPU-bound programs sharing the CPU in quantum-sized turns.",
        programs=ProgramTable(
            [
                [202, 203, 1, 1, 1, 1, 0],
                [],
                [1, 1, 1, 1, 1, 1, 1, 1, 0],
                [1, 1, 1, 1, 1, 0],
            ]
        ),
    ),
    Scenario(
        name="loop-with-io",
        description="A worker that alternates computing with waiting on I/O.",
        programs=ProgramTable([[201, 1, 1, 0], [1, -4, 1, 1, 103, 0]]),
    ),
    Scenario(
        name="fork-flood",
        description="Every process keeps spawning; the table caps at 20 live processes.",
        programs=ProgramTable([[201, 101], [201, 101]]),
    ),
    Scenario(
        name="column-table",
        description="The rectangular column-wise input format with a declared row count.",
        programs=ProgramTable.from_rows(
            [
                [201, 1, -2, 0, 0],
                [202, -1, 1, 0, 0],
                [0, 1, 1, 0, 0],
                [0, 0, 0, 0, 0],
            ],
            row_count=4,
        ),
    ),
)


def builtin(name: str) -> Scenario:
    """Return the built-in scenario called ``name``.

    Raises:
        KeyError: If no built-in scenario has that name.

    """
    for scenario in BUILTIN_SCENARIOS:
        if scenario.name == name:
            return scenario
    msg = f"No built-in scenario named {name!r}"
    raise KeyError(msg)
