"""Program table — the synthetic programs a scenario can run.

A scenario supplies up to five programs, each a short sequence of
integer instructions (see ``py_sched.interpreter`` for what the numbers
mean).  The classic input format is a rectangular table read
*column-wise*: column ``p`` is program ``p`` and row ``s`` is its
instruction ``s``::

    rows = [
        [201, 0, ...],   # step 0 of programs 0, 1, ...
        [0,   0, ...],   # step 1
    ]

A program ends at its first zero, which is kept as its final HALT
instruction, or after 20 instructions.  A program with nothing usable
becomes a single HALT.  Once built, the table is read-only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

NUM_PROGRAMS = 5
MAX_INSTRUCTIONS = 20
HALT = 0


class ScenarioError(ValueError):
    """Raise when a scenario's input cannot be turned into a program table."""


def _check_instruction(value: object, *, where: str) -> int:
    """Return ``value`` as an instruction, rejecting non-integers."""
    # bool is an int subclass; True as an instruction is a typo, not a NOOP.
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"Instruction at {where} must be an integer, got {value!r}"
        raise ScenarioError(msg)
    return value


def _terminate(instructions: Sequence[int]) -> tuple[int, ...]:
    """Cut a raw sequence at its first HALT (inclusive) or the length cap."""
    program: list[int] = []
    for instruction in instructions[:MAX_INSTRUCTIONS]:
        program.append(instruction)
        if instruction == HALT:
            break
    return tuple(program) if program else (HALT,)


class ProgramTable:
    """Read-only mapping from program id to instruction sequence."""

    def __init__(self, programs: Sequence[Sequence[int]]) -> None:
        """Build a table from explicit per-program instruction lists.

        Args:
            programs: One instruction list per program, in program-id
                order.  Missing programs (fewer than five) simply do not
                exist; spawning them is refused.

        Raises:
            ScenarioError: If there are no programs, too many programs,
                or an instruction is not an integer.

        """
        if not programs:
            msg = "A scenario needs at least one program"
            raise ScenarioError(msg)
        if len(programs) > NUM_PROGRAMS:
            msg = f"At most {NUM_PROGRAMS} programs are supported, got {len(programs)}"
            raise ScenarioError(msg)
        table: list[tuple[int, ...]] = []
        for program_id, raw in enumerate(programs):
            if not isinstance(raw, list | tuple):
                msg = f"Program {program_id} must be a list of instructions, got {raw!r}"
                raise ScenarioError(msg)
            checked = [
                _check_instruction(value, where=f"program {program_id} step {step}")
                for step, value in enumerate(raw)
            ]
            table.append(_terminate(checked))
        self._programs: tuple[tuple[int, ...], ...] = tuple(table)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]], row_count: int | None = None) -> ProgramTable:
        """Build a table from the column-wise rectangular input format.

        Args:
            rows: Instruction rows; column ``p`` of row ``s`` is step
                ``s`` of program ``p``.  Short rows read as zeros.
            row_count: How many rows the scenario declares.  Only that
                many rows are read.  Defaults to ``len(rows)``.

        Raises:
            ScenarioError: If the row count or table shape is invalid.

        """
        if row_count is None:
            row_count = len(rows)
        if isinstance(row_count, bool) or not isinstance(row_count, int) or row_count < 0:
            msg = f"Row count must be a non-negative integer, got {row_count!r}"
            raise ScenarioError(msg)
        if row_count > len(rows):
            msg = f"Declared {row_count} rows but only {len(rows)} were given"
            raise ScenarioError(msg)
        if row_count > MAX_INSTRUCTIONS:
            msg = f"At most {MAX_INSTRUCTIONS} rows are supported, got {row_count}"
            raise ScenarioError(msg)

        columns: list[list[int]] = [[] for _ in range(NUM_PROGRAMS)]
        for step, row in enumerate(rows[:row_count]):
            if not isinstance(row, list | tuple):
                msg = f"Row {step} must be a list of instructions, got {row!r}"
                raise ScenarioError(msg)
            if len(row) > NUM_PROGRAMS:
                msg = f"Row {step} has {len(row)} columns, at most {NUM_PROGRAMS} allowed"
                raise ScenarioError(msg)
            for program_id in range(NUM_PROGRAMS):
                value = row[program_id] if program_id < len(row) else HALT
                columns[program_id].append(
                    _check_instruction(value, where=f"row {step} column {program_id}")
                )
        return cls(columns)

    def __len__(self) -> int:
        """Return the number of programs defined."""
        return len(self._programs)

    def __iter__(self) -> Iterator[tuple[int, ...]]:
        """Iterate over the programs in id order."""
        return iter(self._programs)

    def is_valid(self, program_id: int) -> bool:
        """Return True if ``program_id`` names a defined program."""
        return 0 <= program_id < len(self._programs)

    def instructions(self, program_id: int) -> tuple[int, ...]:
        """Return the instruction sequence of a program.

        Raises:
            KeyError: If the program id is not defined.

        """
        if not self.is_valid(program_id):
            msg = f"No program {program_id}"
            raise KeyError(msg)
        return self._programs[program_id]

    def to_lists(self) -> list[list[int]]:
        """Return the programs as plain lists (for JSON)."""
        return [list(program) for program in self._programs]

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return f"ProgramTable({self.to_lists()!r})"
