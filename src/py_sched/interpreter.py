"""Instruction interpreter — runs one instruction of the running process.

Simulated programs are sequences of plain integers.  The value of an
instruction decides what it does:

======================  ===============================================
instruction             effect
======================  ===============================================
``0``                   HALT — the process exits.
``101`` .. ``199``      JUMP back ``n - 100`` instructions (not below 0).
``201`` .. ``299``      SPAWN a child running program ``n % 100``.
negative ``-k``         BLOCK on simulated I/O for ``k`` ticks.
anything else           NOOP — ordinary work, move on.
======================  ===============================================

HALT is checked first; then a program counter that points outside the
program (or an empty program) is treated as HALT too, so a runaway
process exits rather than crashing the simulation.

JUMP and BLOCK leave the program counter where they put it.  SPAWN and
NOOP advance it by one.  A refused SPAWN (table full, no such program)
still advances the parent: it just does not get a child.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from py_sched.logging import Logger, LogLevel
from py_sched.programs import HALT

if TYPE_CHECKING:
    from py_sched.process.pcb import Process
    from py_sched.process.queue import ProcessQueues
    from py_sched.process.scheduler import Scheduler
    from py_sched.process.table import ProcessTable

JUMP_BASE = 100
SPAWN_BASE = 200
OPCODE_SPAN = 100


class Effect(StrEnum):
    """The one thing an executed instruction did."""

    HALT = "halt"
    JUMP = "jump"
    SPAWN = "spawn"
    BLOCK = "block"
    NOOP = "noop"


def decode(instruction: int) -> Effect:
    """Classify an instruction by value alone (ignoring the pc)."""
    if instruction == HALT:
        return Effect.HALT
    if JUMP_BASE < instruction < JUMP_BASE + OPCODE_SPAN:
        return Effect.JUMP
    if SPAWN_BASE < instruction < SPAWN_BASE + OPCODE_SPAN:
        return Effect.SPAWN
    if instruction < 0:
        return Effect.BLOCK
    return Effect.NOOP


class Interpreter:
    """Execute instructions against one simulation's queues and tables."""

    def __init__(
        self,
        *,
        table: ProcessTable,
        scheduler: Scheduler,
        queues: ProcessQueues,
        logger: Logger | None = None,
    ) -> None:
        """Create an interpreter bound to a simulation's state.

        Args:
            table: Process table used by SPAWN.
            scheduler: Owner of the running slot.
            queues: The new, ready, blocked, and exit queues.
            logger: Event log; a private one is created if omitted.

        """
        self._table = table
        self._scheduler = scheduler
        self._queues = queues
        self._logger = logger if logger is not None else Logger()

    def step(self, *, tick: int) -> Effect | None:
        """Execute the next instruction of the running process, if any."""
        process = self._scheduler.current
        if process is None:
            return None
        return self.execute(process, process.fetch(), tick=tick)

    def execute(self, process: Process, instruction: int | None, *, tick: int) -> Effect:
        """Execute ``instruction`` on behalf of the RUNNING ``process``.

        Args:
            process: The process in the running slot.
            instruction: The instruction at its pc (None if there is none).
            tick: The current tick (BLOCK wake-ups are relative to it).

        Returns:
            The effect that was applied.

        """
        if instruction == HALT:
            self._log(process, instruction, "HALT", tick=tick)
            self._halt(process)
            return Effect.HALT

        if instruction is None or not 0 <= process.pc < process.instruction_count:
            self._logger.log(
                LogLevel.WARNING,
                f"pid {process.pid} has no instruction at pc={process.pc}; halting",
                source="interpreter",
                tick=tick,
            )
            self._halt(process)
            return Effect.HALT

        effect = decode(instruction)
        if effect is Effect.JUMP:
            distance = instruction - JUMP_BASE
            self._log(process, instruction, f"JUMP {distance}", tick=tick)
            process.pc = max(process.pc - distance, 0)
        elif effect is Effect.SPAWN:
            program_id = instruction % OPCODE_SPAN
            self._log(process, instruction, f"SPAWN {program_id}", tick=tick)
            child = self._table.spawn(program_id, tick=tick)
            if child is not None:
                self._queues.new.push_back(child)
            process.pc += 1
        elif effect is Effect.BLOCK:
            until = tick - instruction
            self._log(process, instruction, f"BLOCK until {until}", tick=tick)
            process.block(until)
            self._queues.discard(process)
            self._scheduler.vacate()
            self._queues.blocked.push_back(process)
        else:
            self._log(process, instruction, "NOOP", tick=tick)
            process.pc += 1
        return effect

    def _halt(self, process: Process) -> None:
        """Move the running process to EXIT and queue it for reaping."""
        process.terminate()
        self._queues.discard(process)
        self._scheduler.vacate()
        self._queues.exit.push_back(process)

    def _log(self, process: Process, instruction: int, what: str, *, tick: int) -> None:
        self._logger.log(
            LogLevel.DEBUG,
            f"pid {process.pid} pc={process.pc} inst={instruction}: {what}",
            source="interpreter",
            tick=tick,
        )
