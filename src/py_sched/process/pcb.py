"""Process and Process Control Block (PCB).

A simulated process is a tiny program in execution.  The simulator
tracks each one via a PCB holding its PID, the program it runs, its own
copy of that program's instructions, a program counter, and the
bookkeeping the scheduler needs (remaining quantum, wake-up tick, and
how long it has been in its current state).

Processes follow a strict state machine.  Each transition method
(admit, dispatch, preempt, block, wake, terminate) checks that the
process is in the correct source state before moving it, and resets
``time_in_state`` so the aging rules can count ticks from zero.

State machine::

    NEW → READY ⇄ RUNNING → EXIT
            ↑        ↓
            └── BLOCKED
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ProcessState(StrEnum):
    """Lifecycle states of a simulated process.

    - NEW: just created, waiting out the admission delay.
    - READY: waiting in the ready queue for the CPU.
    - RUNNING: executing one instruction per tick.
    - BLOCKED: waiting for simulated I/O to finish.
    - EXIT: finished, visible for one tick before it is reaped.
    """

    NEW = "new"
    READY = "ready"
    RUNNING = "running"
    BLOCKED = "blocked"
    EXIT = "exit"

    @property
    def token(self) -> str:
        """Return the label this state has in the trace table."""
        return _TRACE_TOKENS[self]


_TRACE_TOKENS: dict[ProcessState, str] = {
    ProcessState.NEW: "NEW",
    ProcessState.READY: "READY",
    ProcessState.RUNNING: "RUN",
    ProcessState.BLOCKED: "BLOCKED",
    ProcessState.EXIT: "EXIT",
}


class Process:
    """A simulated process (the Process Control Block).

    The PCB keeps its own copy of the instruction sequence, so later
    changes to the program table cannot affect a process that is
    already running.

    State transitions are enforced: calling dispatch() on a NEW process
    raises RuntimeError, because it has to be admitted first.
    """

    def __init__(self, *, pid: int, program_id: int, instructions: Iterable[int]) -> None:
        """Create a new process in the NEW state.

        Args:
            pid: Process identifier assigned by the process table.
            program_id: Index of the program this process runs.
            instructions: The program's instructions (copied).

        """
        self._pid = pid
        self._program_id = program_id
        self._instructions: tuple[int, ...] = tuple(instructions)
        self._state = ProcessState.NEW
        self._pc = 0
        self._remaining_quantum = 0
        self._blocked_until = 0
        self._time_in_state = 0

    @property
    def pid(self) -> int:
        """Return the process identifier."""
        return self._pid

    @property
    def program_id(self) -> int:
        """Return the program this process was created from."""
        return self._program_id

    @property
    def instructions(self) -> tuple[int, ...]:
        """Return the process's private instruction sequence."""
        return self._instructions

    @property
    def instruction_count(self) -> int:
        """Return the number of instructions the process holds."""
        return len(self._instructions)

    @property
    def state(self) -> ProcessState:
        """Return the current process state."""
        return self._state

    @property
    def pc(self) -> int:
        """Return the program counter."""
        return self._pc

    @pc.setter
    def pc(self, value: int) -> None:
        """Move the program counter.

        Raises:
            ValueError: If the value is outside ``[0, instruction_count]``.

        """
        if not 0 <= value <= self.instruction_count:
            msg = f"pc {value} out of range for process {self._pid} ({self.instruction_count} instructions)"
            raise ValueError(msg)
        self._pc = value

    @property
    def remaining_quantum(self) -> int:
        """Return the ticks left in the current RUNNING burst."""
        return self._remaining_quantum

    @property
    def blocked_until(self) -> int:
        """Return the tick at which a BLOCKED process may wake."""
        return self._blocked_until

    @property
    def time_in_state(self) -> int:
        """Return ticks elapsed since the last state change."""
        return self._time_in_state

    def fetch(self) -> int | None:
        """Return the instruction at ``pc``, or None if there is none."""
        if 0 <= self._pc < len(self._instructions):
            return self._instructions[self._pc]
        return None

    def age(self) -> int:
        """Count one more tick in the current state and return the total."""
        self._time_in_state += 1
        return self._time_in_state

    def use_quantum(self) -> int:
        """Spend one tick of the quantum and return what is left."""
        self._remaining_quantum = max(self._remaining_quantum - 1, 0)
        return self._remaining_quantum

    def _transition(self, action: str, expected: ProcessState, target: ProcessState) -> None:
        """Enforce a state transition.

        Args:
            action: Name of the transition (for error messages).
            expected: The state the process must be in.
            target: The state to move to.

        Raises:
            RuntimeError: If the process is not in the expected state.

        """
        if self._state is not expected:
            msg = f"Cannot {action}: process {self._pid} is {self._state}, expected {expected}"
            raise RuntimeError(msg)
        self._state = target
        self._time_in_state = 0

    def admit(self) -> None:
        """Transition NEW → READY once the admission delay is over."""
        self._transition("admit", ProcessState.NEW, ProcessState.READY)

    def dispatch(self, quantum: int) -> None:
        """Transition READY → RUNNING with a fresh quantum."""
        self._transition("dispatch", ProcessState.READY, ProcessState.RUNNING)
        self._remaining_quantum = quantum

    def preempt(self) -> None:
        """Transition RUNNING → READY. The quantum ran out."""
        self._transition("preempt", ProcessState.RUNNING, ProcessState.READY)
        self._remaining_quantum = 0

    def block(self, until: int) -> None:
        """Transition RUNNING → BLOCKED until tick ``until``."""
        self._transition("block", ProcessState.RUNNING, ProcessState.BLOCKED)
        self._blocked_until = until
        self._remaining_quantum = 0

    def wake(self) -> None:
        """Transition BLOCKED → READY. The simulated I/O completed."""
        self._transition("wake", ProcessState.BLOCKED, ProcessState.READY)

    def terminate(self) -> None:
        """Transition RUNNING → EXIT."""
        self._transition("terminate", ProcessState.RUNNING, ProcessState.EXIT)
        self._remaining_quantum = 0

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return (
            f"Process(pid={self._pid}, program={self._program_id}, "
            f"state={self._state}, pc={self._pc})"
        )
