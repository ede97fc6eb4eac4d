"""CPU scheduler — round-robin admission into the single running slot.

The scheduler owns the running slot and draws from the ready queue.  It
is strict FIFO: whoever has waited in the ready queue longest runs next,
with no priorities.  Each dispatch hands out a fixed time quantum; when
a process has used it up without halting or blocking, it goes to the
back of the ready queue (round robin) and the slot opens for the next.

There is exactly one running slot, so at most one process runs per tick.

What happens at quantum expiry is a policy decision.  The textbook
behaviour is preemption back to READY; some reference traces instead
end the process.  ``QuantumExpiry`` selects between them.
"""

from __future__ import annotations

from enum import StrEnum

from py_sched.logging import Logger, LogLevel
from py_sched.process.pcb import Process, ProcessState
from py_sched.process.queue import FifoQueue

DEFAULT_QUANTUM = 3


class QuantumExpiry(StrEnum):
    """What an exhausted quantum does to the running process."""

    PREEMPT = "preempt"
    TERMINATE = "terminate"


class Scheduler:
    """Round-robin scheduler with one running slot.

    The scheduler does not run instructions; it only decides who holds
    the CPU.  It validates states, keeps the ready queue in FIFO order,
    and tracks which process currently owns the slot.
    """

    def __init__(
        self,
        *,
        ready_queue: FifoQueue[Process] | None = None,
        quantum: int = DEFAULT_QUANTUM,
        expiry: QuantumExpiry = QuantumExpiry.PREEMPT,
        logger: Logger | None = None,
    ) -> None:
        """Create a scheduler.

        Args:
            ready_queue: Queue of READY processes; a fresh one if omitted.
            quantum: Ticks a process may run before it is preempted.
            expiry: What happens to a process whose quantum runs out.
            logger: Event log; a private one is created if omitted.

        Raises:
            ValueError: If the quantum is not positive.

        """
        if quantum <= 0:
            msg = f"Quantum must be positive, got {quantum}"
            raise ValueError(msg)
        self._ready_queue: FifoQueue[Process] = (
            ready_queue if ready_queue is not None else FifoQueue(name="ready")
        )
        self._quantum = quantum
        self._expiry = expiry
        self._logger = logger if logger is not None else Logger()
        self._current: Process | None = None
        self._context_switches = 0

    @property
    def quantum(self) -> int:
        """Return the time quantum (ticks per burst)."""
        return self._quantum

    @property
    def expiry(self) -> QuantumExpiry:
        """Return the quantum-expiry policy."""
        return self._expiry

    @property
    def ready_queue(self) -> FifoQueue[Process]:
        """Return the ready queue."""
        return self._ready_queue

    @property
    def ready_count(self) -> int:
        """Return the number of processes in the ready queue."""
        return len(self._ready_queue)

    @property
    def current(self) -> Process | None:
        """Return the process in the running slot, or None."""
        return self._current

    @property
    def context_switches(self) -> int:
        """Return the total number of dispatches."""
        return self._context_switches

    def add(self, process: Process) -> None:
        """Append a READY process to the back of the ready queue.

        Raises:
            RuntimeError: If the process is not in the READY state.

        """
        if process.state is not ProcessState.READY:
            msg = f"Cannot add process {process.pid}: state is {process.state}, expected ready"
            raise RuntimeError(msg)
        self._ready_queue.push_back(process)

    def schedule_next(self, *, tick: int = 0) -> Process | None:
        """Fill an empty running slot from the front of the ready queue.

        Returns:
            The newly dispatched process, or None if the slot was
            already occupied or nobody was ready.

        """
        if self._current is not None:
            return None
        process = self._ready_queue.pop_front()
        if process is None:
            return None
        process.dispatch(self._quantum)
        self._current = process
        self._context_switches += 1
        self._logger.log(
            LogLevel.DEBUG,
            f"Dispatched pid {process.pid} (pc={process.pc}, quantum={self._quantum})",
            source="scheduler",
            tick=tick,
        )
        return process

    def vacate(self) -> Process | None:
        """Empty the running slot and return whoever was in it.

        Used after the interpreter has already moved the process to
        BLOCKED or EXIT.
        """
        process = self._current
        self._current = None
        return process

    def preempt(self, *, tick: int = 0) -> Process:
        """Move the running process to the back of the ready queue.

        Raises:
            RuntimeError: If no process is currently running.

        """
        if self._current is None:
            msg = "No process is currently running"
            raise RuntimeError(msg)
        process = self._current
        process.preempt()
        self._ready_queue.push_back(process)
        self._current = None
        self._logger.log(
            LogLevel.DEBUG,
            f"Preempted pid {process.pid} at pc={process.pc}",
            source="scheduler",
            tick=tick,
        )
        return process

    def charge(self, *, tick: int = 0) -> Process | None:
        """Charge one tick to the running process's quantum.

        Only a process still RUNNING after its instruction is charged.
        When the quantum reaches zero under ``QuantumExpiry.PREEMPT`` the
        process is preempted here.  Under ``QuantumExpiry.TERMINATE`` it
        is moved to EXIT and returned with the slot vacated; the caller
        queues it for reaping.

        Returns:
            The process that left the slot because its quantum ran
            out, or None if it keeps running (or nothing ran).

        """
        process = self._current
        if process is None or process.state is not ProcessState.RUNNING:
            return None
        if process.use_quantum() > 0:
            return None
        if self._expiry is QuantumExpiry.TERMINATE:
            process.terminate()
            self._current = None
            self._logger.log(
                LogLevel.INFO,
                f"Quantum expired: pid {process.pid} terminated",
                source="scheduler",
                tick=tick,
            )
            return process
        return self.preempt(tick=tick)
