"""The simulation clock — one scenario, one hundred ticks.

A ``Simulation`` owns everything for a single scenario: the process
table, the four queues, the scheduler's running slot, the tick counter,
the trace, and the event log.  Nothing is shared between scenarios.

Each tick runs the same fixed sequence:

    1. **Exit aging** — processes that spent their one tick in EXIT are
       reaped: removed from the exit queue, then from the process table.
    2. **Blocked aging** — BLOCKED processes whose wake tick has come
       move to the back of the ready queue.
    3. **New aging** — NEW processes that have waited out the admission
       delay move to the back of the ready queue.
    4. **Execute** — the running process (if any) runs one instruction.
    5. **Quantum accounting** — a process still RUNNING is charged one
       tick; an exhausted quantum sends it back to READY.
    6. **Schedule** — an empty running slot takes the front of the
       ready queue.
    7. **Snapshot** — every process slot's state is recorded.

Steps 1–3 scan their queues while removing from them; see
``FifoQueue.sweep`` for how that stays correct.

A scenario that runs out of work keeps ticking: the remaining rows are
simply empty.  The trace always has exactly ``HORIZON`` rows.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from py_sched import trace
from py_sched.interpreter import Interpreter
from py_sched.logging import Logger, LogLevel
from py_sched.process.pcb import Process, ProcessState
from py_sched.process.queue import ProcessQueues
from py_sched.process.scheduler import DEFAULT_QUANTUM, QuantumExpiry, Scheduler
from py_sched.process.table import MAX_PROCESSES, ProcessTable
from py_sched.programs import ScenarioError
from py_sched.trace import TraceRow

if TYPE_CHECKING:
    from py_sched.programs import ProgramTable

HORIZON = 100
ADMISSION_DELAY = 2
EXIT_DWELL = 1
INIT_PROGRAM = 0


class BlockResume(StrEnum):
    """Where a woken process picks up again.

    - RETRY: at the instruction it blocked on (pc untouched).
    - ADVANCE: just after it, so each blocking instruction waits once.
    """

    RETRY = "retry"
    ADVANCE = "advance"


class Simulation:
    """Discrete-time simulation of one scenario."""

    def __init__(
        self,
        programs: ProgramTable,
        *,
        quantum: int = DEFAULT_QUANTUM,
        capacity: int = MAX_PROCESSES,
        expiry: QuantumExpiry = QuantumExpiry.PREEMPT,
        resume: BlockResume = BlockResume.RETRY,
        logger: Logger | None = None,
    ) -> None:
        """Set up a scenario with one NEW process running program 0.

        Args:
            programs: The scenario's program table.
            quantum: Ticks per RUNNING burst.
            capacity: Maximum number of live processes.
            expiry: What an exhausted quantum does.
            resume: Where a woken process continues.
            logger: Event log; a private one is created if omitted.

        Raises:
            ScenarioError: If the initial process cannot be created.

        """
        self._logger = logger if logger is not None else Logger()
        self._resume = resume
        self._tick = 0
        self._trace: list[TraceRow] = []
        self._idle = False

        self._queues = ProcessQueues()
        self._table = ProcessTable(programs, capacity=capacity, logger=self._logger)
        self._scheduler = Scheduler(
            ready_queue=self._queues.ready,
            quantum=quantum,
            expiry=expiry,
            logger=self._logger,
        )
        self._interpreter = Interpreter(
            table=self._table,
            scheduler=self._scheduler,
            queues=self._queues,
            logger=self._logger,
        )

        init = self._table.spawn(INIT_PROGRAM, tick=0)
        if init is None:
            msg = f"Cannot start program {INIT_PROGRAM}"
            raise ScenarioError(msg)
        self._queues.new.push_back(init)

    # -- Accessors -----------------------------------------------------------

    @property
    def tick(self) -> int:
        """Return the last completed tick (0 before the first)."""
        return self._tick

    @property
    def horizon(self) -> int:
        """Return the number of ticks a scenario runs for."""
        return HORIZON

    @property
    def finished(self) -> bool:
        """Return True once every tick of the horizon has run."""
        return self._tick >= HORIZON

    @property
    def table(self) -> ProcessTable:
        """Return the process table."""
        return self._table

    @property
    def queues(self) -> ProcessQueues:
        """Return the scheduling queues."""
        return self._queues

    @property
    def scheduler(self) -> Scheduler:
        """Return the scheduler."""
        return self._scheduler

    @property
    def running(self) -> Process | None:
        """Return the process in the running slot, or None."""
        return self._scheduler.current

    @property
    def logger(self) -> Logger:
        """Return the event log."""
        return self._logger

    @property
    def trace(self) -> list[TraceRow]:
        """Return the rows recorded so far."""
        return list(self._trace)

    def is_idle(self) -> bool:
        """Return True if no process is queued or running."""
        return self._scheduler.current is None and self._queues.is_empty()

    # -- The clock -----------------------------------------------------------

    def step(self) -> TraceRow:
        """Run one tick and return its snapshot.

        Raises:
            RuntimeError: If the horizon has already been reached.

        """
        if self.finished:
            msg = f"Simulation already ran all {HORIZON} ticks"
            raise RuntimeError(msg)
        self._tick += 1
        tick = self._tick

        self._age_exit(tick)
        self._age_blocked(tick)
        self._age_new(tick)

        self._interpreter.step(tick=tick)
        expired = self._scheduler.charge(tick=tick)
        if expired is not None and expired.state is ProcessState.EXIT:
            self._queues.exit.push_back(expired)
        self._scheduler.schedule_next(tick=tick)

        row = TraceRow.capture(tick, self._table.slots())
        self._trace.append(row)
        self._note_idle(tick)
        return row

    def run(self) -> list[TraceRow]:
        """Run the remaining ticks of the horizon and return the full trace."""
        while not self.finished:
            self.step()
        return self.trace

    def render(self) -> str:
        """Return the trace so far as the text table."""
        return trace.render(self._trace)

    # -- Transition pipeline ---------------------------------------------------

    def _age_exit(self, tick: int) -> None:
        reaped = self._queues.exit.sweep(lambda p: p.age() >= EXIT_DWELL)
        for process in reaped:
            self._table.release(process.pid, tick=tick)

    def _age_blocked(self, tick: int) -> None:
        def wakes(process: Process) -> bool:
            process.age()
            return tick >= process.blocked_until

        for process in self._queues.blocked.sweep(wakes):
            process.wake()
            if self._resume is BlockResume.ADVANCE:
                process.pc = min(process.pc + 1, process.instruction_count)
            self._scheduler.add(process)
            self._logger.log(
                LogLevel.DEBUG,
                f"Woke pid {process.pid} at pc={process.pc}",
                source="pipeline",
                tick=tick,
            )

    def _age_new(self, tick: int) -> None:
        for process in self._queues.new.sweep(lambda p: p.age() > ADMISSION_DELAY):
            process.admit()
            self._scheduler.add(process)
            self._logger.log(
                LogLevel.DEBUG,
                f"Admitted pid {process.pid}",
                source="pipeline",
                tick=tick,
            )

    def _note_idle(self, tick: int) -> None:
        idle = self.is_idle()
        if idle and not self._idle:
            self._logger.log(LogLevel.INFO, "All processes finished", source="simulation", tick=tick)
        self._idle = idle

    # -- Invariants ----------------------------------------------------------

    def violations(self) -> list[str]:
        """Describe every broken bookkeeping invariant (empty when healthy).

        Checks that each live process sits in exactly one place (one
        queue or the running slot) matching its state, that every queued
        process is live, and that program counters are in range.
        """
        problems: list[str] = []
        running = self._scheduler.current
        expected_queue = {
            ProcessState.NEW: "new",
            ProcessState.READY: "ready",
            ProcessState.BLOCKED: "blocked",
            ProcessState.EXIT: "exit",
        }
        for process in self._table.processes:
            places = self._queues.locate(process)
            if process is running:
                places.append("running")
            if len(places) != 1:
                problems.append(f"pid {process.pid} is in {places or 'nowhere'}")
                continue
            wanted = "running" if process.state is ProcessState.RUNNING else expected_queue[process.state]
            if places[0] != wanted:
                problems.append(f"pid {process.pid} is {process.state} but in {places[0]}")
            if not 0 <= process.pc <= process.instruction_count:
                problems.append(f"pid {process.pid} has pc {process.pc} out of range")
        for queue in self._queues.queues():
            for process in queue:
                if self._table.get(process.pid) is not process:
                    problems.append(f"{queue.name} queue holds reaped pid {process.pid}")
        if running is not None and self._table.get(running.pid) is not running:
            problems.append(f"running slot holds reaped pid {running.pid}")
        return problems

