"""Process table and process factory.

The process table is the single owner of every live PCB.  Queues and
the running slot only hold references; a process stops existing when
the table releases it (exit reaping), and nowhere else.

PIDs come from a monotonic counter ``1, 2, ...`` up to the table's
capacity and are never handed out twice: once a process is reaped its
slot stays empty for the rest of the scenario.  The report layout puts
PID ``n`` in column ``n - 1``.

Spawning is refused (``None``, nothing registered) when the table is
full, the PID counter is used up, or the program id does not exist.
Refusals are logged, never raised: a process that asks for a child it
cannot have just carries on.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_sched.logging import Logger, LogLevel
from py_sched.process.pcb import Process

if TYPE_CHECKING:
    from py_sched.programs import ProgramTable

MAX_PROCESSES = 20


class ProcessTable:
    """PID-indexed registry of live processes, and the factory that fills it."""

    def __init__(
        self,
        programs: ProgramTable,
        *,
        capacity: int = MAX_PROCESSES,
        logger: Logger | None = None,
    ) -> None:
        """Create an empty process table.

        Args:
            programs: Where spawned processes get their instructions.
            capacity: Maximum number of concurrently live processes.
            logger: Event log; a private one is created if omitted.

        """
        self._programs = programs
        self._capacity = capacity
        self._logger = logger if logger is not None else Logger()
        self._processes: dict[int, Process] = {}
        self._next_pid = 1

    @property
    def capacity(self) -> int:
        """Return the maximum number of live processes."""
        return self._capacity

    @property
    def programs(self) -> ProgramTable:
        """Return the program table processes are spawned from."""
        return self._programs

    def __len__(self) -> int:
        """Return the number of live processes."""
        return len(self._processes)

    def __contains__(self, pid: object) -> bool:
        """Return True if ``pid`` belongs to a live process."""
        return pid in self._processes

    def is_full(self) -> bool:
        """Return True if no more processes can be spawned."""
        return len(self._processes) >= self._capacity

    def get(self, pid: int) -> Process | None:
        """Return the live process with ``pid``, or None."""
        return self._processes.get(pid)

    @property
    def processes(self) -> list[Process]:
        """Return the live processes in PID order."""
        return [self._processes[pid] for pid in sorted(self._processes)]

    def slots(self) -> list[Process | None]:
        """Return the report projection: index ``pid - 1`` per process."""
        return [self._processes.get(pid) for pid in range(1, self._capacity + 1)]

    def _allocate_pid(self) -> int | None:
        """Return the next unused PID, or None once the counter is exhausted."""
        if self._next_pid > self._capacity:
            return None
        pid = self._next_pid
        self._next_pid += 1
        return pid

    def spawn(self, program_id: int, *, tick: int = 0) -> Process | None:
        """Create a NEW process running ``program_id``.

        The caller decides which queue the process joins; the table has
        no queue side effects.

        Args:
            program_id: Program to run.
            tick: Current tick (for the log).

        Returns:
            The registered process, or None if the spawn was refused.

        """
        if not self._programs.is_valid(program_id):
            self._logger.log(
                LogLevel.WARNING,
                f"Spawn refused: no program {program_id}",
                source="factory",
                tick=tick,
            )
            return None
        if self.is_full():
            self._logger.log(
                LogLevel.WARNING,
                f"Spawn refused: process table full ({self._capacity} live)",
                source="factory",
                tick=tick,
            )
            return None
        pid = self._allocate_pid()
        if pid is None:
            self._logger.log(
                LogLevel.WARNING,
                f"Spawn refused: all {self._capacity} pids used",
                source="factory",
                tick=tick,
            )
            return None

        process = Process(
            pid=pid,
            program_id=program_id,
            instructions=self._programs.instructions(program_id),
        )
        self._processes[pid] = process
        self._logger.log(
            LogLevel.INFO,
            f"Spawned pid {pid} (program {program_id}, {process.instruction_count} instructions)",
            source="factory",
            tick=tick,
        )
        return process

    def release(self, pid: int, *, tick: int = 0) -> Process | None:
        """Reap a process: drop it from the table and free its PID.

        Returns:
            The released process, or None if ``pid`` was not live.

        """
        process = self._processes.pop(pid, None)
        if process is not None:
            self._logger.log(LogLevel.INFO, f"Reaped pid {pid}", source="factory", tick=tick)
        return process
