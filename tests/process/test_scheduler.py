"""Tests for the round-robin scheduler.

The scheduler owns the single running slot.  It dispatches strictly in
FIFO order, gives each dispatch a fixed quantum, and preempts a process
that used its whole quantum back to the end of the ready queue (or, under
the TERMINATE policy, ends it).
"""

import pytest

from py_sched.process.pcb import Process, ProcessState
from py_sched.process.scheduler import DEFAULT_QUANTUM, QuantumExpiry, Scheduler


def _ready(pid: int) -> Process:
    """Create an admitted (READY) process."""
    process = Process(pid=pid, program_id=0, instructions=[1, 1, 1, 1, 0])
    process.admit()
    return process


class TestSchedulerCreation:
    """Verify scheduler initialisation."""

    def test_starts_empty(self) -> None:
        """A new scheduler has no ready processes and an empty slot."""
        scheduler = Scheduler()
        assert scheduler.ready_count == 0
        assert scheduler.current is None
        assert scheduler.quantum == DEFAULT_QUANTUM

    def test_non_positive_quantum_raises(self) -> None:
        """A quantum must be at least one tick."""
        with pytest.raises(ValueError, match="Quantum must be positive"):
            Scheduler(quantum=0)


class TestScheduleNext:
    """Verify dispatching into the running slot."""

    def test_dispatches_front_of_ready_queue(self) -> None:
        """The longest-waiting process runs first."""
        scheduler = Scheduler()
        first, second = _ready(1), _ready(2)
        scheduler.add(first)
        scheduler.add(second)
        assert scheduler.schedule_next() is first
        assert first.state is ProcessState.RUNNING
        assert first.remaining_quantum == DEFAULT_QUANTUM
        assert scheduler.current is first
        assert scheduler.ready_count == 1

    def test_empty_ready_queue_is_a_no_op(self) -> None:
        """Nothing to run means nothing is dispatched."""
        scheduler = Scheduler()
        assert scheduler.schedule_next() is None
        assert scheduler.current is None

    def test_occupied_slot_is_a_no_op(self) -> None:
        """Only one process runs at a time."""
        scheduler = Scheduler()
        first, second = _ready(1), _ready(2)
        scheduler.add(first)
        scheduler.add(second)
        scheduler.schedule_next()
        assert scheduler.schedule_next() is None
        assert scheduler.current is first
        assert second.state is ProcessState.READY

    def test_add_non_ready_process_raises(self) -> None:
        """Only READY processes can join the ready queue."""
        scheduler = Scheduler()
        process = Process(pid=1, program_id=0, instructions=[0])
        with pytest.raises(RuntimeError, match="Cannot add"):
            scheduler.add(process)

    def test_context_switches_counted(self) -> None:
        """Every dispatch counts as a context switch."""
        scheduler = Scheduler()
        scheduler.add(_ready(1))
        scheduler.schedule_next()
        scheduler.preempt()
        scheduler.schedule_next()
        expected_switches = 2
        assert scheduler.context_switches == expected_switches


class TestQuantumAccounting:
    """Verify charging ticks against the running process's quantum."""

    def test_charge_counts_down(self) -> None:
        """Ticks before the last leave the process running."""
        scheduler = Scheduler()
        process = _ready(1)
        scheduler.add(process)
        scheduler.schedule_next()
        assert scheduler.charge() is None
        assert scheduler.charge() is None
        assert process.remaining_quantum == 1
        assert scheduler.current is process

    def test_exhausted_quantum_preempts_to_back(self) -> None:
        """The last tick of the quantum sends the process behind the others."""
        scheduler = Scheduler()
        first, second = _ready(1), _ready(2)
        scheduler.add(first)
        scheduler.schedule_next()
        scheduler.add(second)
        for _ in range(DEFAULT_QUANTUM - 1):
            scheduler.charge()
        assert scheduler.charge() is first
        assert first.state is ProcessState.READY
        assert scheduler.current is None
        assert [p.pid for p in scheduler.ready_queue] == [2, 1]

    def test_terminate_policy_ends_the_process(self) -> None:
        """Under TERMINATE an exhausted quantum means EXIT."""
        scheduler = Scheduler(expiry=QuantumExpiry.TERMINATE)
        process = _ready(1)
        scheduler.add(process)
        scheduler.schedule_next()
        for _ in range(DEFAULT_QUANTUM - 1):
            scheduler.charge()
        assert scheduler.charge() is process
        assert process.state is ProcessState.EXIT
        assert scheduler.current is None
        assert scheduler.ready_count == 0

    def test_charge_with_empty_slot_does_nothing(self) -> None:
        """With nothing running there is nothing to charge."""
        scheduler = Scheduler()
        assert scheduler.charge() is None

    def test_preempt_with_no_current_raises(self) -> None:
        """Cannot preempt when nothing is running."""
        scheduler = Scheduler()
        with pytest.raises(RuntimeError, match="No process"):
            scheduler.preempt()

    def test_vacate_empties_the_slot(self) -> None:
        """vacate hands back whoever was running."""
        scheduler = Scheduler()
        process = _ready(1)
        scheduler.add(process)
        scheduler.schedule_next()
        assert scheduler.vacate() is process
        assert scheduler.current is None
        assert scheduler.vacate() is None
