"""Tests for the Process Control Block.

The PCB carries a private copy of its program, a program counter, and
the counters the aging rules need.  Its state machine only allows the
textbook transitions; anything else is a programming error.
"""

import pytest

from py_sched.process.pcb import Process, ProcessState

QUANTUM = 3
WAKE_TICK = 9


def _process(instructions: list[int] | None = None) -> Process:
    """Create a NEW process for program 0."""
    return Process(pid=1, program_id=0, instructions=instructions or [1, 1, 0])


class TestProcessCreation:
    """Verify the initial PCB contents."""

    def test_starts_new_with_zeroed_counters(self) -> None:
        """A new process is NEW with every counter at zero."""
        process = _process()
        assert process.state is ProcessState.NEW
        assert process.pc == 0
        assert process.time_in_state == 0
        assert process.remaining_quantum == 0
        assert process.blocked_until == 0

    def test_instructions_are_copied(self) -> None:
        """Changing the source list later does not affect the process."""
        source = [1, 2, 0]
        process = _process(source)
        source[0] = 999
        assert process.instructions == (1, 2, 0)
        assert process.instruction_count == len(source)

    def test_fetch_returns_instruction_at_pc(self) -> None:
        """fetch reads the instruction the pc points at."""
        process = _process([7, 0])
        assert process.fetch() == 7

    def test_fetch_past_end_returns_none(self) -> None:
        """A pc at the end of the program has nothing to fetch."""
        process = _process([7])
        process.pc = 1
        assert process.fetch() is None

    def test_empty_program_has_nothing_to_fetch(self) -> None:
        """An empty instruction sequence fetches None."""
        process = Process(pid=1, program_id=0, instructions=())
        assert process.fetch() is None


class TestProgramCounter:
    """Verify pc range checking."""

    def test_pc_may_point_one_past_the_end(self) -> None:
        """pc == instruction_count is allowed (the program ran off its end)."""
        process = _process([1, 0])
        process.pc = 2
        assert process.pc == 2

    def test_pc_beyond_end_raises(self) -> None:
        """pc past instruction_count is rejected."""
        process = _process([1, 0])
        with pytest.raises(ValueError, match="out of range"):
            process.pc = 3

    def test_negative_pc_raises(self) -> None:
        """A negative pc is rejected."""
        process = _process()
        with pytest.raises(ValueError, match="out of range"):
            process.pc = -1


class TestTransitions:
    """Verify the enforced state machine."""

    def test_full_lifecycle(self) -> None:
        """NEW → READY → RUNNING → BLOCKED → READY → RUNNING → READY → RUNNING → EXIT."""
        process = _process()
        process.admit()
        assert process.state is ProcessState.READY
        process.dispatch(QUANTUM)
        assert process.state is ProcessState.RUNNING
        assert process.remaining_quantum == QUANTUM
        process.block(WAKE_TICK)
        assert process.state is ProcessState.BLOCKED
        assert process.blocked_until == WAKE_TICK
        process.wake()
        assert process.state is ProcessState.READY
        process.dispatch(QUANTUM)
        process.preempt()
        assert process.state is ProcessState.READY
        process.dispatch(QUANTUM)
        process.terminate()
        assert process.state is ProcessState.EXIT

    def test_dispatch_from_new_raises(self) -> None:
        """A NEW process must be admitted before it can run."""
        process = _process()
        with pytest.raises(RuntimeError, match="Cannot dispatch"):
            process.dispatch(QUANTUM)

    def test_terminate_from_ready_raises(self) -> None:
        """Only the running process can terminate."""
        process = _process()
        process.admit()
        with pytest.raises(RuntimeError, match="Cannot terminate"):
            process.terminate()

    def test_wake_from_running_raises(self) -> None:
        """Only a BLOCKED process can be woken."""
        process = _process()
        process.admit()
        process.dispatch(QUANTUM)
        with pytest.raises(RuntimeError, match="Cannot wake"):
            process.wake()

    def test_every_transition_resets_time_in_state(self) -> None:
        """Entering a state starts its tick count from zero."""
        process = _process()
        process.age()
        process.age()
        process.admit()
        assert process.time_in_state == 0
        process.age()
        process.dispatch(QUANTUM)
        assert process.time_in_state == 0


class TestCounters:
    """Verify aging and quantum use."""

    def test_age_counts_ticks(self) -> None:
        """age increments and returns time_in_state."""
        process = _process()
        assert process.age() == 1
        assert process.age() == 2

    def test_use_quantum_counts_down_to_zero(self) -> None:
        """Each tick spends one unit of quantum, never below zero."""
        process = _process()
        process.admit()
        process.dispatch(QUANTUM)
        assert [process.use_quantum() for _ in range(QUANTUM + 1)] == [2, 1, 0, 0]


class TestTraceTokens:
    """Verify the labels states have in the trace table."""

    def test_tokens(self) -> None:
        """RUNNING is shown as RUN; the rest by their own names."""
        assert ProcessState.NEW.token == "NEW"
        assert ProcessState.READY.token == "READY"
        assert ProcessState.RUNNING.token == "RUN"
        assert ProcessState.BLOCKED.token == "BLOCKED"
        assert ProcessState.EXIT.token == "EXIT"
