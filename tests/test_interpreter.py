"""Tests for the instruction interpreter.

Each instruction of the running process has exactly one effect: HALT,
JUMP, SPAWN, BLOCK, or NOOP.  A program counter that points nowhere is
treated as HALT so the simulation never crashes on a bad program.
"""

from py_sched.interpreter import Effect, Interpreter, decode
from py_sched.logging import Logger, LogLevel
from py_sched.process.pcb import Process, ProcessState
from py_sched.process.queue import ProcessQueues
from py_sched.process.scheduler import Scheduler
from py_sched.process.table import ProcessTable
from py_sched.programs import ProgramTable

TICK = 10


class _World:
    """One interpreter with its collaborators, and a running process."""

    def __init__(self, programs: list[list[int]], *, capacity: int = 20) -> None:
        self.logger = Logger()
        self.table = ProcessTable(ProgramTable(programs), capacity=capacity, logger=self.logger)
        self.queues = ProcessQueues()
        self.scheduler = Scheduler(ready_queue=self.queues.ready, logger=self.logger)
        self.interpreter = Interpreter(
            table=self.table,
            scheduler=self.scheduler,
            queues=self.queues,
            logger=self.logger,
        )
        process = self.table.spawn(0)
        assert process is not None
        self.process = self.run(process)

    def run(self, process: Process) -> Process:
        """Put a NEW process into the running slot."""
        process.admit()
        self.scheduler.add(process)
        self.scheduler.schedule_next()
        return process

    def execute(self) -> Effect:
        """Execute the running process's current instruction."""
        return self.interpreter.execute(self.process, self.process.fetch(), tick=TICK)


class TestDecode:
    """Verify classification by value."""

    def test_halt(self) -> None:
        """Zero halts."""
        assert decode(0) is Effect.HALT

    def test_jump_range_is_exclusive(self) -> None:
        """101..199 jump; 100 and 200 themselves do not."""
        assert decode(101) is Effect.JUMP
        assert decode(199) is Effect.JUMP
        assert decode(100) is Effect.NOOP
        assert decode(200) is Effect.NOOP

    def test_spawn_range_is_exclusive(self) -> None:
        """201..299 spawn; 300 does not."""
        assert decode(201) is Effect.SPAWN
        assert decode(299) is Effect.SPAWN
        assert decode(300) is Effect.NOOP

    def test_negative_blocks(self) -> None:
        """Any negative value blocks."""
        assert decode(-1) is Effect.BLOCK
        assert decode(-250) is Effect.BLOCK

    def test_other_values_are_noops(self) -> None:
        """Ordinary positive values are plain work."""
        for value in (1, 42, 99, 1000):
            assert decode(value) is Effect.NOOP


class TestHalt:
    """Verify termination."""

    def test_zero_moves_process_to_exit(self) -> None:
        """HALT ends the process and frees the running slot."""
        world = _World([[0]])
        assert world.execute() is Effect.HALT
        assert world.process.state is ProcessState.EXIT
        assert world.process.time_in_state == 0
        assert world.scheduler.current is None
        assert list(world.queues.exit) == [world.process]

    def test_pc_past_end_halts(self) -> None:
        """Running off the end of the program is a HALT."""
        world = _World([[7]])
        world.execute()
        assert world.process.pc == 1
        assert world.interpreter.step(tick=TICK) is Effect.HALT
        assert world.process.state is ProcessState.EXIT
        assert world.logger.filter(min_level=LogLevel.WARNING, source="interpreter")

    def test_empty_program_halts(self) -> None:
        """A process without instructions halts instead of crashing."""
        world = _World([[1, 0]])
        empty = Process(pid=9, program_id=0, instructions=())
        world.scheduler.vacate()
        world.run(empty)
        assert world.interpreter.execute(empty, None, tick=TICK) is Effect.HALT
        assert empty.state is ProcessState.EXIT


class TestJump:
    """Verify backwards jumps."""

    def test_jump_moves_pc_back(self) -> None:
        """1xx moves the pc back by xx without the usual +1."""
        world = _World([[1, 1, 1, 102, 0]])
        world.process.pc = 3
        assert world.execute() is Effect.JUMP
        assert world.process.pc == 1

    def test_jump_clamps_at_zero(self) -> None:
        """Jumping before the start lands on instruction 0."""
        world = _World([[1, 150, 0]])
        world.process.pc = 1
        world.execute()
        assert world.process.pc == 0

    def test_jump_keeps_process_running(self) -> None:
        """A jump does not leave the running slot."""
        world = _World([[101]])
        world.execute()
        assert world.process.state is ProcessState.RUNNING
        assert world.scheduler.current is world.process


class TestSpawn:
    """Verify child creation."""

    def test_spawn_queues_child_as_new(self) -> None:
        """2xx creates a NEW process of program xx on the new queue."""
        world = _World([[201, 0], [0]])
        assert world.execute() is Effect.SPAWN
        children = list(world.queues.new)
        assert len(children) == 1
        child = children[0]
        assert child.program_id == 1
        assert child.state is ProcessState.NEW
        assert child.time_in_state == 0
        assert world.process.pc == 1
        assert world.process.state is ProcessState.RUNNING

    def test_spawn_of_unknown_program_still_advances(self) -> None:
        """A refused spawn creates nothing but the parent moves on."""
        world = _World([[209, 0]])
        world.execute()
        assert world.queues.new.is_empty()
        assert len(world.table) == 1
        assert world.process.pc == 1

    def test_spawn_at_capacity_is_dropped(self) -> None:
        """A full table refuses the child silently."""
        world = _World([[201, 0], [0]], capacity=1)
        world.execute()
        assert world.queues.new.is_empty()
        assert len(world.table) == 1
        assert world.process.pc == 1


class TestBlock:
    """Verify blocking on simulated I/O."""

    def test_negative_instruction_blocks(self) -> None:
        """-k blocks until tick + k and leaves the pc alone."""
        world = _World([[-4, 0]])
        assert world.execute() is Effect.BLOCK
        assert world.process.state is ProcessState.BLOCKED
        assert world.process.blocked_until == TICK + 4
        assert world.process.pc == 0
        assert world.scheduler.current is None
        assert world.queues.locate(world.process) == ["blocked"]


class TestNoop:
    """Verify plain work instructions."""

    def test_noop_advances_pc(self) -> None:
        """Any other value just moves to the next instruction."""
        world = _World([[42, 0]])
        assert world.execute() is Effect.NOOP
        assert world.process.pc == 1
        assert world.process.state is ProcessState.RUNNING

    def test_step_without_running_process(self) -> None:
        """With nothing running, step does nothing."""
        world = _World([[0]])
        world.scheduler.vacate()
        assert world.interpreter.step(tick=TICK) is None

    def test_every_execution_is_logged(self) -> None:
        """Each executed instruction leaves a DEBUG entry."""
        world = _World([[42, 0]])
        world.execute()
        entries = world.logger.filter(source="interpreter")
        assert len(entries) == 1
        assert "inst=42" in entries[0].message
        assert entries[0].tick == TICK
