"""FIFO queue of process handles.

Every scheduling queue in the simulator (NEW, READY, BLOCKED, EXIT) is
one of these.  It is a plain first-in, first-out container with two
extras that an OS needs and ``collections.deque`` alone does not give:

- **Removal by identity** — take a specific process out of the middle
  of a queue (e.g. when it blocks) without disturbing the order of the
  others.  Matching is by ``is``, never ``==``.
- **Sweeping** — visit every element once and remove the ones that are
  ready to move on, *while scanning*.  Removing from a sequence you are
  indexing shifts the later elements left by one, so the sweep steps
  the cursor and the captured length back after each removal; the next
  index then re-examines the element that slid into the hole.

The queue does not own what it holds.  The process table owns every
PCB; queues only hold references to them.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from py_sched.process.pcb import Process


T = TypeVar("T")


class FifoQueue(Generic[T]):
    """An insertion-ordered queue with removal by identity."""

    def __init__(self, *, name: str = "") -> None:
        """Create an empty queue.

        Args:
            name: Label used in logs and ``repr`` (e.g. "ready").

        """
        self._name = name
        self._items: deque[T] = deque()

    @property
    def name(self) -> str:
        """Return the queue name."""
        return self._name

    def __len__(self) -> int:
        """Return the number of queued items."""
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        """Iterate front to back over a snapshot of the queue."""
        return iter(list(self._items))

    def __contains__(self, item: object) -> bool:
        """Return True if this exact object is queued."""
        return any(queued is item for queued in self._items)

    def is_empty(self) -> bool:
        """Return True if the queue holds nothing."""
        return not self._items

    def push_back(self, item: T) -> None:
        """Append an item at the back of the queue."""
        self._items.append(item)

    def pop_front(self) -> T | None:
        """Remove and return the front item, or None if empty."""
        if not self._items:
            return None
        return self._items.popleft()

    def peek_at(self, index: int) -> T | None:
        """Return the item at *index* without removing it.

        Args:
            index: Zero-based position from the front.

        Returns:
            The item, or None if the index is out of range.

        """
        if index < 0 or index >= len(self._items):
            return None
        return self._items[index]

    def remove_at(self, index: int) -> bool:
        """Remove the item at *index*.

        Returns:
            True on success, False if the index is out of range.

        """
        if index < 0 or index >= len(self._items):
            return False
        del self._items[index]
        return True

    def remove_by_identity(self, item: T) -> bool:
        """Remove the first element that *is* ``item``.

        The relative order of the remaining elements is preserved.

        Returns:
            True if an element was removed, False if none matched.

        """
        for i, queued in enumerate(self._items):
            if queued is item:
                del self._items[i]
                return True
        return False

    def sweep(self, leaves: Callable[[T], bool]) -> list[T]:
        """Visit every item once, removing those for which ``leaves`` is True.

        ``leaves`` may update the item (age it, change its state); it is
        called exactly once per element present when the sweep starts.

        Args:
            leaves: Predicate deciding whether the visited item leaves
                the queue.

        Returns:
            The removed items, in the order they were queued.

        """
        removed: list[T] = []
        index = 0
        size = len(self._items)
        while index < size:
            item = self._items[index]
            if leaves(item) and self.remove_at(index):
                removed.append(item)
                # The next element slid into this slot: look at it again.
                index -= 1
                size -= 1
            index += 1
        return removed

    def clear(self) -> None:
        """Drop every queued item."""
        self._items.clear()

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return f"FifoQueue(name={self._name!r}, size={len(self._items)})"


def _queue(name: str) -> Callable[[], FifoQueue[Process]]:
    return lambda: FifoQueue(name=name)


@dataclass(frozen=True)
class ProcessQueues:
    """The four scheduling queues of one simulation.

    A live process is in at most one of them; the running process is in
    none (it sits in the scheduler's running slot instead).
    """

    new: FifoQueue[Process] = field(default_factory=_queue("new"))
    ready: FifoQueue[Process] = field(default_factory=_queue("ready"))
    blocked: FifoQueue[Process] = field(default_factory=_queue("blocked"))
    exit: FifoQueue[Process] = field(default_factory=_queue("exit"))

    def queues(self) -> tuple[FifoQueue[Process], ...]:
        """Return the four queues (new, ready, blocked, exit)."""
        return (self.new, self.ready, self.blocked, self.exit)

    def discard(self, process: Process) -> None:
        """Take ``process`` out of whichever queues hold it."""
        for queue in self.queues():
            queue.remove_by_identity(process)

    def locate(self, process: Process) -> list[str]:
        """Return the names of every queue holding ``process``."""
        return [queue.name for queue in self.queues() if process in queue]

    def is_empty(self) -> bool:
        """Return True if no queue holds anything."""
        return all(queue.is_empty() for queue in self.queues())
