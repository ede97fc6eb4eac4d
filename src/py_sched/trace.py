"""Per-tick trace of every process slot, and its text rendering.

After each tick the simulation takes a snapshot: one token per process
slot (slot ``n`` shows PID ``n + 1``), empty when nobody holds it.  The
rendered table is the artifact a scenario is judged by, so its layout
is fixed::

    time inst\tproc1\tproc2\t...\tproc20
    1       \tNEW     \t        \t...
    2       \tNEW     \t        \t...

The tick is left-justified in eight characters; each slot is a tab
followed by the token left-justified in eight characters.  The header
line appears once, before tick 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from py_sched.process.pcb import Process

FIELD_WIDTH = 8
SLOT_COUNT = 20


def header(slot_count: int = SLOT_COUNT) -> str:
    """Return the header line (without newline)."""
    columns = "\t".join(f"proc{n}" for n in range(1, slot_count + 1))
    return f"time inst\t{columns}"


@dataclass(frozen=True)
class TraceRow:
    """The state of every process slot at the end of one tick."""

    tick: int
    slots: tuple[str, ...]

    @classmethod
    def capture(cls, tick: int, slots: Iterable[Process | None]) -> TraceRow:
        """Snapshot a report projection (``ProcessTable.slots()``)."""
        return cls(tick=tick, slots=tuple("" if p is None else p.state.token for p in slots))

    def occupied(self) -> dict[int, str]:
        """Return ``{pid: token}`` for every non-empty slot."""
        return {index + 1: token for index, token in enumerate(self.slots) if token}

    def token(self, pid: int) -> str:
        """Return the token shown for ``pid`` (empty if none)."""
        return self.slots[pid - 1]

    def render(self) -> str:
        """Return this row as one line of the trace table (without newline)."""
        fields = "".join(f"\t{token:<{FIELD_WIDTH}}" for token in self.slots)
        return f"{self.tick:<{FIELD_WIDTH}}{fields}"

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-friendly dict."""
        return {"tick": self.tick, "slots": list(self.slots)}


def render(rows: Iterable[TraceRow]) -> str:
    """Render a full trace: header before the first row, newline after each.

    Returns an empty string for an empty trace.
    """
    lines: list[str] = []
    for row in rows:
        if not lines:
            lines.append(header(len(row.slots)))
        lines.append(row.render())
    return "".join(f"{line}\n" for line in lines)
