"""Process subsystem — PCB, queues, process table, and scheduling.

Re-exports public symbols so callers can write::

    from py_sched.process import Process, ProcessTable, Scheduler
"""

from py_sched.process.pcb import Process, ProcessState
from py_sched.process.queue import FifoQueue, ProcessQueues
from py_sched.process.scheduler import DEFAULT_QUANTUM, QuantumExpiry, Scheduler
from py_sched.process.table import MAX_PROCESSES, ProcessTable

__all__ = [
    "DEFAULT_QUANTUM",
    "MAX_PROCESSES",
    "FifoQueue",
    "Process",
    "ProcessQueues",
    "ProcessState",
    "ProcessTable",
    "QuantumExpiry",
    "Scheduler",
]
