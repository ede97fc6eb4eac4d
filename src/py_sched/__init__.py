"""py-sched — a discrete-time simulator of process scheduling.

A fixed population of synthetic programs is admitted, queued, run under
preemptive round robin, blocked on simulated I/O, and reaped, one tick
at a time, producing a per-tick trace of every process's state.

Typical use::

    from py_sched.programs import ProgramTable
    from py_sched.simulation import Simulation

    simulation = Simulation(ProgramTable([[201, 0], [0]]))
    simulation.run()
    print(simulation.render())
"""
