"""Browser-based trace viewer for py-sched.

This package provides a Flask application that renders simulation
traces as an HTML table.  It is an **optional** extra — install with::

    pip install py-sched[web]

The ``create_app`` factory in ``app.py`` serves four endpoints:

- ``GET /`` — HTML trace table for a built-in scenario.
- ``GET /api/scenarios`` — the built-in scenarios as JSON.
- ``GET /api/trace/<name>`` — one built-in scenario's trace as JSON.
- ``POST /api/simulate`` — simulate a scenario sent as JSON.
"""
