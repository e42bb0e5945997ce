"""HTTP API for the trace simulator.

This package provides a Flask application that runs simulations on
request.  It is an **optional** extra — install with::

    pip install py-forkexec[web]

The ``create_app`` factory in ``app.py`` serves three endpoints:

- ``GET /`` — HTML page describing the machine.
- ``GET /api/config`` — the machine tables.
- ``POST /api/simulate`` — run a trace and return both logs.
"""
