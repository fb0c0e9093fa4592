"""SQLite driver that reports trace events.

The driver plays the part of a database driver with a trace hook: a `TraceConfig` given
in the connection settings selects which events are reported and the callback that
receives them.

Example:
    ```python
    from sqlitetrace.drivers import SQLiteDriver, TraceConfig
    from sqlitetrace.trace_events import print_trace_event
    from sqlitetrace.trace_mask import TraceEventCode

    trace = TraceConfig(print_trace_event, TraceEventCode.STMT | TraceEventCode.PROFILE)
    with SQLiteDriver.connect({"database": "demo.db", "trace": trace}) as driver:
        driver.execute("CREATE TABLE IF NOT EXISTS t (note TEXT)")
        with driver.transaction() as transaction:
            transaction.execute("INSERT INTO t (note) VALUES (?)", "traced")
    ```
"""
from sqlitetrace.drivers.drivers import BaseDriver
from sqlitetrace.drivers.transactions import BaseDriverTransaction
from sqlitetrace.drivers.driver import SQLiteDriver, SQLiteSettings
from sqlitetrace.drivers.statement import ExecResult, PreparedStatement, Rows
from sqlitetrace.drivers.tracing import TraceConfig
from sqlitetrace.drivers.transaction import SQLiteTransaction


__all__ = [
    "BaseDriver",
    "BaseDriverTransaction",
    "ExecResult",
    "PreparedStatement",
    "Rows",
    "SQLiteDriver",
    "SQLiteSettings",
    "SQLiteTransaction",
    "TraceConfig",
]
