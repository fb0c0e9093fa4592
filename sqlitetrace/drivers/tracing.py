"""Trace event emission for the SQLite driver.

Python's `sqlite3` module only exposes SQLite's statement trace hook, so the driver
reports the remaining categories itself. Statement begin events come straight from
SQLite through `sqlite3.Connection.set_trace_callback` (which hands over the SQL with its
parameters expanded), profile and row events are emitted by the statement and row
wrappers, and the close event is emitted by the driver once the connection is closed.

SQLite also reports a statement begin event at the start of each trigger subprogram. The
`sqlite3` hook passes the expanded text of the outer statement for those and never the
trigger name, so every begin event after the first one of a running statement is reported
with `TRIGGER_MARKER` as its text and without expanded SQL.

Every event is delivered synchronously on the thread that ran the traced operation.
"""
import logging
import sqlite3
from dataclasses import dataclass

from tramp.optionals import Optional

from sqlitetrace.drivers.shared_types import SQLStatement, TraceCallback
from sqlitetrace.trace_events import DBError, TraceEvent
from sqlitetrace.trace_mask import TraceEventCode


logger = logging.getLogger(__name__)

TRIGGER_MARKER = "-- TRIGGER"


@dataclass(frozen=True)
class TraceConfig:
    """Trace hook settings applied when a connection is opened.

    Attributes:
        callback: Called with each `TraceEvent`, its return value is ignored.
        event_mask: Union of the `TraceEventCode` bits to report.
        want_expanded_sql: Attach the statement text with its bound parameters expanded
            to statement begin events.
    """
    callback: TraceCallback
    event_mask: int = 0
    want_expanded_sql: bool = True


class Tracer:
    """Builds trace events for one connection and forwards the enabled ones to the callback.

    Attributes:
        conn_handle: The handle reported on every event of the connection.
    """
    def __init__(self, config: TraceConfig | None, conn_handle: int):
        self.conn_handle = conn_handle
        self._config = config
        self._mask = TraceEventCode(config.event_mask if config else 0)
        self._running: tuple[int, SQLStatement] | None = None
        self._running_started = False

    def wants(self, code: TraceEventCode) -> bool:
        return bool(self._mask & code)

    def attach(self, connection: sqlite3.Connection):
        """Registers the statement hook on the connection when statement events are enabled."""
        if self.wants(TraceEventCode.STMT):
            connection.set_trace_callback(self._on_sqlite_statement)

    # ---------------------------------------- #
    # Statement Lifecycle                      #
    # ---------------------------------------- #
    def begin(self, stmt_handle: int, sql: SQLStatement):
        """Marks the statement SQLite is about to run so its begin event can name it."""
        self._running = (stmt_handle, sql)
        self._running_started = False

    def end(self):
        self._running = None
        self._running_started = False

    def profile(self, stmt_handle: int, sql: SQLStatement, run_time_ns: int, error: sqlite3.Error | None = None):
        if not self.wants(TraceEventCode.PROFILE):
            return

        self._emit(
            TraceEvent(
                event_code=TraceEventCode.PROFILE,
                conn_handle=self.conn_handle,
                stmt_handle=stmt_handle,
                stmt_or_trigger=sql,
                run_time_ns=run_time_ns,
                db_error=DBError.from_exception(error) if error else DBError(),
            )
        )

    def row(self, stmt_handle: int, sql: SQLStatement):
        if not self.wants(TraceEventCode.ROW):
            return

        self._emit(
            TraceEvent(
                event_code=TraceEventCode.ROW,
                conn_handle=self.conn_handle,
                stmt_handle=stmt_handle,
                stmt_or_trigger=sql,
            )
        )

    def close(self):
        if not self.wants(TraceEventCode.CLOSE):
            return

        self._emit(TraceEvent(event_code=TraceEventCode.CLOSE, conn_handle=self.conn_handle))

    # ---------------------------------------- #
    # Event Delivery                           #
    # ---------------------------------------- #
    def _on_sqlite_statement(self, expanded: str):
        # Statements run without going through the driver have no known handle or raw text
        stmt_handle, sql = self._running or (0, expanded)
        expanded_sql = Optional.Some(expanded) if self._config.want_expanded_sql else Optional.Nothing()
        if self._running and self._running_started:
            sql, expanded_sql = TRIGGER_MARKER, Optional.Nothing()
        elif self._running:
            self._running_started = True

        self._emit(
            TraceEvent(
                event_code=TraceEventCode.STMT,
                conn_handle=self.conn_handle,
                stmt_handle=stmt_handle,
                stmt_or_trigger=sql,
                expanded_sql=expanded_sql,
            )
        )

    def _emit(self, event: TraceEvent):
        logger.debug("Delivering trace event %s", event.event_code)
        self._config.callback(event)
