"""Trace events reported by the tracing SQLite driver and the formatter that renders them.

The driver assembles a `TraceEvent` for every enabled event category and hands it to the
callback registered in its `TraceConfig`. `print_trace_event` is the callback used by the
demo program, it prints one line per event:

    Trace: ev 0x1, conn 0x7f3a9c0, stmt 0x7f3a9f0 {"INSERT INTO t1 ..."} expanded {"INSERT ..."}; 0 ns.

The statement text is shown in curly braces since, of the paired ASCII characters, they
are the least used in SQL syntax. Braces showing up inside the statement usually mean a
template or string interpolation leaked into the SQL.
"""
import json
import sqlite3
from dataclasses import dataclass, field

from tramp.optionals import Optional

from sqlitetrace.trace_mask import TraceEventCode


@dataclass(frozen=True)
class DBError:
    """SQLite error codes attached to an event, all zero when the statement didn't fail."""
    code: int = 0
    extended_code: int = 0
    message: str = ""

    @classmethod
    def from_exception(cls, error: sqlite3.Error) -> "DBError":
        extended_code = getattr(error, "sqlite_errorcode", None) or sqlite3.SQLITE_ERROR
        return cls(code=extended_code & 0xFF, extended_code=extended_code, message=str(error))

    def __bool__(self) -> bool:
        return self.code != 0 or self.extended_code != 0


@dataclass(frozen=True)
class TraceEvent:
    """A single trace notification.

    Attributes:
        event_code: The category that fired.
        conn_handle: Identifies the connection the event belongs to.
        stmt_handle: Identifies the statement, zero for connection level events.
        stmt_or_trigger: The statement text as written by the caller.
        expanded_sql: The statement with its bound parameters substituted, when the driver
            could expand it.
        run_time_ns: Estimated run time, only meaningful for profile events.
        db_error: The error the statement failed with, if any.
    """
    event_code: TraceEventCode
    conn_handle: int
    stmt_handle: int = 0
    stmt_or_trigger: str = ""
    expanded_sql: Optional[str] = field(default_factory=Optional.Nothing)
    run_time_ns: int = 0
    db_error: DBError = field(default_factory=DBError)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def format_trace_event(event: TraceEvent) -> str:
    if event.db_error:
        db_error_text = f"; DB error: {event.db_error!r}"
    else:
        db_error_text = "."

    expanded = event.expanded_sql.value_or(None)
    if not expanded:
        expanded_text = ""
    elif expanded == event.stmt_or_trigger:
        expanded_text = " no change when expanded"
    else:
        expanded_text = f" expanded {{{_quote(expanded)}}}"

    return (
        f"Trace: ev 0x{int(event.event_code):x}, conn 0x{event.conn_handle:x}, stmt 0x{event.stmt_handle:x} "
        f"{{{_quote(event.stmt_or_trigger)}}}{expanded_text}; {event.run_time_ns} ns{db_error_text}"
    )


def print_trace_event(event: TraceEvent) -> int:
    print(format_trace_event(event), flush=True)
    return 0
