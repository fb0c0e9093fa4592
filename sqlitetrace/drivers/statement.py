"""Statement execution shared by the driver and its transactions.

Python's `sqlite3` has no explicit prepare step, a `PreparedStatement` keeps a dedicated
cursor bound to one SQL string so repeated executions reuse SQLite's cached statement.
"""
import sqlite3
import time
from dataclasses import dataclass
from typing import Any, Iterator, TYPE_CHECKING

from sqlitetrace.drivers.exceptions import DriverClosed, DriverQueryFailed

if TYPE_CHECKING:
    from sqlitetrace.drivers.drivers import BaseDriver
    from sqlitetrace.drivers.shared_types import Cursor, SQLParams, SQLStatement
    from sqlitetrace.drivers.tracing import Tracer


@dataclass(frozen=True)
class ExecResult:
    """Outcome of a statement that doesn't produce rows."""
    last_insert_id: int
    rows_affected: int


class Rows:
    """Iterates the rows produced by a query.

    A row trace event is emitted for each row and a profile event once the rows are
    exhausted or the cursor is closed early. Use it as a context manager so the cursor is
    closed even when iteration fails.
    """
    def __init__(
        self,
        cursor: "Cursor",
        sql: "SQLStatement",
        tracer: "Tracer",
        started_ns: int,
        driver: "BaseDriver | None" = None,
        *,
        owns_cursor: bool = True,
    ):
        self._cursor = cursor
        self._sql = sql
        self._tracer = tracer
        self._started_ns = started_ns
        self._driver = driver
        self._owns_cursor = owns_cursor
        # Statements without a result set got their profile event when they ran
        self._finished = cursor.description is None
        self.closed = False

    def __iter__(self) -> Iterator[tuple[Any, ...]]:
        return self

    def __next__(self) -> tuple[Any, ...]:
        if self._finished:
            raise StopIteration

        try:
            row = self._cursor.fetchone()
        except sqlite3.Error as error:
            self._finish(error)
            raise DriverQueryFailed("Failed to fetch the next row.", driver=self._driver) from error

        if row is None:
            self._finish()
            raise StopIteration

        self._tracer.row(id(self._cursor), self._sql)
        return row

    def close(self):
        if self.closed:
            return

        self._finish()
        self.closed = True
        if self._owns_cursor:
            self._cursor.close()

    def _finish(self, error: sqlite3.Error | None = None):
        if self._finished:
            return

        self._finished = True
        self._tracer.profile(id(self._cursor), self._sql, time.perf_counter_ns() - self._started_ns, error)

    def __enter__(self) -> "Rows":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def execute(
    cursor: "Cursor", tracer: "Tracer", sql: "SQLStatement", params: "SQLParams", driver=None, *, expect_rows: bool = False
) -> int:
    """Runs a statement on the cursor with tracing and returns its start time in nanoseconds.

    The profile event is emitted here unless `expect_rows` is set and the statement has a
    result set, `Rows` emits it once the rows are done.

    Raises:
        DriverQueryFailed: If SQLite rejects the statement.
    """
    stmt_handle = id(cursor)
    tracer.begin(stmt_handle, sql)
    started_ns = time.perf_counter_ns()
    try:
        cursor.execute(sql, params)
    except sqlite3.Error as error:
        tracer.profile(stmt_handle, sql, time.perf_counter_ns() - started_ns, error)
        raise DriverQueryFailed(f"Failed to execute {sql!r}.", driver=driver) from error
    finally:
        tracer.end()

    if not expect_rows or cursor.description is None:
        tracer.profile(stmt_handle, sql, time.perf_counter_ns() - started_ns)

    return started_ns


def execute_result(cursor: "Cursor", tracer: "Tracer", sql: "SQLStatement", params: "SQLParams", driver=None) -> ExecResult:
    execute(cursor, tracer, sql, params, driver)
    return ExecResult(last_insert_id=cursor.lastrowid or 0, rows_affected=cursor.rowcount)


class PreparedStatement:
    """A statement bound to its own cursor, executed any number of times with new parameters.

    Attributes:
        sql: The statement text.
    """
    def __init__(self, cursor: "Cursor", tracer: "Tracer", sql: "SQLStatement", driver: "BaseDriver | None" = None):
        self.sql = sql
        self._cursor = cursor
        self._tracer = tracer
        self._driver = driver
        self._rows: Rows | None = None
        self.closed = False

    def execute(self, *params: Any) -> ExecResult:
        """Runs the statement with the given parameters.

        Returns:
            The id of the last inserted row and the number of rows affected.
        """
        self._reset()
        return execute_result(self._cursor, self._tracer, self.sql, params, self._driver)

    def query(self, *params: Any) -> Rows:
        """Runs the statement with the given parameters and returns its rows.

        Querying again closes the rows of the previous query since they share the cursor.
        """
        self._reset()
        started_ns = execute(self._cursor, self._tracer, self.sql, params, self._driver, expect_rows=True)
        self._rows = Rows(self._cursor, self.sql, self._tracer, started_ns, self._driver, owns_cursor=False)
        return self._rows

    def close(self):
        if self.closed:
            return

        if self._rows:
            self._rows.close()

        self.closed = True
        self._cursor.close()

    def _reset(self):
        if self.closed:
            raise DriverClosed(f"Statement {self.sql!r} is closed.", driver=self._driver)

        if self._rows:
            self._rows.close()
            self._rows = None

    def __enter__(self) -> "PreparedStatement":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
