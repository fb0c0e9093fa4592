"""Provides the SQLite implementation of driver transactions.

The driver opens its connections with `isolation_level=None`, so the `sqlite3` module
never starts transactions on its own. `SQLiteTransaction` issues `BEGIN`, `COMMIT`, and
`ROLLBACK` itself, which also makes those statements show up in the trace.
"""
import logging
from typing import Any, TYPE_CHECKING

from sqlitetrace.drivers.exceptions import DriverQueryFailed, TransactionError
from sqlitetrace.drivers.statement import ExecResult, PreparedStatement, Rows, execute, execute_result
from sqlitetrace.drivers.transactions import BaseDriverTransaction

if TYPE_CHECKING:
    from sqlitetrace.drivers.driver import SQLiteDriver
    from sqlitetrace.drivers.shared_types import Cursor
    from sqlitetrace.drivers.tracing import Tracer


logger = logging.getLogger(__name__)


class SQLiteTransaction(BaseDriverTransaction):
    """Manages a SQLite transaction with explicit BEGIN, COMMIT, and ROLLBACK statements.

    Statements run through the transaction's `execute`, `query`, and `prepare` methods share
    the driver's connection and so happen inside the transaction while it is open.

    Attributes:
        cursor: The SQLite cursor used for the transaction control statements.
    """
    def __init__(self, cursor: "Cursor", tracer: "Tracer", driver: "SQLiteDriver | None" = None):
        """
        Args:
            cursor: The SQLite cursor used to begin and end the transaction.
            tracer: Reports the trace events of the connection the cursor belongs to.
            driver: The driver the transaction was created by, named in raised errors.
        """
        self.cursor = cursor
        self._tracer = tracer
        self._driver = driver
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self):
        """Starts the transaction if it isn't already open.

        Raises:
            TransactionError: If SQLite refuses to begin, for example when the connection
                is already inside another transaction.
        """
        if not self._is_open:
            self._control("BEGIN;", "begin")
            self._is_open = True

    def commit(self):
        """Commits the active transaction.

        SQLite keeps the transaction active when COMMIT fails, for example when a deferred
        foreign key is still violated. It is rolled back before the error is raised so the
        connection can begin new transactions.

        Raises:
            TransactionError: If the commit failed, the transaction is closed either way.
        """
        if not self._is_open:
            return

        try:
            self._control("COMMIT;", "commit")
        except TransactionError:
            self._rollback_failed_commit()
            raise
        finally:
            self._is_open = False

    def rollback(self):
        """Rolls back the active transaction."""
        if self._is_open:
            self._control("ROLLBACK;", "roll back")
            self._is_open = False

    def close(self):
        """Closes the cursor used for the control statements."""
        self.cursor.close()

    def execute(self, sql: str, *params: Any) -> ExecResult:
        cursor = self.cursor.connection.cursor()
        try:
            return execute_result(cursor, self._tracer, sql, params, self._driver)
        finally:
            cursor.close()

    def query(self, sql: str, *params: Any) -> Rows:
        cursor = self.cursor.connection.cursor()
        try:
            started_ns = execute(cursor, self._tracer, sql, params, self._driver, expect_rows=True)
        except DriverQueryFailed:
            cursor.close()
            raise

        return Rows(cursor, sql, self._tracer, started_ns, self._driver)

    def prepare(self, sql: str) -> PreparedStatement:
        return PreparedStatement(self.cursor.connection.cursor(), self._tracer, sql, self._driver)

    def _control(self, sql: str, action: str):
        try:
            execute(self.cursor, self._tracer, sql, (), self._driver)
        except DriverQueryFailed as error:
            raise TransactionError(f"Failed to {action} the transaction.", driver=self._driver) from error

    def _rollback_failed_commit(self):
        try:
            self._control("ROLLBACK;", "roll back")
        except TransactionError:
            logger.exception("Failed to roll back the transaction after its commit failed")
