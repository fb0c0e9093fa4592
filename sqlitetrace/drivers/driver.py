import logging
import sqlite3
from typing import Any, NotRequired, TypedDict

from sqlitetrace.drivers.connection_protocol import SQLiteConnection
from sqlitetrace.drivers.drivers import BaseDriver
from sqlitetrace.drivers.exceptions import DriverClosed, DriverConnectFailed, DriverQueryFailed
from sqlitetrace.drivers.statement import ExecResult, PreparedStatement, Rows, execute, execute_result
from sqlitetrace.drivers.tracing import TraceConfig, Tracer
from sqlitetrace.drivers.transaction import SQLiteTransaction


logger = logging.getLogger(__name__)


class SQLiteSettings(TypedDict):
    """Configuration settings for SQLite database connections.

    Attributes:
        database: Path to the SQLite database file. Use ":memory:" for an in-memory database.
        trace: Trace hook applied as soon as the connection is opened. Without it no trace
            events are reported.
        timeout: Seconds to wait for a locked database before failing.
    """
    database: str
    trace: NotRequired[TraceConfig | None]
    timeout: NotRequired[float]


class SQLiteDriver(BaseDriver):
    """SQLite driver that reports trace events for the statements it runs.

    Connections are opened in autocommit mode (`isolation_level=None`): statements run
    directly on the driver commit immediately, grouping them requires a transaction from
    `transaction()`.

    Attributes:
        connection: The underlying sqlite3.Connection instance
        _settings: The configuration settings used for this connection
    """
    _default_settings = SQLiteSettings(database=":memory:", trace=None, timeout=5.0)

    def __init__(self, connection: SQLiteConnection, settings: SQLiteSettings):
        """Initialize a new SQLiteDriver and install its trace hook.

        Args:
            connection: An established SQLite database connection
            settings: Configuration settings used for this connection
        """
        super().__init__()
        self.connection = connection
        self._settings = settings
        self._tracer = Tracer(settings.get("trace"), id(connection))
        self._tracer.attach(connection)
        self.closed = False

    @classmethod
    def connect(cls, settings: SQLiteSettings | None = None) -> "SQLiteDriver":
        """Create a new SQLite database connection.

        Args:
            settings: Optional configuration settings for the connection.
                     If omitted, defaults to an in-memory database without tracing.

        Returns:
            A new SQLiteDriver instance with an established connection

        Raises:
            DriverConnectFailed: If the connection attempt fails
        """
        _settings = cls._default_settings | (settings or {})
        try:
            connection = sqlite3.connect(_settings["database"], timeout=_settings["timeout"], isolation_level=None)
        except sqlite3.Error as error:
            raise DriverConnectFailed(
                f"Failed to open the SQLite database {_settings['database']!r}.", driver=cls
            ) from error

        logger.debug("Opened SQLite database %r", _settings["database"])
        return cls(connection, _settings)

    @property
    def conn_handle(self) -> int:
        """The handle trace events of this connection report."""
        return self._tracer.conn_handle

    def ping(self):
        """Reads the schema version to make sure the file really is a usable database.

        Raises:
            DriverConnectFailed: If the database can't be read.
        """
        try:
            self.execute("PRAGMA schema_version;")
        except DriverQueryFailed as error:
            raise DriverConnectFailed(
                f"SQLite database {self._settings['database']!r} is not usable.", driver=self
            ) from error

    def close(self):
        """Close the SQLite database connection and report the close event."""
        if self.closed:
            return

        self.connection.close()
        self.closed = True
        self._tracer.close()
        logger.debug("Closed SQLite database %r", self._settings["database"])

    def transaction(self) -> SQLiteTransaction:
        return SQLiteTransaction(self._cursor(), self._tracer, self)

    def execute(self, sql: str, *params: Any) -> ExecResult:
        cursor = self._cursor()
        try:
            return execute_result(cursor, self._tracer, sql, params, self)
        finally:
            cursor.close()

    def query(self, sql: str, *params: Any) -> Rows:
        cursor = self._cursor()
        try:
            started_ns = execute(cursor, self._tracer, sql, params, self, expect_rows=True)
        except DriverQueryFailed:
            cursor.close()
            raise

        return Rows(cursor, sql, self._tracer, started_ns, self)

    def prepare(self, sql: str) -> PreparedStatement:
        return PreparedStatement(self._cursor(), self._tracer, sql, self)

    def _cursor(self) -> sqlite3.Cursor:
        if self.closed:
            raise DriverClosed("The SQLite connection is closed.", driver=self)

        return self.connection.cursor()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(database={self._settings['database']!r})"
