import sqlite3
from typing import Any, Callable, Protocol, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from sqlitetrace.trace_events import TraceEvent

type SQLStatement = str
type SQLParams = Sequence[Any]
type TraceCallback = Callable[["TraceEvent"], int | None]


class Cursor(Protocol):
    @property
    def connection(self) -> sqlite3.Connection:
        ...

    @property
    def description(self) -> tuple[tuple[Any, ...], ...] | None:
        ...

    @property
    def lastrowid(self) -> int | None:
        ...

    @property
    def rowcount(self) -> int:
        ...

    def close(self) -> None:
        ...

    def execute(self, sql: SQLStatement, params: SQLParams) -> "Cursor":
        ...

    def fetchone(self) -> tuple[Any, ...] | None:
        ...
