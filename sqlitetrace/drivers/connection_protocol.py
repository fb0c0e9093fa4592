import sqlite3
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class SQLiteConnection(Protocol):
    def close(self) -> None: ...

    def cursor(self) -> sqlite3.Cursor: ...

    def set_trace_callback(self, trace_callback: Callable[[str], object] | None) -> None: ...
