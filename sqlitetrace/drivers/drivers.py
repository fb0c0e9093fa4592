"""Drivers are the interface between sqlitetrace and the database. They are responsible for connecting to the database,
reporting trace events, managing transactions, and executing statements. Each driver must implement the BaseDriver
interface, which defines the methods the transaction wrapper and the demo use to interact with the database.

Drivers should avoid over engineering and should allow exceptions to bubble up to the caller. Database exceptions
should be replaced with the driver exceptions in sqlitetrace.drivers.exceptions, chained to the original error, so the
caller can decide which failures are recoverable."""
from abc import ABC, abstractmethod
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from sqlitetrace.drivers.statement import ExecResult, PreparedStatement, Rows
    from sqlitetrace.drivers.transactions import BaseDriverTransaction


class BaseDriver(ABC):
    # ---------------------------------------- #
    # Connection Management                    #
    # ---------------------------------------- #
    @classmethod
    @abstractmethod
    def connect(cls, settings: dict[str, Any] | None = None) -> "BaseDriver":
        """Connects to the database."""
        ...

    @abstractmethod
    def ping(self):
        """Verifies that the connection can reach a usable database."""
        ...

    @abstractmethod
    def close(self):
        """Disconnects from the database."""
        ...

    # ---------------------------------------- #
    # Transaction Management                   #
    # ---------------------------------------- #
    @abstractmethod
    def transaction(self) -> "BaseDriverTransaction":
        """Creates a transaction for the database. The transaction isn't started until it is opened."""
        ...

    # ---------------------------------------- #
    # Statement Execution                      #
    # ---------------------------------------- #
    @abstractmethod
    def execute(self, sql: str, *params: Any) -> "ExecResult":
        """Runs a statement that doesn't produce rows."""
        ...

    @abstractmethod
    def query(self, sql: str, *params: Any) -> "Rows":
        """Runs a statement and returns the rows it produces."""
        ...

    @abstractmethod
    def prepare(self, sql: str) -> "PreparedStatement":
        """Prepares a statement to be run any number of times."""
        ...

    # ---------------------------------------- #
    # Context Management                       #
    # ---------------------------------------- #
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
