from abc import ABC, abstractmethod
from typing import Any, TYPE_CHECKING


if TYPE_CHECKING:
    from sqlitetrace.drivers.statement import ExecResult, PreparedStatement, Rows


class BaseDriverTransaction(ABC):
    # ---------------------------------------- #
    # Transaction Management                   #
    # ---------------------------------------- #
    @abstractmethod
    def close(self):
        """Closes the transaction to further changes."""
        ...

    @abstractmethod
    def commit(self):
        """Commits the transaction to the database."""
        ...

    @abstractmethod
    def open(self):
        """Begins the transaction."""
        ...

    @abstractmethod
    def rollback(self):
        """Rolls back all changes to the database that have happened inside the transaction."""
        ...

    # ---------------------------------------- #
    # Statement Execution                      #
    # ---------------------------------------- #
    @abstractmethod
    def execute(self, sql: str, *params: Any) -> "ExecResult":
        """Runs a statement that doesn't produce rows inside the transaction."""
        ...

    @abstractmethod
    def query(self, sql: str, *params: Any) -> "Rows":
        """Runs a statement inside the transaction and returns the rows it produces."""
        ...

    @abstractmethod
    def prepare(self, sql: str) -> "PreparedStatement":
        """Prepares a statement bound to the transaction."""
        ...

    # ---------------------------------------- #
    # Context Management                       #
    # ---------------------------------------- #
    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            self.rollback() if exc_type else self.commit()
        finally:
            self.close()
