from typing import TYPE_CHECKING, Type

if TYPE_CHECKING:
    from sqlitetrace.drivers.drivers import BaseDriver


class BaseDriverException(Exception):
    """Base exception for driver exceptions."""
    def __init__(self, *args, driver: "BaseDriver | Type[BaseDriver] | None" = None):
        super().__init__(*args)

        self.driver = driver
        if driver:
            self.add_note(f" - Using Driver: {driver!r}")


class DriverConnectFailed(BaseDriverException):
    """Raised when a driver fails to open or verify a database connection."""


class DriverQueryFailed(BaseDriverException):
    """Raised when a driver fails to execute a statement or fetch its rows."""


class DriverClosed(BaseDriverException):
    """Raised when a statement is run through a connection, statement, or cursor that was already closed."""


class TransactionError(BaseDriverException):
    """Raised for errors related to the transaction lifecycle (begin, commit, rollback)."""
