"""Runs a unit of work inside a transaction and decides between commit and rollback.

Once the transaction has begun exactly one of commit or rollback is attempted:

-   The work raises: rollback, then the very same exception propagates to the caller.
-   The work returns `WorkResult.Failure`: rollback, the outcome carries the error.
-   The work returns normally while `rollback_always` is set: rollback anyway. This lets
    tests exercise the rollback path without changing the work itself.
-   Otherwise: commit. A failing commit is reported as `TransactionOutcome.Failed` and is
    neither retried nor followed by a rollback from here. Discarding the work of a failed
    commit is up to the driver's transaction.

Example:
    ```python
    def add_notes(transaction):
        for note in notes:
            transaction.execute("INSERT INTO t1 (seq_num, note) VALUES (?, ?)", 0, note)
        return len(notes)

    match tx_wrap(driver, add_notes):
        case TransactionOutcome.Committed(count):
            print(f"Added {count} notes")
        case TransactionOutcome.Failed(error):
            raise error
    ```
"""
import logging
from typing import Callable, TYPE_CHECKING

from sqlitetrace.drivers.exceptions import BaseDriverException
from sqlitetrace.results import ROLLBACK_REQUESTED, TransactionOutcome, WorkResult

if TYPE_CHECKING:
    from sqlitetrace.drivers import BaseDriver, BaseDriverTransaction

type UnitOfWork[T] = Callable[["BaseDriverTransaction"], T | WorkResult[T]]

logger = logging.getLogger(__name__)


def tx_wrap[T](
    driver: "BaseDriver", unit_of_work: UnitOfWork[T], *, rollback_always: bool = False
) -> TransactionOutcome[T]:
    """Runs `unit_of_work` with a new transaction of `driver`.

    Args:
        driver: The driver that creates the transaction.
        unit_of_work: Called with the open transaction. It can return a plain value, which
            counts as success, or a `WorkResult`.
        rollback_always: Roll back even when the work succeeds.

    Returns:
        The outcome of the transaction. Begin and commit failures are returned as
        `TransactionOutcome.Failed`, not raised.

    Raises:
        Any exception raised by `unit_of_work`, unchanged, after the transaction was rolled back.
    """
    try:
        transaction = driver.transaction()
    except BaseDriverException as error:
        return _begin_failed(error)

    try:
        try:
            transaction.open()
        except BaseDriverException as error:
            return _begin_failed(error)

        try:
            result = unit_of_work(transaction)
        except BaseException:
            _rollback_after_fault(transaction)
            raise

        if not isinstance(result, WorkResult):
            result = WorkResult.Success(result)

        match result:
            case WorkResult.Failure(error):
                return _rollback(transaction, error)

            case _ if rollback_always:
                return _rollback(transaction, ROLLBACK_REQUESTED)

        try:
            transaction.commit()
        except BaseDriverException as error:
            logger.error("Failed to commit transaction: %s", error)
            return TransactionOutcome.Failed(error)

        return TransactionOutcome.Committed(result.value)

    finally:
        transaction.close()


def _begin_failed(error: BaseDriverException) -> TransactionOutcome:
    logger.error("Failed to begin transaction: %s", error)
    return TransactionOutcome.Failed(error)


def _rollback(transaction: "BaseDriverTransaction", reason) -> TransactionOutcome:
    try:
        transaction.rollback()
    except BaseDriverException as error:
        logger.error("Failed to roll back transaction: %s", error)
        return TransactionOutcome.Failed(error)

    logger.debug("Rolled back transaction: %r", reason)
    return TransactionOutcome.RolledBack(reason)


def _rollback_after_fault(transaction: "BaseDriverTransaction"):
    # The fault raised by the work must reach the caller, a rollback error can only be logged
    try:
        transaction.rollback()
    except BaseDriverException:
        logger.exception("Failed to roll back transaction after the unit of work raised")
