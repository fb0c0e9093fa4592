"""Result types exchanged between the transaction wrapper and the work it runs.

A unit of work reports a failure it wants rolled back by returning `WorkResult.Failure`
instead of raising. The wrapper answers with a `TransactionOutcome`, the single source of
truth for what happened to the transaction:

-   `TransactionOutcome.Committed(value)`: the work succeeded and the commit went through.
-   `TransactionOutcome.RolledBack(reason)`: the work reported a failure, or a rollback was
    requested even though it succeeded.
-   `TransactionOutcome.Failed(error)`: the transaction couldn't begin or commit.

Outcomes support pattern matching:

    ```python
    match tx_wrap(driver, work):
        case TransactionOutcome.Committed(value):
            ...
        case TransactionOutcome.RolledBack(reason):
            ...
        case TransactionOutcome.Failed(error):
            ...
    ```
"""
from typing import Generic, NoReturn, Type, TypeVar

from tramp.results import Error, Value

T = TypeVar("T")


class RollbackRequested:
    """Reason given when the wrapper was asked to roll back work that succeeded."""
    def __repr__(self) -> str:
        return "ROLLBACK_REQUESTED"


ROLLBACK_REQUESTED = RollbackRequested()


class WorkResult(Generic[T]):
    """What a unit of work returns when it wants to steer the transaction.

    `WorkResult.Success(value)` commits and hands `value` to `TransactionOutcome.Committed`,
    `WorkResult.Failure(error)` rolls back. Both are `tramp.results` results and unwrap
    and match like any other.
    """
    Failure: "Type[WorkFailure[T]]"
    Success: "Type[WorkSuccess[T]]"


class WorkSuccess(Value, WorkResult):
    def __init__(self, value: T = None):
        super().__init__(value)

    def __repr__(self) -> str:
        return f"WorkResult.Success({self.value!r})"


class WorkFailure(Error, WorkResult):
    def __repr__(self) -> str:
        return f"WorkResult.Failure({self.error!r})"


WorkResult.Success = WorkSuccess
WorkResult.Failure = WorkFailure


class TransactionOutcome(Generic[T]):
    Committed: "Type[Committed[T]]"
    RolledBack: "Type[RolledBack[T]]"
    Failed: "Type[Failed[T]]"

    def or_raise(self) -> "TransactionOutcome[T]":
        """Returns the outcome, raising the error behind it when the transaction failed."""
        return self

    def __bool__(self) -> bool:
        return False


class Committed(TransactionOutcome[T]):
    __match_args__ = ("value",)

    def __init__(self, value: T = None):
        self.value = value

    def __bool__(self) -> bool:
        return True

    def __eq__(self, other):
        if not isinstance(other, TransactionOutcome):
            return NotImplemented

        return isinstance(other, Committed) and self.value == other.value

    def __hash__(self):
        return hash((Committed, self.value))

    def __repr__(self) -> str:
        return f"TransactionOutcome.Committed({self.value!r})"


class RolledBack(TransactionOutcome[T]):
    """The transaction was rolled back.

    Attributes:
        reason: The error the work reported or `ROLLBACK_REQUESTED`.
    """
    __match_args__ = ("reason",)

    def __init__(self, reason: Exception | RollbackRequested):
        self.reason = reason

    @property
    def requested(self) -> bool:
        return self.reason is ROLLBACK_REQUESTED

    def or_raise(self) -> "TransactionOutcome[T]":
        if isinstance(self.reason, Exception):
            raise self.reason

        return self

    def __eq__(self, other):
        if not isinstance(other, TransactionOutcome):
            return NotImplemented

        return isinstance(other, RolledBack) and self.reason is other.reason

    def __hash__(self):
        return hash((RolledBack, id(self.reason)))

    def __repr__(self) -> str:
        return f"TransactionOutcome.RolledBack({self.reason!r})"


class Failed(TransactionOutcome[T]):
    __match_args__ = ("error",)

    def __init__(self, error: Exception):
        self.error = error

    def or_raise(self) -> NoReturn:
        raise self.error

    def __eq__(self, other):
        if not isinstance(other, TransactionOutcome):
            return NotImplemented

        return isinstance(other, Failed) and self.error is other.error

    def __hash__(self):
        return hash((Failed, id(self.error)))

    def __repr__(self) -> str:
        return f"TransactionOutcome.Failed({self.error!r})"


TransactionOutcome.Committed = Committed
TransactionOutcome.RolledBack = RolledBack
TransactionOutcome.Failed = Failed
