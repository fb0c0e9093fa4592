"""
Tests for the commit/rollback discipline of the transaction wrapper.
"""
import logging
from dataclasses import dataclass, field

import pytest
from tramp.results import Result, ResultWasAnErrorException

from sqlitetrace.drivers import BaseDriver, BaseDriverTransaction, SQLiteDriver
from sqlitetrace.drivers.exceptions import DriverClosed, DriverQueryFailed, TransactionError
from sqlitetrace.results import ROLLBACK_REQUESTED, TransactionOutcome, WorkResult
from sqlitetrace.tx_wrap import tx_wrap


@dataclass
class CountingTransaction(BaseDriverTransaction):
    """Fake transaction counting lifecycle calls, optionally failing some of them."""
    fail_on: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    def _call(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise TransactionError(f"{name} failed")

    def open(self):
        self._call("open")

    def commit(self):
        self._call("commit")

    def rollback(self):
        self._call("rollback")

    def close(self):
        self._call("close")

    def execute(self, sql, *params):
        raise NotImplementedError

    def query(self, sql, *params):
        raise NotImplementedError

    def prepare(self, sql):
        raise NotImplementedError


@dataclass
class CountingDriver(BaseDriver):
    """Fake driver handing out a single counting transaction."""
    transaction_: CountingTransaction = field(default_factory=CountingTransaction)

    @classmethod
    def connect(cls, settings=None):
        return cls()

    def ping(self):
        pass

    def close(self):
        pass

    def transaction(self):
        return self.transaction_

    def execute(self, sql, *params):
        raise NotImplementedError

    def query(self, sql, *params):
        raise NotImplementedError

    def prepare(self, sql):
        raise NotImplementedError


@pytest.fixture
def fake():
    return CountingDriver()


def ended(driver):
    return [call for call in driver.transaction_.calls if call in ("commit", "rollback")]


def test_commit_on_success(fake):
    outcome = tx_wrap(fake, lambda transaction: 4)

    assert outcome == TransactionOutcome.Committed(4)
    assert fake.transaction_.calls == ["open", "commit", "close"]


def test_success_result_is_unwrapped(fake):
    outcome = tx_wrap(fake, lambda transaction: WorkResult.Success("done"))

    assert outcome == TransactionOutcome.Committed("done")


def test_rollback_always(fake):
    outcome = tx_wrap(fake, lambda transaction: 4, rollback_always=True)

    match outcome:
        case TransactionOutcome.RolledBack(reason):
            assert reason is ROLLBACK_REQUESTED

        case _:
            pytest.fail(f"Expected a rollback, got {outcome!r}")

    assert outcome.requested
    assert ended(fake) == ["rollback"]


def test_failure_result_rolls_back(fake):
    error = ValueError("bad row")

    outcome = tx_wrap(fake, lambda transaction: WorkResult.Failure(error))

    assert outcome == TransactionOutcome.RolledBack(error)
    assert not outcome.requested
    assert ended(fake) == ["rollback"]

    with pytest.raises(ValueError) as exc_info:
        outcome.or_raise()

    assert exc_info.value is error


def test_exception_propagates_unchanged(fake):
    error = RuntimeError("unit of work blew up")

    def work(transaction):
        raise error

    with pytest.raises(RuntimeError) as exc_info:
        tx_wrap(fake, work)

    assert exc_info.value is error
    assert fake.transaction_.calls == ["open", "rollback", "close"]


def test_exception_wins_over_rollback_failure(fake, caplog):
    fake.transaction_.fail_on.add("rollback")
    error = KeyError("missing")

    def work(transaction):
        raise error

    with caplog.at_level(logging.ERROR, logger="sqlitetrace"):
        with pytest.raises(KeyError) as exc_info:
            tx_wrap(fake, work)

    assert exc_info.value is error
    assert "Failed to roll back" in caplog.text
    assert fake.transaction_.calls[-1] == "close"


def test_exception_ignores_rollback_always(fake):
    def work(transaction):
        raise RuntimeError()

    with pytest.raises(RuntimeError):
        tx_wrap(fake, work, rollback_always=True)

    assert ended(fake) == ["rollback"]


def test_begin_failure(fake):
    fake.transaction_.fail_on.add("open")
    ran = []

    outcome = tx_wrap(fake, ran.append)

    match outcome:
        case TransactionOutcome.Failed(error):
            assert isinstance(error, TransactionError)

        case _:
            pytest.fail(f"Expected a failure, got {outcome!r}")

    assert ran == []
    assert ended(fake) == []


def test_commit_failure_is_not_retried(fake):
    fake.transaction_.fail_on.add("commit")

    outcome = tx_wrap(fake, lambda transaction: None)

    assert isinstance(outcome, TransactionOutcome.Failed)
    assert ended(fake) == ["commit"]
    assert fake.transaction_.calls[-1] == "close"

    with pytest.raises(TransactionError):
        outcome.or_raise()


def test_rollback_failure_after_failure_result(fake):
    fake.transaction_.fail_on.add("rollback")

    outcome = tx_wrap(fake, lambda transaction: WorkResult.Failure(ValueError()))

    assert isinstance(outcome, TransactionOutcome.Failed)
    assert ended(fake) == ["rollback"]


@pytest.mark.parametrize("rollback_always", [False, True])
@pytest.mark.parametrize("work_fails", [False, True])
def test_exactly_one_of_commit_or_rollback(fake, rollback_always, work_fails):
    def work(transaction):
        if work_fails:
            raise RuntimeError()

    try:
        tx_wrap(fake, work, rollback_always=rollback_always)
    except RuntimeError:
        pass

    assert len(ended(fake)) == 1


# ---------------------------------------- #
# Against SQLite                           #
# ---------------------------------------- #
INSERT = "INSERT INTO notes (note) VALUES (?)"


def insert_four(transaction):
    for index in range(4):
        transaction.execute(INSERT, f"note-{index}")

    return 4


def select_all(transaction):
    with transaction.query("SELECT id FROM notes") as rows:
        return len(list(rows))


def test_committed_rows_are_visible(driver):
    assert tx_wrap(driver, insert_four) == TransactionOutcome.Committed(4)
    assert tx_wrap(driver, select_all) == TransactionOutcome.Committed(4)


def test_rollback_always_discards_rows(driver):
    outcome = tx_wrap(driver, insert_four, rollback_always=True)

    assert outcome.requested
    with driver.query("SELECT COUNT(*) FROM notes") as rows:
        assert next(rows) == (0,)


def test_raising_work_discards_rows(driver):
    def insert_then_fail(transaction):
        insert_four(transaction)
        transaction.execute("INSERT INTO notes (note) VALUES (NULL)")

    with pytest.raises(DriverQueryFailed):
        tx_wrap(driver, insert_then_fail)

    assert tx_wrap(driver, select_all) == TransactionOutcome.Committed(0)


def test_begin_failure_against_sqlite(driver):
    outer = driver.transaction()
    outer.open()

    outcome = tx_wrap(driver, insert_four)

    assert isinstance(outcome, TransactionOutcome.Failed)
    outer.rollback()
    outer.close()


def test_closed_driver_fails_to_begin():
    driver = SQLiteDriver.connect()
    driver.close()

    outcome = tx_wrap(driver, lambda transaction: 1)

    match outcome:
        case TransactionOutcome.Failed(error):
            assert isinstance(error, DriverClosed)

        case _:
            pytest.fail(f"Expected a failure, got {outcome!r}")


@pytest.fixture
def deferred_fk(driver):
    driver.execute("PRAGMA foreign_keys = ON")
    driver.execute("CREATE TABLE authors (id INTEGER PRIMARY KEY)")
    driver.execute(
        "CREATE TABLE books (id INTEGER PRIMARY KEY,"
        " author_id INTEGER NOT NULL REFERENCES authors (id) DEFERRABLE INITIALLY DEFERRED)"
    )
    return driver


def test_failed_commit_leaves_connection_usable(deferred_fk):
    def insert_orphan(transaction):
        transaction.execute("INSERT INTO books (author_id) VALUES (?)", 42)
        return 1

    outcome = tx_wrap(deferred_fk, insert_orphan)

    assert isinstance(outcome, TransactionOutcome.Failed)
    assert not deferred_fk.connection.in_transaction
    assert tx_wrap(deferred_fk, lambda transaction: 1) == TransactionOutcome.Committed(1)

    with deferred_fk.query("SELECT COUNT(*) FROM books") as rows:
        assert next(rows) == (0,)


# ---------------------------------------- #
# Result types                             #
# ---------------------------------------- #
def test_work_results_are_tramp_results():
    error = ValueError("bad row")

    assert WorkResult.Success(3).value == 3
    assert WorkResult.Failure(error).error is error
    assert isinstance(WorkResult.Success(3), Result)
    assert not WorkResult.Failure(error)

    with pytest.raises(ResultWasAnErrorException):
        WorkResult.Failure(error).value


def test_outcomes_are_hashable():
    error = ValueError("bad row")

    outcomes = {
        TransactionOutcome.Committed(4),
        TransactionOutcome.Committed(4),
        TransactionOutcome.RolledBack(error),
        TransactionOutcome.Failed(error),
    }

    assert len(outcomes) == 3
    assert TransactionOutcome.RolledBack(error) in outcomes
