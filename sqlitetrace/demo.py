"""The traced workload: inserts and selects run through every access path.

Each approach (direct, prepared, inside a transaction, prepared inside a transaction)
inserts `row_count` rows and then runs the pattern select, so the trace shows how every
path reaches SQLite. Database errors are not handled here, they propagate and the `with`
blocks release statements, cursors, and transactions on the way out.
"""
import logging
from typing import Callable, TYPE_CHECKING

from sqlitetrace.drivers import BaseDriver, BaseDriverTransaction, ExecResult, Rows
from sqlitetrace.drivers.exceptions import TransactionError
from sqlitetrace.results import TransactionOutcome
from sqlitetrace.tx_wrap import tx_wrap

if TYPE_CHECKING:
    from sqlitetrace.config import DemoSettings


logger = logging.getLogger(__name__)

# "INTEGER PRIMARY KEY NOT NULL AUTOINCREMENT" is a syntax error in SQLite, the id column can't carry NOT NULL
TABLE_DDL = """CREATE TABLE t1 (
 id INTEGER PRIMARY KEY AUTOINCREMENT,
 seq_num INTEGER NOT NULL,
 note VARCHAR NOT NULL
)"""

INSERT_DML = "INSERT INTO t1 (seq_num, note) VALUES (?, ?)"
SELECT_DML = "SELECT id, seq_num, note FROM t1 WHERE note LIKE ?"

NOTE_TEXT_PREFIX = "bla-1234567890"


class DemoRun:
    """One run of the workload against a connected driver.

    Attributes:
        driver: The traced driver every approach runs against.
        settings: Row count, search pattern, and rollback switch for the run.
        row_seq_num: Sequence number given to the next inserted row, it keeps increasing
            across all approaches.
    """
    def __init__(self, driver: BaseDriver, settings: "DemoSettings"):
        self.driver = driver
        self.settings = settings
        self.row_seq_num = 0

    def run(self):
        """Runs every approach in order.

        Raises:
            BaseDriverException: When a statement fails or a transaction can't begin or commit.
        """
        self.setup()

        self.db_insert()
        self.wrap(self.tx_insert)
        self.db_insert_prepared()
        self.wrap(self.tx_insert_prepared)

        self.db_select()
        self.wrap(self.tx_select)
        self.db_select_prepared()
        self.wrap(self.tx_select_prepared)

    def setup(self):
        self.driver.execute("DROP TABLE IF EXISTS t1")
        self.driver.execute(TABLE_DDL)

    def wrap(self, unit_of_work: Callable[[BaseDriverTransaction], int]) -> TransactionOutcome[int]:
        """Runs a transactional approach, anything but a commit or a requested rollback is fatal."""
        outcome = tx_wrap(self.driver, unit_of_work, rollback_always=self.settings.rollback_always)
        match outcome:
            case TransactionOutcome.Committed(_):
                pass

            case TransactionOutcome.RolledBack(_) if outcome.requested:
                logger.info("Rolled back %s as requested", unit_of_work.__name__)

            case TransactionOutcome.RolledBack(reason) | TransactionOutcome.Failed(reason):
                raise TransactionError(f"Transaction wrapper error: {reason}", driver=self.driver) from reason

        return outcome

    # ---------------------------------------- #
    # Inserts                                  #
    # ---------------------------------------- #
    def db_insert(self) -> int:
        return self._insert(self.driver, "DB-imm")

    def tx_insert(self, transaction: BaseDriverTransaction) -> int:
        return self._insert(transaction, "Tx-imm")

    def db_insert_prepared(self) -> int:
        return self._insert_prepared(self.driver, "DB-Prepare")

    def tx_insert_prepared(self, transaction: BaseDriverTransaction) -> int:
        return self._insert_prepared(transaction, "Tx-Prepare")

    def _insert(self, target: BaseDriver | BaseDriverTransaction, descr: str) -> int:
        for index in range(self.settings.row_count):
            result = target.execute(INSERT_DML, self.row_seq_num, NOTE_TEXT_PREFIX + descr)
            self._check_result(result, descr, index)
            self.row_seq_num += 1

        return self.settings.row_count

    def _insert_prepared(self, target: BaseDriver | BaseDriverTransaction, descr: str) -> int:
        with target.prepare(INSERT_DML) as statement:
            for index in range(self.settings.row_count):
                result = statement.execute(self.row_seq_num, NOTE_TEXT_PREFIX + descr)
                self._check_result(result, descr, index)
                self.row_seq_num += 1

        return self.settings.row_count

    def _check_result(self, result: ExecResult, descr: str, index: int):
        logger.info(
            "Exec result for %s (%d): ID = %d, affected = %d", descr, index, result.last_insert_id, result.rows_affected
        )

    # ---------------------------------------- #
    # Selects                                  #
    # ---------------------------------------- #
    def db_select(self) -> int:
        with self.driver.query(SELECT_DML, self.settings.search_pattern) as rows:
            return self._fetch(rows, "DB-imm")

    def tx_select(self, transaction: BaseDriverTransaction) -> int:
        with transaction.query(SELECT_DML, self.settings.search_pattern) as rows:
            return self._fetch(rows, "Tx-imm")

    def db_select_prepared(self) -> int:
        return self._select_prepared(self.driver, "DB-Prepare")

    def tx_select_prepared(self, transaction: BaseDriverTransaction) -> int:
        return self._select_prepared(transaction, "Tx-Prepare")

    def _select_prepared(self, target: BaseDriver | BaseDriverTransaction, descr: str) -> int:
        with target.prepare(SELECT_DML) as statement:
            with statement.query(self.settings.search_pattern) as rows:
                return self._fetch(rows, descr)

    def _fetch(self, rows: Rows, descr: str) -> int:
        count = sum(1 for _ in rows)
        logger.info("Select result for %s: %d rows matching %r", descr, count, self.settings.search_pattern)
        return count
