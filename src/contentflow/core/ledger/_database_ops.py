"""Database operation helpers to reduce boilerplate in the recorder.

Consolidates the repeated `with self._db.connection() as conn:` pattern.
"""

from typing import TYPE_CHECKING, Any

from sqlalchemy import Executable
from sqlalchemy.engine import Row

from contentflow.contracts.errors import AuditIntegrityError

if TYPE_CHECKING:
    from contentflow.core.ledger.database import LedgerDB


class DatabaseOps:
    """Helper for common read and insert operations.

    There is deliberately no update helper: run state is mutated only by the
    transition executor, inside its own compare-and-set transaction.
    """

    def __init__(self, db: "LedgerDB") -> None:
        self._db = db

    def execute_fetchone(self, query: Executable) -> Row[Any] | None:
        """Execute query and return single row or None."""
        with self._db.connection() as conn:
            result = conn.execute(query)
            return result.fetchone()

    def execute_fetchall(self, query: Executable) -> list[Row[Any]]:
        """Execute query and return all rows."""
        with self._db.connection() as conn:
            result = conn.execute(query)
            return list(result.fetchall())

    def execute_insert(self, stmt: Executable) -> None:
        """Execute insert statement.

        Raises:
            AuditIntegrityError: If zero rows are affected
        """
        with self._db.connection() as conn:
            result = conn.execute(stmt)
            if result.rowcount == 0:
                raise AuditIntegrityError("execute_insert: zero rows affected - ledger write failed")
