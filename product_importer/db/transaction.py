from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

"""Explicit transaction scope for one import.

The connection runs in autocommit mode and the boundaries are issued here
(BEGIN / COMMIT / ROLLBACK). The scope always ends in exactly one of commit or
rollback: leaving the `with` block without calling commit() rolls back,
including on KeyboardInterrupt.

Row inserts run inside a SAVEPOINT so that one failing INSERT does not put the
whole PostgreSQL transaction into the aborted state.
"""

__all__ = [
    "TransactionError",
    "Transaction",
    "transaction",
]

logger = logging.getLogger(__name__)

SAVEPOINT_NAME = "product_row"


class TransactionError(Exception):
    """BEGIN / COMMIT / ROLLBACK / SAVEPOINT failed. Never retried."""


class Transaction:
    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    @property
    def closed(self) -> bool:
        return self.committed or self.rolled_back

    def _execute(self, statement: str, action: str) -> None:
        try:
            self._cursor.execute(statement)
        except Exception as e:
            raise TransactionError(f"{action} failed: {e}") from e

    def commit(self) -> None:
        if self.closed:
            raise TransactionError("transaction already closed")
        self._execute("COMMIT", "commit")
        self.committed = True
        logger.debug("transaction committed")

    def rollback(self) -> None:
        if self.closed:
            raise TransactionError("transaction already closed")
        self._execute("ROLLBACK", "rollback")
        self.rolled_back = True
        logger.debug("transaction rolled back")

    @contextmanager
    def savepoint(self, name: str = SAVEPOINT_NAME) -> Iterator[None]:
        """Run the block inside a savepoint; undo only the block on error.

        The original exception is re-raised after ROLLBACK TO SAVEPOINT. If the
        savepoint itself cannot be set or restored the transaction is unusable
        and TransactionError is raised instead.
        """
        self._execute(f"SAVEPOINT {name}", "savepoint")
        try:
            yield
        except Exception:
            self._execute(f"ROLLBACK TO SAVEPOINT {name}", "rollback to savepoint")
            raise
        self._execute(f"RELEASE SAVEPOINT {name}", "release savepoint")


@contextmanager
def transaction(cursor: Any) -> Iterator[Transaction]:
    """Open a transaction on `cursor`; roll back unless committed."""
    try:
        cursor.execute("BEGIN")
    except Exception as e:
        raise TransactionError(f"failed to begin transaction: {e}") from e

    tx = Transaction(cursor)
    try:
        yield tx
    except BaseException:
        if not tx.closed:
            try:
                cursor.execute("ROLLBACK")
                tx.rolled_back = True
            except Exception:
                # keep the original error
                logger.warning("rollback after failure also failed", exc_info=True)
        raise
    if not tx.closed:
        tx.rollback()
