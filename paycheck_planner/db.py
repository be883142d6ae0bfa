"""SQLite-backed transaction store.

Amounts are stored as TEXT so they round-trip as exact Decimals. Dates are
ISO strings, which sort correctly as text.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional

from . import config
from .models import (
    EXPENSE,
    INCOME,
    InvalidTransaction,
    Transaction,
    TransactionNotFound,
    transaction_from_record,
    with_flag,
)

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS transactions (
    id TEXT PRIMARY KEY,
    type TEXT NOT NULL CHECK (type IN ('income', 'expense')),
    amount TEXT NOT NULL,
    category TEXT NOT NULL,
    date TEXT NOT NULL,
    funded INTEGER,
    received_amount INTEGER,
    budget_category TEXT,
    linked_income_id TEXT,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS ix_txn_date ON transactions (date);
CREATE INDEX IF NOT EXISTS ix_txn_linked_income ON transactions (linked_income_id);
"""

_SELECT_FIELDS = (
    "id, type, amount, category, date, funded, received_amount, "
    "budget_category, linked_income_id"
)


def _resolve(db_path: Optional[Path]) -> Path:
    return Path(db_path) if db_path is not None else config.DB_PATH


@contextmanager
def connect(db_path: Optional[Path] = None) -> Iterator[sqlite3.Connection]:
    path = _resolve(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Optional[Path] = None) -> None:
    with connect(db_path) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
        _migrate_database(conn)


def _migrate_database(conn: sqlite3.Connection) -> None:
    """Add columns introduced after the first schema if they don't exist."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA table_info(transactions)")
    existing_columns = [row[1] for row in cursor.fetchall()]

    new_columns = [
        ('linked_income_id', 'TEXT'),
        ('created_at', 'TEXT'),
    ]
    for column_name, column_type in new_columns:
        if column_name not in existing_columns:
            cursor.execute(f"ALTER TABLE transactions ADD COLUMN {column_name} {column_type}")
            logger.info("Added column %s to transactions table", column_name)
    conn.commit()


def _row_to_transaction(row: sqlite3.Row) -> Transaction:
    return transaction_from_record(dict(row))


def _bool_to_db(value: Optional[bool]) -> Optional[int]:
    return None if value is None else int(value)


def _fetch_one(conn: sqlite3.Connection, transaction_id: str) -> Optional[Transaction]:
    row = conn.execute(
        f"SELECT {_SELECT_FIELDS} FROM transactions WHERE id = ?",
        (transaction_id,),
    ).fetchone()
    return _row_to_transaction(row) if row else None


def add_transaction(payload: Mapping[str, Any], db_path: Optional[Path] = None) -> Transaction:
    """Validate and insert a new transaction.

    Args:
        payload: Transaction fields without an id (``type``, ``amount``,
            ``category``, ``date`` plus ``funded`` / ``budgetCategory`` /
            ``linkedIncomeId`` for expenses or ``receivedAmount`` for incomes).
        db_path: Optional database path. Defaults to ``config.DB_PATH``.

    Returns:
        The stored Transaction with its assigned id.

    Raises:
        InvalidTransaction: If the payload breaks an invariant or links to
            an income that does not exist.
    """
    record = dict(payload)
    record['id'] = uuid.uuid4().hex
    txn = transaction_from_record(record)

    with connect(db_path) as conn:
        if txn.linked_income_id is not None:
            target = _fetch_one(conn, txn.linked_income_id)
            if target is None or target.type != INCOME:
                raise InvalidTransaction(
                    [f"linked income '{txn.linked_income_id}' does not exist"],
                    transaction_id=txn.id,
                )
        conn.execute(
            "INSERT INTO transactions (id, type, amount, category, date, funded, received_amount, "
            "budget_category, linked_income_id, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                txn.id,
                txn.type,
                str(txn.amount),
                txn.category,
                txn.date.isoformat(),
                _bool_to_db(txn.funded),
                _bool_to_db(txn.received_amount),
                txn.budget_category,
                txn.linked_income_id,
                datetime.now(timezone.utc).isoformat(),
            ),
        )
        conn.commit()

    logger.info("Added %s %s of %s (%s)", txn.type, txn.category, txn.amount, txn.id)
    return txn


def fetch_transactions(db_path: Optional[Path] = None) -> List[Transaction]:
    """Return every transaction, newest date first.

    Transactions on the same date come back newest insert first.
    """
    with connect(db_path) as conn:
        rows = conn.execute(
            f"SELECT {_SELECT_FIELDS} FROM transactions ORDER BY date DESC, rowid DESC"
        ).fetchall()
    return [_row_to_transaction(row) for row in rows]


def get_transaction(transaction_id: str, db_path: Optional[Path] = None) -> Transaction:
    with connect(db_path) as conn:
        txn = _fetch_one(conn, transaction_id)
    if txn is None:
        raise TransactionNotFound(transaction_id)
    return txn


def set_funded(transaction_id: str, funded: bool, db_path: Optional[Path] = None) -> Transaction:
    """Mark an expense as paid or unpaid."""
    txn = with_flag(get_transaction(transaction_id, db_path), funded=funded)
    with connect(db_path) as conn:
        conn.execute(
            "UPDATE transactions SET funded = ? WHERE id = ? AND type = ?",
            (_bool_to_db(funded), transaction_id, EXPENSE),
        )
        conn.commit()
    logger.info("Set funded=%s on %s", funded, transaction_id)
    return txn


def set_received(transaction_id: str, received: bool, db_path: Optional[Path] = None) -> Transaction:
    """Mark an income as received or still expected."""
    txn = with_flag(get_transaction(transaction_id, db_path), received=received)
    with connect(db_path) as conn:
        conn.execute(
            "UPDATE transactions SET received_amount = ? WHERE id = ? AND type = ?",
            (_bool_to_db(received), transaction_id, INCOME),
        )
        conn.commit()
    logger.info("Set received=%s on %s", received, transaction_id)
    return txn


def delete_transaction(transaction_id: str, db_path: Optional[Path] = None) -> bool:
    """Delete a transaction. Returns True if a row was removed.

    Deleting an income also unlinks the expenses that were earmarked
    against it so no expense points at a missing income.
    """
    with connect(db_path) as conn:
        cursor = conn.cursor()
        unlinked = cursor.execute(
            "UPDATE transactions SET linked_income_id = NULL WHERE linked_income_id = ?",
            (transaction_id,),
        ).rowcount
        cursor.execute("DELETE FROM transactions WHERE id = ?", (transaction_id,))
        deleted = cursor.rowcount > 0
        conn.commit()

    if deleted:
        logger.info("Deleted transaction %s (%d expense(s) unlinked)", transaction_id, unlinked)
    return deleted


def clear_database(db_path: Optional[Path] = None) -> bool:
    """Clear all transactions from the database. Returns True if successful."""
    with connect(db_path) as conn:
        conn.execute("DELETE FROM transactions")
        conn.commit()
    logger.warning("Cleared all transactions")
    return True
