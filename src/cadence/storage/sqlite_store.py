"""
SQLite-backed template and transaction store.

Templates and transactions are stored as Pydantic JSON documents next to the
columns needed for filtering. A partial UNIQUE index on
(template_id, month_key) guarantees at most one materialized transaction per
template month, regardless of how many processes attempt the conversion.

Privacy: local-only SQLite file under the workspace. No network I/O.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional
from uuid import uuid4

from cadence.errors import (
    DuplicateMaterializationError,
    InvalidStateError,
    NotFoundError,
    StoreError,
)
from cadence.model.month_key import naive_utc
from cadence.model.template import RecurringTemplate
from cadence.model.transaction import Transaction

logger = logging.getLogger(__name__)


class SqliteStore:
    """Implements both TemplateStore and TransactionStore over one database file.

    Usage:
        store = SqliteStore(workspace.database_path)
        store.create_template(template)
        store.list_transactions("local", start, end)
    """

    def __init__(self, db_path: Path | str):
        """Initialize the store, creating the database and schema if needed.

        Args:
            db_path: Path to SQLite database file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open database {self.db_path}: {exc}") from exc
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError:
            conn.rollback()
            raise
        except sqlite3.Error as exc:
            conn.rollback()
            raise StoreError(f"Database operation failed: {exc}") from exc
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS templates (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    template_id TEXT NOT NULL UNIQUE,
                    owner_id TEXT NOT NULL,
                    is_active INTEGER NOT NULL,
                    data TEXT NOT NULL
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_templates_owner
                ON templates(owner_id)
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS transactions (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    transaction_id TEXT NOT NULL UNIQUE,
                    owner_id TEXT NOT NULL,
                    txn_date TEXT NOT NULL,
                    template_id TEXT,
                    month_key TEXT,
                    data TEXT NOT NULL
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_transactions_owner_date
                ON transactions(owner_id, txn_date)
            """)
            cursor.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_transactions_materialized
                ON transactions(template_id, month_key)
                WHERE template_id IS NOT NULL AND month_key IS NOT NULL
            """)

    # ------------------------------
    # Templates
    # ------------------------------

    def list_templates(self, owner_id: str, active_only: bool = True) -> list[RecurringTemplate]:
        query = "SELECT data FROM templates WHERE owner_id = ?"
        if active_only:
            query += " AND is_active = 1"
        query += " ORDER BY seq"
        with self._connect() as conn:
            rows = conn.execute(query, (owner_id,)).fetchall()
        return [RecurringTemplate.model_validate_json(data) for (data,) in rows]

    def get_template(self, template_id: str) -> RecurringTemplate:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM templates WHERE template_id = ?", (template_id,)
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Template not found: {template_id}")
        return RecurringTemplate.model_validate_json(row[0])

    def create_template(self, template: RecurringTemplate) -> str:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO templates (template_id, owner_id, is_active, data)
                    VALUES (?, ?, ?, ?)
                """,
                    (
                        template.template_id,
                        template.owner_id,
                        int(template.is_active),
                        template.model_dump_json(),
                    ),
                )
        except sqlite3.IntegrityError as exc:
            raise InvalidStateError(f"Template already exists: {template.template_id}") from exc
        return template.template_id

    def update_template(self, template: RecurringTemplate) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE templates SET owner_id = ?, is_active = ?, data = ?
                WHERE template_id = ?
            """,
                (
                    template.owner_id,
                    int(template.is_active),
                    template.model_dump_json(),
                    template.template_id,
                ),
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Template not found: {template.template_id}")

    def delete_template(self, template_id: str) -> None:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM templates WHERE template_id = ?", (template_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"Template not found: {template_id}")

    # ------------------------------
    # Transactions
    # ------------------------------

    def list_transactions(
        self,
        owner_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Transaction]:
        query = "SELECT data FROM transactions WHERE owner_id = ?"
        params: list[str] = [owner_id]
        if start is not None:
            query += " AND txn_date >= ?"
            params.append(_iso(start))
        if end is not None:
            query += " AND txn_date <= ?"
            params.append(_iso(end))
        query += " ORDER BY txn_date, seq"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [Transaction.model_validate_json(data) for (data,) in rows]

    def get_transaction(self, transaction_id: str) -> Transaction:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM transactions WHERE transaction_id = ?", (transaction_id,)
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        return Transaction.model_validate_json(row[0])

    def create_transaction(self, transaction: Transaction) -> str:
        if transaction.is_projected:
            raise InvalidStateError("Projected instances cannot be stored")
        transaction_id = transaction.transaction_id or str(uuid4())
        stored = transaction.model_copy(update={"transaction_id": transaction_id})
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO transactions (
                        transaction_id, owner_id, txn_date, template_id, month_key, data
                    ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                    (
                        transaction_id,
                        stored.owner_id,
                        _iso(stored.date),
                        stored.template_id,
                        stored.month_key,
                        stored.model_dump_json(),
                    ),
                )
        except sqlite3.IntegrityError as exc:
            if stored.materialization_key is not None:
                logger.debug("Materialization conflict on %s", stored.materialization_key)
                raise DuplicateMaterializationError(*stored.materialization_key) from exc
            raise StoreError(f"Cannot insert transaction {transaction_id}: {exc}") from exc
        return transaction_id

    def delete_transaction(self, transaction_id: str) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE transaction_id = ?", (transaction_id,)
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Transaction not found: {transaction_id}")

    def find_materialized(self, template_id: str, month_key: str) -> Optional[Transaction]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM transactions WHERE template_id = ? AND month_key = ?",
                (template_id, month_key),
            ).fetchone()
        if row is None:
            return None
        return Transaction.model_validate_json(row[0])


def _iso(value: datetime) -> str:
    # Fixed-width so lexical order in SQLite matches chronological order
    return naive_utc(value).isoformat(timespec="microseconds")


__all__ = ["SqliteStore"]
