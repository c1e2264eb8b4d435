"""
In-memory store implementations.

Dict-backed, insertion ordered, guarded by a lock so the materialization
uniqueness check and the insert happen together.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Dict, Optional
from uuid import uuid4

from cadence.errors import DuplicateMaterializationError, InvalidStateError, NotFoundError
from cadence.model.month_key import naive_utc
from cadence.model.template import RecurringTemplate
from cadence.model.transaction import Transaction


class InMemoryTemplateStore:
    def __init__(self) -> None:
        self._templates: Dict[str, RecurringTemplate] = {}
        self._lock = threading.Lock()

    def list_templates(self, owner_id: str, active_only: bool = True) -> list[RecurringTemplate]:
        with self._lock:
            return [
                t.model_copy(deep=True)
                for t in self._templates.values()
                if t.owner_id == owner_id and (t.is_active or not active_only)
            ]

    def get_template(self, template_id: str) -> RecurringTemplate:
        with self._lock:
            template = self._templates.get(template_id)
        if template is None:
            raise NotFoundError(f"Template not found: {template_id}")
        return template.model_copy(deep=True)

    def create_template(self, template: RecurringTemplate) -> str:
        with self._lock:
            if template.template_id in self._templates:
                raise InvalidStateError(f"Template already exists: {template.template_id}")
            self._templates[template.template_id] = template.model_copy(deep=True)
        return template.template_id

    def update_template(self, template: RecurringTemplate) -> None:
        with self._lock:
            if template.template_id not in self._templates:
                raise NotFoundError(f"Template not found: {template.template_id}")
            self._templates[template.template_id] = template.model_copy(deep=True)

    def delete_template(self, template_id: str) -> None:
        with self._lock:
            if self._templates.pop(template_id, None) is None:
                raise NotFoundError(f"Template not found: {template_id}")


class InMemoryTransactionStore:
    def __init__(self) -> None:
        self._transactions: Dict[str, Transaction] = {}
        self._lock = threading.Lock()

    def list_transactions(
        self,
        owner_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Transaction]:
        start = naive_utc(start) if start is not None else None
        end = naive_utc(end) if end is not None else None
        with self._lock:
            rows = [
                t.model_copy(deep=True)
                for t in self._transactions.values()
                if t.owner_id == owner_id
                and (start is None or t.date >= start)
                and (end is None or t.date <= end)
            ]
        return sorted(rows, key=lambda t: t.date)

    def get_transaction(self, transaction_id: str) -> Transaction:
        with self._lock:
            txn = self._transactions.get(transaction_id)
        if txn is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        return txn

    def create_transaction(self, transaction: Transaction) -> str:
        if transaction.is_projected:
            raise InvalidStateError("Projected instances cannot be stored")
        transaction_id = transaction.transaction_id or str(uuid4())
        with self._lock:
            key = transaction.materialization_key
            if key is not None and self._find(*key) is not None:
                raise DuplicateMaterializationError(*key)
            self._transactions[transaction_id] = transaction.model_copy(
                update={"transaction_id": transaction_id}
            )
        return transaction_id

    def delete_transaction(self, transaction_id: str) -> None:
        with self._lock:
            if self._transactions.pop(transaction_id, None) is None:
                raise NotFoundError(f"Transaction not found: {transaction_id}")

    def find_materialized(self, template_id: str, month_key: str) -> Optional[Transaction]:
        with self._lock:
            return self._find(template_id, month_key)

    def _find(self, template_id: str, month_key: str) -> Optional[Transaction]:
        for txn in self._transactions.values():
            if txn.template_id == template_id and txn.month_key == month_key:
                return txn
        return None


__all__ = ["InMemoryTemplateStore", "InMemoryTransactionStore"]
