"""
Narrow interfaces into the persistence layer.

Implementations raise NotFoundError for missing records and StoreError
(with the cause chained) for I/O failures. create_transaction must raise
DuplicateMaterializationError when a record with the same
(template_id, month_key) already exists; that uniqueness guarantee is what
makes conversion safe under concurrent callers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from cadence.model.template import RecurringTemplate
from cadence.model.transaction import Transaction


class TemplateStore(Protocol):
    def list_templates(self, owner_id: str, active_only: bool = True) -> list[RecurringTemplate]:
        """Templates for an owner in creation order."""
        ...

    def get_template(self, template_id: str) -> RecurringTemplate: ...

    def create_template(self, template: RecurringTemplate) -> str: ...

    def update_template(self, template: RecurringTemplate) -> None: ...

    def delete_template(self, template_id: str) -> None: ...


class TransactionStore(Protocol):
    def list_transactions(
        self,
        owner_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Transaction]:
        """Durable transactions for an owner with start <= date <= end, by date."""
        ...

    def get_transaction(self, transaction_id: str) -> Transaction: ...

    def create_transaction(self, transaction: Transaction) -> str: ...

    def delete_transaction(self, transaction_id: str) -> None: ...

    def find_materialized(self, template_id: str, month_key: str) -> Optional[Transaction]: ...


__all__ = ["TemplateStore", "TransactionStore"]
