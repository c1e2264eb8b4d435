"""
Recurring service - the owner-scoped API exposed to UI and report layers.

Wires the ledger, projection, conversion, lifecycle, reconciliation and
budget components over a TemplateStore and TransactionStore.

Every call that writes a template document (month entries, end dates,
deactivation, conversion's skip marker) holds a per-(owner_id, template_id)
lock. Month entries live inside the template document, so a coarser key is
what prevents lost updates between month-level and template-level writes.
Projection and reconciliation are lock-free reads.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from cadence.errors import NotFoundError, ValidationError, store_call
from cadence.model.month_key import month_end, month_start, validate_month_key
from cadence.model.reconciliation import BudgetComparison, BudgetReport, ReconciliationResult
from cadence.model.template import Frequency, RecurringTemplate
from cadence.model.transaction import Transaction
from cadence.services.budget_comparator import (
    ExpectedPredicate,
    build_budget_report,
    compare_budget,
    expected_from_templates,
    has_expected_marker,
)
from cadence.services.conversion_service import ConversionService
from cadence.services.lifecycle_controller import DeleteScope, LifecycleController
from cadence.services.locks import KeyedLocks
from cadence.services.override_ledger import OverrideLedger
from cadence.services.projection_engine import project_month
from cadence.services.reconciliation_matcher import ReconciliationMatcher
from cadence.services.similarity import SimilarityProvider
from cadence.storage.interfaces import TemplateStore, TransactionStore

logger = logging.getLogger(__name__)


class RecurringService:
    """Facade over the projection and reconciliation engine.

    Usage:
        service = RecurringService(store, store)
        view = service.project_month("local", "2025-03")
        txn_id = service.convert_projected_to_actual("local", template_id, "2025-03")
    """

    def __init__(
        self,
        template_store: TemplateStore,
        transaction_store: TransactionStore,
        similarity: Optional[SimilarityProvider] = None,
    ):
        self.template_store = template_store
        self.transaction_store = transaction_store
        self.ledger = OverrideLedger(template_store)
        self.conversion = ConversionService(template_store, transaction_store, self.ledger)
        self.lifecycle = LifecycleController(template_store, transaction_store, self.ledger)
        self.matcher = ReconciliationMatcher(similarity)
        self._locks = KeyedLocks()

    # ------------------------------
    # Reads
    # ------------------------------

    def templates(self, owner_id: str, active_only: bool = True) -> List[RecurringTemplate]:
        with store_call(f"Listing templates for {owner_id}"):
            return self.template_store.list_templates(owner_id, active_only=active_only)

    def template(self, owner_id: str, template_id: str) -> RecurringTemplate:
        """One template belonging to owner_id, active or not."""
        return self._owned(owner_id, template_id)

    def actual_for_month(self, owner_id: str, month_key: str) -> List[Transaction]:
        validate_month_key(month_key)
        with store_call(f"Listing transactions for {owner_id}"):
            return self.transaction_store.list_transactions(
                owner_id, month_start(month_key), month_end(month_key)
            )

    def transaction(self, owner_id: str, transaction_id: str) -> Transaction:
        with store_call(f"Loading transaction {transaction_id}"):
            txn = self.transaction_store.get_transaction(transaction_id)
        if txn.owner_id != owner_id:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        return txn

    def record_transaction(self, owner_id: str, /, **fields: Any) -> str:
        """Store a one-off transaction (no template link).

        Raises:
            ValidationError: Invalid fields
        """
        if "owner_id" in fields:
            raise ValidationError("owner_id is set by the caller, not by transaction fields")
        try:
            txn = Transaction(owner_id=owner_id, **fields)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid transaction: {exc}") from exc
        if txn.template_id is not None or txn.month_key is not None or txn.is_projected:
            raise ValidationError("One-off transactions cannot carry a template link")
        with store_call("Recording transaction"):
            transaction_id = self.transaction_store.create_transaction(txn)
        logger.info("Recorded transaction %s", transaction_id)
        return transaction_id

    def projected_for_month(self, owner_id: str, month_key: str) -> List[Transaction]:
        templates = self.templates(owner_id)
        return project_month(templates, self.ledger.snapshot(templates), month_key)

    def project_month(self, owner_id: str, month_key: str) -> List[Transaction]:
        """Merged month view: actual records plus projected instances.

        A projected instance is dropped when the month already holds a
        materialized record for the same template, which covers a conversion
        whose skip marker has not been written yet.

        Returns:
            Transactions ordered by date; on equal dates actual records come first
        """
        actual = self.actual_for_month(owner_id, month_key)
        materialized = {t.materialization_key for t in actual if t.materialization_key}
        projected = [
            p
            for p in self.projected_for_month(owner_id, month_key)
            if p.materialization_key not in materialized
        ]
        return sorted(actual + projected, key=lambda t: t.date)

    def expected_for_month(self, owner_id: str, month_key: str) -> List[Transaction]:
        return expected_from_templates(self.templates(owner_id), month_key)

    # ------------------------------
    # Ledger writes
    # ------------------------------

    def set_month_override(
        self,
        owner_id: str,
        template_id: str,
        month_key: str,
        *,
        amount: Decimal,
        category: str,
        name: str,
    ) -> RecurringTemplate:
        with self._locks.hold((owner_id, template_id)):
            self._owned(owner_id, template_id)
            return self.ledger.set_override(
                template_id, month_key, amount=amount, category=category, name=name
            )

    def set_month_skip(self, owner_id: str, template_id: str, month_key: str) -> RecurringTemplate:
        with self._locks.hold((owner_id, template_id)):
            self._owned(owner_id, template_id)
            return self.ledger.set_skip(template_id, month_key)

    def clear_month_override(self, owner_id: str, template_id: str, month_key: str) -> bool:
        with self._locks.hold((owner_id, template_id)):
            self._owned(owner_id, template_id)
            return self.ledger.clear_override(template_id, month_key)

    # ------------------------------
    # Conversion and lifecycle
    # ------------------------------

    def convert_projected_to_actual(self, owner_id: str, template_id: str, month_key: str) -> str:
        with self._locks.hold((owner_id, template_id)):
            return self.conversion.convert_projected_to_actual(
                template_id, month_key, owner_id=owner_id
            )

    def create_template(self, owner_id: str, /, **fields: Any) -> RecurringTemplate:
        """Create a template for owner_id.

        Raises:
            ValidationError: fields also names an owner
        """
        if "owner_id" in fields:
            raise ValidationError("owner_id is set by the caller, not by template fields")
        return self.lifecycle.create_template(owner_id=owner_id, **fields)

    def update_template(
        self, owner_id: str, template_id: str, /, **changes: Any
    ) -> RecurringTemplate:
        with self._locks.hold((owner_id, template_id)):
            self._owned(owner_id, template_id)
            return self.lifecycle.update_template(template_id, **changes)

    def stop_future_recurrence(
        self, owner_id: str, template_id: str, reference_date: datetime
    ) -> RecurringTemplate:
        with self._locks.hold((owner_id, template_id)):
            self._owned(owner_id, template_id)
            return self.lifecycle.stop_future_recurrence(template_id, reference_date)

    def delete_template(
        self,
        owner_id: str,
        template_id: str,
        scope: DeleteScope,
        reference_date: datetime,
    ) -> RecurringTemplate:
        with self._locks.hold((owner_id, template_id)):
            self._owned(owner_id, template_id)
            return self.lifecycle.delete_template(template_id, scope, reference_date)

    def purge_template(self, owner_id: str, template_id: str) -> None:
        with self._locks.hold((owner_id, template_id)):
            self._owned(owner_id, template_id)
            self.lifecycle.purge_template(template_id)

    def promote_transaction_to_template(
        self, owner_id: str, transaction_id: str, frequency: Frequency
    ) -> RecurringTemplate:
        """Promote the stored record transaction_id of owner_id into a template.

        The stored record, not a caller-held copy, seeds the template.

        Raises:
            NotFoundError: Unknown transaction or one owned by someone else
        """
        with self._locks.hold((owner_id, transaction_id)):
            transaction = self.transaction(owner_id, transaction_id)
            return self.lifecycle.promote_transaction_to_template(transaction, frequency)

    def demote_template_to_transaction(self, owner_id: str, template_id: str, month_key: str) -> str:
        with self._locks.hold((owner_id, template_id)):
            self._owned(owner_id, template_id)
            return self.lifecycle.demote_template_to_transaction(template_id, month_key)

    # ------------------------------
    # Reconciliation and budgeting
    # ------------------------------

    def reconcile(
        self, expected: Sequence[Transaction], actual: Sequence[Transaction]
    ) -> ReconciliationResult:
        return self.matcher.reconcile(expected, actual)

    def reconcile_month(self, owner_id: str, month_key: str) -> ReconciliationResult:
        """Reconcile the month's template baseline against its recorded transactions."""
        return self.matcher.reconcile(
            self.expected_for_month(owner_id, month_key),
            self.actual_for_month(owner_id, month_key),
        )

    def compare_budget(
        self,
        expected: Sequence[Transaction],
        actual: Sequence[Transaction],
        is_expected: ExpectedPredicate = has_expected_marker,
    ) -> List[BudgetComparison]:
        return compare_budget(expected, actual, is_expected)

    def budget_for_month(self, owner_id: str, month_key: str) -> BudgetReport:
        return build_budget_report(
            self.expected_for_month(owner_id, month_key),
            self.actual_for_month(owner_id, month_key),
        )

    def _owned(self, owner_id: str, template_id: str) -> RecurringTemplate:
        with store_call(f"Loading template {template_id}"):
            template = self.template_store.get_template(template_id)
        if template.owner_id != owner_id:
            raise NotFoundError(f"Template not found: {template_id}")
        return template


__all__ = ["RecurringService"]
