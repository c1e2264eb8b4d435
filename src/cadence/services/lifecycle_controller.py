"""
Lifecycle Controller - template creation, editing, ending and removal.

Handles:
- Creating and editing templates (template-wide changes)
- Stopping future recurrence at the end of a reference month
- Scoped deletion (one month only, or this month onward)
- Promoting a one-off transaction into a template, and demoting a template
  back into a one-off transaction

Materialized transactions are independent historical records: nothing here
deletes a transaction that was created from a template.

Promotion and demotion span both stores and are two-phase (create first,
then remove the original). A failed second phase is reported with the ids
needed to retry it; the first phase is never rolled back.

All "current month" decisions use an explicit reference_date argument.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from cadence.errors import (
    InvalidStateError,
    NotFoundError,
    PromotionIncomplete,
    StoreError,
    ValidationError,
    store_call,
)
from cadence.model.month_key import (
    month_end,
    month_index,
    month_key_for,
    naive_utc,
    validate_month_key,
)
from cadence.model.template import Frequency, RecurringTemplate
from cadence.model.transaction import Transaction
from cadence.services.override_ledger import OverrideLedger
from cadence.services.projection_engine import project_instance
from cadence.storage.interfaces import TemplateStore, TransactionStore

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"name", "amount", "type", "category", "frequency", "start_date", "end_date", "is_active"}


class DeleteScope(StrEnum):
    """How much of a template a delete removes."""

    current_month_only = "current_month_only"
    all_future = "all_future"


def build_template(data: dict[str, Any]) -> RecurringTemplate:
    """Validate raw template fields into a RecurringTemplate.

    Raises:
        ValidationError: Non-positive amount or otherwise invalid fields
        InvalidStateError: end_date before start_date
    """
    amount = data.get("amount")
    if amount is not None and Decimal(str(amount)) <= 0:
        raise ValidationError(f"Template amount must be positive, got {amount}")
    start, end = data.get("start_date"), data.get("end_date")
    if start is not None and end is not None and end < start:
        raise InvalidStateError(
            f"End date {end.isoformat()} precedes start date {start.isoformat()}"
        )
    try:
        return RecurringTemplate.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid template: {exc}") from exc


class LifecycleController:
    """Service for template lifecycle operations."""

    def __init__(
        self,
        template_store: TemplateStore,
        transaction_store: TransactionStore,
        ledger: Optional[OverrideLedger] = None,
    ):
        self.template_store = template_store
        self.transaction_store = transaction_store
        self.ledger = ledger or OverrideLedger(template_store)

    # ------------------------------
    # Creation and editing
    # ------------------------------

    def create_template(self, **fields: Any) -> RecurringTemplate:
        """Create a template from keyword fields (name, amount, type, ...)."""
        template = build_template(fields)
        with store_call("Creating template"):
            self.template_store.create_template(template)
        logger.info("Created template %s (%s)", template.template_id, template.frequency)
        return template

    def update_template(self, template_id: str, /, **changes: Any) -> RecurringTemplate:
        """Apply template-wide changes; month entries are kept.

        Raises:
            ValidationError: Unknown field or invalid value
            InvalidStateError: Resulting end date precedes start date
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot edit template fields: {', '.join(sorted(unknown))}")
        template = self._load(template_id)
        data = template.model_dump()
        data.update(changes)
        data["updated_at"] = datetime.now()
        updated = build_template(data)
        self._save(updated)
        logger.info("Updated template %s: %s", template_id, ", ".join(sorted(changes)))
        return updated

    # ------------------------------
    # Ending and deletion
    # ------------------------------

    def stop_future_recurrence(self, template_id: str, reference_date: datetime) -> RecurringTemplate:
        """End the template at the last instant of reference_date's month.

        The reference month still projects; later months never do. Entries
        for later months are dropped, earlier ones kept. An end date that is
        already earlier is left as it is.

        Raises:
            InvalidStateError: The reference month ends before the template starts
        """
        template = self._load(template_id)
        end = month_end(month_key_for(naive_utc(reference_date)))
        if end < template.start_date:
            raise InvalidStateError(
                f"Cannot stop template {template_id} before it starts ({template.start_month})"
            )
        if template.end_date is not None and template.end_date < end:
            end = template.end_date
        end_index = month_index(month_key_for(end))
        overrides = {
            k: v for k, v in template.month_overrides.items() if month_index(k) <= end_index
        }
        updated = template.model_copy(
            update={"end_date": end, "month_overrides": overrides, "updated_at": datetime.now()}
        )
        self._save(updated)
        logger.info("Template %s stopped after %s", template_id, month_key_for(end))
        return updated

    def delete_template(
        self,
        template_id: str,
        scope: DeleteScope,
        reference_date: datetime,
    ) -> RecurringTemplate:
        """Scoped deletion relative to reference_date's month.

        current_month_only: the reference month becomes a skip (replacing any
        override); other months are unaffected.
        all_future: the template is deactivated and entries for the reference
        month onward are removed; earlier entries stay as history.
        """
        month_key = month_key_for(naive_utc(reference_date))
        if scope == DeleteScope.current_month_only:
            self.ledger.force_skip(template_id, month_key, check_range=True)
            logger.info("Template %s removed for %s only", template_id, month_key)
            return self._load(template_id)

        template = self._load(template_id)
        cutoff = month_index(month_key)
        overrides = {
            k: v for k, v in template.month_overrides.items() if month_index(k) < cutoff
        }
        updated = template.model_copy(
            update={"is_active": False, "month_overrides": overrides, "updated_at": datetime.now()}
        )
        self._save(updated)
        logger.info("Template %s deactivated from %s", template_id, month_key)
        return updated

    def purge_template(self, template_id: str) -> None:
        """Hard-delete the template record; materialized transactions remain."""
        with store_call(f"Deleting template {template_id}"):
            self.template_store.delete_template(template_id)
        logger.info("Template %s purged", template_id)

    # ------------------------------
    # Promotion / demotion
    # ------------------------------

    def promote_transaction_to_template(
        self, transaction: Transaction, frequency: Frequency
    ) -> RecurringTemplate:
        """Create a template anchored at a one-off transaction, then remove it.

        Returns:
            The new template

        Raises:
            InvalidStateError: The transaction is projected or already belongs to a template
            ValidationError: The transaction amount is zero
            PromotionIncomplete: Template created but the original was not removed
        """
        if transaction.is_projected or transaction.template_id is not None:
            raise InvalidStateError("Only standalone durable transactions can be promoted")
        if not transaction.transaction_id:
            raise InvalidStateError("Transaction has no id; store it before promoting")

        template = self.create_template(
            owner_id=transaction.owner_id,
            name=transaction.description or transaction.category,
            amount=abs(transaction.amount),
            type=transaction.type,
            category=transaction.category,
            frequency=frequency,
            start_date=transaction.date,
        )
        try:
            self.complete_promotion(transaction.transaction_id)
        except StoreError as exc:
            logger.warning(
                "Template %s created but transaction %s not removed",
                template.template_id,
                transaction.transaction_id,
            )
            raise PromotionIncomplete(
                f"Template {template.template_id} created; removing transaction "
                f"{transaction.transaction_id} failed",
                template_id=template.template_id,
                transaction_id=transaction.transaction_id,
            ) from exc
        return template

    def complete_promotion(self, transaction_id: str) -> None:
        """Remove the promoted transaction. Safe to repeat."""
        try:
            with store_call(f"Deleting transaction {transaction_id}"):
                self.transaction_store.delete_transaction(transaction_id)
        except NotFoundError:
            logger.debug("Transaction %s already removed", transaction_id)

    def demote_template_to_transaction(self, template_id: str, month_key: str) -> str:
        """Replace a template with one durable transaction for month_key.

        The transaction carries the month's effective values but no template
        link. The template is purged afterwards; if that fails, the new
        transaction stays and purge_template can be retried.

        Returns:
            Id of the new transaction
        """
        validate_month_key(month_key)
        template = self._load(template_id)
        instance = project_instance(template, month_key, template.entry_for(month_key))
        if instance is None:
            raise InvalidStateError(
                f"Template {template_id} has no projected instance in {month_key}"
            )
        one_off = instance.model_copy(
            update={"is_projected": False, "template_id": None, "month_key": None}
        )
        with store_call(f"Creating transaction from template {template_id}"):
            transaction_id = self.transaction_store.create_transaction(one_off)
        self.purge_template(template_id)
        return transaction_id

    def _load(self, template_id: str) -> RecurringTemplate:
        with store_call(f"Loading template {template_id}"):
            return self.template_store.get_template(template_id)

    def _save(self, template: RecurringTemplate) -> None:
        with store_call(f"Saving template {template.template_id}"):
            self.template_store.update_template(template)


__all__ = ["DeleteScope", "LifecycleController", "build_template"]
