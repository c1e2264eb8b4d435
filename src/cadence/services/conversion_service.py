"""
Conversion Service - materialize a projected instance into a durable record.

Conversion spans two independent stores and is modelled as two phases:

1. Materialize: return the existing (template_id, month_key) record if one
   exists; otherwise create it from the month's effective projected values.
   The transaction store's uniqueness guarantee resolves concurrent callers:
   the loser receives the winner's id.
2. Mark: write a skip marker for the month so projection does not re-derive
   a virtual duplicate beside the durable record.

If phase 1 fails nothing has been written. If phase 2 fails the caller gets
ConversionIncomplete; calling convert again finds the record in phase 1 and
re-applies phase 2.
"""

from __future__ import annotations

import logging
from typing import Optional

from cadence.errors import (
    ConversionIncomplete,
    DuplicateMaterializationError,
    InvalidStateError,
    NotFoundError,
    StoreError,
    store_call,
)
from cadence.model.month_key import validate_month_key
from cadence.model.transaction import Transaction
from cadence.services.override_ledger import OverrideLedger
from cadence.services.projection_engine import project_instance
from cadence.storage.interfaces import TemplateStore, TransactionStore

logger = logging.getLogger(__name__)


class ConversionService:
    """Turns projected instances into durable transactions, idempotently."""

    def __init__(
        self,
        template_store: TemplateStore,
        transaction_store: TransactionStore,
        ledger: Optional[OverrideLedger] = None,
    ):
        self.template_store = template_store
        self.transaction_store = transaction_store
        self.ledger = ledger or OverrideLedger(template_store)

    def convert_projected_to_actual(
        self,
        template_id: str,
        month_key: str,
        owner_id: Optional[str] = None,
    ) -> str:
        """Materialize the (template_id, month_key) instance.

        Args:
            template_id: Template whose instance is converted
            month_key: Month in "YYYY-MM" form
            owner_id: When given, the template/record must belong to this owner

        Returns:
            Id of the durable transaction (existing or newly created)

        Raises:
            NotFoundError: Unknown template (or owned by someone else)
            InvalidStateError: The template does not project in that month
            ConversionIncomplete: Record exists but the skip marker write failed
            StoreError: A store failed before anything was written
        """
        validate_month_key(month_key)

        existing = self._find_existing(template_id, month_key)
        if existing is not None:
            if owner_id is not None and existing.owner_id != owner_id:
                raise NotFoundError(f"Template not found: {template_id}")
            logger.debug("Instance %s/%s already materialized", template_id, month_key)
            self._mark_materialized(template_id, month_key, existing.transaction_id)
            return existing.transaction_id

        transaction_id = self._materialize(template_id, month_key, owner_id)
        self._mark_materialized(template_id, month_key, transaction_id)
        return transaction_id

    def _find_existing(self, template_id: str, month_key: str) -> Optional[Transaction]:
        with store_call(f"Looking up materialized {template_id}/{month_key}"):
            return self.transaction_store.find_materialized(template_id, month_key)

    def _materialize(self, template_id: str, month_key: str, owner_id: Optional[str]) -> str:
        with store_call(f"Loading template {template_id}"):
            template = self.template_store.get_template(template_id)
        if owner_id is not None and template.owner_id != owner_id:
            raise NotFoundError(f"Template not found: {template_id}")

        instance = project_instance(template, month_key, template.entry_for(month_key))
        if instance is None:
            raise InvalidStateError(
                f"Template {template_id} has no projected instance in {month_key}"
            )
        durable = instance.model_copy(update={"is_projected": False, "transaction_id": None})

        try:
            with store_call(f"Creating transaction for {template_id}/{month_key}"):
                transaction_id = self.transaction_store.create_transaction(durable)
        except DuplicateMaterializationError:
            winner = self._find_existing(template_id, month_key)
            if winner is None:
                raise StoreError(
                    f"Store reported {template_id}/{month_key} as materialized but returned no record"
                )
            logger.info("Lost materialization race for %s/%s", template_id, month_key)
            return winner.transaction_id

        logger.info("Materialized %s/%s as %s", template_id, month_key, transaction_id)
        return transaction_id

    def _mark_materialized(self, template_id: str, month_key: str, transaction_id: str) -> None:
        try:
            self.ledger.force_skip(template_id, month_key)
        except NotFoundError:
            # Template deleted after materialization; nothing left to project
            logger.debug("Template %s gone; no skip marker needed", template_id)
        except StoreError as exc:
            logger.warning(
                "Skip marker for %s/%s not written; re-run conversion to complete",
                template_id,
                month_key,
            )
            raise ConversionIncomplete(
                f"Transaction {transaction_id} created but skip marker for "
                f"{template_id}/{month_key} was not written",
                transaction_id=transaction_id,
                template_id=template_id,
                month_key=month_key,
            ) from exc


__all__ = ["ConversionService"]
