"""
Override Ledger - per-(template, month) override and skip markers.

Entries live in each template's month_overrides map and are persisted
through the TemplateStore. At most one entry exists per
(template_id, month_key): setting an override where a skip exists (or the
reverse) is rejected, and the caller must clear the entry first.

NO IMPORTS FROM:
- rich / typer (presentation belongs to cadence.cli)
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Optional, Tuple

from cadence.errors import InvalidStateError, ValidationError, store_call
from cadence.model.month_key import month_index, validate_month_key
from cadence.model.template import MonthEntry, RecurringTemplate
from cadence.storage.interfaces import TemplateStore

logger = logging.getLogger(__name__)


class LedgerSnapshot:
    """Read-only view of ledger entries keyed by (template_id, month_key).

    Projection consumes a snapshot so it stays a pure function of its inputs.
    """

    def __init__(self, entries: Mapping[Tuple[str, str], MonthEntry] | None = None):
        self._entries: Dict[Tuple[str, str], MonthEntry] = dict(entries or {})

    @classmethod
    def from_templates(cls, templates: Iterable[RecurringTemplate]) -> LedgerSnapshot:
        entries: Dict[Tuple[str, str], MonthEntry] = {}
        for template in templates:
            for month_key, entry in template.month_overrides.items():
                entries[(template.template_id, month_key)] = entry
        return cls(entries)

    def entry(self, template_id: str, month_key: str) -> Optional[MonthEntry]:
        return self._entries.get((template_id, month_key))

    def is_skipped(self, template_id: str, month_key: str) -> bool:
        entry = self.entry(template_id, month_key)
        return entry is not None and entry.is_skip

    def __len__(self) -> int:
        return len(self._entries)


class OverrideLedger:
    """Manages override/skip entries for templates held in a TemplateStore."""

    def __init__(self, template_store: TemplateStore):
        self.template_store = template_store

    def snapshot(self, templates: Iterable[RecurringTemplate]) -> LedgerSnapshot:
        return LedgerSnapshot.from_templates(templates)

    def entry(self, template_id: str, month_key: str) -> Optional[MonthEntry]:
        validate_month_key(month_key)
        return self._load(template_id).entry_for(month_key)

    def set_override(
        self,
        template_id: str,
        month_key: str,
        *,
        amount: Decimal,
        category: str,
        name: str,
    ) -> RecurringTemplate:
        """Upsert an override for one month.

        Args:
            template_id: Template to override
            month_key: Month in "YYYY-MM" form
            amount: Replacement amount for that month (must be positive)
            category: Replacement category
            name: Replacement name

        Returns:
            The updated template

        Raises:
            ValidationError: Malformed month key or non-positive amount
            InvalidStateError: A skip exists for the month, or the month is
                outside the template's start/end range
        """
        validate_month_key(month_key)
        amount = Decimal(str(amount))
        if amount <= 0:
            raise ValidationError(f"Override amount must be positive, got {amount}")
        template = self._load(template_id)
        _check_in_range(template, month_key)
        existing = template.entry_for(month_key)
        if existing is not None and existing.is_skip:
            raise InvalidStateError(
                f"{month_key} is skipped for template {template_id}; clear it before overriding"
            )
        entry = MonthEntry.overridden(amount, category, name)
        logger.info("Override set for template %s in %s", template_id, month_key)
        return self._write(template, month_key, entry)

    def set_skip(self, template_id: str, month_key: str) -> RecurringTemplate:
        """Upsert a skip marker for one month. Rejected if an override exists."""
        validate_month_key(month_key)
        template = self._load(template_id)
        _check_in_range(template, month_key)
        existing = template.entry_for(month_key)
        if existing is not None and existing.is_override:
            raise InvalidStateError(
                f"{month_key} has an override for template {template_id}; clear it before skipping"
            )
        logger.info("Skip set for template %s in %s", template_id, month_key)
        return self._write(template, month_key, MonthEntry.skipped())

    def clear_override(self, template_id: str, month_key: str) -> bool:
        """Remove whichever entry exists for the month.

        Returns:
            True if an entry was removed, False if there was none
        """
        validate_month_key(month_key)
        template = self._load(template_id)
        if month_key not in template.month_overrides:
            return False
        overrides = {k: v for k, v in template.month_overrides.items() if k != month_key}
        self._save(template.model_copy(update={"month_overrides": overrides}))
        logger.info("Entry cleared for template %s in %s", template_id, month_key)
        return True

    def force_skip(self, template_id: str, month_key: str, *, check_range: bool = False) -> bool:
        """Replace whatever entry exists for the month with a skip marker.

        Used when a month's virtual instance must disappear regardless of any
        override: after materialization, or when deleting a single month.

        Returns:
            True if the ledger changed, False if the skip was already present
        """
        validate_month_key(month_key)
        template = self._load(template_id)
        if check_range:
            _check_in_range(template, month_key)
        existing = template.entry_for(month_key)
        if existing is not None and existing.is_skip:
            return False
        self._write(template, month_key, MonthEntry.skipped())
        return True

    def _load(self, template_id: str) -> RecurringTemplate:
        with store_call(f"Loading template {template_id}"):
            return self.template_store.get_template(template_id)

    def _write(self, template: RecurringTemplate, month_key: str, entry: MonthEntry) -> RecurringTemplate:
        overrides = dict(template.month_overrides)
        overrides[month_key] = entry
        updated = template.model_copy(update={"month_overrides": overrides})
        self._save(updated)
        return updated

    def _save(self, template: RecurringTemplate) -> None:
        stamped = template.model_copy(update={"updated_at": datetime.now()})
        with store_call(f"Saving template {template.template_id}"):
            self.template_store.update_template(stamped)


def _check_in_range(template: RecurringTemplate, month_key: str) -> None:
    if month_index(month_key) < month_index(template.start_month):
        raise InvalidStateError(
            f"{month_key} is before template {template.template_id} starts ({template.start_month})"
        )
    end_month = template.end_month
    if end_month is not None and month_index(month_key) > month_index(end_month):
        raise InvalidStateError(
            f"{month_key} is after template {template.template_id} ends ({end_month})"
        )


__all__ = ["LedgerSnapshot", "OverrideLedger"]
