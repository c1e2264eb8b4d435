"""
Projection Engine - derive virtual transactions for a month from templates.

Pure functions: the output depends only on (templates, ledger snapshot,
month key). No store access and no implicit clock, so projections are safe
for concurrent readers and reproducible in tests.

Firing rule (which months a template projects into):
- weekly, biweekly, monthly: every month from the start month on
- quarterly: start month, then every 3rd month after it
- yearly: the start month of each year
A template never projects before its start month, after its end date, or
while inactive.

Instance date: the start date's day-of-month clamped to the month length,
keeping the start date's time of day.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple

from cadence.config import CENTS
from cadence.model.month_key import (
    days_in_month,
    month_index,
    month_start,
    parse_month_key,
    validate_month_key,
)
from cadence.model.template import Frequency, MonthEntry, RecurringTemplate
from cadence.model.transaction import Transaction
from cadence.services.override_ledger import LedgerSnapshot


def instance_date(template: RecurringTemplate, month_key: str) -> datetime:
    year, month = parse_month_key(month_key)
    day = min(template.start_date.day, days_in_month(month_key))
    return template.start_date.replace(year=year, month=month, day=day)


def fires_in_month(template: RecurringTemplate, month_key: str) -> bool:
    """True when the template's recurrence produces an instance in month_key."""
    if not template.is_active:
        return False
    offset = month_index(month_key) - month_index(template.start_month)
    if offset < 0:
        return False
    if template.end_date is not None:
        if template.end_date < month_start(month_key):
            return False
        if instance_date(template, month_key) > template.end_date:
            return False
    return offset % template.frequency.anchor_interval == 0


def default_amount(template: RecurringTemplate) -> Decimal:
    """Amount a firing month carries when no override applies.

    Quarterly and yearly templates fire once in their anchor month, so that
    month carries the whole occurrence. The others fire every month with
    their canonical monthly equivalent.
    """
    if template.frequency in (Frequency.quarterly, Frequency.yearly):
        return template.amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    return template.monthly_amount


def effective_values(
    template: RecurringTemplate, entry: Optional[MonthEntry]
) -> Tuple[Decimal, str, str]:
    """(amount, category, name) for a month, honouring an override entry."""
    if entry is not None and entry.override is not None:
        override = entry.override
        return override.amount, override.category, override.name
    return default_amount(template), template.category, template.name


def project_instance(
    template: RecurringTemplate,
    month_key: str,
    entry: Optional[MonthEntry],
) -> Optional[Transaction]:
    """The virtual instance for one template and month, or None if none exists."""
    if not fires_in_month(template, month_key):
        return None
    if entry is not None and entry.is_skip:
        return None
    amount, category, name = effective_values(template, entry)
    return Transaction(
        owner_id=template.owner_id,
        amount=amount,
        type=template.type,
        category=category,
        description=name,
        date=instance_date(template, month_key),
        template_id=template.template_id,
        month_key=month_key,
        is_projected=True,
    )


def project_month(
    templates: Iterable[RecurringTemplate],
    ledger: LedgerSnapshot,
    month_key: str,
) -> List[Transaction]:
    """Project every template into month_key.

    Args:
        templates: Templates in insertion order
        ledger: Override/skip entries to honour
        month_key: Target month "YYYY-MM"

    Returns:
        Projected transactions ordered by date, ties kept in template order
    """
    validate_month_key(month_key)
    projected: List[Transaction] = []
    for template in templates:
        instance = project_instance(
            template, month_key, ledger.entry(template.template_id, month_key)
        )
        if instance is not None:
            projected.append(instance)
    return sorted(projected, key=lambda t: t.date)


__all__ = [
    "default_amount",
    "effective_values",
    "fires_in_month",
    "instance_date",
    "project_instance",
    "project_month",
]
