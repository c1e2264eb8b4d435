"""
Budget Comparator - per-category expected vs actual roll-up.

Expected items are told apart from actual items by a caller-supplied
predicate; the default is the "Expected:" description marker that
expected_from_templates() writes.

Amounts are compared by magnitude, as the matcher does: the transaction type
carries the direction, so an expense stored as -560 counts as 560.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Iterable, List, Sequence

from cadence.config import (
    CLOSE_TO_LIMIT_PERCENT,
    EXPECTED_MARKER,
    OVER_BUDGET_PERCENT,
    UNDER_BUDGET_PERCENT,
)
from cadence.model.month_key import month_end, month_start, validate_month_key
from cadence.model.reconciliation import BudgetComparison, BudgetReport, BudgetStatus
from cadence.model.template import RecurringTemplate
from cadence.model.transaction import Transaction

ZERO = Decimal("0")
HUNDRED = Decimal("100")
PERCENT_PLACES = Decimal("0.01")

ExpectedPredicate = Callable[[Transaction], bool]


def has_expected_marker(transaction: Transaction) -> bool:
    return (transaction.description or "").startswith(EXPECTED_MARKER)


def budget_status(percentage: Decimal) -> BudgetStatus:
    if percentage > OVER_BUDGET_PERCENT:
        return BudgetStatus.over_budget
    if percentage > CLOSE_TO_LIMIT_PERCENT:
        return BudgetStatus.close_to_limit
    if percentage < UNDER_BUDGET_PERCENT:
        return BudgetStatus.under_budget
    return BudgetStatus.on_track


def compare_budget(
    expected: Iterable[Transaction],
    actual: Iterable[Transaction],
    is_expected: ExpectedPredicate = has_expected_marker,
) -> List[BudgetComparison]:
    """Group both sets by category and compute variance and status.

    Only items satisfying is_expected count from the expected set, and only
    items not satisfying it count from the actual set.

    Returns:
        One comparison per category, in first-seen order
    """
    totals: Dict[str, List[Decimal]] = {}
    for txn in expected:
        if is_expected(txn):
            totals.setdefault(txn.category, [ZERO, ZERO])[0] += abs(txn.amount)
    for txn in actual:
        if not is_expected(txn):
            totals.setdefault(txn.category, [ZERO, ZERO])[1] += abs(txn.amount)

    comparisons: List[BudgetComparison] = []
    for category, (exp_total, act_total) in totals.items():
        percentage = ZERO
        if exp_total > 0:
            percentage = (act_total / exp_total * HUNDRED).quantize(
                PERCENT_PLACES, rounding=ROUND_HALF_UP
            )
        comparisons.append(
            BudgetComparison(
                category=category,
                expected=exp_total,
                actual=act_total,
                variance=act_total - exp_total,
                percentage=percentage,
                status=budget_status(percentage),
            )
        )
    return comparisons


def build_budget_report(
    expected: Iterable[Transaction],
    actual: Iterable[Transaction],
    is_expected: ExpectedPredicate = has_expected_marker,
) -> BudgetReport:
    return BudgetReport(comparisons=compare_budget(expected, actual, is_expected))


def expected_from_templates(
    templates: Sequence[RecurringTemplate],
    month_key: str,
) -> List[Transaction]:
    """Build the month's expected set from active templates.

    Every active template whose date range overlaps the month contributes its
    monthly-equivalent amount, dated the first of the month, with the
    expected marker prefixed to its name. Month entries are ignored: this is
    the budget baseline, not the projection.
    """
    validate_month_key(month_key)
    first, last = month_start(month_key), month_end(month_key)
    expected: List[Transaction] = []
    for template in templates:
        if not template.is_active or template.start_date > last:
            continue
        if template.end_date is not None and template.end_date < first:
            continue
        expected.append(
            Transaction(
                owner_id=template.owner_id,
                amount=template.monthly_amount,
                type=template.type,
                category=template.category,
                description=f"{EXPECTED_MARKER} {template.name}",
                date=first,
                template_id=template.template_id,
                is_projected=True,
            )
        )
    return expected


__all__ = [
    "budget_status",
    "build_budget_report",
    "compare_budget",
    "expected_from_templates",
    "has_expected_marker",
]
