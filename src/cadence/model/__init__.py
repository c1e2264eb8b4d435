from .month_key import (
    MonthKey,
    month_end,
    month_key_for,
    month_start,
    parse_month_key,
    shift_month,
)
from .reconciliation import (
    BudgetComparison,
    BudgetReport,
    BudgetStatus,
    ReconciliationMatch,
    ReconciliationResult,
)
from .template import (
    Frequency,
    MonthEntry,
    MonthOverride,
    RecurringTemplate,
    to_monthly,
)
from .transaction import Transaction, TransactionType

__all__ = [
    # models
    "Transaction",
    "TransactionType",
    "RecurringTemplate",
    "Frequency",
    "MonthEntry",
    "MonthOverride",
    "ReconciliationMatch",
    "ReconciliationResult",
    "BudgetComparison",
    "BudgetReport",
    "BudgetStatus",
    # month key helpers
    "MonthKey",
    "month_end",
    "month_key_for",
    "month_start",
    "parse_month_key",
    "shift_month",
    "to_monthly",
]
