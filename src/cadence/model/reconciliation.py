from __future__ import annotations

"""
Result models for reconciliation and budget comparison.

Scope
- Pure Pydantic v2 models; produced by cadence.services, consumed by the
  CLI and any report layer.
"""

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, Field, computed_field

from cadence.model.transaction import Transaction


class ReconciliationMatch(BaseModel):
    """An expected transaction paired with an actual one."""

    expected: Transaction
    actual: Transaction
    confidence: float = Field(gt=0.0, le=1.0)
    reason: str


class ReconciliationResult(BaseModel):
    matches: list[ReconciliationMatch] = Field(default_factory=list)
    unmatched_expected: list[Transaction] = Field(default_factory=list)
    unmatched_actual: list[Transaction] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class BudgetStatus(StrEnum):
    on_track = "on_track"
    under_budget = "under_budget"
    over_budget = "over_budget"
    close_to_limit = "close_to_limit"


class BudgetComparison(BaseModel):
    """Expected vs actual totals for one category."""

    category: str
    expected: Decimal
    actual: Decimal
    variance: Decimal
    percentage: Decimal
    status: BudgetStatus


class BudgetReport(BaseModel):
    """Roll-up of per-category comparisons."""

    comparisons: list[BudgetComparison] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def total_expected(self) -> Decimal:
        return sum((c.expected for c in self.comparisons), Decimal("0"))

    @computed_field  # type: ignore[misc]
    @property
    def total_actual(self) -> Decimal:
        return sum((c.actual for c in self.comparisons), Decimal("0"))

    @computed_field  # type: ignore[misc]
    @property
    def total_variance(self) -> Decimal:
        return self.total_actual - self.total_expected

    @computed_field  # type: ignore[misc]
    @property
    def over_budget_count(self) -> int:
        return sum(1 for c in self.comparisons if c.status == BudgetStatus.over_budget)


__all__ = [
    "ReconciliationMatch",
    "ReconciliationResult",
    "BudgetStatus",
    "BudgetComparison",
    "BudgetReport",
]
