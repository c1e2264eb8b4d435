from __future__ import annotations

"""
Recurring obligation templates and their per-month ledger entries.

Scope
- Pure Pydantic v2 models; no I/O (stores live in cadence.storage).
- A template's month_overrides map holds at most one entry per month: either
  an override of amount/category/name, or a skip marker.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import StrEnum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from cadence.config import ANCHOR_INTERVAL_MONTHS, CENTS, DEFAULT_OWNER_ID, MONTHLY_FACTORS
from cadence.model.month_key import month_key_for, naive_utc, validate_month_key
from cadence.model.transaction import TransactionType


class Frequency(StrEnum):
    weekly = "weekly"
    biweekly = "biweekly"
    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"

    @property
    def monthly_factor(self) -> Decimal:
        return MONTHLY_FACTORS[self.value]

    @property
    def anchor_interval(self) -> int:
        """Months between firings (1 for frequencies that fire every month)."""
        return ANCHOR_INTERVAL_MONTHS.get(self.value, 1)


def to_monthly(amount: Decimal, frequency: Frequency) -> Decimal:
    """Normalize a per-occurrence amount to its monthly equivalent (cents)."""
    return (amount * frequency.monthly_factor).quantize(CENTS, rounding=ROUND_HALF_UP)


def _parse_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class MonthOverride(BaseModel):
    """Month-specific replacement of a template's amount, category and name."""

    amount: Decimal = Field(gt=0)
    category: str
    name: str

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Decimal:
        return _parse_decimal(value)

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return str(value)


class MonthEntry(BaseModel):
    """One ledger entry: exactly one of override or skip."""

    override: Optional[MonthOverride] = None
    skip: bool = False

    @model_validator(mode="after")
    def _validate_exclusive(self) -> MonthEntry:
        if self.skip and self.override is not None:
            raise ValueError("A month entry cannot be both an override and a skip")
        if not self.skip and self.override is None:
            raise ValueError("A month entry must be an override or a skip")
        return self

    @classmethod
    def skipped(cls) -> MonthEntry:
        return cls(skip=True)

    @classmethod
    def overridden(cls, amount: Decimal, category: str, name: str) -> MonthEntry:
        return cls(override=MonthOverride(amount=amount, category=category, name=name))

    @property
    def is_skip(self) -> bool:
        return self.skip

    @property
    def is_override(self) -> bool:
        return self.override is not None


class RecurringTemplate(BaseModel):
    """A recurring obligation that generates one projected instance per firing month.

    amount is the per-occurrence amount as entered; monthly_amount is its
    canonical monthly equivalent.
    """

    template_id: str = Field(default_factory=lambda: str(uuid4()))
    owner_id: str = DEFAULT_OWNER_ID
    name: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    type: TransactionType
    category: str
    frequency: Frequency = Frequency.monthly
    start_date: datetime
    end_date: Optional[datetime] = None
    is_active: bool = True
    month_overrides: dict[str, MonthEntry] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Decimal:
        return _parse_decimal(value)

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return str(value)

    @field_validator("start_date", "end_date", "created_at", "updated_at")
    @classmethod
    def _naive_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value) if value is not None else None

    @field_validator("month_overrides")
    @classmethod
    def _validate_keys(cls, value: dict[str, MonthEntry]) -> dict[str, MonthEntry]:
        for key in value:
            validate_month_key(key)
        return value

    @model_validator(mode="after")
    def _validate_dates(self) -> RecurringTemplate:
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError(
                f"end_date ({self.end_date.isoformat()}) precedes start_date "
                f"({self.start_date.isoformat()})"
            )
        return self

    @property
    def monthly_amount(self) -> Decimal:
        return to_monthly(self.amount, self.frequency)

    @property
    def start_month(self) -> str:
        return month_key_for(self.start_date)

    @property
    def end_month(self) -> str | None:
        return month_key_for(self.end_date) if self.end_date is not None else None

    def entry_for(self, month_key: str) -> MonthEntry | None:
        return self.month_overrides.get(month_key)


__all__ = [
    "Frequency",
    "MonthOverride",
    "MonthEntry",
    "RecurringTemplate",
    "to_monthly",
]
