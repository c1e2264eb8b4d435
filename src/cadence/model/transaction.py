from __future__ import annotations

"""
Transaction model shared by projection, conversion and reconciliation.

Scope
- Pure Pydantic v2 model; no I/O.
- The same model carries durable records (from a transaction store) and
  virtual projected instances (is_projected=True). Projected instances are
  never handed to a store.
"""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from cadence.config import DEFAULT_OWNER_ID
from cadence.model.month_key import naive_utc


class TransactionType(StrEnum):
    income = "income"
    expense = "expense"


class Transaction(BaseModel):
    """A single income or expense record.

    Materialized records carry both template_id and month_key; together they
    form the uniqueness key a transaction store enforces.
    """

    model_config = ConfigDict(frozen=True)

    transaction_id: Optional[str] = None
    owner_id: str = DEFAULT_OWNER_ID
    amount: Decimal
    type: TransactionType
    category: str
    description: str = ""
    date: datetime
    template_id: Optional[str] = None
    month_key: Optional[str] = None
    is_projected: bool = False

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Decimal:
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))

    @field_validator("date")
    @classmethod
    def _naive_date(cls, value: datetime) -> datetime:
        return naive_utc(value)

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        """Serialize Decimal to string to preserve precision."""
        return str(value)

    @property
    def materialization_key(self) -> tuple[str, str] | None:
        if self.template_id and self.month_key:
            return (self.template_id, self.month_key)
        return None


__all__ = ["Transaction", "TransactionType"]
