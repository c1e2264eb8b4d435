"""
Error hierarchy for the Cadence engine.

All errors raised across the library boundary derive from CadenceError so
callers (CLI, UI) can catch one type. Store failures are wrapped in
StoreError with the original exception chained as __cause__.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


class CadenceError(Exception):
    """Base class for all engine errors."""


class NotFoundError(CadenceError):
    """A template or transaction does not exist."""


class InvalidStateError(CadenceError):
    """The requested change conflicts with current template/ledger state."""


class ValidationError(CadenceError):
    """Input failed validation (non-positive amount, malformed month key)."""


class StoreError(CadenceError):
    """A backing store failed. The underlying exception is kept as __cause__."""


class ConversionIncomplete(StoreError):
    """The durable transaction was created but the skip marker was not written.

    Re-running the conversion for the same (template_id, month_key) finds the
    transaction and writes the missing marker.
    """

    def __init__(self, message: str, *, transaction_id: str, template_id: str, month_key: str):
        super().__init__(message)
        self.transaction_id = transaction_id
        self.template_id = template_id
        self.month_key = month_key


class PromotionIncomplete(StoreError):
    """The template was created but the original transaction was not removed.

    Retry the removal with LifecycleController.complete_promotion().
    """

    def __init__(self, message: str, *, template_id: str, transaction_id: str):
        super().__init__(message)
        self.template_id = template_id
        self.transaction_id = transaction_id


class DuplicateMaterializationError(CadenceError):
    """Raised by a transaction store when (template_id, month_key) already exists.

    Never surfaced to callers; the conversion service resolves it to the
    existing transaction id.
    """

    def __init__(self, template_id: str, month_key: str):
        super().__init__(f"Transaction already materialized for {template_id} {month_key}")
        self.template_id = template_id
        self.month_key = month_key


@contextmanager
def store_call(action: str) -> Iterator[None]:
    """Wrap collaborator failures in StoreError, keeping engine errors as-is."""
    try:
        yield
    except CadenceError:
        raise
    except Exception as exc:
        raise StoreError(f"{action} failed: {exc}") from exc


__all__ = [
    "CadenceError",
    "NotFoundError",
    "InvalidStateError",
    "ValidationError",
    "StoreError",
    "ConversionIncomplete",
    "PromotionIncomplete",
    "DuplicateMaterializationError",
    "store_call",
]
