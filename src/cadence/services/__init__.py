"""
Service layer for Cadence.

This module contains the functional core: projection, ledger, conversion,
lifecycle, reconciliation and budgeting. Services depend on the narrow store
protocols in cadence.storage and never on the CLI.

Principles:
- No UI framework imports (Rich, Typer)
- All dependencies injected through constructors
- No implicit clock: callers pass reference dates and month keys
- Functions return data structures, not void
"""

from cadence.services.budget_comparator import (
    build_budget_report,
    compare_budget,
    expected_from_templates,
    has_expected_marker,
)
from cadence.services.conversion_service import ConversionService
from cadence.services.lifecycle_controller import DeleteScope, LifecycleController
from cadence.services.override_ledger import LedgerSnapshot, OverrideLedger
from cadence.services.projection_engine import project_month
from cadence.services.reconciliation_matcher import ReconciliationMatcher, reconcile
from cadence.services.recurring_service import RecurringService
from cadence.services.similarity import ExactTable, FuzzyTable, SimilarityProvider

__all__ = [
    "RecurringService",
    "OverrideLedger",
    "LedgerSnapshot",
    "ConversionService",
    "LifecycleController",
    "DeleteScope",
    "ReconciliationMatcher",
    "SimilarityProvider",
    "ExactTable",
    "FuzzyTable",
    "project_month",
    "reconcile",
    "compare_budget",
    "build_budget_report",
    "expected_from_templates",
    "has_expected_marker",
]
