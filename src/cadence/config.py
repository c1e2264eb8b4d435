"""
Central configuration for the Cadence engine.

Path resolution lives in cadence.workspace.Workspace. This module only holds
engine constants shared by the projection, matching and budgeting code:

  1. Canonical frequency -> monthly conversion factors
  2. Reconciliation weights and thresholds
  3. Budget status thresholds and the expected-transaction marker
"""

from decimal import Decimal

DEFAULT_OWNER_ID = "local"

CENTS = Decimal("0.01")

# Calendar averages: 52 weeks / 12 months, 26 fortnights / 12 months
MONTHLY_FACTORS = {
    "weekly": Decimal("4.33"),
    "biweekly": Decimal("2.17"),
    "monthly": Decimal("1"),
    "quarterly": Decimal("1") / Decimal("3"),
    "yearly": Decimal("1") / Decimal("12"),
}

# Months between occurrences for templates that do not fire every month
ANCHOR_INTERVAL_MONTHS = {
    "quarterly": 3,
    "yearly": 12,
}

# Reconciliation confidence weights
WEIGHT_CATEGORY_EXACT = Decimal("0.4")
WEIGHT_CATEGORY_SIMILAR = Decimal("0.3")
WEIGHT_AMOUNT_WITHIN = Decimal("0.4")
WEIGHT_AMOUNT_CLOSE = Decimal("0.2")
WEIGHT_DATE_WITHIN = Decimal("0.2")
WEIGHT_DATE_CLOSE = Decimal("0.1")
WEIGHT_DESCRIPTION = Decimal("0.1")

MATCH_NOISE_THRESHOLD = Decimal("0.3")
AMOUNT_TOLERANCE_RATIO = Decimal("0.1")
AMOUNT_TOLERANCE_FLOOR = Decimal("1")
DATE_WITHIN_DAYS = 1
DATE_CLOSE_DAYS = 3

RECURRING_KEYWORDS = ("salary", "paycheck", "rent")

# Budget comparison
EXPECTED_MARKER = "Expected:"
OVER_BUDGET_PERCENT = Decimal("110")
CLOSE_TO_LIMIT_PERCENT = Decimal("90")
UNDER_BUDGET_PERCENT = Decimal("70")
