from __future__ import annotations

"""
Tests for budget comparison.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from cadence.model.reconciliation import BudgetStatus
from cadence.model.template import Frequency, RecurringTemplate
from cadence.model.transaction import Transaction, TransactionType
from cadence.services.budget_comparator import (
    budget_status,
    build_budget_report,
    compare_budget,
    expected_from_templates,
)


def _txn(category, amount, description="") -> Transaction:
    return Transaction(
        amount=Decimal(str(amount)),
        type=TransactionType.expense,
        category=category,
        description=description,
        date=datetime(2025, 3, 5),
    )


def _expected(category, amount) -> Transaction:
    return _txn(category, amount, description=f"Expected: {category}")


class DescribeBudgetStatus:
    @pytest.mark.parametrize(
        "percentage,status",
        [
            ("110.01", BudgetStatus.over_budget),
            ("110", BudgetStatus.close_to_limit),
            ("90.01", BudgetStatus.close_to_limit),
            ("90", BudgetStatus.on_track),
            ("70", BudgetStatus.on_track),
            ("69.99", BudgetStatus.under_budget),
            ("0", BudgetStatus.under_budget),
        ],
    )
    def it_should_classify_by_percentage(self, percentage, status):
        assert budget_status(Decimal(percentage)) == status


class DescribeCompareBudget:
    def it_should_report_overspending(self):
        [food] = compare_budget([_expected("Food", 500)], [_txn("Food", 560)])

        assert food.category == "Food"
        assert food.variance == Decimal("60")
        assert food.percentage == Decimal("112")
        assert food.status == BudgetStatus.over_budget

    def it_should_report_zero_percent_without_an_expectation(self):
        [travel] = compare_budget([], [_txn("Travel", 80)])

        assert travel.expected == 0
        assert travel.percentage == 0
        assert travel.status == BudgetStatus.under_budget

    def it_should_tell_expected_items_apart_by_the_marker(self):
        # The same list can feed both sides
        items = [_expected("Food", 200), _txn("Food", 150), _txn("Food", 40)]

        [food] = compare_budget(items, items)

        assert food.expected == Decimal("200")
        assert food.actual == Decimal("190")
        assert food.status == BudgetStatus.close_to_limit

    def it_should_accept_a_custom_predicate(self):
        def projected(txn):
            return txn.is_projected

        expected = [_txn("Rent", 1000).model_copy(update={"is_projected": True})]
        actual = [_txn("Rent", 800)]

        [rent] = compare_budget(expected, actual, projected)

        assert rent.percentage == Decimal("80")
        assert rent.status == BudgetStatus.on_track

    def it_should_count_a_full_spend_as_close_to_limit(self):
        [rent] = compare_budget([_expected("Rent", 1000)], [_txn("Rent", 1000)])

        assert rent.status == BudgetStatus.close_to_limit

    def it_should_compare_magnitudes_of_negative_expenses(self):
        [food] = compare_budget([_expected("Food", 500)], [_txn("Food", -560)])

        assert food.actual == Decimal("560")
        assert food.variance == Decimal("60")
        assert food.percentage == Decimal("112")
        assert food.status == BudgetStatus.over_budget

    def it_should_keep_first_seen_category_order(self):
        comparisons = compare_budget(
            [_expected("Rent", 1000), _expected("Food", 100)],
            [_txn("Travel", 10), _txn("Food", 50)],
        )

        assert [c.category for c in comparisons] == ["Rent", "Food", "Travel"]

    def it_should_round_percentages_to_two_places(self):
        [food] = compare_budget([_expected("Food", 3)], [_txn("Food", 1)])

        assert food.percentage == Decimal("33.33")


class DescribeBuildBudgetReport:
    def it_should_total_the_comparisons(self):
        report = build_budget_report(
            [_expected("Food", 500), _expected("Rent", 1000)],
            [_txn("Food", 560), _txn("Rent", 1000)],
        )

        assert report.total_expected == Decimal("1500")
        assert report.total_actual == Decimal("1560")
        assert report.total_variance == Decimal("60")
        assert report.over_budget_count == 1


class DescribeExpectedFromTemplates:
    @pytest.fixture
    def templates(self):
        return [
            RecurringTemplate(
                template_id="gym",
                name="Gym",
                amount=Decimal("10"),
                type=TransactionType.expense,
                category="Health",
                frequency=Frequency.weekly,
                start_date=datetime(2025, 1, 6),
            ),
            RecurringTemplate(
                template_id="insurance",
                name="Insurance",
                amount=Decimal("1200"),
                type=TransactionType.expense,
                category="Insurance",
                frequency=Frequency.yearly,
                start_date=datetime(2025, 6, 1),
            ),
            RecurringTemplate(
                template_id="old",
                name="Old",
                amount=Decimal("5"),
                type=TransactionType.expense,
                category="Misc",
                start_date=datetime(2024, 1, 1),
                end_date=datetime(2024, 12, 31),
            ),
        ]

    def it_should_use_monthly_equivalents_of_templates_in_range(self, templates):
        expected = expected_from_templates(templates, "2025-03")

        assert [(t.template_id, t.amount) for t in expected] == [("gym", Decimal("43.30"))]
        assert expected[0].description == "Expected: Gym"
        assert expected[0].date == datetime(2025, 3, 1)
        assert expected[0].is_projected

    def it_should_spread_yearly_templates_over_every_month(self, templates):
        expected = expected_from_templates(templates, "2025-09")

        assert [(t.template_id, t.amount) for t in expected] == [
            ("gym", Decimal("43.30")),
            ("insurance", Decimal("100.00")),
        ]
