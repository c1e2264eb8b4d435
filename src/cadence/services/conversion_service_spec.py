"""
Tests for ConversionService.

Covers idempotence, the race path through the store's uniqueness check, and
recovery when the second phase (skip marker) fails.
"""

from __future__ import annotations

import threading
from datetime import datetime
from decimal import Decimal

import pytest

from cadence.errors import (
    ConversionIncomplete,
    InvalidStateError,
    NotFoundError,
    StoreError,
)
from cadence.model.template import Frequency, MonthEntry, RecurringTemplate
from cadence.model.transaction import TransactionType
from cadence.services.conversion_service import ConversionService
from cadence.storage.memory_store import InMemoryTemplateStore, InMemoryTransactionStore


class FlakyTemplateStore(InMemoryTemplateStore):
    """Fails template updates while fail_updates is set."""

    def __init__(self):
        super().__init__()
        self.fail_updates = False

    def update_template(self, template):
        if self.fail_updates:
            raise OSError("template store unavailable")
        super().update_template(template)


class FailingTransactionStore(InMemoryTransactionStore):
    def create_transaction(self, transaction):
        raise OSError("transaction store unavailable")


class RacingTransactionStore(InMemoryTransactionStore):
    """Pretends another caller materialized the record between lookup and insert."""

    def __init__(self):
        super().__init__()
        self.lookups = 0

    def find_materialized(self, template_id, month_key):
        self.lookups += 1
        if self.lookups == 1:
            return None
        return super().find_materialized(template_id, month_key)

    def create_transaction(self, transaction):
        if self.lookups == 1:
            super().create_transaction(transaction.model_copy(update={"transaction_id": "winner"}))
        return super().create_transaction(transaction)


def _template(**overrides) -> RecurringTemplate:
    data = dict(
        template_id="rent",
        owner_id="alice",
        name="Rent",
        amount=Decimal("1200"),
        type=TransactionType.expense,
        category="Housing",
        frequency=Frequency.monthly,
        start_date=datetime(2025, 1, 1, 9, 0),
    )
    data.update(overrides)
    return RecurringTemplate(**data)


class DescribeConversionService:
    @pytest.fixture
    def templates(self):
        store = FlakyTemplateStore()
        store.create_template(_template())
        return store

    @pytest.fixture
    def transactions(self):
        return InMemoryTransactionStore()

    @pytest.fixture
    def service(self, templates, transactions):
        return ConversionService(templates, transactions)


class DescribeConvert(DescribeConversionService):
    def it_should_create_a_durable_transaction_from_the_projection(self, service, transactions):
        txn_id = service.convert_projected_to_actual("rent", "2025-03")

        txn = transactions.get_transaction(txn_id)
        assert txn.is_projected is False
        assert txn.amount == Decimal("1200.00")
        assert txn.template_id == "rent"
        assert txn.month_key == "2025-03"
        assert txn.date == datetime(2025, 3, 1, 9, 0)
        assert txn.owner_id == "alice"

    def it_should_write_a_skip_marker(self, service, templates):
        service.convert_projected_to_actual("rent", "2025-03")

        assert templates.get_template("rent").entry_for("2025-03").is_skip

    def it_should_use_override_values_and_replace_the_override(self, service, templates, transactions):
        templates.update_template(
            _template(month_overrides={"2025-03": MonthEntry.overridden(Decimal("1300"), "Housing", "Rent+")})
        )

        txn_id = service.convert_projected_to_actual("rent", "2025-03")

        txn = transactions.get_transaction(txn_id)
        assert txn.amount == Decimal("1300")
        assert txn.description == "Rent+"
        assert templates.get_template("rent").entry_for("2025-03").is_skip

    def it_should_be_idempotent(self, service, transactions):
        first = service.convert_projected_to_actual("rent", "2025-03")
        second = service.convert_projected_to_actual("rent", "2025-03")

        assert first == second
        assert len(transactions.list_transactions("alice")) == 1

    def it_should_reject_months_without_an_instance(self, service, templates):
        templates.update_template(_template(month_overrides={"2025-04": MonthEntry.skipped()}))

        with pytest.raises(InvalidStateError):
            service.convert_projected_to_actual("rent", "2024-12")
        with pytest.raises(InvalidStateError):
            service.convert_projected_to_actual("rent", "2025-04")

    def it_should_raise_not_found_for_unknown_templates(self, service):
        with pytest.raises(NotFoundError):
            service.convert_projected_to_actual("ghost", "2025-03")

    def it_should_hide_templates_of_other_owners(self, service):
        with pytest.raises(NotFoundError):
            service.convert_projected_to_actual("rent", "2025-03", owner_id="bob")

    def it_should_return_the_existing_id_after_the_template_is_deleted(self, service, templates):
        txn_id = service.convert_projected_to_actual("rent", "2025-03")
        templates.delete_template("rent")

        assert service.convert_projected_to_actual("rent", "2025-03") == txn_id


class DescribeFailures(DescribeConversionService):
    def it_should_write_nothing_when_creation_fails(self, templates):
        service = ConversionService(templates, FailingTransactionStore())

        with pytest.raises(StoreError) as info:
            service.convert_projected_to_actual("rent", "2025-03")

        assert isinstance(info.value.__cause__, OSError)
        assert templates.get_template("rent").month_overrides == {}

    def it_should_report_incomplete_conversion_and_recover_on_rerun(self, service, templates, transactions):
        templates.fail_updates = True

        with pytest.raises(ConversionIncomplete) as info:
            service.convert_projected_to_actual("rent", "2025-03")

        created = info.value.transaction_id
        assert transactions.get_transaction(created).month_key == "2025-03"
        assert templates.get_template("rent").entry_for("2025-03") is None

        templates.fail_updates = False
        assert service.convert_projected_to_actual("rent", "2025-03") == created
        assert templates.get_template("rent").entry_for("2025-03").is_skip
        assert len(transactions.list_transactions("alice")) == 1


class DescribeRaces:
    def it_should_return_the_winners_id_on_a_uniqueness_conflict(self):
        templates = InMemoryTemplateStore()
        templates.create_template(_template())
        transactions = RacingTransactionStore()

        txn_id = ConversionService(templates, transactions).convert_projected_to_actual("rent", "2025-03")

        assert txn_id == "winner"
        assert len(transactions.list_transactions("alice")) == 1

    def it_should_create_one_record_under_concurrent_callers(self):
        templates = InMemoryTemplateStore()
        templates.create_template(_template())
        transactions = InMemoryTransactionStore()
        service = ConversionService(templates, transactions)
        results: list[str] = []
        errors: list[Exception] = []

        def convert():
            try:
                results.append(service.convert_projected_to_actual("rent", "2025-03"))
            except Exception as exc:  # pragma: no cover
                errors.append(exc)

        threads = [threading.Thread(target=convert) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(set(results)) == 1
        assert len(transactions.list_transactions("alice")) == 1
