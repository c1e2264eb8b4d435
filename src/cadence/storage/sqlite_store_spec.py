"""
Tests for the SQLite store.
"""

from __future__ import annotations

import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from cadence.errors import DuplicateMaterializationError, InvalidStateError, NotFoundError
from cadence.model.template import Frequency, MonthEntry, RecurringTemplate
from cadence.model.transaction import Transaction, TransactionType
from cadence.storage.sqlite_store import SqliteStore


def _template(name: str, **overrides) -> RecurringTemplate:
    data = dict(
        name=name,
        amount=Decimal("100"),
        type=TransactionType.expense,
        category="Bills",
        frequency=Frequency.monthly,
        start_date=datetime(2025, 1, 5),
    )
    data.update(overrides)
    return RecurringTemplate(**data)


def _txn(day: int, **overrides) -> Transaction:
    data = dict(
        amount=Decimal("25.50"),
        type=TransactionType.expense,
        category="Food",
        description="Groceries",
        date=datetime(2025, 3, day, 9, 30),
    )
    data.update(overrides)
    return Transaction(**data)


class DescribeSqliteStore:
    @pytest.fixture
    def temp_db_path(self):
        """Create a temporary database file."""
        with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
            db_path = Path(f.name)
        yield db_path
        if db_path.exists():
            db_path.unlink()

    @pytest.fixture
    def store(self, temp_db_path):
        return SqliteStore(temp_db_path)


class DescribeTemplates(DescribeSqliteStore):
    def it_should_start_empty(self, store):
        assert store.list_templates("local") == []

    def it_should_round_trip_a_template_with_overrides(self, store):
        template = _template("Rent", month_overrides={"2025-02": MonthEntry.skipped()})
        store.create_template(template)

        loaded = store.get_template(template.template_id)
        assert loaded == template

    def it_should_list_in_creation_order(self, store):
        for name in ["Rent", "Gym", "Phone"]:
            store.create_template(_template(name))

        assert [t.name for t in store.list_templates("local")] == ["Rent", "Gym", "Phone"]

    def it_should_filter_inactive_templates(self, store):
        store.create_template(_template("Rent"))
        store.create_template(_template("Old", is_active=False))

        assert [t.name for t in store.list_templates("local")] == ["Rent"]
        assert len(store.list_templates("local", active_only=False)) == 2

    def it_should_scope_by_owner(self, store):
        store.create_template(_template("Mine"))
        store.create_template(_template("Theirs", owner_id="other"))

        assert [t.name for t in store.list_templates("other")] == ["Theirs"]

    def it_should_update_a_template(self, store):
        template = _template("Rent")
        store.create_template(template)

        store.update_template(template.model_copy(update={"amount": Decimal("1300")}))

        assert store.get_template(template.template_id).amount == Decimal("1300")

    def it_should_reject_duplicate_template_ids(self, store):
        template = _template("Rent")
        store.create_template(template)

        with pytest.raises(InvalidStateError):
            store.create_template(template)

    def it_should_raise_not_found(self, store):
        with pytest.raises(NotFoundError):
            store.get_template("missing")
        with pytest.raises(NotFoundError):
            store.update_template(_template("Ghost"))
        with pytest.raises(NotFoundError):
            store.delete_template("missing")


class DescribeTransactions(DescribeSqliteStore):
    def it_should_assign_ids_and_read_back(self, store):
        txn_id = store.create_transaction(_txn(3))

        loaded = store.get_transaction(txn_id)
        assert loaded.transaction_id == txn_id
        assert loaded.amount == Decimal("25.50")

    def it_should_filter_by_date_range_inclusive(self, store):
        store.create_transaction(_txn(1))
        store.create_transaction(_txn(15))
        store.create_transaction(_txn(31))

        rows = store.list_transactions(
            "local", datetime(2025, 3, 1), datetime(2025, 3, 15, 23, 59, 59, 999999)
        )
        assert [t.date.day for t in rows] == [1, 15]

    def it_should_order_by_date(self, store):
        store.create_transaction(_txn(20))
        store.create_transaction(_txn(2))

        assert [t.date.day for t in store.list_transactions("local")] == [2, 20]

    def it_should_enforce_one_materialized_record_per_template_month(self, store):
        store.create_transaction(_txn(5, template_id="t1", month_key="2025-03"))

        with pytest.raises(DuplicateMaterializationError):
            store.create_transaction(_txn(6, template_id="t1", month_key="2025-03"))

        assert len(store.list_transactions("local")) == 1

    def it_should_allow_many_standalone_transactions(self, store):
        store.create_transaction(_txn(5))
        store.create_transaction(_txn(5))

        assert len(store.list_transactions("local")) == 2

    def it_should_find_materialized_records(self, store):
        txn_id = store.create_transaction(_txn(5, template_id="t1", month_key="2025-03"))

        assert store.find_materialized("t1", "2025-03").transaction_id == txn_id
        assert store.find_materialized("t1", "2025-04") is None

    def it_should_refuse_projected_instances(self, store):
        with pytest.raises(InvalidStateError):
            store.create_transaction(_txn(5, is_projected=True))

    def it_should_delete_transactions(self, store):
        txn_id = store.create_transaction(_txn(5))
        store.delete_transaction(txn_id)

        with pytest.raises(NotFoundError):
            store.get_transaction(txn_id)
        with pytest.raises(NotFoundError):
            store.delete_transaction(txn_id)
