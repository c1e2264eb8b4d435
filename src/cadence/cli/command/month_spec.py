from __future__ import annotations

"""
Tests for month, convert, override, skip and clear commands.
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from tempfile import TemporaryDirectory

from cadence.cli.command import clear, convert, month, override, skip
from cadence.model.template import Frequency
from cadence.model.transaction import TransactionType
from cadence.services.recurring_service import RecurringService
from cadence.storage.sqlite_store import SqliteStore
from cadence.workspace import Workspace


def _seed(root: Path) -> tuple[Workspace, SqliteStore, str]:
    workspace = Workspace(root=root)
    store = SqliteStore(workspace.database_path)
    template = RecurringService(store, store).create_template(
        "local",
        name="Rent",
        amount=Decimal("1200"),
        type=TransactionType.expense,
        category="Housing",
        frequency=Frequency.monthly,
        start_date=datetime(2025, 1, 1),
    )
    return workspace, store, template.template_id


class DescribeMonthCommand:
    def it_should_show_a_month_with_projections(self):
        with TemporaryDirectory() as tmpdir:
            workspace, _, _ = _seed(Path(tmpdir))

            assert month.run(month_key="2025-03", workspace=workspace) == 0

    def it_should_reject_a_malformed_month(self):
        with TemporaryDirectory() as tmpdir:
            workspace, _, _ = _seed(Path(tmpdir))

            assert month.run(month_key="2025-13", workspace=workspace) == 1


class DescribeConvertCommand:
    def it_should_record_the_instance_once(self):
        with TemporaryDirectory() as tmpdir:
            workspace, store, template_id = _seed(Path(tmpdir))

            assert convert.run(template=template_id[:8], month_key="2025-03", workspace=workspace) == 0
            assert convert.run(template=template_id, month_key="2025-03", workspace=workspace) == 0

            records = store.list_transactions("local", datetime(2025, 3, 1), datetime(2025, 3, 31))
            assert len(records) == 1
            assert records[0].template_id == template_id
            assert store.get_template(template_id).entry_for("2025-03").is_skip

    def it_should_fail_for_an_unknown_template(self):
        with TemporaryDirectory() as tmpdir:
            workspace, _, _ = _seed(Path(tmpdir))

            assert convert.run(template="nope", month_key="2025-03", workspace=workspace) == 1

    def it_should_not_convert_for_another_owner(self):
        with TemporaryDirectory() as tmpdir:
            workspace, store, template_id = _seed(Path(tmpdir))

            rc = convert.run(template=template_id, month_key="2025-03", owner="other", workspace=workspace)

            assert rc == 1
            assert store.find_materialized(template_id, "2025-03") is None


class DescribeMonthEntryCommands:
    def it_should_override_with_template_defaults_for_missing_fields(self):
        with TemporaryDirectory() as tmpdir:
            workspace, store, template_id = _seed(Path(tmpdir))

            rc = override.run(
                template=template_id, month_key="2025-04", amount=Decimal("1300"), workspace=workspace
            )

            assert rc == 0
            entry = store.get_template(template_id).entry_for("2025-04")
            assert entry.override.amount == Decimal("1300")
            assert entry.override.category == "Housing"
            assert entry.override.name == "Rent"

    def it_should_refuse_to_skip_an_overridden_month_until_cleared(self):
        with TemporaryDirectory() as tmpdir:
            workspace, store, template_id = _seed(Path(tmpdir))
            override.run(template=template_id, month_key="2025-04", amount=Decimal("1"), workspace=workspace)

            assert skip.run(template=template_id, month_key="2025-04", workspace=workspace) == 1
            assert clear.run(template=template_id, month_key="2025-04", workspace=workspace) == 0
            assert skip.run(template=template_id, month_key="2025-04", workspace=workspace) == 0
            assert store.get_template(template_id).entry_for("2025-04").is_skip

    def it_should_reject_a_month_before_the_template_starts(self):
        with TemporaryDirectory() as tmpdir:
            workspace, _, template_id = _seed(Path(tmpdir))

            assert skip.run(template=template_id, month_key="2024-12", workspace=workspace) == 1

    def it_should_succeed_when_clearing_an_empty_month(self):
        with TemporaryDirectory() as tmpdir:
            workspace, _, template_id = _seed(Path(tmpdir))

            assert clear.run(template=template_id, month_key="2025-06", workspace=workspace) == 0
