from __future__ import annotations

"""
Tests for template management commands.
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from tempfile import TemporaryDirectory

from cadence.cli.command import add_template, add_transaction, delete, demote, init, promote, stop, templates
from cadence.model.template import Frequency
from cadence.model.transaction import TransactionType
from cadence.services.lifecycle_controller import DeleteScope
from cadence.storage.sqlite_store import SqliteStore
from cadence.workspace import Workspace


def _with_template(root: Path) -> tuple[Workspace, SqliteStore, str]:
    workspace = Workspace(root=root)
    rc = add_template.run(
        name="Gym",
        amount=Decimal("40"),
        category="Health",
        start_date=datetime(2025, 1, 15),
        workspace=workspace,
    )
    assert rc == 0
    store = SqliteStore(workspace.database_path)
    [template] = store.list_templates("local")
    return workspace, store, template.template_id


class DescribeInitCommand:
    def it_should_create_database_and_similarity_config(self):
        with TemporaryDirectory() as tmpdir:
            workspace = Workspace(root=Path(tmpdir))

            assert init.run(workspace=workspace) == 0

            assert workspace.database_path.exists()
            assert "categories:" in workspace.similarity_config.read_text(encoding="utf-8")

    def it_should_leave_existing_files_alone(self):
        with TemporaryDirectory() as tmpdir:
            workspace = Workspace(root=Path(tmpdir))
            workspace.similarity_config.parent.mkdir(parents=True)
            workspace.similarity_config.write_text("categories: {}\n", encoding="utf-8")

            assert init.run(workspace=workspace) == 0
            assert workspace.similarity_config.read_text(encoding="utf-8") == "categories: {}\n"


class DescribeAddTemplateCommand:
    def it_should_create_a_template(self):
        with TemporaryDirectory() as tmpdir:
            _, store, template_id = _with_template(Path(tmpdir))

            template = store.get_template(template_id)
            assert template.amount == Decimal("40")
            assert template.frequency == Frequency.monthly
            assert template.type == TransactionType.expense

    def it_should_reject_non_positive_amounts(self):
        with TemporaryDirectory() as tmpdir:
            workspace = Workspace(root=Path(tmpdir))

            rc = add_template.run(
                name="Bad",
                amount=Decimal("0"),
                category="Misc",
                start_date=datetime(2025, 1, 1),
                workspace=workspace,
            )

            assert rc == 1

    def it_should_reject_an_end_before_the_start(self):
        with TemporaryDirectory() as tmpdir:
            workspace = Workspace(root=Path(tmpdir))

            rc = add_template.run(
                name="Bad",
                amount=Decimal("5"),
                category="Misc",
                start_date=datetime(2025, 3, 1),
                end_date=datetime(2025, 1, 1),
                workspace=workspace,
            )

            assert rc == 1


class DescribeTemplatesCommand:
    def it_should_list_templates(self):
        with TemporaryDirectory() as tmpdir:
            workspace, _, _ = _with_template(Path(tmpdir))

            assert templates.run(workspace=workspace) == 0
            assert templates.run(include_inactive=True, workspace=workspace) == 0

    def it_should_handle_an_empty_workspace(self):
        with TemporaryDirectory() as tmpdir:
            assert templates.run(workspace=Workspace(root=Path(tmpdir))) == 0


class DescribeLifecycleCommands:
    def it_should_stop_after_the_reference_month(self):
        with TemporaryDirectory() as tmpdir:
            workspace, store, template_id = _with_template(Path(tmpdir))

            rc = stop.run(template=template_id, reference_date=datetime(2025, 5, 2), workspace=workspace)

            assert rc == 0
            assert store.get_template(template_id).end_month == "2025-05"

    def it_should_delete_one_month(self):
        with TemporaryDirectory() as tmpdir:
            workspace, store, template_id = _with_template(Path(tmpdir))

            rc = delete.run(template=template_id, reference_date=datetime(2025, 5, 2), workspace=workspace)

            assert rc == 0
            assert store.get_template(template_id).entry_for("2025-05").is_skip

    def it_should_delete_from_a_month_onward(self):
        with TemporaryDirectory() as tmpdir:
            workspace, store, template_id = _with_template(Path(tmpdir))

            rc = delete.run(
                template=template_id,
                scope=DeleteScope.all_future,
                reference_date=datetime(2025, 5, 2),
                workspace=workspace,
            )

            assert rc == 0
            assert store.get_template(template_id).is_active is False

    def it_should_purge_a_template(self):
        with TemporaryDirectory() as tmpdir:
            workspace, store, template_id = _with_template(Path(tmpdir))

            assert delete.run(template=template_id, purge=True, workspace=workspace) == 0
            assert store.list_templates("local", active_only=False) == []

    def it_should_demote_a_template(self):
        with TemporaryDirectory() as tmpdir:
            workspace, store, template_id = _with_template(Path(tmpdir))

            assert demote.run(template=template_id, month_key="2025-02", workspace=workspace) == 0

            [record] = store.list_transactions("local", datetime(2025, 2, 1), datetime(2025, 2, 28))
            assert record.date == datetime(2025, 2, 15)
            assert record.template_id is None


class DescribePromoteCommand:
    def it_should_promote_a_recorded_transaction(self):
        with TemporaryDirectory() as tmpdir:
            workspace = Workspace(root=Path(tmpdir))
            rc = add_transaction.run(
                amount=Decimal("12.99"),
                category="Entertainment",
                date=datetime(2025, 2, 7),
                description="Music",
                workspace=workspace,
            )
            assert rc == 0
            store = SqliteStore(workspace.database_path)
            [txn] = store.list_transactions("local")

            rc = promote.run(transaction_id=txn.transaction_id, frequency=Frequency.monthly, workspace=workspace)

            assert rc == 0
            [template] = store.list_templates("local")
            assert template.name == "Music"
            assert store.list_transactions("local") == []

    def it_should_fail_for_another_owners_transaction(self):
        with TemporaryDirectory() as tmpdir:
            workspace = Workspace(root=Path(tmpdir))
            add_transaction.run(
                amount=Decimal("12.99"),
                category="Entertainment",
                date=datetime(2025, 2, 7),
                description="Music",
                workspace=workspace,
            )
            store = SqliteStore(workspace.database_path)
            [txn] = store.list_transactions("local")

            rc = promote.run(transaction_id=txn.transaction_id, owner="someone-else", workspace=workspace)

            assert rc == 1
            assert [t.transaction_id for t in store.list_transactions("local")] == [txn.transaction_id]
            assert store.list_templates("someone-else") == []

    def it_should_fail_for_an_unknown_transaction(self):
        with TemporaryDirectory() as tmpdir:
            workspace = Workspace(root=Path(tmpdir))

            assert promote.run(transaction_id="missing", workspace=workspace) == 1
