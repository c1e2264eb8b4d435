from __future__ import annotations

"""
Cadence CLI Wrapper (Typer + Rich)

Local-only CLI for recurring obligations: month views with projected
instances, per-month overrides and skips, conversion into recorded
transactions, reconciliation and budget reports.

All paths are resolved from a single workspace root:
  --data-dir / CADENCE_DATA env var / current working directory
"""

import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional

import typer

from cadence.model.template import Frequency
from cadence.model.transaction import TransactionType
from cadence.services.lifecycle_controller import DeleteScope
from cadence.workspace import Workspace

APP_HELP = "Cadence CLI (local-only)"
DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"]
HELP_TEMPLATE = "Template ID (a unique prefix is enough)"
HELP_MONTH = "Month as YYYY-MM"
HELP_OWNER = "Owner ID (default: local)"
HELP_REFERENCE = "Reference date YYYY-MM-DD (default: today)"

app = typer.Typer(no_args_is_help=True, add_completion=False, help=APP_HELP)


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        envvar="CADENCE_DATA",
        help="Workspace root directory (default: current directory)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Cadence CLI. All paths resolved from a single workspace root."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    ctx.ensure_object(dict)
    ctx.obj["workspace"] = Workspace.resolve(data_dir)


def _ws(ctx: typer.Context) -> Workspace:
    return ctx.obj["workspace"]


def _amount(value: float) -> Decimal:
    return Decimal(str(value))


@app.command()
def init(ctx: typer.Context):
    """Initialize a workspace: database and starter config/similarity.yml.

    Safe to run on an existing workspace.
    """
    from cadence.cli.command import init as cmd_init

    code = cmd_init.run(workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def month(
    ctx: typer.Context,
    month_key: str = typer.Argument(..., help=HELP_MONTH),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """Show a month: recorded transactions merged with projected instances.

    Examples:
      cadence month 2025-03
    """
    from cadence.cli.command import month as cmd_month

    code = cmd_month.run(month_key=month_key, owner=owner, workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def templates(
    ctx: typer.Context,
    include_inactive: bool = typer.Option(False, "--all", help="Include deactivated templates"),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """List recurring templates with their monthly equivalents."""
    from cadence.cli.command import templates as cmd_templates

    code = cmd_templates.run(include_inactive=include_inactive, owner=owner, workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command("add-template")
def add_template(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="Template name"),
    amount: float = typer.Option(..., "--amount", help="Amount per occurrence (positive)"),
    category: str = typer.Option(..., "--category", help="Category"),
    start_date: datetime = typer.Option(..., "--start", formats=DATE_FORMATS, help="First occurrence"),
    frequency: Frequency = typer.Option(Frequency.monthly, "--frequency", "-f", help="Recurrence"),
    txn_type: TransactionType = typer.Option(TransactionType.expense, "--type", help="income or expense"),
    end_date: Optional[datetime] = typer.Option(None, "--end", formats=DATE_FORMATS, help="Last day (optional)"),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """Create a recurring template.

    Examples:
      cadence add-template --name Rent --amount 1200 --category Housing --start 2025-01-01
      cadence add-template --name Salary --amount 2000 --category Income --type income -f biweekly --start 2025-01-10
    """
    from cadence.cli.command import add_template as cmd_add_template

    code = cmd_add_template.run(
        name=name,
        amount=_amount(amount),
        category=category,
        start_date=start_date,
        frequency=frequency,
        txn_type=txn_type,
        end_date=end_date,
        owner=owner,
        workspace=_ws(ctx),
    )
    raise typer.Exit(code=code)


@app.command("add-transaction")
def add_transaction(
    ctx: typer.Context,
    amount: float = typer.Option(..., "--amount", help="Amount"),
    category: str = typer.Option(..., "--category", help="Category"),
    date: datetime = typer.Option(..., "--date", formats=DATE_FORMATS, help="Transaction date"),
    description: str = typer.Option("", "--description", "-d", help="Description"),
    txn_type: TransactionType = typer.Option(TransactionType.expense, "--type", help="income or expense"),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """Record a one-off transaction."""
    from cadence.cli.command import add_transaction as cmd_add_transaction

    code = cmd_add_transaction.run(
        amount=_amount(amount),
        category=category,
        date=date,
        description=description,
        txn_type=txn_type,
        owner=owner,
        workspace=_ws(ctx),
    )
    raise typer.Exit(code=code)


@app.command()
def convert(
    ctx: typer.Context,
    template: str = typer.Argument(..., help=HELP_TEMPLATE),
    month_key: str = typer.Argument(..., help=HELP_MONTH),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """Record a projected instance as a real transaction. Safe to repeat.

    Examples:
      cadence convert 3f2a91c0 2025-03
    """
    from cadence.cli.command import convert as cmd_convert

    code = cmd_convert.run(template=template, month_key=month_key, owner=owner, workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def override(
    ctx: typer.Context,
    template: str = typer.Argument(..., help=HELP_TEMPLATE),
    month_key: str = typer.Argument(..., help=HELP_MONTH),
    amount: float = typer.Option(..., "--amount", help="Amount for this month only"),
    category: Optional[str] = typer.Option(None, "--category", help="Category for this month only"),
    name: Optional[str] = typer.Option(None, "--name", help="Name for this month only"),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """Change one month of a template without touching the others.

    Examples:
      cadence override 3f2a91c0 2025-03 --amount 1350
    """
    from cadence.cli.command import override as cmd_override

    code = cmd_override.run(
        template=template,
        month_key=month_key,
        amount=_amount(amount),
        category=category,
        name=name,
        owner=owner,
        workspace=_ws(ctx),
    )
    raise typer.Exit(code=code)


@app.command()
def skip(
    ctx: typer.Context,
    template: str = typer.Argument(..., help=HELP_TEMPLATE),
    month_key: str = typer.Argument(..., help=HELP_MONTH),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """Skip one month of a template."""
    from cadence.cli.command import skip as cmd_skip

    code = cmd_skip.run(template=template, month_key=month_key, owner=owner, workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def clear(
    ctx: typer.Context,
    template: str = typer.Argument(..., help=HELP_TEMPLATE),
    month_key: str = typer.Argument(..., help=HELP_MONTH),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """Remove the override or skip recorded for one month."""
    from cadence.cli.command import clear as cmd_clear

    code = cmd_clear.run(template=template, month_key=month_key, owner=owner, workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def stop(
    ctx: typer.Context,
    template: str = typer.Argument(..., help=HELP_TEMPLATE),
    reference_date: Optional[datetime] = typer.Option(None, "--as-of", formats=DATE_FORMATS, help=HELP_REFERENCE),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """End a template after the reference month."""
    from cadence.cli.command import stop as cmd_stop

    code = cmd_stop.run(template=template, reference_date=reference_date, owner=owner, workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def delete(
    ctx: typer.Context,
    template: str = typer.Argument(..., help=HELP_TEMPLATE),
    scope: DeleteScope = typer.Option(DeleteScope.current_month_only, "--scope", help="What to remove"),
    reference_date: Optional[datetime] = typer.Option(None, "--as-of", formats=DATE_FORMATS, help=HELP_REFERENCE),
    purge: bool = typer.Option(False, "--purge", help="Remove the template record entirely"),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """Delete a template for one month, from a month onward, or entirely.

    Recorded transactions are never removed.

    Examples:
      cadence delete 3f2a91c0 --as-of 2025-03-01
      cadence delete 3f2a91c0 --scope all_future --as-of 2025-03-01
    """
    from cadence.cli.command import delete as cmd_delete

    code = cmd_delete.run(
        template=template,
        scope=scope,
        reference_date=reference_date,
        purge=purge,
        owner=owner,
        workspace=_ws(ctx),
    )
    raise typer.Exit(code=code)


@app.command()
def promote(
    ctx: typer.Context,
    transaction_id: str = typer.Argument(..., help="Transaction ID"),
    frequency: Frequency = typer.Option(Frequency.monthly, "--frequency", "-f", help="Recurrence"),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """Turn a one-off transaction into a recurring template."""
    from cadence.cli.command import promote as cmd_promote

    code = cmd_promote.run(transaction_id=transaction_id, frequency=frequency, owner=owner, workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def demote(
    ctx: typer.Context,
    template: str = typer.Argument(..., help=HELP_TEMPLATE),
    month_key: str = typer.Argument(..., help=HELP_MONTH),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """Replace a template with a single transaction in the given month."""
    from cadence.cli.command import demote as cmd_demote

    code = cmd_demote.run(template=template, month_key=month_key, owner=owner, workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def reconcile(
    ctx: typer.Context,
    month_key: str = typer.Argument(..., help=HELP_MONTH),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """Match the month's template baseline against recorded transactions."""
    from cadence.cli.command import reconcile as cmd_reconcile

    code = cmd_reconcile.run(month_key=month_key, owner=owner, workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def budget(
    ctx: typer.Context,
    month_key: str = typer.Argument(..., help=HELP_MONTH),
    owner: Optional[str] = typer.Option(None, "--owner", help=HELP_OWNER),
):
    """Per-category expected vs actual for one month."""
    from cadence.cli.command import budget as cmd_budget

    code = cmd_budget.run(month_key=month_key, owner=owner, workspace=_ws(ctx))
    raise typer.Exit(code=code)


if __name__ == "__main__":
    app()
