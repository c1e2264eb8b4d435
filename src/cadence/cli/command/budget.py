"""
Budget reporting: compare recorded spending with the template baseline.
"""

from __future__ import annotations

from typing import Optional

from rich.table import Table

from cadence.errors import CadenceError
from cadence.model.reconciliation import BudgetComparison, BudgetReport, BudgetStatus
from cadence.workspace import Workspace

from .util import console, open_service, owner_or_default, print_error

STATUS_STYLES = {
    BudgetStatus.over_budget: "red bold",
    BudgetStatus.close_to_limit: "yellow",
    BudgetStatus.on_track: "green",
    BudgetStatus.under_budget: "cyan",
}


def run(*, month_key: str, owner: Optional[str] = None, workspace: Workspace) -> int:
    """Display per-category expected vs actual for one month.

    Expected amounts are each active template's monthly equivalent.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    try:
        service = open_service(workspace)
        report = service.budget_for_month(owner_or_default(owner), month_key)
    except CadenceError as e:
        print_error(e)
        return 1

    _display_budget_report(report, month_key)
    return 0


def _display_budget_report(report: BudgetReport, month_key: str) -> None:
    table = Table(title=f"Budget Report ({month_key})", show_lines=True)
    table.add_column("Category", style="cyan", no_wrap=True)
    table.add_column("Expected", style="green", justify="right")
    table.add_column("Actual", style="yellow", justify="right")
    table.add_column("Variance", style="white", justify="right")
    table.add_column("% Used", justify="right")
    table.add_column("Status")

    for item in report.comparisons:
        _add_row(table, item)

    console.print(table)

    console.print(f"\n[bold]Total Expected:[/] ${report.total_expected:,.2f}")
    console.print(f"[bold]Total Actual:[/] ${report.total_actual:,.2f}")
    if report.total_variance > 0:
        console.print(f"[bold]Over Budget:[/] [red]${report.total_variance:,.2f}[/]")
    else:
        console.print(f"[bold]Remaining:[/] [green]${abs(report.total_variance):,.2f}[/]")

    if report.over_budget_count > 0:
        plural = "y" if report.over_budget_count == 1 else "ies"
        console.print(f"\n[yellow]⚠ {report.over_budget_count} categor{plural} over budget[/]")


def _add_row(table: Table, item: BudgetComparison) -> None:
    style = STATUS_STYLES[item.status]
    if item.variance > 0:
        variance_str = f"[red]+${item.variance:,.2f}[/]"
    elif item.variance < 0:
        variance_str = f"[green]-${abs(item.variance):,.2f}[/]"
    else:
        variance_str = "$0.00"
    pct_str = f"{item.percentage:.1f}%" if item.expected > 0 else "—"
    table.add_row(
        item.category,
        f"${item.expected:,.2f}" if item.expected else "—",
        f"${item.actual:,.2f}" if item.actual else "—",
        variance_str,
        pct_str,
        f"[{style}]{item.status.replace('_', ' ')}[/]",
    )
