"""
Reconcile a month's template baseline against its recorded transactions.
"""

from __future__ import annotations

from typing import Optional

from rich.table import Table

from cadence.errors import CadenceError
from cadence.workspace import Workspace

from .util import console, fmt_amount, open_service, owner_or_default, print_error


def run(*, month_key: str, owner: Optional[str] = None, workspace: Workspace) -> int:
    """Show matched pairs, unmatched items on both sides, and suggestions.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    try:
        service = open_service(workspace)
        result = service.reconcile_month(owner_or_default(owner), month_key)
    except CadenceError as e:
        print_error(e)
        return 1

    table = Table(title=f"Reconciliation {month_key}", show_lines=True)
    table.add_column("Expected", style="white")
    table.add_column("Actual", style="white")
    table.add_column("Expected Amt", justify="right")
    table.add_column("Actual Amt", justify="right")
    table.add_column("Confidence", justify="right", style="magenta")
    table.add_column("Why", style="dim")
    for match in result.matches:
        table.add_row(
            match.expected.description,
            f"{match.actual.date:%Y-%m-%d} {match.actual.description}",
            fmt_amount(match.expected.amount),
            fmt_amount(match.actual.amount),
            f"{match.confidence:.0%}",
            match.reason,
        )
    console.print(table)

    if result.unmatched_expected:
        console.print("\n[bold yellow]Expected but not found:[/]")
        for txn in result.unmatched_expected:
            console.print(f"  {txn.description} ({txn.category}) {txn.amount:,.2f}")
    if result.unmatched_actual:
        console.print("\n[bold yellow]Recorded but not expected:[/]")
        for txn in result.unmatched_actual:
            console.print(f"  {txn.date:%Y-%m-%d} {txn.category} {txn.amount:,.2f}")
    if result.suggestions:
        console.print()
        for suggestion in result.suggestions:
            console.print(f"[dim]• {suggestion}[/dim]")
    return 0
