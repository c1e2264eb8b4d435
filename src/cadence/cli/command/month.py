"""
Smart month view: recorded transactions merged with projected instances.
"""

from __future__ import annotations

from typing import Optional

from rich.table import Table

from cadence.errors import CadenceError
from cadence.workspace import Workspace

from .util import console, fmt_amount, open_service, owner_or_default, print_error


def run(*, month_key: str, owner: Optional[str] = None, workspace: Workspace) -> int:
    """Print the merged view for one month.

    Projected rows are marked so they can be told apart from recorded ones;
    their template id is what convert/override/skip expect.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    try:
        service = open_service(workspace)
        rows = service.project_month(owner_or_default(owner), month_key)
    except CadenceError as e:
        print_error(e)
        return 1

    table = Table(title=f"Month {month_key}", show_lines=False)
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Description", style="white")
    table.add_column("Category", style="blue")
    table.add_column("Amount", justify="right")
    table.add_column("Status", style="magenta")
    table.add_column("Template", style="dim")

    for txn in rows:
        status = "[yellow]projected[/]" if txn.is_projected else "recorded"
        table.add_row(
            txn.date.strftime("%Y-%m-%d"),
            txn.description,
            txn.category,
            fmt_amount(txn.amount),
            status,
            (txn.template_id or "")[:8],
        )

    console.print(table)
    projected = sum(1 for t in rows if t.is_projected)
    console.print(f"[dim]{len(rows) - projected} recorded, {projected} projected[/]")
    return 0
