"""List recurring templates."""

from __future__ import annotations

from typing import Optional

from rich.table import Table

from cadence.errors import CadenceError
from cadence.workspace import Workspace

from .util import console, fmt_amount, open_service, owner_or_default, print_error


def run(*, include_inactive: bool = False, owner: Optional[str] = None, workspace: Workspace) -> int:
    try:
        service = open_service(workspace)
        templates = service.templates(owner_or_default(owner), active_only=not include_inactive)
    except CadenceError as e:
        print_error(e)
        return 1

    if not templates:
        console.print("[yellow]No templates defined[/]")
        console.print("Run: cadence add-template --help")
        return 0

    table = Table(title="Recurring Templates", show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Category", style="blue")
    table.add_column("Frequency", style="cyan")
    table.add_column("Amount", justify="right")
    table.add_column("Monthly", justify="right")
    table.add_column("Starts", style="cyan")
    table.add_column("Ends", style="cyan")
    table.add_column("Entries", justify="right")

    for t in templates:
        name = t.name if t.is_active else f"[dim]{t.name} (inactive)[/dim]"
        table.add_row(
            t.template_id[:8],
            name,
            t.category,
            str(t.frequency),
            fmt_amount(t.amount),
            fmt_amount(t.monthly_amount),
            t.start_month,
            t.end_month or "—",
            str(len(t.month_overrides)),
        )

    console.print(table)
    return 0
