"""Initialize a new cadence workspace directory."""

from __future__ import annotations

from cadence.services.similarity import default_similarity_config, save_similarity_config
from cadence.storage.sqlite_store import SqliteStore
from cadence.workspace import Workspace

from .util import console


def run(*, workspace: Workspace) -> int:
    """Create the database and a starter similarity.yml.

    Skips anything that already exists (safe to run on an existing workspace).

    Returns:
        Exit code (0 = success)
    """
    root = workspace.root
    console.print(f"[bold cyan]Initializing workspace:[/] {root}\n")

    created = []
    skipped = []

    if workspace.database_path.exists():
        skipped.append(str(workspace.database_path.relative_to(root)))
    else:
        SqliteStore(workspace.database_path)
        created.append(str(workspace.database_path.relative_to(root)))

    if workspace.similarity_config.exists():
        skipped.append(str(workspace.similarity_config.relative_to(root)))
    else:
        save_similarity_config(workspace.similarity_config, default_similarity_config())
        created.append(str(workspace.similarity_config.relative_to(root)))

    if created:
        console.print("[green]Created:[/]")
        for path in created:
            console.print(f"  {path}")
    if skipped:
        console.print("[dim]Already exists (skipped):[/dim]")
        for path in skipped:
            console.print(f"  [dim]{path}[/dim]")

    if not created:
        console.print("[green]Workspace already fully initialized.[/]")
    else:
        console.print(f"\n[green]Workspace ready at {root}[/]")
        console.print("\n[dim]Next steps:[/dim]")
        console.print("  1. Run: cadence add-template --name Rent --amount 1200 --category Housing --start 2025-01-01")
        console.print("  2. Run: cadence month 2025-01")
    return 0
