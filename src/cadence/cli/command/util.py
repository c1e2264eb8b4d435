from __future__ import annotations

from decimal import Decimal
from typing import Optional

from rich.console import Console
from rich.text import Text

from cadence.config import DEFAULT_OWNER_ID
from cadence.errors import NotFoundError, ValidationError
from cadence.services.recurring_service import RecurringService
from cadence.services.similarity import load_similarity_table
from cadence.storage.sqlite_store import SqliteStore
from cadence.workspace import Workspace

console = Console()


def open_service(workspace: Workspace) -> RecurringService:
    """RecurringService over the workspace database and similarity table."""
    store = SqliteStore(workspace.database_path)
    return RecurringService(store, store, load_similarity_table(workspace.similarity_config))


def owner_or_default(owner: Optional[str]) -> str:
    return owner or DEFAULT_OWNER_ID


def fmt_amount(amt: Decimal) -> Text:
    s = f"{amt:,.2f}"
    if amt < 0:
        return Text(s, style="bold red")
    elif amt > 0:
        return Text(s, style="bold green")
    return Text(s)


def print_error(message: object) -> None:
    console.print(f"[red]Error:[/] {message}")


def resolve_template_id(service: RecurringService, owner_id: str, prefix: str) -> str:
    """Expand a template id prefix (as shown in tables) to the full id.

    Raises:
        NotFoundError: No template id starts with prefix
        ValidationError: More than one does
    """
    p = (prefix or "").strip().lower()
    if not p:
        raise ValidationError("Template id is required")
    ids = [
        t.template_id
        for t in service.templates(owner_id, active_only=False)
        if t.template_id.lower().startswith(p)
    ]
    if not ids:
        raise NotFoundError(f"Template not found: {prefix}")
    if len(ids) > 1:
        raise ValidationError(f"Ambiguous template id {prefix}: matches {len(ids)} templates")
    return ids[0]
