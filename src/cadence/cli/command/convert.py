"""Convert a projected instance into a recorded transaction."""

from __future__ import annotations

from typing import Optional

from cadence.errors import CadenceError, ConversionIncomplete
from cadence.workspace import Workspace

from .util import console, open_service, owner_or_default, print_error, resolve_template_id


def run(*, template: str, month_key: str, owner: Optional[str] = None, workspace: Workspace) -> int:
    """Materialize one template month. Safe to repeat.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    owner_id = owner_or_default(owner)
    try:
        service = open_service(workspace)
        template_id = resolve_template_id(service, owner_id, template)
        transaction_id = service.convert_projected_to_actual(owner_id, template_id, month_key)
    except ConversionIncomplete as e:
        console.print(f"[yellow]Recorded transaction {e.transaction_id}[/] but the month was not marked.")
        console.print("Run the same convert command again to finish.")
        return 1
    except CadenceError as e:
        print_error(e)
        return 1

    console.print(f"[green]Recorded[/] {month_key} as transaction {transaction_id}")
    return 0
