"""Turn a one-off transaction into a recurring template."""

from __future__ import annotations

from typing import Optional

from cadence.errors import CadenceError, PromotionIncomplete
from cadence.model.template import Frequency
from cadence.workspace import Workspace

from .util import console, open_service, owner_or_default, print_error


def run(
    *,
    transaction_id: str,
    frequency: Frequency = Frequency.monthly,
    owner: Optional[str] = None,
    workspace: Workspace,
) -> int:
    """Create a template from the transaction, then remove the transaction.

    Returns:
        Exit code (0 = success, 1 = error or partial promotion)
    """
    owner_id = owner_or_default(owner)
    try:
        service = open_service(workspace)
        template = service.promote_transaction_to_template(owner_id, transaction_id, frequency)
    except PromotionIncomplete as e:
        console.print(f"[yellow]Template {e.template_id} created[/] but transaction {e.transaction_id} was not removed.")
        console.print("Delete that transaction to finish the promotion.")
        return 1
    except CadenceError as e:
        print_error(e)
        return 1

    console.print(f"[green]Promoted[/] to {frequency} template {template.template_id}")
    return 0
