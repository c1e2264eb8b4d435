"""Override a template's amount, category or name for one month."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from cadence.errors import CadenceError
from cadence.workspace import Workspace

from .util import console, open_service, owner_or_default, print_error, resolve_template_id


def run(
    *,
    template: str,
    month_key: str,
    amount: Decimal,
    category: Optional[str] = None,
    name: Optional[str] = None,
    owner: Optional[str] = None,
    workspace: Workspace,
) -> int:
    """Set an override; category and name default to the template's own values.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    owner_id = owner_or_default(owner)
    try:
        service = open_service(workspace)
        template_id = resolve_template_id(service, owner_id, template)
        current = service.template(owner_id, template_id)
        service.set_month_override(
            owner_id,
            template_id,
            month_key,
            amount=amount,
            category=category or current.category,
            name=name or current.name,
        )
    except CadenceError as e:
        print_error(e)
        return 1

    console.print(f"[green]Override set[/] for {current.name} in {month_key}: {amount:,.2f}")
    return 0
