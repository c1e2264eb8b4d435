"""Scoped template deletion."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from cadence.errors import CadenceError
from cadence.services.lifecycle_controller import DeleteScope
from cadence.workspace import Workspace

from .util import console, open_service, owner_or_default, print_error, resolve_template_id


def run(
    *,
    template: str,
    scope: DeleteScope = DeleteScope.current_month_only,
    reference_date: Optional[datetime] = None,
    purge: bool = False,
    owner: Optional[str] = None,
    workspace: Workspace,
) -> int:
    """Delete one month of a template, everything from that month on, or the whole record.

    Recorded transactions created from the template are never touched.

    Args:
        scope: current_month_only or all_future (ignored with purge)
        reference_date: Month to delete from; defaults to today
        purge: Remove the template record entirely
    """
    owner_id = owner_or_default(owner)
    reference_date = reference_date or datetime.now()
    try:
        service = open_service(workspace)
        template_id = resolve_template_id(service, owner_id, template)
        if purge:
            service.purge_template(owner_id, template_id)
        else:
            service.delete_template(owner_id, template_id, scope, reference_date)
    except CadenceError as e:
        print_error(e)
        return 1

    if purge:
        console.print(f"[green]Purged[/] template {template_id}")
    elif scope == DeleteScope.current_month_only:
        console.print(f"[green]Removed[/] {reference_date:%Y-%m} only")
    else:
        console.print(f"[green]Removed[/] from {reference_date:%Y-%m} onward")
    return 0
