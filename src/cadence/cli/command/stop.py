"""End a template after the month of a reference date."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from cadence.errors import CadenceError
from cadence.workspace import Workspace

from .util import console, open_service, owner_or_default, print_error, resolve_template_id


def run(
    *,
    template: str,
    reference_date: Optional[datetime] = None,
    owner: Optional[str] = None,
    workspace: Workspace,
) -> int:
    """Stop future recurrence. The reference month still projects.

    Args:
        reference_date: Defaults to today
    """
    owner_id = owner_or_default(owner)
    reference_date = reference_date or datetime.now()
    try:
        service = open_service(workspace)
        template_id = resolve_template_id(service, owner_id, template)
        updated = service.stop_future_recurrence(owner_id, template_id, reference_date)
    except CadenceError as e:
        print_error(e)
        return 1

    console.print(f"[green]{updated.name}[/] ends {updated.end_date:%Y-%m-%d}")
    return 0
