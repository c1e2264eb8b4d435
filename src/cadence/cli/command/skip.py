"""Skip a template for one month."""

from __future__ import annotations

from typing import Optional

from cadence.errors import CadenceError
from cadence.workspace import Workspace

from .util import console, open_service, owner_or_default, print_error, resolve_template_id


def run(*, template: str, month_key: str, owner: Optional[str] = None, workspace: Workspace) -> int:
    owner_id = owner_or_default(owner)
    try:
        service = open_service(workspace)
        template_id = resolve_template_id(service, owner_id, template)
        service.set_month_skip(owner_id, template_id, month_key)
    except CadenceError as e:
        print_error(e)
        return 1

    console.print(f"[green]Skipped[/] {month_key}")
    return 0
