"""Create a recurring template."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from cadence.errors import CadenceError
from cadence.model.template import Frequency
from cadence.model.transaction import TransactionType
from cadence.workspace import Workspace

from .util import console, open_service, owner_or_default, print_error


def run(
    *,
    name: str,
    amount: Decimal,
    category: str,
    start_date: datetime,
    frequency: Frequency = Frequency.monthly,
    txn_type: TransactionType = TransactionType.expense,
    end_date: Optional[datetime] = None,
    owner: Optional[str] = None,
    workspace: Workspace,
) -> int:
    """Create a template.

    Args:
        amount: Per-occurrence amount (positive); the type carries the direction
        start_date: First occurrence; its day of month anchors every instance
    """
    try:
        service = open_service(workspace)
        template = service.create_template(
            owner_or_default(owner),
            name=name,
            amount=amount,
            type=txn_type,
            category=category,
            frequency=frequency,
            start_date=start_date,
            end_date=end_date,
        )
    except CadenceError as e:
        print_error(e)
        return 1

    console.print(
        f"[green]Created[/] {template.name} ({template.frequency}, "
        f"{template.monthly_amount:,.2f}/month) id={template.template_id}"
    )
    return 0
