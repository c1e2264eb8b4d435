"""Record a one-off transaction."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from cadence.errors import CadenceError
from cadence.model.transaction import TransactionType
from cadence.workspace import Workspace

from .util import console, open_service, owner_or_default, print_error


def run(
    *,
    amount: Decimal,
    category: str,
    date: datetime,
    description: str = "",
    txn_type: TransactionType = TransactionType.expense,
    owner: Optional[str] = None,
    workspace: Workspace,
) -> int:
    try:
        service = open_service(workspace)
        transaction_id = service.record_transaction(
            owner_or_default(owner),
            amount=amount,
            type=txn_type,
            category=category,
            description=description,
            date=date,
        )
    except CadenceError as e:
        print_error(e)
        return 1

    console.print(f"[green]Recorded[/] transaction {transaction_id}")
    return 0
