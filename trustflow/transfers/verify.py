"""Checks for executable transfer lists."""

from __future__ import annotations

from typing import Dict, Sequence

from trustflow.logging import get_logger
from trustflow.types.base import Account
from trustflow.types.dto import Transfer

logger = get_logger(__name__)


def validate_transfers(
    transfers: Sequence[Transfer], source: Account, sink: Account
) -> int:
    """Verify ordering and conservation of a transfer list.

    Simulates the transfers in order against zero starting balances (the
    source may go negative, it is the payer) and then checks that every
    account other than source and sink ends balanced.

    Args:
        transfers: Ordered transfers.
        source: Paying account.
        sink: Receiving account.

    Returns:
        Net value delivered to ``sink``.

    Raises:
        ValueError: If an account overdraws or an intermediate account keeps
            a non-zero balance.
    """
    balances: Dict[Account, int] = {}
    for step, transfer in enumerate(transfers):
        sender = transfer.source
        if sender != source and balances.get(sender, 0) < transfer.amount:
            logger.error(
                "Transfer %d overdraws %s: holds %d, sends %d",
                step,
                sender,
                balances.get(sender, 0),
                transfer.amount,
            )
            raise ValueError(f"Transfer {step} overdraws account '{sender}'")
        balances[sender] = balances.get(sender, 0) - transfer.amount
        balances[transfer.target] = balances.get(transfer.target, 0) + transfer.amount

    for account, balance in sorted(balances.items()):
        if account not in (source, sink) and balance != 0:
            logger.error("Account %s is unbalanced by %d", account, balance)
            raise ValueError(f"Flow is not conserved at account '{account}'")
    return balances.get(sink, 0)
