"""Dependency ordering of transfers."""

from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from trustflow.logging import get_logger
from trustflow.types.dto import Transfer

logger = get_logger(__name__)


def sort_transfers(transfers: Sequence[Transfer]) -> List[Transfer]:
    """Order transfers so no account sends before all its receipts arrived.

    A transfer is ready once its sender has no pending inbound transfer;
    among ready transfers the input order is kept. If a cycle leaves nothing
    ready, the pending transfer whose sender waits on the fewest inbound
    transfers goes next.

    Args:
        transfers: Transfers in any order.

    Returns:
        A new, reordered list.
    """
    pending = list(transfers)
    inbound = Counter(t.target for t in pending)
    ordered: List[Transfer] = []

    while pending:
        index = next(
            (i for i, t in enumerate(pending) if inbound[t.source] == 0), None
        )
        if index is None:
            index = min(
                range(len(pending)), key=lambda i: (inbound[pending[i].source], i)
            )
            logger.debug("Breaking transfer cycle at %s", pending[index])
        transfer = pending.pop(index)
        inbound[transfer.target] -= 1
        ordered.append(transfer)
    return ordered
