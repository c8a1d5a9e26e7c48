"""Turn a used-edge map into individually realizable transfers."""

from __future__ import annotations

from typing import Dict, List

import networkx as nx

from trustflow.logging import get_logger
from trustflow.transfers.prune import UsedEdges
from trustflow.types.base import Account
from trustflow.types.dto import Transfer

logger = get_logger(__name__)


def cancel_flow_cycles(used_edges: UsedEdges) -> int:
    """Remove directed flow cycles from ``used_edges`` in place.

    Each cycle found loses its smallest edge amount on every edge. Net flow
    through every account is unchanged, so delivered flow and conservation
    are preserved while the remaining flow becomes acyclic.

    Returns:
        Number of cycles cancelled.
    """
    cancelled = 0
    while True:
        flow_graph = nx.MultiDiGraph()
        for (u, v, token), amount in sorted(used_edges.items()):
            flow_graph.add_edge(u, v, key=token, amount=amount)
        try:
            cycle = nx.find_cycle(flow_graph)
        except nx.NetworkXNoCycle:
            break
        keys = [(u, v, token) for u, v, token in cycle]
        amount = min(used_edges[k] for k in keys)
        for k in keys:
            remaining = used_edges[k] - amount
            if remaining:
                used_edges[k] = remaining
            else:
                del used_edges[k]
        cancelled += 1
        logger.debug("Cancelled flow cycle of %d over %d edges", amount, len(keys))
    return cancelled


def extract_transfers(used_edges: UsedEdges, source: Account) -> List[Transfer]:
    """Emit one transfer per used edge, each realizable when emitted.

    Every round emits the first edge (in key order) whose sender already holds
    enough routed value; the source is never short. Balances are tracked per
    account across tokens.

    Args:
        used_edges: Net flow per edge. Not modified.
        source: Source account.

    Returns:
        Transfers in emission order.

    Raises:
        ValueError: If edges remain but none of them can be funded.
    """
    pending = {k: a for k, a in used_edges.items() if a > 0}
    balances: Dict[Account, int] = {}
    transfers: List[Transfer] = []

    while pending:
        ready = next(
            (
                key
                for key in sorted(pending)
                if key[0] == source or balances.get(key[0], 0) >= pending[key]
            ),
            None,
        )
        if ready is None:
            logger.error("No fundable transfer among %d remaining edges", len(pending))
            raise ValueError("Remaining flow cannot be funded from the source")
        amount = pending.pop(ready)
        u, v, token = ready
        if u != source:
            balances[u] -= amount
        balances[v] = balances.get(v, 0) + amount
        transfers.append(Transfer(u, v, token, amount))
    return transfers
