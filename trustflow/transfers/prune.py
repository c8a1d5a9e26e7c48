"""Flow pruning on a used-edge map.

Removing flow from one edge unbalances its endpoints. `remove_edge_flow`
restores balance by pulling the same amount out of the receiver's outgoing
edges all the way down to the sink, and out of the sender's incoming edges all
the way up to the source. The delivered flow therefore drops by exactly the
removed amount and every intermediate account stays balanced.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Dict, List, Optional

from trustflow.logging import get_logger
from trustflow.types.base import Account, EdgeKey

logger = get_logger(__name__)

UsedEdges = Dict[EdgeKey, int]


def delivered_flow(used_edges: UsedEdges, sink: Account) -> int:
    """Return the net flow into ``sink``."""
    inflow = sum(a for (_u, v, _t), a in used_edges.items() if v == sink)
    outflow = sum(a for (u, _v, _t), a in used_edges.items() if u == sink)
    return inflow - outflow


def remove_edge_flow(
    used_edges: UsedEdges,
    key: EdgeKey,
    amount: int,
    source: Account,
    sink: Account,
) -> None:
    """Remove ``amount`` from ``key`` and rebalance along the way to source and sink.

    Smaller edges are drained first at each account.

    Raises:
        ValueError: If ``amount`` exceeds the edge's flow or an account cannot
            be rebalanced (the input was not a conserving flow).
    """
    current = used_edges.get(key, 0)
    if amount <= 0:
        return
    if amount > current:
        raise ValueError(f"Cannot remove {amount} from edge {key!r} carrying {current}")
    _reduce(used_edges, key, amount)

    # (account, excess, downstream?)
    pending = deque([(key[1], amount, True), (key[0], amount, False)])
    while pending:
        node, excess, downstream = pending.popleft()
        if node == source or node == sink:
            continue
        if downstream:
            candidates = [k for k in used_edges if k[0] == node]
        else:
            candidates = [k for k in used_edges if k[1] == node]
        for edge in sorted(candidates, key=lambda k: (used_edges[k], k)):
            if excess == 0:
                break
            take = min(excess, used_edges[edge])
            _reduce(used_edges, edge, take)
            excess -= take
            pending.append((edge[1] if downstream else edge[0], take, downstream))
        if excess:
            logger.error("Account %s cannot be rebalanced by %d", node, excess)
            raise ValueError(f"Flow is not conserved at account '{node}'")


def _reduce(used_edges: UsedEdges, key: EdgeKey, amount: int) -> None:
    remaining = used_edges[key] - amount
    if remaining:
        used_edges[key] = remaining
    else:
        del used_edges[key]


def _distances_from(used_edges: UsedEdges, source: Account) -> Dict[Account, int]:
    """Return hop distance from ``source`` over edges carrying flow."""
    succ: Dict[Account, List[Account]] = {}
    for u, v, _t in used_edges:
        succ.setdefault(u, []).append(v)
    dist = {source: 0}
    queue = deque([source])
    while queue:
        node = queue.popleft()
        for nxt in sorted(succ.get(node, ())):
            if nxt not in dist:
                dist[nxt] = dist[node] + 1
                queue.append(nxt)
    return dist


def prune_flow(
    used_edges: UsedEdges, source: Account, sink: Account, excess: int
) -> int:
    """Remove exactly ``excess`` units of delivered flow, in place.

    Edges farthest from the source are removed whole first (smaller ones first
    at equal distance) as long as they fit in what is left to prune; when no
    edge fits, the remainder is taken from the smallest edge.

    Args:
        used_edges: Net flow per edge; modified in place.
        source: Source account.
        sink: Sink account.
        excess: Amount of delivered flow to remove.

    Returns:
        The amount actually pruned (less than ``excess`` only if the flow ran out).
    """
    remaining = excess
    while remaining > 0 and used_edges:
        dist = _distances_from(used_edges, source)
        far = len(dist) + 1
        ordered = sorted(
            used_edges,
            key=lambda k: (-(dist.get(k[0], far) + 1), used_edges[k], k),
        )
        whole = next((k for k in ordered if used_edges[k] <= remaining), None)
        if whole is not None:
            amount = used_edges[whole]
            remove_edge_flow(used_edges, whole, amount, source, sink)
        else:
            smallest = min(used_edges, key=lambda k: (used_edges[k], k))
            amount = remaining
            remove_edge_flow(used_edges, smallest, amount, source, sink)
        remaining -= amount
    pruned = excess - remaining
    if pruned:
        logger.debug("Pruned %d of excess flow", pruned)
    return pruned


def reduce_transfers(
    used_edges: UsedEdges,
    source: Account,
    sink: Account,
    max_transfers: int,
    count_transfers: Optional[Callable[[UsedEdges], int]] = None,
) -> int:
    """Drop the smallest edges until at most ``max_transfers`` transfers remain.

    Args:
        used_edges: Net flow per edge; modified in place.
        source: Source account.
        sink: Sink account.
        max_transfers: Largest acceptable number of transfers.
        count_transfers: Counts the transfers an edge map would produce.
            Defaults to the number of edges.

    Returns:
        The delivered flow lost by the reduction.
    """
    counter = count_transfers or len
    lost = 0
    while used_edges and counter(used_edges) > max_transfers:
        smallest = min(used_edges, key=lambda k: (used_edges[k], k))
        before = delivered_flow(used_edges, sink)
        remove_edge_flow(used_edges, smallest, used_edges[smallest], source, sink)
        lost += before - delivered_flow(used_edges, sink)
    if lost:
        logger.debug("Reduced transfer count to %d, losing %d", max_transfers, lost)
    return lost

