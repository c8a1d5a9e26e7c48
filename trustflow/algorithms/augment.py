"""Flow placement along an augmenting path.

Each hop of an account path may be served by several token edges; the hop's
amount is split over them largest-capacity first. Every step of the placement
is planned and checked before the residual graph is touched.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from trustflow.graph.capacity_graph import CapacityGraph
from trustflow.logging import get_logger
from trustflow.types.base import Account, EdgeKey

logger = get_logger(__name__)


def plan_path_flow(
    graph: CapacityGraph, path: Sequence[Account], amount: int
) -> List[Tuple[EdgeKey, int]]:
    """Split ``amount`` over the token edges of every hop in ``path``.

    Returns:
        ``[(edge_key, amount), ...]`` in path order.

    Raises:
        ValueError: If the path is too short, repeats an account, or a hop
            cannot carry ``amount``.
        OverflowError: If a step would overflow a reverse capacity or a
            balance.
    """
    if len(path) < 2:
        raise ValueError(f"Path needs at least two accounts: {list(path)!r}")
    if len(set(path)) != len(path):
        raise ValueError(f"Path repeats an account: {list(path)!r}")

    plan: List[Tuple[EdgeKey, int]] = []
    ledger = graph.ledger
    for u, v in zip(path, path[1:]):
        remaining = amount
        # Tokens of one issuer share the receiver's headroom within a hop.
        consumed: Dict[Account, int] = {}
        for token, capacity in graph.edges_between(u, v):
            issuer = ledger.issuer(token) if ledger is not None else token
            if ledger is not None and ledger.headroom(v, token) is not None:
                capacity = min(
                    capacity, ledger.headroom(v, token) - consumed.get(issuer, 0)
                )
            if capacity <= 0:
                continue
            take = min(remaining, capacity)
            graph.check_push(u, v, token, take)
            consumed[issuer] = consumed.get(issuer, 0) + take
            plan.append(((u, v, token), take))
            remaining -= take
            if remaining == 0:
                break
        if remaining > 0:
            logger.error(
                "Hop %s -> %s lacks %d of the %d requested", u, v, remaining, amount
            )
            raise ValueError(f"No token edge from '{u}' to '{v}' can carry {amount}")
    return plan


def place_flow_on_path(
    graph: CapacityGraph,
    path: Sequence[Account],
    amount: int,
    used_edges: Dict[EdgeKey, int],
) -> List[Tuple[EdgeKey, int]]:
    """Push ``amount`` along ``path`` and record it in ``used_edges``.

    Args:
        graph: Residual graph, mutated in place.
        path: Accounts from source to sink.
        amount: Flow to push; must fit every hop.
        used_edges: Net flow per edge key, updated in place.

    Returns:
        The applied ``(edge_key, amount)`` plan.

    Raises:
        ValueError: If the path cannot carry ``amount``.
        OverflowError: If a step would overflow; nothing is applied then.
    """
    if amount <= 0:
        return []
    plan = plan_path_flow(graph, path, amount)
    for (u, v, token), take in plan:
        graph.push_flow(u, v, token, take)
        record_flow(used_edges, (u, v, token), take)
    return plan


def record_flow(used_edges: Dict[EdgeKey, int], key: EdgeKey, amount: int) -> None:
    """Add ``amount`` on ``key``, cancelling flow on the opposite edge first."""
    u, v, token = key
    reverse = (v, u, token)
    opposing = used_edges.get(reverse, 0)
    if opposing:
        cancelled = min(opposing, amount)
        if opposing == cancelled:
            del used_edges[reverse]
        else:
            used_edges[reverse] = opposing - cancelled
        amount -= cancelled
    if amount:
        used_edges[key] = used_edges.get(key, 0) + amount
