"""Augmenting-path search dispatch.

`find_path` is the single entry point the flow algorithms use; the strategy
enum selects one of the implementations below.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from trustflow.algorithms.bfs import bfs_path
from trustflow.algorithms.bidirectional import bidirectional_bfs_path
from trustflow.graph.capacity_graph import CapacityGraph
from trustflow.types.base import Account, SearchStrategy

PathSearch = Callable[
    [CapacityGraph, Account, Account, int, Optional[int], int],
    Tuple[int, List[Account]],
]

_SEARCHES: Dict[SearchStrategy, PathSearch] = {
    SearchStrategy.BFS: bfs_path,
    SearchStrategy.BIDIRECTIONAL_BFS: bidirectional_bfs_path,
}


def find_path(
    graph: CapacityGraph,
    src_node: Account,
    dst_node: Account,
    flow_ceiling: int,
    max_hops: Optional[int] = None,
    min_edge_capacity: int = 1,
    strategy: SearchStrategy = SearchStrategy.BFS,
) -> Tuple[int, List[Account]]:
    """Find one augmenting path and the flow it can carry.

    Args:
        graph: Residual graph.
        src_node: Source account.
        dst_node: Sink account.
        flow_ceiling: Upper bound on the returned flow.
        max_hops: Optional bound on the number of edges in the path.
        min_edge_capacity: Capacity floor for eligible edges.
        strategy: Search implementation to use.

    Returns:
        ``(flow, path)``; ``(0, [])`` when no path satisfies the constraints.

    Raises:
        KeyError: If either account is not in the graph.
        ValueError: If ``strategy`` is not supported.
    """
    try:
        search = _SEARCHES[SearchStrategy(strategy)]
    except (KeyError, ValueError):
        raise ValueError(f"Unsupported search strategy: {strategy!r}") from None
    return search(graph, src_node, dst_node, flow_ceiling, max_hops, min_edge_capacity)
