"""Breadth-first augmenting-path search."""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List, Optional, Tuple

from trustflow.graph.capacity_graph import CapacityGraph
from trustflow.types.base import Account


def bfs_path(
    graph: CapacityGraph,
    src_node: Account,
    dst_node: Account,
    flow_ceiling: int,
    max_hops: Optional[int] = None,
    min_edge_capacity: int = 1,
) -> Tuple[int, List[Account]]:
    """Find a minimum-hop augmenting path from ``src_node`` to ``dst_node``.

    Neighbors are explored in the graph's adjacency order (largest capacity
    first), so among equally short paths the high-capacity ones win and ties
    resolve identically on identical graphs. An edge is eligible when its
    capacity is at least ``min_edge_capacity``. Nodes at depth ``max_hops`` are
    not expanded, which excludes longer paths only.

    Args:
        graph: Residual graph.
        src_node: Source account.
        dst_node: Sink account.
        flow_ceiling: Upper bound on the returned flow.
        max_hops: Optional bound on the number of edges in the path.
        min_edge_capacity: Capacity floor for eligible edges.

    Returns:
        ``(flow, path)`` with ``path`` listing accounts from source to sink, or
        ``(0, [])`` if no eligible path exists.

    Raises:
        KeyError: If either account is not in the graph.
    """
    for node in (src_node, dst_node):
        if node not in graph:
            raise KeyError(f"Account '{node}' is not in the graph.")
    if src_node == dst_node or flow_ceiling <= 0:
        return 0, []
    if max_hops is not None and max_hops < 1:
        return 0, []

    # bottleneck flow and parent per discovered node
    flow: Dict[Account, int] = {src_node: flow_ceiling}
    parent: Dict[Account, Optional[Account]] = {src_node: None}
    depth: Dict[Account, int] = {src_node: 0}
    queue: Deque[Account] = deque([src_node])

    while queue:
        node = queue.popleft()
        if max_hops is not None and depth[node] >= max_hops:
            continue
        for neighbor, _token, capacity in graph.get_outgoing(node):
            if neighbor in parent or capacity < min_edge_capacity:
                continue
            new_flow = min(flow[node], capacity)
            if new_flow <= 0:
                continue
            flow[neighbor] = new_flow
            parent[neighbor] = node
            depth[neighbor] = depth[node] + 1
            if neighbor == dst_node:
                return new_flow, _trace_back(parent, dst_node)
            queue.append(neighbor)

    return 0, []


def _trace_back(parent: Dict[Account, Optional[Account]], node: Account) -> List[Account]:
    path = [node]
    while parent[node] is not None:
        node = parent[node]  # type: ignore[assignment]
        path.append(node)
    path.reverse()
    return path
