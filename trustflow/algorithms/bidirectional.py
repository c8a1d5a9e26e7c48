"""Bidirectional breadth-first augmenting-path search.

Two level-synchronous frontiers grow towards each other: forward from the
source over outgoing edges and backward from the sink over incoming edges.
The sides take turns, forward first, and each turn expands one whole level of
that side. The turn in which a node is first reached by both sides is finished,
and the shortest of the meeting paths found in it is returned, so the result
has as few hops as a plain BFS would produce while touching far fewer nodes
when source and sink are distant.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from trustflow.graph.capacity_graph import CapacityGraph
from trustflow.logging import get_logger
from trustflow.types.base import Account

logger = get_logger(__name__)

# (hops, order found, forward node, backward node, meeting edge capacity)
_Meeting = Tuple[int, int, Account, Account, int]


def bidirectional_bfs_path(
    graph: CapacityGraph,
    src_node: Account,
    dst_node: Account,
    flow_ceiling: int,
    max_hops: Optional[int] = None,
    min_edge_capacity: int = 1,
) -> Tuple[int, List[Account]]:
    """Find a minimum-hop augmenting path by searching from both ends.

    Args:
        graph: Residual graph.
        src_node: Source account.
        dst_node: Sink account.
        flow_ceiling: Upper bound on the returned flow.
        max_hops: Optional bound on the combined number of edges.
        min_edge_capacity: Capacity floor for eligible edges.

    Returns:
        ``(flow, path)`` or ``(0, [])`` if no eligible path exists.

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

    # Per side: parent pointer, hop depth and bottleneck towards the endpoint
    fwd_parent: Dict[Account, Optional[Account]] = {src_node: None}
    fwd_depth: Dict[Account, int] = {src_node: 0}
    fwd_flow: Dict[Account, int] = {src_node: flow_ceiling}
    bwd_parent: Dict[Account, Optional[Account]] = {dst_node: None}
    bwd_depth: Dict[Account, int] = {dst_node: 0}
    bwd_flow: Dict[Account, int] = {dst_node: flow_ceiling}

    fwd_frontier: List[Account] = [src_node]
    bwd_frontier: List[Account] = [dst_node]
    fwd_level = 0
    bwd_level = 0
    expand_forward = True

    while fwd_frontier and bwd_frontier:
        if max_hops is not None and fwd_level + bwd_level >= max_hops:
            break

        meetings: List[_Meeting] = []
        next_frontier: List[Account] = []

        if expand_forward:
            for node in fwd_frontier:
                for neighbor, _token, capacity in graph.get_outgoing(node):
                    if capacity < min_edge_capacity:
                        continue
                    if neighbor in bwd_parent:
                        hops = fwd_depth[node] + 1 + bwd_depth[neighbor]
                        meetings.append((hops, len(meetings), node, neighbor, capacity))
                    if neighbor in fwd_parent:
                        continue
                    new_flow = min(fwd_flow[node], capacity)
                    if new_flow <= 0:
                        continue
                    fwd_parent[neighbor] = node
                    fwd_depth[neighbor] = fwd_depth[node] + 1
                    fwd_flow[neighbor] = new_flow
                    next_frontier.append(neighbor)
            fwd_frontier = next_frontier
            fwd_level += 1
        else:
            for node in bwd_frontier:
                for neighbor, _token, capacity in graph.get_incoming(node):
                    if capacity < min_edge_capacity:
                        continue
                    if neighbor in fwd_parent:
                        hops = fwd_depth[neighbor] + 1 + bwd_depth[node]
                        meetings.append((hops, len(meetings), neighbor, node, capacity))
                    if neighbor in bwd_parent:
                        continue
                    new_flow = min(bwd_flow[node], capacity)
                    if new_flow <= 0:
                        continue
                    bwd_parent[neighbor] = node
                    bwd_depth[neighbor] = bwd_depth[node] + 1
                    bwd_flow[neighbor] = new_flow
                    next_frontier.append(neighbor)
            bwd_frontier = next_frontier
            bwd_level += 1
        expand_forward = not expand_forward

        if max_hops is not None:
            meetings = [m for m in meetings if m[0] <= max_hops]
        if meetings:
            _hops, _order, fwd_node, bwd_node, _capacity = min(meetings)
            path = _join(fwd_parent, bwd_parent, fwd_node, bwd_node)
            return _path_flow(graph, path, flow_ceiling, min_edge_capacity), path

    return 0, []


def _join(
    fwd_parent: Dict[Account, Optional[Account]],
    bwd_parent: Dict[Account, Optional[Account]],
    fwd_node: Account,
    bwd_node: Account,
) -> List[Account]:
    """Concatenate the forward chain to ``fwd_node`` with the backward chain."""
    head: List[Account] = []
    node: Optional[Account] = fwd_node
    while node is not None:
        head.append(node)
        node = fwd_parent[node]
    head.reverse()

    tail: List[Account] = []
    node = bwd_node
    while node is not None:
        tail.append(node)
        node = bwd_parent[node]

    path = head + tail
    # The two trees may share an account; cut the loop it would create
    seen: Dict[Account, int] = {}
    simple: List[Account] = []
    for account in path:
        if account in seen:
            del simple[seen[account] + 1 :]
            seen = {a: i for i, a in enumerate(simple)}
            continue
        seen[account] = len(simple)
        simple.append(account)
    return simple


def _path_flow(
    graph: CapacityGraph, path: List[Account], flow_ceiling: int, min_edge_capacity: int
) -> int:
    """Return the bottleneck of ``path`` using the best eligible edge per hop."""
    flow = flow_ceiling
    for u, v in zip(path, path[1:]):
        best = max(
            (c for _t, c in graph.edges_between(u, v) if c >= min_edge_capacity),
            default=0,
        )
        flow = min(flow, best)
    return flow
