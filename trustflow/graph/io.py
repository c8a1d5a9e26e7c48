"""Node-link serialization of capacity graphs.

Snapshots are what step observers receive, so they are plain data: effective
capacities are rendered as decimal strings, since 256-bit integers do not fit
JSON numbers.
"""

from __future__ import annotations

from typing import Any, Dict

from trustflow.graph.capacity_graph import CapacityGraph


def graph_to_node_link(graph: CapacityGraph) -> Dict[str, Any]:
    """Convert a CapacityGraph into a node-link dict representation.

    The returned dict has the following structure:
        {
            "graph": { ... top-level graph attributes ... },
            "nodes": [{"id": account}, ...],
            "links": [
                {
                    "source": <indexed_node>,
                    "target": <indexed_node>,
                    "token": <token>,
                    "capacity": "<effective capacity>",
                },
                ...
            ]
        }

    Nodes are sorted by id and links by ``(source, target, token)`` so equal
    graphs give equal snapshots.

    Args:
        graph: The CapacityGraph to convert.

    Returns:
        A dict containing the 'graph' attributes, list of 'nodes', and list of 'links'.
    """
    node_list = sorted(graph.nodes)
    node_map = {node_id: i for i, node_id in enumerate(node_list)}

    links = []
    for src, dst, token in sorted(graph.edges(keys=True)):
        links.append(
            {
                "source": node_map[src],
                "target": node_map[dst],
                "token": token,
                "capacity": str(graph.capacity(src, dst, token)),
            }
        )
    return {
        "graph": dict(graph.graph),
        "nodes": [{"id": node_id} for node_id in node_list],
        "links": links,
    }

