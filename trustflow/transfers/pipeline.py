"""Post-processing pipeline from raw used edges to an ordered transfer list."""

from __future__ import annotations

from typing import List, Mapping, Optional, Tuple

from trustflow.logging import get_logger
from trustflow.transfers.extract import cancel_flow_cycles, extract_transfers
from trustflow.transfers.ordering import sort_transfers
from trustflow.transfers.prune import (
    UsedEdges,
    delivered_flow,
    prune_flow,
    reduce_transfers,
)
from trustflow.transfers.simplify import simplify_transfers
from trustflow.types.base import Account, EdgeKey
from trustflow.types.dto import Transfer

logger = get_logger(__name__)


def count_simplified_transfers(used_edges: UsedEdges, source: Account) -> int:
    """Return how many transfers ``used_edges`` yields after simplification."""
    return len(simplify_transfers(extract_transfers(used_edges, source)))


def post_process_flow(
    used_edges: Mapping[EdgeKey, int],
    source: Account,
    sink: Account,
    requested: int,
    max_transfers: Optional[int] = None,
) -> Tuple[int, List[Transfer]]:
    """Convert a raw flow into an executable transfer list.

    Steps: cancel flow cycles, prune flow above ``requested``, drop the
    smallest edges while more than ``max_transfers`` transfers would result,
    extract realizable transfers, merge chains, and order by dependency.

    Args:
        used_edges: Net flow per ``(from, to, token)``. Not modified.
        source: Paying account.
        sink: Receiving account.
        requested: Upper bound on delivered value.
        max_transfers: Optional bound on the number of transfers.

    Returns:
        ``(flow, transfers)`` where ``flow`` is the value the transfers deliver.
    """
    used: UsedEdges = {k: a for k, a in used_edges.items() if a > 0}
    cancel_flow_cycles(used)

    delivered = delivered_flow(used, sink)
    if delivered > requested:
        prune_flow(used, source, sink, delivered - requested)

    if max_transfers is not None:
        lost = reduce_transfers(
            used,
            source,
            sink,
            max_transfers,
            count_transfers=lambda edges: count_simplified_transfers(edges, source),
        )
        if lost:
            logger.info(
                "Transfer limit %d reduced the flow by %d", max_transfers, lost
            )

    transfers = sort_transfers(simplify_transfers(extract_transfers(used, source)))
    return delivered_flow(used, sink), transfers
