"""Build capacity graphs from trust and balance records.

Input records are already-parsed in-memory maps; loading them from files or
chains is left to callers.
"""

from __future__ import annotations

from typing import Mapping, Optional, Tuple

from trustflow.graph.capacity_graph import CapacityGraph
from trustflow.graph.ledger import TrustLedger
from trustflow.logging import get_logger
from trustflow.types.base import Account, Token

logger = get_logger(__name__)


def build_capacity_graph(
    trust_limits: Mapping[Tuple[Account, Account], int],
    balances: Mapping[Tuple[Account, Token], int],
    issuers: Optional[Mapping[Token, Account]] = None,
) -> CapacityGraph:
    """Create a ledger-backed CapacityGraph.

    For every positive balance ``(holder, token)``, one edge is added from the
    holder to each account that may receive the token: accounts trusting the
    token's issuer with a positive limit, and the issuer itself. The raw
    capacity is the initial ledger limit; pairs with zero limit get no edge.

    Args:
        trust_limits: ``(truster, trusted) -> limit``.
        balances: ``(holder, token) -> amount``.
        issuers: Optional ``token -> issuer``; defaults to the token id.

    Returns:
        CapacityGraph: Graph whose nodes include every account in the inputs.

    Raises:
        TypeError, ValueError, OverflowError: On malformed records.
    """
    ledger = TrustLedger(trust_limits, balances, issuers)
    graph = CapacityGraph(ledger=ledger)
    graph.add_nodes_from(sorted(ledger.accounts()))

    edge_count = 0
    for (holder, token), _amount in sorted(ledger.holdings().items()):
        issuer = ledger.issuer(token)
        receivers = set(ledger.trusters_of(issuer))
        receivers.add(issuer)
        receivers.discard(holder)
        for receiver in sorted(receivers):
            capacity = ledger.limit(holder, receiver, token)
            if capacity > 0:
                graph.add_edge(holder, receiver, token, capacity=capacity)
                edge_count += 1

    logger.debug(
        "Built capacity graph: %d accounts, %d edges", graph.number_of_nodes(), edge_count
    )
    return graph
