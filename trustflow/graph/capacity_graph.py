"""Token-keyed residual graph with cached, capacity-ordered adjacency views.

`CapacityGraph` extends `networkx.MultiDiGraph`: nodes are accounts and each
edge ``(from, to, token)`` carries a raw ``capacity`` attribute. When a
`TrustLedger` is attached, the capacity reported for an edge is additionally
bounded by the sender's balance and the receiver's trust headroom.
"""

from __future__ import annotations

from pickle import dumps, loads
from typing import Any, Dict, Iterable, Optional, Set, Tuple

import networkx as nx

from trustflow.graph.ledger import TrustLedger
from trustflow.logging import get_logger
from trustflow.types.base import (
    U256_MAX,
    Account,
    Token,
    validate_amount,
    validate_identifier,
)

logger = get_logger(__name__)

#: Adjacency entry: ``(neighbor, token, capacity)``.
AdjacencyEntry = Tuple[Account, Token, int]

OUTGOING = "out"
INCOMING = "in"


class CapacityGraph(nx.MultiDiGraph):
    """A multi-directed capacity graph keyed by token.

    This class provides:
      - One edge per ``(from, to, token)``; adding it again replaces the capacity.
      - Effective capacities bounded by an optional `TrustLedger`.
      - Per-instance adjacency views sorted by descending capacity (ties by
        neighbor, then token), rebuilt lazily for nodes in a dirty-set.
      - Residual mutations (`decrease_capacity`, `increase_capacity`,
        `push_flow`) that check before they apply.
      - ``copy()`` as a pickle-based deep copy with fresh caches.

    Inherits from:
        networkx.MultiDiGraph
    """

    def __init__(self, ledger: Optional[TrustLedger] = None, **attr: Any) -> None:
        """Initialize a CapacityGraph.

        Args:
            ledger: Optional balance/trust bookkeeping bounding capacities.
            **attr: Graph attributes forwarded to the MultiDiGraph constructor.

        Attributes:
            _out_cache: Sorted outgoing entries per node.
            _in_cache: Sorted incoming entries per node.
            _dirty_out: Nodes whose outgoing view is stale.
            _dirty_in: Nodes whose incoming view is stale.
        """
        super().__init__(**attr)
        self.ledger = ledger
        self._out_cache: Dict[Account, Tuple[AdjacencyEntry, ...]] = {}
        self._in_cache: Dict[Account, Tuple[AdjacencyEntry, ...]] = {}
        self._dirty_out: Set[Account] = set()
        self._dirty_in: Set[Account] = set()

    def copy(self, as_view: bool = False) -> CapacityGraph:  # type: ignore[override]
        """Return an independent deep copy with empty adjacency caches.

        Args:
            as_view: Unsupported; views would share residual state.

        Returns:
            CapacityGraph: A new graph owning its own ledger and caches.
        """
        if as_view:
            raise ValueError("CapacityGraph does not support views")
        clone = loads(dumps(self))
        clone.clear_caches()
        return clone

    #
    # Edge management
    #
    def add_edge(  # type: ignore[override]
        self,
        u_for_edge: Account,
        v_for_edge: Account,
        key: Optional[Token] = None,
        capacity: int = 0,
        **attr: Any,
    ) -> Token:
        """Add (or replace) the edge ``(u, v, token)`` with a raw capacity.

        Missing accounts are created.

        Args:
            u_for_edge: Sending account.
            v_for_edge: Receiving account.
            key: Token moved along the edge.
            capacity: Raw capacity in ``[0, U256_MAX]``.
            **attr: Extra edge attributes.

        Returns:
            Token: The edge key.

        Raises:
            TypeError: If identifiers or capacity have the wrong type.
            ValueError: On a missing token, a self-loop or a negative capacity.
            OverflowError: If capacity exceeds ``U256_MAX``.
        """
        validate_identifier(u_for_edge)
        validate_identifier(v_for_edge)
        if key is None:
            raise ValueError("An edge needs a token key")
        validate_identifier(key, "token")
        validate_amount(capacity, "capacity")
        if u_for_edge == v_for_edge:
            raise ValueError(f"Self-loop on '{u_for_edge}' is not allowed")

        super().add_edge(u_for_edge, v_for_edge, key=key, **attr)
        self._adj[u_for_edge][v_for_edge][key]["capacity"] = capacity
        self._touch(u_for_edge, v_for_edge)
        return key

    def remove_edge(  # type: ignore[override]
        self, u: Account, v: Account, key: Optional[Token] = None
    ) -> None:
        """Remove the edge ``(u, v, key)``, or every ``u -> v`` edge if key is None.

        Removing an edge that does not exist is a no-op.
        """
        if u not in self._adj or v not in self._adj[u]:
            return
        if key is None:
            keys = tuple(self._adj[u][v])
        elif key in self._adj[u][v]:
            keys = (key,)
        else:
            return
        for token in keys:
            super().remove_edge(u, v, key=token)
        self._touch(u, v)

    def remove_node(self, n: Account) -> None:
        """Remove an account with its edges and refresh neighbor views."""
        if n not in self._adj:
            return
        neighbors = set(self._adj[n]) | set(self._pred[n])
        super().remove_node(n)
        self._out_cache.pop(n, None)
        self._in_cache.pop(n, None)
        self._dirty_out.discard(n)
        self._dirty_in.discard(n)
        self._dirty_out.update(neighbors)
        self._dirty_in.update(neighbors)

    #
    # Capacity queries
    #
    def raw_capacity(self, u: Account, v: Account, token: Token) -> int:
        """Return the stored capacity of ``(u, v, token)`` (0 if missing)."""
        try:
            return self._adj[u][v][token]["capacity"]
        except KeyError:
            return 0

    def capacity(self, u: Account, v: Account, token: Token) -> int:
        """Return the effective capacity of ``(u, v, token)`` (0 if missing)."""
        return self._effective(u, v, token, self.raw_capacity(u, v, token))

    def _effective(self, u: Account, v: Account, token: Token, raw: int) -> int:
        if self.ledger is None or raw == 0:
            return raw
        return min(raw, self.ledger.limit(u, v, token))

    def get_outgoing(self, u: Account) -> Tuple[AdjacencyEntry, ...]:
        """Return ``(target, token, capacity)`` for positive-capacity edges of ``u``.

        Sorted by descending capacity, then target, then token. Unknown
        accounts yield an empty tuple.
        """
        if u not in self._adj:
            return ()
        if u in self._dirty_out or u not in self._out_cache:
            entries = [
                (v, token, self._effective(u, v, token, attr["capacity"]))
                for v, keyed in self._adj[u].items()
                for token, attr in keyed.items()
            ]
            self._out_cache[u] = _sorted_entries(entries)
            self._dirty_out.discard(u)
        return self._out_cache[u]

    def get_incoming(self, v: Account) -> Tuple[AdjacencyEntry, ...]:
        """Return ``(source, token, capacity)`` for positive-capacity edges into ``v``.

        Sorted by descending capacity, then source, then token.
        """
        if v not in self._pred:
            return ()
        if v in self._dirty_in or v not in self._in_cache:
            entries = [
                (u, token, self._effective(u, v, token, attr["capacity"]))
                for u, keyed in self._pred[v].items()
                for token, attr in keyed.items()
            ]
            self._in_cache[v] = _sorted_entries(entries)
            self._dirty_in.discard(v)
        return self._in_cache[v]

    def edges_between(self, u: Account, v: Account) -> Tuple[Tuple[Token, int], ...]:
        """Return ``(token, capacity)`` of positive ``u -> v`` edges, largest first."""
        return tuple((t, c) for (w, t, c) in self.get_outgoing(u) if w == v)

    def max_capacity(self) -> int:
        """Return the largest effective capacity over all edges (0 if none)."""
        best = 0
        for u, v, token, raw in self.edges(keys=True, data="capacity"):
            best = max(best, self._effective(u, v, token, raw))
        return best

    def estimate_max_flow(self, source: Account, sink: Account) -> int:
        """Return a cheap upper bound on the ``source -> sink`` flow.

        The smaller of the source's total outgoing capacity and the sink's total
        incoming capacity; both are cuts, so the bound never underestimates.

        Raises:
            KeyError: If either account is not in the graph.
        """
        for node in (source, sink):
            if node not in self._adj:
                raise KeyError(f"Account '{node}' is not in the graph.")
        if source == sink:
            return 0
        out_total = sum(c for _v, _t, c in self.get_outgoing(source))
        in_total = sum(c for _u, _t, c in self.get_incoming(sink))
        return min(out_total, in_total)

    #
    # Residual mutation
    #
    def decrease_capacity(self, u: Account, v: Account, token: Token, amount: int) -> None:
        """Consume ``amount`` of capacity on ``(u, v, token)``.

        With a ledger, also moves ``amount`` of ``token`` from ``u`` to ``v``.

        Raises:
            ValueError: If ``amount`` exceeds the effective capacity.
        """
        validate_amount(amount)
        available = self.capacity(u, v, token)
        if amount > available:
            logger.error(
                "Decrease of %d on %s -> %s (%s) exceeds capacity %d",
                amount,
                u,
                v,
                token,
                available,
            )
            raise ValueError(
                f"Capacity of edge ({u!r}, {v!r}, {token!r}) is {available}, "
                f"cannot decrease by {amount}"
            )
        if amount == 0:
            return
        if self.ledger is not None:
            self.ledger.move(u, v, token, amount)
        self._adj[u][v][token]["capacity"] -= amount
        self._touch(u, v)

    def increase_capacity(self, u: Account, v: Account, token: Token, amount: int) -> None:
        """Add ``amount`` of raw capacity on ``(u, v, token)``, creating the edge.

        The ledger is not touched; token movement is recorded by
        `decrease_capacity` on the opposite edge.

        Raises:
            OverflowError: If the capacity would exceed ``U256_MAX``.
        """
        validate_amount(amount)
        current = self.raw_capacity(u, v, token)
        if current + amount > U256_MAX:
            logger.error("Capacity overflow on %s -> %s (%s)", u, v, token)
            raise OverflowError(f"Capacity of edge ({u!r}, {v!r}, {token!r}) overflows")
        if amount == 0:
            return
        if self.has_edge(u, v, token):
            self._adj[u][v][token]["capacity"] = current + amount
            self._touch(u, v)
        else:
            self.add_edge(u, v, token, capacity=amount)

    def check_push(self, u: Account, v: Account, token: Token, amount: int) -> None:
        """Raise if `push_flow` would reject ``amount`` on ``(u, v, token)``.

        Covers the forward capacity, the reverse capacity bound and, with a
        ledger, the token movement. Nothing is modified.

        Raises:
            ValueError: If the forward edge lacks capacity.
            OverflowError: If the reverse capacity or the receiver's balance
                would overflow.
        """
        validate_amount(amount)
        available = self.capacity(u, v, token)
        if amount > available:
            logger.error(
                "Push of %d on %s -> %s (%s) exceeds capacity %d",
                amount,
                u,
                v,
                token,
                available,
            )
            raise ValueError(
                f"Capacity of edge ({u!r}, {v!r}, {token!r}) is {available}, "
                f"cannot decrease by {amount}"
            )
        if self.raw_capacity(v, u, token) + amount > U256_MAX:
            logger.error("Capacity overflow on %s -> %s (%s)", v, u, token)
            raise OverflowError(f"Capacity of edge ({v!r}, {u!r}, {token!r}) overflows")
        if self.ledger is not None and amount:
            self.ledger.check_move(u, v, token, amount)

    def push_flow(self, u: Account, v: Account, token: Token, amount: int) -> None:
        """Push ``amount`` along ``(u, v, token)`` and credit the reverse edge.

        Raises:
            ValueError: If the forward edge lacks capacity.
            OverflowError: If the reverse capacity or a ledger balance would
                overflow.
        """
        self.check_push(u, v, token, amount)
        self.decrease_capacity(u, v, token, amount)
        self.increase_capacity(v, u, token, amount)

    #
    # Cache management
    #
    def _touch(self, u: Account, v: Account) -> None:
        """Mark views depending on edge ``(u, v)`` as stale."""
        self._dirty_out.update((u, v))
        self._dirty_in.update((u, v))
        if self.ledger is not None:
            # Balances of u/v bound their other outgoing edges; headroom of u/v
            # is shared by all tokens of an issuer, so it bounds every edge
            # pointing at them whatever its token.
            for node in (u, v):
                self._dirty_out.update(self._pred[node])
                self._dirty_in.update(self._adj[node])

    def invalidate(self, nodes: Iterable[Account]) -> None:
        """Explicitly mark both views of ``nodes`` as stale."""
        nodes = tuple(nodes)
        self._dirty_out.update(nodes)
        self._dirty_in.update(nodes)

    def is_cached(self, node: Account, direction: str = OUTGOING) -> bool:
        """Return True if ``node`` has a fresh cached view in ``direction``."""
        if direction == OUTGOING:
            return node in self._out_cache and node not in self._dirty_out
        if direction == INCOMING:
            return node in self._in_cache and node not in self._dirty_in
        raise ValueError(f"Unknown direction '{direction}'")

    def clear_caches(self) -> None:
        """Drop every cached view."""
        self._out_cache = {}
        self._in_cache = {}
        self._dirty_out = set()
        self._dirty_in = set()

    def to_dict(self) -> Dict[str, Any]:
        """Return a node-link snapshot suitable for JSON serialization."""
        # Import here to avoid circular import
        from trustflow.graph.io import graph_to_node_link

        return graph_to_node_link(self)


def _sorted_entries(entries: Iterable[AdjacencyEntry]) -> Tuple[AdjacencyEntry, ...]:
    return tuple(
        sorted(
            (entry for entry in entries if entry[2] > 0),
            key=lambda entry: (-entry[2], entry[0], entry[1]),
        )
    )
