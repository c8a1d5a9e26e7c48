"""Shared capacity-graph fixtures.

All fixture graphs use string accounts and a single token ``"tok"`` unless
noted otherwise; ``S`` is the source and ``T`` the sink.
"""

from __future__ import annotations

import pytest

from trustflow.graph.capacity_graph import CapacityGraph
from trustflow.graph.convert import build_capacity_graph


@pytest.fixture
def single_edge():
    #  S ──[100]──► T
    g = CapacityGraph()
    g.add_edge("S", "T", "tok", capacity=100)
    return g


@pytest.fixture
def diamond():
    # Capacity:
    #       [40]      [40]
    #   ┌────────►A─────────┐
    #   │                   ▼
    #   S                   T
    #   │                   ▲
    #   └────────►B─────────┘
    #       [60]      [60]
    g = CapacityGraph()
    g.add_edge("S", "A", "tok", capacity=40)
    g.add_edge("A", "T", "tok", capacity=40)
    g.add_edge("S", "B", "tok", capacity=60)
    g.add_edge("B", "T", "tok", capacity=60)
    return g


@pytest.fixture
def bottleneck50():
    #  S ──[50]──► A ──[80]──► T
    g = CapacityGraph()
    g.add_edge("S", "A", "tok", capacity=50)
    g.add_edge("A", "T", "tok", capacity=80)
    return g


@pytest.fixture
def uneven_pair():
    # Two disjoint paths with capacities 1000 and 1:
    #  S ──[1000]──► A ──[1000]──► T
    #  S ───[1]────► B ───[1]────► T
    g = CapacityGraph()
    g.add_edge("S", "A", "tok", capacity=1000)
    g.add_edge("A", "T", "tok", capacity=1000)
    g.add_edge("S", "B", "tok", capacity=1)
    g.add_edge("B", "T", "tok", capacity=1)
    return g


@pytest.fixture
def long_and_short():
    # Three-hop path of capacity 10 and two-hop path of capacity 5:
    #  S ──[10]──► A ──[10]──► B ──[10]──► T
    #  S ──[5]───► C ──[5]──────────────► T
    g = CapacityGraph()
    g.add_edge("S", "A", "tok", capacity=10)
    g.add_edge("A", "B", "tok", capacity=10)
    g.add_edge("B", "T", "tok", capacity=10)
    g.add_edge("S", "C", "tok", capacity=5)
    g.add_edge("C", "T", "tok", capacity=5)
    return g


@pytest.fixture
def needs_cancellation():
    # All capacities 1. The first shortest path S-X-B-T blocks both
    # alternatives; the maximum of 2 needs the reverse of X->B.
    #
    #   S ──► X ──► B ──► T
    #   │     │     ▲     ▲
    #   │     └──► Q ─────┘   (X->Q, Q->T)
    #   └───► Z ────┘         (S->Z, Z->B)
    g = CapacityGraph()
    for u, v in (
        ("S", "X"),
        ("S", "Z"),
        ("X", "B"),
        ("X", "Q"),
        ("Z", "B"),
        ("B", "T"),
        ("Q", "T"),
    ):
        g.add_edge(u, v, "tok", capacity=1)
    return g


@pytest.fixture
def trust_records():
    """Trust and balances for a small ledger-backed network.

    B and C accept A's token (limits 50 and 30); D accepts B's token (100).
    A holds 60 of its own token, B holds 20 of its own token.
    """
    trust = {("B", "A"): 50, ("C", "A"): 30, ("D", "B"): 100}
    balances = {("A", "A"): 60, ("B", "B"): 20}
    return trust, balances


@pytest.fixture
def trust_graph(trust_records):
    trust, balances = trust_records
    return build_capacity_graph(trust, balances)
