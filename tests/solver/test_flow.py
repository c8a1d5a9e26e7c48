"""End-to-end flow computation: scenarios and properties over random graphs."""

import random

import networkx as nx
import pytest

from trustflow.graph.capacity_graph import CapacityGraph
from trustflow.solver.flow import compute_flow, compute_flow_from_config
from trustflow.transfers.verify import validate_transfers
from trustflow.types.base import FlowAlgorithm, SearchStrategy
from trustflow.types.dto import FlowRequest, Transfer

COMBINATIONS = [
    (algorithm, strategy) for algorithm in FlowAlgorithm for strategy in SearchStrategy
]


def _request(amount, algorithm=FlowAlgorithm.AUGMENTING, strategy=SearchStrategy.BFS, **kw):
    return FlowRequest("S", "T", amount, algorithm=algorithm, strategy=strategy, **kw)


@pytest.mark.parametrize("algorithm, strategy", COMBINATIONS)
def test_single_edge(single_edge, algorithm, strategy):
    result = compute_flow(single_edge, _request(100, algorithm, strategy))

    assert result.achieved_flow == 100
    assert result.transfers == (Transfer("S", "T", "tok", 100),)
    assert result.is_complete


@pytest.mark.parametrize("algorithm, strategy", COMBINATIONS)
def test_diamond(diamond, algorithm, strategy):
    result = compute_flow(diamond, _request(100, algorithm, strategy))

    assert result.achieved_flow == 100
    assert len(result.transfers) == 2
    assert sorted(t.amount for t in result.transfers) == [40, 60]
    assert validate_transfers(result.transfers, "S", "T") == 100


@pytest.mark.parametrize("algorithm, strategy", COMBINATIONS)
def test_capped_by_graph(bottleneck50, algorithm, strategy):
    result = compute_flow(bottleneck50, _request(1000, algorithm, strategy))

    assert result.achieved_flow == 50
    assert result.requested_flow == 1000
    assert not result.is_complete
    assert result.transfers == (Transfer("S", "T", "tok", 50),)


def test_transfer_limit(diamond):
    result = compute_flow(diamond, _request(100, max_transfers=1))

    assert result.achieved_flow == 60
    assert result.transfers == (Transfer("S", "T", "tok", 60),)


def test_hop_limit(long_and_short):
    assert compute_flow(long_and_short, _request(100, max_hops=2)).achieved_flow == 5
    assert compute_flow(long_and_short, _request(100)).achieved_flow == 15


def test_partial_request_on_rerouted_flow(needs_cancellation):
    result = compute_flow(needs_cancellation, _request(1))

    assert result.achieved_flow == 1
    assert validate_transfers(result.transfers, "S", "T") == 1


def test_graph_not_modified(diamond):
    before = diamond.to_dict()
    compute_flow(diamond, _request(100))
    assert diamond.to_dict() == before


def test_same_account_and_zero_amount(single_edge):
    result = compute_flow(single_edge, FlowRequest("S", "S", 10))
    assert result.achieved_flow == 0 and result.transfers == ()

    result = compute_flow(single_edge, _request(0))
    assert result.achieved_flow == 0 and result.transfers == ()


def test_unknown_accounts(single_edge):
    with pytest.raises(KeyError, match="Source account 'X'"):
        compute_flow(single_edge, FlowRequest("X", "T", 10))
    with pytest.raises(KeyError, match="Sink account 'Y'"):
        compute_flow(single_edge, FlowRequest("S", "Y", 10))


def test_observer_receives_steps(diamond):
    steps = []
    result = compute_flow(diamond, _request(100), observer=steps.append)

    assert [s.path_flow for s in steps] == [60, 40]
    assert steps[-1].total_flow == result.achieved_flow
    assert "links" in steps[0].snapshot


def test_from_trust_records(trust_records):
    trust, balances = trust_records
    request = FlowRequest("A", "D", 100)
    result = compute_flow_from_config(trust, balances, request)

    assert result.achieved_flow == 20
    assert result.transfers == (
        Transfer("A", "B", "A", 20),
        Transfer("B", "D", "B", 20),
    )


def test_trust_headroom_limits_route():
    # Only C can pay D, and C accepts at most 10 of A's token
    trust = {("B", "A"): 100, ("C", "A"): 10, ("D", "C"): 100}
    balances = {("A", "A"): 100, ("C", "C"): 50}
    result = compute_flow_from_config(trust, balances, FlowRequest("A", "D", 100))

    assert result.achieved_flow == 10
    assert validate_transfers(result.transfers, "A", "D") == 10


def test_tokens_of_one_issuer_share_trust_limit():
    # R trusts X for 100; T1 and T2 are both issued by X
    trust = {("R", "X"): 100}
    balances = {("H", "T1"): 100, ("H", "T2"): 100}
    issuers = {"T1": "X", "T2": "X"}
    result = compute_flow_from_config(
        trust, balances, FlowRequest("H", "R", 1000), issuers=issuers
    )

    assert result.achieved_flow == 100
    assert validate_transfers(result.transfers, "H", "R") == 100


def _random_graph(seed, nodes=8, density=0.35):
    rng = random.Random(seed)
    g = CapacityGraph()
    names = [f"n{i}" for i in range(nodes)]
    g.add_nodes_from(names)
    for u in names:
        for v in names:
            if u != v and rng.random() < density:
                g.add_edge(u, v, rng.choice(["x", "y"]), capacity=rng.randint(1, 20))
    return g, names[0], names[-1]


def _reference_max_flow(graph, source, sink):
    simple = nx.DiGraph()
    simple.add_nodes_from(graph.nodes)
    for u, v, _token, capacity in graph.edges(keys=True, data="capacity"):
        if simple.has_edge(u, v):
            simple[u][v]["capacity"] += capacity
        else:
            simple.add_edge(u, v, capacity=capacity)
    return nx.maximum_flow_value(simple, source, sink)


@pytest.mark.parametrize("seed", range(10))
@pytest.mark.parametrize("algorithm, strategy", COMBINATIONS)
def test_random_graphs_reach_max_flow(seed, algorithm, strategy):
    graph, source, sink = _random_graph(seed)
    expected = _reference_max_flow(graph, source, sink)

    result = compute_flow(
        graph, FlowRequest(source, sink, 10**6, algorithm=algorithm, strategy=strategy)
    )

    assert result.achieved_flow == expected
    assert validate_transfers(result.transfers, source, sink) == expected
    out_capacity = sum(c for _v, _t, c in graph.get_outgoing(source))
    assert result.achieved_flow <= out_capacity


@pytest.mark.parametrize("seed", range(10))
def test_random_graphs_partial_requests(seed):
    graph, source, sink = _random_graph(seed)
    expected = _reference_max_flow(graph, source, sink)
    requested = expected // 2

    for algorithm, strategy in COMBINATIONS:
        result = compute_flow(
            graph,
            FlowRequest(source, sink, requested, algorithm=algorithm, strategy=strategy),
        )
        assert result.achieved_flow == requested
        assert validate_transfers(result.transfers, source, sink) == requested


@pytest.mark.parametrize("seed", range(10))
def test_random_graphs_transfer_limit(seed):
    graph, source, sink = _random_graph(seed)

    result = compute_flow(graph, FlowRequest(source, sink, 10**6, max_transfers=3))

    assert len(result.transfers) <= 3
    assert validate_transfers(result.transfers, source, sink) == result.achieved_flow
