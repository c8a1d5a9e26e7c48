import pytest

from trustflow.graph.convert import build_capacity_graph


def test_edges_follow_trust_towards_issuer(trust_graph):
    assert sorted(trust_graph.nodes) == ["A", "B", "C", "D"]
    assert sorted(trust_graph.edges(keys=True)) == [
        ("A", "B", "A"),
        ("A", "C", "A"),
        ("B", "D", "B"),
    ]
    assert trust_graph.raw_capacity("B", "D", "B") == 20


def test_holders_can_return_tokens_to_issuer():
    graph = build_capacity_graph(
        trust_limits={("B", "A"): 50},
        balances={("B", "A"): 15},
    )
    assert sorted(graph.edges(keys=True)) == [("B", "A", "A")]
    assert graph.capacity("B", "A", "A") == 15


def test_zero_limits_produce_no_edge():
    graph = build_capacity_graph(
        trust_limits={("B", "A"): 0, ("C", "A"): 10},
        balances={("A", "A"): 5, ("D", "D"): 0},
    )
    assert sorted(graph.edges(keys=True)) == [("A", "C", "A")]
    assert "D" in graph


def test_custom_issuers():
    graph = build_capacity_graph(
        trust_limits={("bob", "alice"): 25},
        balances={("alice", "ALC"): 100},
        issuers={"ALC": "alice"},
    )
    assert graph.capacity("alice", "bob", "ALC") == 25


def test_malformed_records_rejected():
    with pytest.raises(OverflowError):
        build_capacity_graph({("B", "A"): 2**256}, {})
    with pytest.raises(TypeError):
        build_capacity_graph({}, {("A", "A"): "10"})
