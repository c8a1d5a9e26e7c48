import pytest

from trustflow.algorithms.augment import place_flow_on_path, plan_path_flow, record_flow
from trustflow.graph.capacity_graph import CapacityGraph
from trustflow.graph.convert import build_capacity_graph
from trustflow.types.base import U256_MAX


@pytest.fixture
def two_token_hop():
    g = CapacityGraph()
    g.add_edge("S", "M", "x", capacity=6)
    g.add_edge("S", "M", "y", capacity=10)
    g.add_edge("M", "T", "x", capacity=30)
    return g


def test_plan_splits_largest_token_first(two_token_hop):
    assert plan_path_flow(two_token_hop, ["S", "M", "T"], 14) == [
        (("S", "M", "y"), 10),
        (("S", "M", "x"), 4),
        (("M", "T", "x"), 14),
    ]


@pytest.mark.parametrize(
    "path, amount",
    [
        (["S"], 1),
        (["S", "M", "S"], 1),
        (["S", "M", "T"], 17),
        (["S", "T"], 1),
    ],
)
def test_plan_rejects_unusable_paths(two_token_hop, path, amount):
    with pytest.raises(ValueError):
        plan_path_flow(two_token_hop, path, amount)


def test_place_flow_updates_graph_and_used_edges(two_token_hop):
    used = {}
    place_flow_on_path(two_token_hop, ["S", "M", "T"], 14, used)

    assert used == {("S", "M", "y"): 10, ("S", "M", "x"): 4, ("M", "T", "x"): 14}
    assert two_token_hop.capacity("S", "M", "y") == 0
    assert two_token_hop.capacity("S", "M", "x") == 2
    assert two_token_hop.capacity("M", "S", "x") == 4
    assert two_token_hop.capacity("T", "M", "x") == 14


def test_failed_placement_changes_nothing(two_token_hop):
    used = {}
    with pytest.raises(ValueError):
        place_flow_on_path(two_token_hop, ["S", "M", "T"], 20, used)

    assert used == {}
    assert two_token_hop.capacity("S", "M", "y") == 10
    assert not two_token_hop.has_edge("M", "S")


def test_zero_amount_is_noop(two_token_hop):
    used = {}
    assert place_flow_on_path(two_token_hop, ["S", "M", "T"], 0, used) == []
    assert used == {}


def test_record_flow_cancels_opposite_direction():
    used = {("A", "B", "t"): 5}

    record_flow(used, ("B", "A", "t"), 3)
    assert used == {("A", "B", "t"): 2}

    record_flow(used, ("B", "A", "t"), 4)
    assert used == {("B", "A", "t"): 2}

    record_flow(used, ("B", "A", "other"), 1)
    assert used == {("B", "A", "t"): 2, ("B", "A", "other"): 1}


def test_overflow_on_later_hop_changes_nothing():
    # C already holds the maximum amount of B's token
    g = build_capacity_graph(
        trust_limits={("B", "A"): 10, ("C", "B"): U256_MAX},
        balances={("A", "A"): 10, ("B", "B"): 10, ("C", "B"): U256_MAX},
    )
    used = {}
    with pytest.raises(OverflowError):
        place_flow_on_path(g, ["A", "B", "C"], 10, used)

    assert used == {}
    assert g.raw_capacity("A", "B", "A") == 10
    assert g.ledger.balance("A", "A") == 10
    assert g.ledger.balance("B", "A") == 0


def test_plan_shares_headroom_between_tokens_of_one_issuer():
    g = build_capacity_graph(
        trust_limits={("R", "X"): 100},
        balances={("H", "T1"): 100, ("H", "T2"): 100},
        issuers={"T1": "X", "T2": "X"},
    )
    assert g.capacity("H", "R", "T1") == 100
    assert g.capacity("H", "R", "T2") == 100

    with pytest.raises(ValueError):
        plan_path_flow(g, ["H", "R"], 150)
    assert plan_path_flow(g, ["H", "R"], 100) == [(("H", "R", "T1"), 100)]
