import json

from trustflow.graph.io import graph_to_node_link
from trustflow.types.base import U256_MAX


def test_node_link_is_json_safe_and_sorted(diamond):
    diamond.add_edge("A", "B", "zzz", capacity=U256_MAX)
    data = graph_to_node_link(diamond)

    assert [n["id"] for n in data["nodes"]] == ["A", "B", "S", "T"]
    assert [(l["source"], l["target"], l["token"]) for l in data["links"]] == [
        (0, 1, "zzz"),
        (0, 3, "tok"),
        (1, 3, "tok"),
        (2, 0, "tok"),
        (2, 1, "tok"),
    ]
    assert data["links"][0]["capacity"] == str(U256_MAX)
    json.dumps(data)


def test_snapshot_reports_effective_capacity(trust_graph):
    trust_graph.push_flow("A", "B", "A", 50)
    data = trust_graph.to_dict()
    ids = [n["id"] for n in data["nodes"]]

    by_edge = {
        (ids[l["source"]], ids[l["target"]], l["token"]): l["capacity"]
        for l in data["links"]
    }
    assert by_edge[("A", "C", "A")] == "10"
    assert by_edge[("A", "B", "A")] == "0"
    assert by_edge[("B", "A", "A")] == "50"

