import networkx as nx
import pytest

from grewrite.core.graph import Edge, Graph
from grewrite.utils.interop import from_networkx, to_networkx
from grewrite.utils.validation import PreconditionError


def _robot_graph():
    g = Graph(name="robot")
    body = g.add_node("body", "B", {"length": 0.4})
    leg = g.add_node("leg", "L", {"length": 0.2})
    g.add_edge(leg, body, "j1", {"joint": "hinge"})
    g.add_edge(body, leg, "j0")
    g.add_edge(body, leg, "")
    g.add_edge(leg, leg, "loop")
    return g


def test_to_networkx_keeps_ids_labels_and_attributes():
    g = _robot_graph()
    nxg = to_networkx(g)
    assert isinstance(nxg, nx.MultiDiGraph)
    assert nxg.graph["name"] == "robot"
    assert nxg.nodes[0] == {"name": "body", "label": "B", "length": 0.4}
    assert nxg.number_of_edges(0, 1) == 2
    assert nxg.edges[1, 0, 0] == {"label": "j1", "joint": "hinge"}
    assert nxg.edges[1, 1, 3]["label"] == "loop"


def test_networkx_round_trip_preserves_graph():
    g = _robot_graph()
    assert from_networkx(to_networkx(g)) == g


def test_from_networkx_digraph_uses_keys_as_default_names():
    nxg = nx.DiGraph()
    nxg.add_node("a", label="x", mass=1.0)
    nxg.add_node("b")
    nxg.add_edge("a", "b", label="e", weight=2)
    g = from_networkx(nxg)
    assert [n.name for n in g.nodes] == ["a", "b"]
    assert g.nodes[0].label == "x" and g.nodes[0].attributes == {"mass": 1.0}
    assert g.nodes[1].label == ""
    assert g.edges == [Edge(head=1, tail=0, label="e", attributes={"weight": 2})]


def test_from_networkx_rejects_undirected_graphs():
    with pytest.raises(PreconditionError) as exc:
        from_networkx(nx.path_graph(3))
    assert exc.value.code == "undirected_graph"


def test_to_networkx_rejects_detached_edges():
    g = Graph()
    g.edges.append(Edge(head=None, tail=None, label="x"))
    with pytest.raises(PreconditionError):
        to_networkx(g)
