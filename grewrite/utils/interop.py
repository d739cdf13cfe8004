"""Conversion between grewrite graphs and networkx, plus fingerprints.

networkx node keys are the grewrite node ids; multiedge keys are the edge
ids, so a round trip keeps element order.
"""

from __future__ import annotations

from collections import defaultdict

import networkx as nx

from grewrite.core.graph import Graph
from grewrite.utils.validation import PreconditionError


def to_networkx(graph: Graph) -> nx.MultiDiGraph:
    """Return a MultiDiGraph with ``name``/``label`` node data and ``label`` edge data."""
    g = nx.MultiDiGraph(name=graph.name)
    for i, node in enumerate(graph.nodes):
        data = dict(node.attributes)
        data.update(name=node.name, label=node.label)
        g.add_node(i, **data)
    for m, edge in enumerate(graph.edges):
        if edge.head is None or edge.tail is None:
            raise PreconditionError(
                "detached_edge",
                "Detached (interface) edges have no networkx equivalent",
                graph=graph.name,
                edge=m,
            )
        data = dict(edge.attributes)
        data["label"] = edge.label
        g.add_edge(edge.tail, edge.head, key=m, **data)
    return g


def from_networkx(nx_graph: nx.Graph) -> Graph:
    """Build a Graph from a directed networkx graph.

    Nodes are numbered in networkx iteration order. A ``name`` node attribute
    is used as the node name (the node key otherwise); ``label`` attributes
    become labels and all other data becomes ``attributes``.
    """
    if not nx_graph.is_directed():
        raise PreconditionError(
            "undirected_graph",
            "Only directed networkx graphs can be converted",
            graph=str(nx_graph.graph.get("name", "")),
        )
    graph = Graph(name=str(nx_graph.graph.get("name", "")))
    index: dict = {}
    for key, data in nx_graph.nodes(data=True):
        attrs = dict(data)
        name = str(attrs.pop("name", key))
        label = str(attrs.pop("label", "") or "")
        index[key] = graph.add_node(name, label, attrs)
    if nx_graph.is_multigraph():
        keyed = [(key, tail, head, data) for tail, head, key, data
                 in nx_graph.edges(keys=True, data=True)]
        keys = [item[0] for item in keyed]
        # Unique integer keys are edge ids written by to_networkx()
        if all(isinstance(k, int) for k in keys) and len(set(keys)) == len(keys):
            keyed.sort(key=lambda item: item[0])
        edges = [(tail, head, data) for _, tail, head, data in keyed]
    else:
        edges = list(nx_graph.edges(data=True))
    for tail, head, data in edges:
        attrs = dict(data)
        label = str(attrs.pop("label", "") or "")
        graph.add_edge(index[tail], index[head], label, attrs)
    return graph


def wl_fingerprint(graph: Graph, iterations: int = 3) -> str:
    # Parallel edges are folded into one edge whose label lists every
    # parallel label, so multiplicity still changes the hash. Each folded
    # edge becomes its own node joined tail -"out"-> edge -"in"-> head, so
    # direction is part of the labels whichever way networkx walks the graph.
    folded: dict[tuple[int, int], list[str]] = defaultdict(list)
    for edge in graph.edges:
        if edge.head is None or edge.tail is None:
            continue
        folded[(edge.tail, edge.head)].append(edge.label)
    g = nx.DiGraph()
    for i, node in enumerate(graph.nodes):
        g.add_node(("node", i), label=f"n:{node.label}")
    for (tail, head), labels in folded.items():
        edge_node = ("edge", tail, head)
        g.add_node(edge_node, label="e:" + "|".join(sorted(labels)) + f"#{len(labels)}")
        g.add_edge(("node", tail), edge_node, label="out")
        g.add_edge(edge_node, ("node", head), label="in")
    return nx.weisfeiler_lehman_graph_hash(
        g, node_attr="label", edge_attr="label", iterations=iterations
    )


__all__ = [
    "to_networkx",
    "from_networkx",
    "wl_fingerprint",
]
