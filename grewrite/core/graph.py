"""Graph data model shared by rule derivation, matching and rewriting.

Graphs are directed multigraphs stored as ordered lists. A node id or edge id
is simply the element's position in its owning Graph, so ids from two
different graphs must never be compared directly; translate them through a
GraphMapping instead.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Iterable

from grewrite.utils.validation import ValidationError

NodeIndex = int
EdgeIndex = int


@dataclass
class Node:
    """A graph node. Only ``label`` takes part in matching."""

    name: str
    label: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass
class Edge:
    """A directed edge ``tail -> head``.

    Edges of a rule's interface graph are detached: ``head`` and ``tail``
    are None and only the label identifies the LHS/RHS edges they pair.
    """

    head: NodeIndex | None
    tail: NodeIndex | None
    label: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def is_detached(self) -> bool:
        return self.head is None and self.tail is None


@dataclass
class Subgraph:
    """A named selection of node and edge ids of one Graph."""

    name: str
    nodes: set[NodeIndex] = field(default_factory=set)
    edges: set[EdgeIndex] = field(default_factory=set)


@dataclass
class GraphMapping:
    """Translation from one graph's positions into another graph's ids.

    Attributes:
        node_mapping: target node id for every source node position
        edge_mapping: for every source edge position, the target edge ids
            realizing it (several when the target has parallel edges)
    """

    node_mapping: list[NodeIndex] = field(default_factory=list)
    edge_mapping: list[list[EdgeIndex]] = field(default_factory=list)


# A match of a pattern graph into a target graph is a GraphMapping
Match = GraphMapping


@dataclass
class Graph:
    """Directed multigraph with ordered nodes and edges and named subgraphs."""

    name: str = ""
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    subgraphs: list[Subgraph] = field(default_factory=list)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def add_node(self, name: str, label: str = "",
                 attributes: dict[str, Any] | None = None) -> NodeIndex:
        self.nodes.append(Node(name=name, label=label, attributes=dict(attributes or {})))
        return len(self.nodes) - 1

    def add_edge(self, tail: NodeIndex, head: NodeIndex, label: str = "",
                 attributes: dict[str, Any] | None = None) -> EdgeIndex:
        """Add the edge ``tail -> head`` and return its id."""
        self.edges.append(Edge(head=head, tail=tail, label=label,
                               attributes=dict(attributes or {})))
        return len(self.edges) - 1

    def add_subgraph(self, name: str, nodes: Iterable[NodeIndex] = (),
                     edges: Iterable[EdgeIndex] = ()) -> Subgraph:
        subgraph = Subgraph(name=name, nodes=set(nodes), edges=set(edges))
        self.subgraphs.append(subgraph)
        return subgraph

    def get_subgraph(self, name: str) -> Subgraph | None:
        """Return the first subgraph with exactly this name."""
        for subgraph in self.subgraphs:
            if subgraph.name == name:
                return subgraph
        return None

    def find_edges(self, tail: NodeIndex, head: NodeIndex) -> list[EdgeIndex]:
        """All edges ``tail -> head``, in id order."""
        return [m for m, e in enumerate(self.edges) if e.tail == tail and e.head == head]

    def copy(self) -> Graph:
        return copy.deepcopy(self)

    def validate(self, collect_errors: list | None = None) -> bool:
        """Check that every edge endpoint and subgraph member resolves.

        Detached edges (both endpoints None) are accepted. Problems are
        appended to ``collect_errors`` when given.
        """
        errors: list[ValidationError] = []
        n = len(self.nodes)
        for m, edge in enumerate(self.edges):
            if edge.is_detached:
                continue
            for end in ("tail", "head"):
                idx = getattr(edge, end)
                if not isinstance(idx, int) or not 0 <= idx < n:
                    errors.append(ValidationError(
                        "invalid_edge_endpoint",
                        f"Edge {m} has an unresolved {end}",
                        graph=self.name,
                        edge=m,
                        endpoint=idx,
                    ))
        for subgraph in self.subgraphs:
            bad_nodes = sorted(i for i in subgraph.nodes if not 0 <= i < n)
            bad_edges = sorted(m for m in subgraph.edges if not 0 <= m < len(self.edges))
            if bad_nodes or bad_edges:
                errors.append(ValidationError(
                    "invalid_subgraph_member",
                    f"Subgraph {subgraph.name!r} references missing elements",
                    graph=self.name,
                    subgraph=subgraph.name,
                    nodes=tuple(bad_nodes),
                    edges=tuple(bad_edges),
                ))
        if collect_errors is not None:
            collect_errors.extend(errors)
        return not errors

    def compute_fingerprint(self, iterations: int = 3) -> str:
        """Weisfeiler-Lehman hash over node and edge labels.

        Isomorphic labelled graphs always share a fingerprint; names and
        attributes are ignored.
        """
        from grewrite.utils.interop import wl_fingerprint

        return wl_fingerprint(self, iterations=iterations)


__all__ = [
    "NodeIndex",
    "EdgeIndex",
    "Node",
    "Edge",
    "Subgraph",
    "GraphMapping",
    "Match",
    "Graph",
]
