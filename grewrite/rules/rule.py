"""Rewrite rules and their derivation from annotated graphs.

A rule graph marks its left-hand side with a subgraph named "L" and its
right-hand side with a subgraph named "R":
- a node only in "L" is deleted, only in "R" is created, in both is kept
  (and copied into the interface graph ``common``);
- an edge belongs to exactly one side. An edge survives a rewrite when one
  LHS edge and one RHS edge share a non-empty label; the interface graph
  records that pairing as a detached edge with the shared label.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field

from grewrite.core.graph import Edge, Graph, GraphMapping, NodeIndex
from grewrite.utils.validation import (
    AmbiguousEdgeError,
    DanglingEdgeError,
    DanglingNodeError,
    DuplicateLabelError,
    StructureError,
)

LHS_SUBGRAPH = "L"
RHS_SUBGRAPH = "R"


@dataclass
class Rule:
    """A double-pushout production ``lhs <- common -> rhs``.

    Attributes:
        lhs: pattern to find in the target
        rhs: replacement
        common: interface graph shared by both sides
        common_to_lhs: positions of interface nodes/edges inside ``lhs``
        common_to_rhs: positions of interface nodes/edges inside ``rhs``
        name: name of the graph the rule was derived from
    """

    lhs: Graph = field(default_factory=Graph)
    rhs: Graph = field(default_factory=Graph)
    common: Graph = field(default_factory=Graph)
    common_to_lhs: GraphMapping = field(default_factory=GraphMapping)
    common_to_rhs: GraphMapping = field(default_factory=GraphMapping)
    name: str = ""


def _copy_edge(edge: Edge, node_map: list[NodeIndex | None], side: str,
               graph: Graph, m: int) -> Edge:
    tail = node_map[edge.tail] if edge.tail is not None else None
    head = node_map[edge.head] if edge.head is not None else None
    if tail is None or head is None:
        raise DanglingEdgeError(
            "dangling_edge_endpoint",
            f"Edge {m} is in {side!r} but one of its endpoints is not",
            graph=graph.name,
            edge=m,
            side=side,
        )
    return Edge(head=head, tail=tail, label=edge.label,
                attributes=copy.deepcopy(edge.attributes))


def _index_label(labels: dict[str, int], label: str, m: int, side: str, graph: Graph) -> None:
    if not label:
        return
    if label in labels:
        raise DuplicateLabelError(
            "duplicate_edge_label",
            f"Edge label {label!r} is used more than once in {side!r}",
            graph=graph.name,
            label=label,
            side=side,
        )
    labels[label] = m


def derive_rule(graph: Graph) -> Rule:
    """Split an annotated graph into a Rule.

    Raises:
        StructureError: "L" or "R" subgraph is missing
        DanglingNodeError: a node is on neither side
        DanglingEdgeError: an edge is on neither side, or touches a node that
            is not on the edge's side
        AmbiguousEdgeError: an edge is on both sides
        DuplicateLabelError: a non-empty edge label repeats within one side
    """
    lhs_sub = graph.get_subgraph(LHS_SUBGRAPH)
    rhs_sub = graph.get_subgraph(RHS_SUBGRAPH)
    if lhs_sub is None or rhs_sub is None:
        raise StructureError(
            "missing_subgraph",
            'Graph must contain subgraphs named "L" and "R"',
            graph=graph.name,
            subgraphs=tuple(s.name for s in graph.subgraphs),
        )

    rule = Rule(name=graph.name)
    rule.lhs.name = f"{graph.name}.L"
    rule.rhs.name = f"{graph.name}.R"
    rule.common.name = f"{graph.name}.common"

    # Original node id -> lhs/rhs node id (None when absent on that side)
    graph_to_lhs: list[NodeIndex | None] = [None] * len(graph.nodes)
    graph_to_rhs: list[NodeIndex | None] = [None] * len(graph.nodes)

    for i, node in enumerate(graph.nodes):
        in_lhs = i in lhs_sub.nodes
        in_rhs = i in rhs_sub.nodes
        if not in_lhs and not in_rhs:
            raise DanglingNodeError(
                "dangling_node",
                f"Node {node.name!r} is in neither the LHS nor the RHS",
                graph=graph.name,
                node=i,
            )
        if in_lhs:
            rule.lhs.nodes.append(copy.deepcopy(node))
            graph_to_lhs[i] = len(rule.lhs.nodes) - 1
        if in_rhs:
            rule.rhs.nodes.append(copy.deepcopy(node))
            graph_to_rhs[i] = len(rule.rhs.nodes) - 1
        if in_lhs and in_rhs:
            rule.common.nodes.append(copy.deepcopy(node))
            rule.common_to_lhs.node_mapping.append(graph_to_lhs[i])
            rule.common_to_rhs.node_mapping.append(graph_to_rhs[i])

    lhs_labels: dict[str, int] = {}
    rhs_labels: dict[str, int] = {}

    for m, edge in enumerate(graph.edges):
        in_lhs = m in lhs_sub.edges
        in_rhs = m in rhs_sub.edges
        if in_lhs and in_rhs:
            raise AmbiguousEdgeError(
                "ambiguous_edge",
                'Edge is in both the "L" and "R" subgraphs, use separate '
                'edges with the same label instead',
                graph=graph.name,
                edge=m,
                label=edge.label,
            )
        if not in_lhs and not in_rhs:
            raise DanglingEdgeError(
                "dangling_edge",
                "Edge is in neither the LHS nor the RHS",
                graph=graph.name,
                edge=m,
                label=edge.label,
            )
        if in_lhs:
            rule.lhs.edges.append(_copy_edge(edge, graph_to_lhs, LHS_SUBGRAPH, graph, m))
            _index_label(lhs_labels, edge.label, len(rule.lhs.edges) - 1, LHS_SUBGRAPH, graph)
        else:
            rule.rhs.edges.append(_copy_edge(edge, graph_to_rhs, RHS_SUBGRAPH, graph, m))
            _index_label(rhs_labels, edge.label, len(rule.rhs.edges) - 1, RHS_SUBGRAPH, graph)

    # One detached interface edge per label shared by the two sides
    for label, m_lhs in lhs_labels.items():
        m_rhs = rhs_labels.get(label)
        if m_rhs is None:
            continue
        rule.common.edges.append(Edge(head=None, tail=None, label=label))
        rule.common_to_lhs.edge_mapping.append([m_lhs])
        rule.common_to_rhs.edge_mapping.append([m_rhs])

    logging.debug(
        f"Derived rule {graph.name!r}: "
        f"lhs={len(rule.lhs.nodes)}n/{len(rule.lhs.edges)}e, "
        f"rhs={len(rule.rhs.nodes)}n/{len(rule.rhs.edges)}e, "
        f"common={len(rule.common.nodes)}n/{len(rule.common.edges)}e"
    )
    return rule


__all__ = [
    'LHS_SUBGRAPH',
    'RHS_SUBGRAPH',
    'Rule',
    'derive_rule',
]
