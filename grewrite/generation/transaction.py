"""Staged construction of rewritten graphs.

A rewrite draws elements from two graphs at once (the live target and the
rule's RHS). The ChangeBuffer stages them under source handles
``(origin, index)`` so node ids of different graphs never mix; commit()
then numbers the staged nodes and resolves every staged edge endpoint into
a fresh Graph.

- An RHS interface node is staged as an alias of the target node it is
  matched to, so edges on either side resolve to the same result node.
- A staged edge whose endpoint was never staged (it points at a deleted
  node) fails the commit instead of producing a corrupted graph.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from grewrite.core.graph import Edge, Graph, Node, NodeIndex
from grewrite.utils.validation import PreconditionError

TARGET = "target"
RHS = "rhs"

NodeRef = tuple[str, NodeIndex]


class ChangeBuffer:
    """In-memory buffer of nodes and edges staged for the result graph."""

    def __init__(self) -> None:
        # staged nodes in result order
        self._nodes: list[tuple[NodeRef, Node]] = []
        self._staged: set[NodeRef] = set()
        # handle -> handle of the staged node it stands for
        self._aliases: dict[NodeRef, NodeRef] = {}
        # (tail handle, head handle, source edge)
        self._edges: list[tuple[NodeRef, NodeRef, Edge]] = []

    def reset(self) -> None:
        self._nodes.clear()
        self._staged.clear()
        self._aliases.clear()
        self._edges.clear()

    def add_node(self, ref: NodeRef, node: Node) -> None:
        if ref in self._staged:
            return
        self._staged.add(ref)
        self._nodes.append((ref, node))

    def alias(self, ref: NodeRef, existing: NodeRef) -> None:
        self._aliases[ref] = existing

    def is_staged(self, ref: NodeRef) -> bool:
        return ref in self._staged

    def resolve_alias(self, ref: NodeRef) -> NodeRef:
        """Return the handle of the staged node ``ref`` stands for."""
        return self._aliases.get(ref, ref)

    def add_edge(self, tail: NodeRef, head: NodeRef, edge: Edge) -> None:
        self._edges.append((tail, head, edge))

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)


@dataclass
class TransactionManager:
    """Builds one result graph from a ChangeBuffer."""

    name: str = ""
    buffer: ChangeBuffer = field(default_factory=ChangeBuffer)

    def begin(self, name: str | None = None) -> None:
        if name is not None:
            self.name = name
        self.buffer.reset()

    def rollback(self) -> None:
        """Discard staged elements."""
        self.buffer.reset()

    def _resolve(self, ref: NodeRef, ref_to_result: dict[NodeRef, NodeIndex]) -> NodeIndex | None:
        return ref_to_result.get(self.buffer.resolve_alias(ref))

    def commit(self) -> Graph:
        """Build the result graph from the staged elements and clear the buffer.

        Raises:
            PreconditionError: a staged edge references a node that was not
                staged (the dangling condition is violated)
        """
        result = Graph(name=self.name)
        ref_to_result: dict[NodeRef, NodeIndex] = {}
        for ref, node in self.buffer._nodes:
            result.nodes.append(copy.deepcopy(node))
            ref_to_result[ref] = len(result.nodes) - 1

        for tail_ref, head_ref, edge in self.buffer._edges:
            tail = self._resolve(tail_ref, ref_to_result)
            head = self._resolve(head_ref, ref_to_result)
            if tail is None or head is None:
                self.buffer.reset()
                raise PreconditionError(
                    "dangling_edge",
                    "Rewrite would leave an edge attached to a deleted node",
                    graph=self.name,
                    tail=tail_ref,
                    head=head_ref,
                    label=edge.label,
                )
            result.edges.append(Edge(head=head, tail=tail, label=edge.label,
                                     attributes=copy.deepcopy(edge.attributes)))

        self.buffer.reset()
        return result


__all__ = [
    'TARGET',
    'RHS',
    'NodeRef',
    'ChangeBuffer',
    'TransactionManager',
]
