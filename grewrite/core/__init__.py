"""Core graph data model for grewrite."""

from .graph import (  # noqa: F401
    Edge,
    EdgeIndex,
    Graph,
    GraphMapping,
    Match,
    Node,
    NodeIndex,
    Subgraph,
)

__all__ = [
    'Node',
    'Edge',
    'Subgraph',
    'Graph',
    'GraphMapping',
    'Match',
    'NodeIndex',
    'EdgeIndex',
]
