"""Rewrite rules for grewrite."""

from .rule import LHS_SUBGRAPH, RHS_SUBGRAPH, Rule, derive_rule  # noqa: F401

__all__ = [
    'LHS_SUBGRAPH',
    'RHS_SUBGRAPH',
    'Rule',
    'derive_rule',
]
