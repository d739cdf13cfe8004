"""Matching and rule application for grewrite."""

from .matching import (  # noqa: F401
    find_embeddings,
    find_embeddings_partitioned,
    iter_embeddings,
    partition_root_candidates,
)
from .rule_engine import RuleEngine, apply_rule, check_match, validate_match  # noqa: F401

__all__ = [
    'find_embeddings',
    'find_embeddings_partitioned',
    'iter_embeddings',
    'partition_root_candidates',
    'RuleEngine',
    'apply_rule',
    'check_match',
    'validate_match',
]
