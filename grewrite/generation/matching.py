"""Subgraph matching: enumerate every embedding of a pattern into a target.

The search is an ordered depth-first backtracking over pattern node
positions 0..n-1. Each stack frame owns the assignment of the positions
before it and a cursor, the next target node to try for its own position.
A pattern edge is checked as soon as both of its endpoints are placed, so
every pattern edge must exist in the target with the same direction. Extra
target edges between matched nodes are never rejected (no induced matching).

Matches are produced in discovery order: lowest target id first at every
position. The search always runs to completion; callers that need a cap can
consume iter_embeddings() lazily.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterator

from grewrite.config import resolve_config
from grewrite.core.graph import EdgeIndex, Graph, GraphMapping, NodeIndex
from grewrite.utils.validation import PreconditionError


@dataclass
class _Frame:
    assignment: tuple[NodeIndex, ...]
    cursor: NodeIndex = 0


def _edge_index(target: Graph) -> dict[tuple[NodeIndex, NodeIndex], list[EdgeIndex]]:
    index: dict[tuple[NodeIndex, NodeIndex], list[EdgeIndex]] = defaultdict(list)
    for m, edge in enumerate(target.edges):
        index[(edge.tail, edge.head)].append(m)
    return dict(index)


def _edge_checks(pattern: Graph) -> list[list[tuple[NodeIndex, NodeIndex]]]:
    # A pattern edge is checked at the position of its later endpoint
    checks: list[list[tuple[NodeIndex, NodeIndex]]] = [[] for _ in pattern.nodes]
    for edge in pattern.edges:
        checks[max(edge.tail, edge.head)].append((edge.tail, edge.head))
    return checks


def _check_pattern(pattern: Graph) -> None:
    if pattern.node_count < 1:
        raise PreconditionError(
            "empty_pattern",
            "Pattern graph must have at least one node",
            pattern=pattern.name,
        )
    for m, edge in enumerate(pattern.edges):
        if edge.head is None or edge.tail is None:
            raise PreconditionError(
                "detached_pattern_edge",
                "Pattern edges must have both endpoints",
                pattern=pattern.name,
                edge=m,
            )


def _candidate_fits(pattern: Graph, target: Graph, i: NodeIndex, j: NodeIndex,
                    placed: tuple[NodeIndex, ...],
                    checks: list[list[tuple[NodeIndex, NodeIndex]]],
                    edge_index: dict[tuple[NodeIndex, NodeIndex], list[EdgeIndex]],
                    injective: bool) -> bool:
    label = pattern.nodes[i].label
    if label and label != target.nodes[j].label:
        return False
    if injective and j in placed:
        return False
    for tail, head in checks[i]:
        j_tail = j if tail == i else placed[tail]
        j_head = j if head == i else placed[head]
        if (j_tail, j_head) not in edge_index:
            return False
    return True


def _complete_match(pattern: Graph, assignment: tuple[NodeIndex, ...],
                    edge_index: dict[tuple[NodeIndex, NodeIndex], list[EdgeIndex]]) -> GraphMapping:
    edge_mapping = [
        list(edge_index.get((assignment[e.tail], assignment[e.head]), ()))
        for e in pattern.edges
    ]
    return GraphMapping(node_mapping=list(assignment), edge_mapping=edge_mapping)


def iter_embeddings(pattern: Graph, target: Graph, config: dict[str, Any] | None = None,
                    *, root_candidates: range | None = None) -> Iterator[GraphMapping]:
    """Return a lazy iterator over every embedding of ``pattern`` into ``target``.

    The pattern is checked eagerly; the search itself runs as the iterator
    is consumed.

    Args:
        pattern: graph to search for; must have at least one node
        target: graph to search in
        config: optional overrides (see grewrite.config); honours
            ``injective_matching``
        root_candidates: contiguous range of target node ids allowed for
            pattern node 0. Disjoint ranges give independent sub-searches
            whose results, concatenated in range order, equal the full search.

    Raises:
        PreconditionError: the pattern is empty or has detached edges
    """
    _check_pattern(pattern)
    cfg = resolve_config(config)
    injective = bool(cfg.get('injective_matching', False))

    root = root_candidates if root_candidates is not None else range(target.node_count)
    if root.step != 1:
        raise PreconditionError(
            "invalid_root_candidates",
            "root_candidates must be a contiguous range",
            start=root.start,
            stop=root.stop,
            step=root.step,
        )
    return _search(pattern, target, injective, max(0, root.start),
                   min(root.stop, target.node_count))


def _search(pattern: Graph, target: Graph, injective: bool,
            root_start: NodeIndex, root_stop: NodeIndex) -> Iterator[GraphMapping]:
    n = pattern.node_count
    edge_index = _edge_index(target)
    checks = _edge_checks(pattern)

    stack: list[_Frame] = [_Frame(assignment=(), cursor=root_start)]
    while stack:
        frame = stack[-1]
        i = len(frame.assignment)
        j = frame.cursor
        limit = root_stop if i == 0 else target.node_count

        if j >= limit:
            # Candidates exhausted for this prefix, backtrack
            stack.pop()
            if stack:
                stack[-1].cursor += 1
            continue

        if not _candidate_fits(pattern, target, i, j, frame.assignment, checks,
                               edge_index, injective):
            frame.cursor += 1
            continue

        assignment = frame.assignment + (j,)
        if i + 1 < n:
            stack.append(_Frame(assignment=assignment))
            continue

        yield _complete_match(pattern, assignment, edge_index)
        frame.cursor += 1


def find_embeddings(pattern: Graph, target: Graph,
                    config: dict[str, Any] | None = None) -> list[GraphMapping]:
    """Return all embeddings of ``pattern`` into ``target`` in discovery order.

    An empty list means no match; this never fails for a non-empty pattern.
    """
    matches = list(iter_embeddings(pattern, target, config))
    logging.debug(
        f"Found {len(matches)} embedding(s) of {pattern.name!r} "
        f"({pattern.node_count}n/{pattern.edge_count}e) in {target.name!r}"
    )
    return matches


def partition_root_candidates(node_count: int, parts: int) -> list[range]:
    """Split ``range(node_count)`` into at most ``parts`` contiguous ranges."""
    parts = max(1, min(int(parts), node_count))
    size, extra = divmod(node_count, parts)
    ranges: list[range] = []
    start = 0
    for k in range(parts):
        stop = start + size + (1 if k < extra else 0)
        ranges.append(range(start, stop))
        start = stop
    return ranges


def find_embeddings_partitioned(pattern: Graph, target: Graph,
                                config: dict[str, Any] | None = None) -> list[GraphMapping]:
    """Run the search as independent sub-searches over pattern node 0's candidates.

    With ``parallel_execution`` the sub-searches run on a thread pool of
    ``max_parallel_workers``. Results are merged in partition order, so the
    output equals find_embeddings() exactly.
    """
    _check_pattern(pattern)
    cfg = resolve_config(config)
    workers = max(1, int(cfg.get('max_parallel_workers', 1)))
    parts = partition_root_candidates(target.node_count, workers)

    def run(root: range) -> list[GraphMapping]:
        return list(iter_embeddings(pattern, target, cfg, root_candidates=root))

    if cfg.get('parallel_execution') and len(parts) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(parts))) as pool:
            chunks = list(pool.map(run, parts))
    else:
        chunks = [run(root) for root in parts]

    matches = [m for chunk in chunks for m in chunk]
    logging.debug(
        f"Found {len(matches)} embedding(s) of {pattern.name!r} in {target.name!r} "
        f"across {len(parts)} partition(s)"
    )
    return matches


__all__ = [
    'iter_embeddings',
    'find_embeddings',
    'find_embeddings_partitioned',
    'partition_root_candidates',
]
