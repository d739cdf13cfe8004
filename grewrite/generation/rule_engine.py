"""RuleEngine: double-pushout application of a Rule at one match.

The result is built from scratch, the target is never mutated:
1. target nodes outside the match are copied unchanged;
2. interface nodes are copied from the target nodes they are matched to,
   so the live target's name/label/attributes survive the rewrite;
3. RHS-only nodes are created;
4. unmatched target edges are copied, the target edges realizing each
   interface edge are copied, and RHS-only edges are created between the
   result nodes of their RHS endpoints.
"""

from __future__ import annotations

import logging
from typing import Any

from grewrite.config import resolve_config
from grewrite.core.graph import Graph, GraphMapping, NodeIndex
from grewrite.generation.matching import find_embeddings
from grewrite.generation.transaction import RHS, TARGET, TransactionManager
from grewrite.rules.rule import Rule
from grewrite.utils.validation import PreconditionError


def _structure_problems(rule: Rule, target: Graph, match: GraphMapping) -> list[PreconditionError]:
    problems: list[PreconditionError] = []
    if len(rule.common_to_lhs.node_mapping) != len(rule.common.nodes) or \
            len(rule.common_to_rhs.node_mapping) != len(rule.common.nodes) or \
            len(rule.common_to_lhs.edge_mapping) != len(rule.common.edges) or \
            len(rule.common_to_rhs.edge_mapping) != len(rule.common.edges):
        problems.append(PreconditionError(
            "inconsistent_rule",
            "Interface translations do not match the interface graph",
            rule=rule.name,
        ))
    if len(match.node_mapping) != len(rule.lhs.nodes):
        problems.append(PreconditionError(
            "incomplete_match",
            "Match does not cover every LHS node",
            rule=rule.name,
            expected=len(rule.lhs.nodes),
            actual=len(match.node_mapping),
        ))
    if len(match.edge_mapping) != len(rule.lhs.edges):
        problems.append(PreconditionError(
            "incomplete_match",
            "Match does not cover every LHS edge",
            rule=rule.name,
            expected=len(rule.lhs.edges),
            actual=len(match.edge_mapping),
        ))
    bad_nodes = [j for j in match.node_mapping if not 0 <= j < target.node_count]
    if bad_nodes:
        problems.append(PreconditionError(
            "invalid_match_node",
            "Match references nodes outside the target",
            rule=rule.name,
            nodes=tuple(bad_nodes),
        ))
    return problems


def validate_match(rule: Rule, target: Graph, match: GraphMapping,
                   collect_errors: list | None = None, *,
                   check_identification: bool = False) -> bool:
    """Check that ``match`` embeds ``rule.lhs`` into ``target`` and can be rewritten.

    Checked: the match covers every LHS node and edge, ids resolve, labels
    agree, every LHS edge is realized by at least one target edge joining the
    mapped endpoints, and no kept edge touches a deleted node (dangling
    condition). With ``check_identification`` a match is also rejected when a
    target element would be both deleted and kept; otherwise such an element
    is kept. Problems are appended to ``collect_errors``.
    """
    errors = _structure_problems(rule, target, match)
    if errors:
        if collect_errors is not None:
            collect_errors.extend(errors)
        return False

    nm = match.node_mapping
    for i, node in enumerate(rule.lhs.nodes):
        if node.label and node.label != target.nodes[nm[i]].label:
            errors.append(PreconditionError(
                "label_mismatch",
                f"LHS node {node.name!r} is matched to a node with another label",
                rule=rule.name,
                lhs_node=i,
                target_node=nm[i],
            ))

    for m, edge in enumerate(rule.lhs.edges):
        realized = match.edge_mapping[m]
        if not realized:
            errors.append(PreconditionError(
                "unrealized_edge",
                "LHS edge has no target edge",
                rule=rule.name,
                lhs_edge=m,
            ))
        for t in realized:
            if not 0 <= t < target.edge_count:
                errors.append(PreconditionError(
                    "invalid_match_edge",
                    "Match references an edge outside the target",
                    rule=rule.name,
                    lhs_edge=m,
                    target_edge=t,
                ))
                continue
            t_edge = target.edges[t]
            if (t_edge.tail, t_edge.head) != (nm[edge.tail], nm[edge.head]):
                errors.append(PreconditionError(
                    "edge_endpoint_mismatch",
                    "Target edge does not join the matched endpoints",
                    rule=rule.name,
                    lhs_edge=m,
                    target_edge=t,
                ))
    if errors:
        if collect_errors is not None:
            collect_errors.extend(errors)
        return False

    kept_lhs_nodes = set(rule.common_to_lhs.node_mapping)
    kept_nodes = {nm[i] for i in kept_lhs_nodes}
    deleted_nodes = set(nm) - kept_nodes
    glued = sorted({nm[i] for i in range(len(nm)) if i not in kept_lhs_nodes} & kept_nodes)
    if check_identification and glued:
        errors.append(PreconditionError(
            "identification_conflict",
            "Target node would be both deleted and kept",
            rule=rule.name,
            target_nodes=tuple(glued),
        ))

    kept_lhs_edges = {ms[0] for ms in rule.common_to_lhs.edge_mapping}
    kept_edges = {t for m in kept_lhs_edges for t in match.edge_mapping[m]}
    deleted_edges = {
        t for m, ts in enumerate(match.edge_mapping) if m not in kept_lhs_edges for t in ts
    }
    if check_identification and kept_edges & deleted_edges:
        errors.append(PreconditionError(
            "identification_conflict",
            "Target edge would be both deleted and kept",
            rule=rule.name,
            target_edges=tuple(sorted(kept_edges & deleted_edges)),
        ))

    matched_edges = kept_edges | deleted_edges
    dangling = sorted(
        t for t, e in enumerate(target.edges)
        if (t not in matched_edges or t in kept_edges)
        and (e.tail in deleted_nodes or e.head in deleted_nodes)
    )
    if dangling:
        errors.append(PreconditionError(
            "dangling_edge",
            "Rewrite would leave edges attached to deleted nodes",
            rule=rule.name,
            target_edges=tuple(dangling),
        ))

    if collect_errors is not None:
        collect_errors.extend(errors)
    return not errors


def check_match(rule: Rule, target: Graph, match: GraphMapping, *,
                check_identification: bool = False) -> None:
    """Raise the first problem found by validate_match()."""
    errors: list[PreconditionError] = []
    if not validate_match(rule, target, match, collect_errors=errors,
                          check_identification=check_identification):
        raise errors[0]


class RuleEngine:
    """Applies Rules to target graphs by double-pushout rewriting."""

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self.config = resolve_config(config)
        self.check_identification = bool(self.config.get('check_identification', False))

    def _stage(self, tm: TransactionManager, rule: Rule, target: Graph,
               match: GraphMapping) -> None:
        buffer = tm.buffer
        nm = match.node_mapping

        # Untouched context nodes
        matched_nodes = set(nm)
        for i, node in enumerate(target.nodes):
            if i not in matched_nodes:
                buffer.add_node((TARGET, i), node)

        # Interface nodes keep the target's identity and attributes; a target
        # node glued from several LHS nodes is staged once
        for k in range(len(rule.common.nodes)):
            t: NodeIndex = nm[rule.common_to_lhs.node_mapping[k]]
            if not buffer.is_staged((TARGET, t)):
                buffer.add_node((TARGET, t), target.nodes[t])
            buffer.alias((RHS, rule.common_to_rhs.node_mapping[k]), (TARGET, t))

        # Created nodes
        rhs_common_nodes = set(rule.common_to_rhs.node_mapping)
        for i, node in enumerate(rule.rhs.nodes):
            if i not in rhs_common_nodes:
                buffer.add_node((RHS, i), node)

        # Untouched context edges
        matched_edges = {t for ts in match.edge_mapping for t in ts}
        for m, edge in enumerate(target.edges):
            if m not in matched_edges:
                buffer.add_edge((TARGET, edge.tail), (TARGET, edge.head), edge)

        # Interface edges: every target edge realizing the paired LHS edge
        copied: set[int] = set()
        for lhs_edges in rule.common_to_lhs.edge_mapping:
            for t in match.edge_mapping[lhs_edges[0]]:
                if t in copied:
                    continue
                copied.add(t)
                edge = target.edges[t]
                buffer.add_edge((TARGET, edge.tail), (TARGET, edge.head), edge)

        # Created edges
        rhs_common_edges = {m for ms in rule.common_to_rhs.edge_mapping for m in ms}
        for m, edge in enumerate(rule.rhs.edges):
            if m not in rhs_common_edges:
                buffer.add_edge((RHS, edge.tail), (RHS, edge.head), edge)

    def apply_rule(self, rule: Rule, target: Graph, match: GraphMapping) -> Graph:
        """Rewrite ``target`` at ``match`` and return the new graph.

        Raises:
            PreconditionError: the match does not fit the rule/target (only
                checked in full when ``validate_matches`` is on), or the
                rewrite would leave a dangling edge (always checked)
        """
        if self.config.get('validate_matches', True):
            check_match(rule, target, match, check_identification=self.check_identification)

        tm = TransactionManager()
        tm.begin(name=target.name)
        try:
            self._stage(tm, rule, target, match)
            result = tm.commit()
        except Exception:
            tm.rollback()
            raise

        logging.debug(
            f"Applied rule {rule.name!r} to {target.name!r}: "
            f"{target.node_count}n/{target.edge_count}e -> "
            f"{result.node_count}n/{result.edge_count}e"
        )
        return result

    def rewrite_all(self, rule: Rule, target: Graph) -> list[tuple[GraphMapping, Graph]]:
        """Apply ``rule`` at every embedding of its LHS that can be rewritten.

        Embeddings that fail validate_match() are skipped: always those that
        violate the dangling condition, and with ``check_identification`` also
        those that would both delete and keep a target element. Returns
        ``(match, result)`` pairs in discovery order.
        """
        results: list[tuple[GraphMapping, Graph]] = []
        for match in find_embeddings(rule.lhs, target, self.config):
            if not validate_match(rule, target, match,
                                  check_identification=self.check_identification):
                logging.debug(f"Skipping non-applicable match {match.node_mapping} of rule {rule.name!r}")
                continue
            results.append((match, self.apply_rule(rule, target, match)))
        return results


def apply_rule(rule: Rule, target: Graph, match: GraphMapping,
               config: dict[str, Any] | None = None) -> Graph:
    """Apply ``rule`` to ``target`` at ``match``; see RuleEngine.apply_rule."""
    return RuleEngine(config).apply_rule(rule, target, match)


__all__ = [
    'RuleEngine',
    'apply_rule',
    'validate_match',
    'check_match',
]
