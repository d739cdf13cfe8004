"""
Quickstart Tutorial

Goals:
- Describe a rewrite rule as one annotated graph with "L" and "R" subgraphs
- Find every embedding of the rule's LHS in a target graph
- Apply the rule at one embedding to derive a new graph
"""

from grewrite.core.graph import Graph
from grewrite.generation.matching import find_embeddings
from grewrite.generation.rule_engine import apply_rule
from grewrite.rules.rule import derive_rule


def build_rule_graph() -> Graph:
    # L = {A, B, A->B}, R = {B, C, B->C}: delete A and its edge, keep B, attach a new C
    g = Graph(name='replace_tail')
    a = g.add_node('A')
    b = g.add_node('B')
    c = g.add_node('C', 'leg')
    e_ab = g.add_edge(a, b)
    e_bc = g.add_edge(b, c)
    g.add_subgraph('L', nodes=[a, b], edges=[e_ab])
    g.add_subgraph('R', nodes=[b, c], edges=[e_bc])
    return g


def main():
    rule = derive_rule(build_rule_graph())
    print('lhs:', [n.name for n in rule.lhs.nodes], 'rhs:', [n.name for n in rule.rhs.nodes])

    target = Graph(name='design')
    body = target.add_node('body', 'body')
    joint = target.add_node('joint', 'joint')
    target.add_edge(body, joint)

    matches = find_embeddings(rule.lhs, target)
    print('matches:', [m.node_mapping for m in matches])

    result = apply_rule(rule, target, matches[0])
    print('result nodes:', [(n.name, n.label) for n in result.nodes])
    print('result edges:', [(e.tail, e.head) for e in result.edges])


if __name__ == '__main__':
    main()
