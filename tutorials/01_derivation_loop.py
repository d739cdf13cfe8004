"""
Derivation Loop Tutorial

Goals:
- Keep an edge across a rewrite by labelling one LHS and one RHS edge alike
- Drive several derivation steps (the caller picks the match each step)
- Compare derived graphs with WL fingerprints and networkx

Choosing rules and matches is up to the caller; here we always take the
last embedding so the chain keeps growing at its tip.
"""

import networkx as nx

from grewrite import PRESET_STRICT
from grewrite.core.graph import Graph
from grewrite.generation.matching import find_embeddings_partitioned
from grewrite.generation.rule_engine import RuleEngine
from grewrite.rules.rule import derive_rule
from grewrite.utils.interop import to_networkx


def build_grow_rule() -> Graph:
    # X -link-> Y persists; a new segment Z is attached to Y
    g = Graph(name='grow')
    x = g.add_node('X')
    y = g.add_node('Y')
    z = g.add_node('Z', 'segment')
    l_link = g.add_edge(x, y, 'link')
    r_link = g.add_edge(x, y, 'link')
    r_new = g.add_edge(y, z)
    g.add_subgraph('L', nodes=[x, y], edges=[l_link])
    g.add_subgraph('R', nodes=[x, y, z], edges=[r_link, r_new])
    return g


def main():
    rule = derive_rule(build_grow_rule())
    engine = RuleEngine(PRESET_STRICT)

    graph = Graph(name='axiom')
    base = graph.add_node('base', 'base')
    tip = graph.add_node('tip', 'segment')
    graph.add_edge(base, tip)

    config = {**PRESET_STRICT, 'parallel_execution': True, 'max_parallel_workers': 2}
    for step in range(3):
        matches = find_embeddings_partitioned(rule.lhs, graph, config)
        if not matches:
            print('no match, stopping')
            break
        graph = engine.apply_rule(rule, graph, matches[-1])
        print(f'step {step}: nodes={graph.node_count} edges={graph.edge_count} '
              f'fingerprint={graph.compute_fingerprint()}')

    nx_graph = to_networkx(graph)
    print('is DAG:', nx.is_directed_acyclic_graph(nx_graph))
    print('longest path:', nx.dag_longest_path_length(nx_graph))


if __name__ == '__main__':
    main()
