import itertools

import pytest

from grewrite.core.graph import Edge, Graph
from grewrite.generation.matching import (
    find_embeddings,
    find_embeddings_partitioned,
    iter_embeddings,
    partition_root_candidates,
)
from grewrite.utils.validation import PreconditionError


def _graph(labels, edges, name=""):
    g = Graph(name=name)
    for i, label in enumerate(labels):
        g.add_node(f"n{i}", label)
    for tail, head in edges:
        g.add_edge(tail, head)
    return g


def _brute_force(pattern, target):
    """All label-respecting assignments under which every pattern edge exists."""
    found = []
    for assignment in itertools.product(range(target.node_count), repeat=pattern.node_count):
        if any(p.label and p.label != target.nodes[j].label
               for p, j in zip(pattern.nodes, assignment)):
            continue
        if all(target.find_edges(assignment[e.tail], assignment[e.head])
               for e in pattern.edges):
            found.append(list(assignment))
    return found


def _target():
    # Small multigraph with a self-loop, parallel edges and mixed labels
    return _graph(
        ["a", "b", "a", "", "b"],
        [(0, 1), (1, 2), (2, 0), (0, 1), (3, 3), (3, 4), (4, 0), (2, 4)],
        name="target",
    )


def test_scenario_single_edge_pattern_has_one_match():
    pattern = _graph(["", ""], [(0, 1)], name="lhs")
    target = _graph(["", ""], [(0, 1)])
    matches = find_embeddings(pattern, target)
    assert len(matches) == 1
    assert matches[0].node_mapping == [0, 1]
    assert matches[0].edge_mapping == [[0]]


def test_empty_pattern_is_precondition_error():
    with pytest.raises(PreconditionError) as exc:
        find_embeddings(Graph(), _target())
    assert exc.value.code == "empty_pattern"
    # raised eagerly, before iteration starts
    with pytest.raises(PreconditionError):
        iter_embeddings(Graph(), _target())


def test_detached_pattern_edges_are_rejected():
    pattern = _graph([""], [])
    pattern.edges.append(Edge(head=None, tail=None, label="x"))
    with pytest.raises(PreconditionError):
        find_embeddings(pattern, _target())


def test_no_match_is_empty_list():
    pattern = _graph(["missing"], [])
    assert find_embeddings(pattern, _target()) == []
    assert find_embeddings(_graph([""], []), Graph()) == []


def test_wildcard_and_labelled_nodes():
    target = _target()
    assert [m.node_mapping for m in find_embeddings(_graph([""], []), target)] == \
        [[0], [1], [2], [3], [4]]
    assert [m.node_mapping for m in find_embeddings(_graph(["a"], []), target)] == [[0], [2]]
    assert [m.node_mapping for m in find_embeddings(_graph(["b"], []), target)] == [[1], [4]]


def test_edge_direction_is_respected():
    pattern = _graph(["", ""], [(0, 1)])
    target = _graph(["", ""], [(1, 0)])
    assert [m.node_mapping for m in find_embeddings(pattern, target)] == [[1, 0]]


def test_extra_target_edges_are_not_forbidden():
    pattern = _graph(["", ""], [(0, 1)])
    target = _graph(["", ""], [(0, 1), (1, 0), (0, 0)])
    matches = find_embeddings(pattern, target)
    assert [m.node_mapping for m in matches] == [[0, 0], [0, 1], [1, 0]]


def test_parallel_target_edges_all_realize_pattern_edge():
    pattern = _graph(["a", "b"], [(0, 1)])
    matches = find_embeddings(pattern, _target())
    assert [m.node_mapping for m in matches] == [[0, 1], [2, 4]]
    assert matches[0].edge_mapping == [[0, 3]]
    assert matches[1].edge_mapping == [[7]]


def test_self_loop_pattern():
    pattern = _graph([""], [(0, 0)])
    matches = find_embeddings(pattern, _target())
    assert [m.node_mapping for m in matches] == [[3]]
    assert matches[0].edge_mapping == [[4]]


def test_node_mapping_is_not_injective_by_default():
    pattern = _graph(["", ""], [])
    target = _graph(["", ""], [])
    assert [m.node_mapping for m in find_embeddings(pattern, target)] == \
        [[0, 0], [0, 1], [1, 0], [1, 1]]


def test_injective_matching_option():
    pattern = _graph(["", ""], [])
    target = _graph(["", ""], [])
    matches = find_embeddings(pattern, target, {"injective_matching": True})
    assert [m.node_mapping for m in matches] == [[0, 1], [1, 0]]


@pytest.mark.parametrize("labels,edges", [
    (["", ""], [(0, 1)]),
    (["a", ""], [(0, 1), (1, 0)]),
    (["", "", ""], [(0, 1), (1, 2)]),
    (["", "", ""], [(2, 0), (0, 1)]),
    (["b", "", "a"], [(1, 0), (2, 1)]),
    (["", ""], [(0, 1), (0, 1)]),
    (["", ""], [(1, 1), (1, 0)]),
    (["", "", ""], []),
])
def test_matches_equal_brute_force_enumeration(labels, edges):
    pattern = _graph(labels, edges)
    target = _target()
    matches = find_embeddings(pattern, target)
    # same set, and the same depth-first (lexicographic) order
    assert [m.node_mapping for m in matches] == _brute_force(pattern, target)


def test_every_recorded_edge_joins_the_mapped_endpoints():
    pattern = _graph(["", "", ""], [(0, 1), (1, 2), (0, 1)])
    target = _target()
    matches = find_embeddings(pattern, target)
    assert matches
    for match in matches:
        assert len(match.node_mapping) == pattern.node_count
        assert len(match.edge_mapping) == pattern.edge_count
        for m, edge in enumerate(pattern.edges):
            tail, head = match.node_mapping[edge.tail], match.node_mapping[edge.head]
            assert match.edge_mapping[m] == target.find_edges(tail, head)
            assert match.edge_mapping[m]


def test_iter_embeddings_is_lazy():
    pattern = _graph([""], [])
    first_two = list(itertools.islice(iter_embeddings(pattern, _target()), 2))
    assert [m.node_mapping for m in first_two] == [[0], [1]]


def test_root_candidates_restrict_first_position():
    pattern = _graph(["", ""], [(0, 1)])
    target = _target()
    full = [m.node_mapping for m in find_embeddings(pattern, target)]
    sub = [m.node_mapping for m in iter_embeddings(pattern, target, root_candidates=range(2, 4))]
    assert sub == [nm for nm in full if 2 <= nm[0] < 4]
    with pytest.raises(PreconditionError):
        iter_embeddings(pattern, target, root_candidates=range(0, 4, 2))


def test_partition_root_candidates():
    assert partition_root_candidates(7, 3) == [range(0, 3), range(3, 5), range(5, 7)]
    assert partition_root_candidates(2, 5) == [range(0, 1), range(1, 2)]
    assert partition_root_candidates(0, 4) == [range(0, 0)]


@pytest.mark.parametrize("parallel", [False, True])
def test_partitioned_search_equals_sequential(parallel):
    pattern = _graph(["", "", ""], [(0, 1), (1, 2)])
    target = _target()
    config = {"parallel_execution": parallel, "max_parallel_workers": 3}
    assert find_embeddings_partitioned(pattern, target, config) == find_embeddings(pattern, target)


def test_partitioned_search_checks_pattern():
    with pytest.raises(PreconditionError):
        find_embeddings_partitioned(Graph(), _target())
