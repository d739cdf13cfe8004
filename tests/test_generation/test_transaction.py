import pytest

from grewrite.core.graph import Edge, Node
from grewrite.generation.transaction import RHS, TARGET, ChangeBuffer, TransactionManager
from grewrite.utils.validation import PreconditionError


def test_commit_resolves_aliases_into_fresh_graph():
    tm = TransactionManager()
    tm.begin(name="result")
    tm.buffer.add_node((TARGET, 4), Node("kept", "k"))
    tm.buffer.alias((RHS, 0), (TARGET, 4))
    tm.buffer.add_node((RHS, 1), Node("new"))
    tm.buffer.add_edge((RHS, 0), (RHS, 1), Edge(head=1, tail=0, label="e", attributes={"w": 1}))
    tm.buffer.add_edge((TARGET, 4), (TARGET, 4), Edge(head=4, tail=4))

    result = tm.commit()

    assert result.name == "result"
    assert [n.name for n in result.nodes] == ["kept", "new"]
    assert result.edges == [
        Edge(head=1, tail=0, label="e", attributes={"w": 1}),
        Edge(head=0, tail=0),
    ]
    assert tm.buffer.node_count == 0 and tm.buffer.edge_count == 0


def test_resolve_alias_follows_interface_handles():
    buffer = ChangeBuffer()
    buffer.add_node((TARGET, 3), Node("kept"))
    buffer.alias((RHS, 0), (TARGET, 3))
    assert buffer.resolve_alias((RHS, 0)) == (TARGET, 3)
    assert buffer.resolve_alias((RHS, 1)) == (RHS, 1)


def test_staging_a_node_twice_keeps_first_copy():
    buffer = ChangeBuffer()
    buffer.add_node((TARGET, 0), Node("a"))
    buffer.add_node((TARGET, 0), Node("again"))
    assert buffer.node_count == 1
    assert buffer.is_staged((TARGET, 0))
    assert not buffer.is_staged((RHS, 0))


def test_commit_copies_staged_nodes():
    source = Node("a", attributes={"mass": 1})
    tm = TransactionManager()
    tm.buffer.add_node((TARGET, 0), source)
    result = tm.commit()
    result.nodes[0].attributes["mass"] = 2
    assert source.attributes == {"mass": 1}


def test_unstaged_endpoint_fails_commit():
    tm = TransactionManager(name="broken")
    tm.buffer.add_node((TARGET, 0), Node("a"))
    tm.buffer.add_edge((TARGET, 0), (TARGET, 1), Edge(head=1, tail=0))
    with pytest.raises(PreconditionError) as exc:
        tm.commit()
    assert exc.value.code == "dangling_edge"
    assert tm.buffer.node_count == 0


def test_rollback_discards_staged_elements():
    tm = TransactionManager()
    tm.begin()
    tm.buffer.add_node((TARGET, 0), Node("a"))
    tm.rollback()
    assert tm.commit().node_count == 0
