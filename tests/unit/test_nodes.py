import logging

from valuepath import Node, NodeKind, Nodes
from valuepath.accessors import field_reader, field_writer, map_read, map_write


def _field(name, read=True, write=True, kind=NodeKind.FIELD):
    return Node(
        key=name,
        key_string=name,
        key_type=str,
        value_type=int,
        read=field_reader(name) if read else None,
        write=field_writer(name) if write else None,
        kind=kind,
    )


def test_dynamic_node_binds_key():
    dynamic = Node(key_type=int, value_type=str, copy_only=True, read=map_read, write=map_write, kind=NodeKind.MAP_ENTRY)
    assert dynamic.is_dynamic()
    bound = dynamic.for_key(3)
    assert not bound.is_dynamic()
    assert (bound.key, bound.key_string) == (3, "3")
    assert bound.copy_only
    assert bound.for_key(4) is bound


def test_exact_key_wins_over_dynamic():
    nodes = Nodes([
        Node(key_type=str, value_type=int, read=map_read, write=map_write, kind=NodeKind.MAP_ENTRY),
        _field("size", write=False, kind=NodeKind.GETTER),
    ])
    assert nodes.for_key("size").kind is NodeKind.GETTER
    assert nodes.for_key("other").key == "other"
    assert nodes.key_strings() == ["size"]
    assert "size" in nodes and "other" not in nodes


def test_no_match_without_dynamic():
    nodes = Nodes([_field("a")])
    assert nodes.for_key("b") is None


def test_getter_and_setter_merge_into_accessor():
    nodes = Nodes()
    nodes.add(_field("Full", write=False, kind=NodeKind.GETTER))
    nodes.add(_field("Full", read=False, kind=NodeKind.SETTER))
    merged = nodes.for_key("Full")
    assert merged.kind is NodeKind.ACCESSOR
    assert merged.copy_only
    assert not merged.is_read_only() and not merged.is_write_only()
    assert len(nodes) == 1


def test_conflicting_side_keeps_first_and_warns(caplog):
    first = _field("a", write=False, kind=NodeKind.GETTER)
    nodes = Nodes([first])
    with caplog.at_level(logging.WARNING, logger="valuepath.nodes"):
        nodes.add(_field("a", write=False, kind=NodeKind.GETTER))
    assert nodes.for_key("a") is first
    assert "already readable" in caplog.text


def test_clone_is_independent():
    nodes = Nodes([_field("a")])
    copy = nodes.clone()
    copy.add(_field("b"))
    assert nodes.key_strings() == ["a"]
    assert copy.key_strings() == ["a", "b"]
