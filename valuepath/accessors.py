"""Read and write functions attached to nodes.

Every read takes ``(node, container)`` and returns the child or `MISSING`.
Every write takes ``(node, container, value)``, changes the container in
place and raises `NotWritable` when it cannot. Containers may arrive boxed;
immutable ones are rebuilt and the result stored back into their `Box`.
"""
from __future__ import annotations
import collections.abc
import logging
from typing import Any, Callable, Optional

from .box import Box
from .errors import InvalidResult, NotWritable
from .values import (
    MISSING,
    concrete,
    holder_of,
    init_type,
    is_nil,
    pointer_maybe,
    set_field,
    zero_value,
)

logger = logging.getLogger(__name__)

NodeRead = Callable[[Any, Any], Any]
NodeWrite = Callable[[Any, Any, Any], None]


def _update(container: Any, change: Callable[[Any], Any]) -> None:
    """Apply `change` to the concrete container, keeping its result.

    `change` returns the container to keep: the same object after an in
    place change, or a rebuilt one for immutable containers, which is only
    possible when the container sits in a `Box`.
    """
    target = concrete(container)
    if target is None:
        raise NotWritable("cannot write into a nil container")
    result = change(target)
    if result is target:
        return
    holder = holder_of(container)
    if holder is None:
        raise NotWritable(f"{type(target).__name__} cannot be changed in place; wrap it in a Box")
    holder.value = result


def index_read(node, container):
    seq = concrete(container)
    index = node.key
    if seq is None or not isinstance(index, int) or not 0 <= index < len(seq):
        return MISSING
    return seq[index]


def _index_writer(grow: bool) -> NodeWrite:
    def write(node, container, value):
        index = node.key
        if not isinstance(index, int) or index < 0:
            raise NotWritable(f"invalid index {index!r}")

        def change(seq):
            items = list(seq) if isinstance(seq, tuple) else seq
            if grow:
                while len(items) <= index:
                    items.append(zero_value(node.value_type))
            elif index >= len(items):
                raise NotWritable(f"index {index} out of range for length {len(items)}")
            items[index] = value
            return tuple(items) if isinstance(seq, tuple) else seq

        _update(container, change)
    return write


slot_write = _index_writer(grow=False)
grow_write = _index_writer(grow=True)


def map_read(node, container):
    mapping = concrete(container)
    if mapping is None:
        return MISSING
    try:
        return mapping[node.key]
    except KeyError:
        return MISSING


def map_write(node, container, value):
    def change(mapping):
        if not isinstance(mapping, collections.abc.MutableMapping):
            rebuilt = dict(mapping)
            rebuilt[node.key] = value
            return rebuilt
        mapping[node.key] = value
        return mapping

    _update(container, change)


def field_reader(name: str) -> NodeRead:
    def read(node, container):
        obj = concrete(container)
        if obj is None:
            return MISSING
        return getattr(obj, name, MISSING)
    return read


def field_writer(name: str) -> NodeWrite:
    def write(node, container, value):
        _update(container, lambda obj: set_field(obj, name, value))
    return write


def _receiver(container: Any, owner: type) -> Any:
    """Walk box layers down to the value that owns a method."""
    value = container
    while not isinstance(value, owner):
        if not isinstance(value, Box):
            return None
        value = value.value
    return value


def method_reader(name: str, owner: type) -> NodeRead:
    def read(node, container):
        recv = _receiver(container, owner)
        if recv is None:
            return MISSING
        return getattr(recv, name)()
    return read


def method_writer(name: str, owner: type) -> NodeWrite:
    def write(node, container, value):
        recv = _receiver(container, owner)
        if recv is None:
            raise NotWritable(f"no receiver for {name}()")
        result = getattr(recv, name)(value)
        if isinstance(result, BaseException):
            raise result
    return write


def property_reader(name: str, owner: type) -> NodeRead:
    def read(node, container):
        recv = _receiver(container, owner)
        if recv is None:
            return MISSING
        return getattr(recv, name)
    return read


def property_writer(name: str, owner: type) -> NodeWrite:
    def write(node, container, value):
        recv = _receiver(container, owner)
        if recv is None:
            raise NotWritable(f"no receiver for property {name}")
        setattr(recv, name, value)
    return write


def call_through(read: NodeRead) -> NodeRead:
    """Compose `read` behind a call of the zero-argument getter held by the container."""
    def composed(node, container):
        fn = concrete(container)
        if not callable(fn):
            return MISSING
        return read(node, fn())
    return composed


def promoted_reader(outer, read: Optional[NodeRead]) -> Optional[NodeRead]:
    """Read of an embedded record's node, going through the embedding field."""
    if read is None:
        return None

    def composed(node, container):
        embedded = outer.read(outer, container)
        if embedded is MISSING:
            return MISSING
        return read(node, embedded)
    return composed


def promoted_writer(outer, write: Optional[NodeWrite]) -> Optional[NodeWrite]:
    """Write into an embedded record, creating it when nil and storing it back."""
    if write is None:
        return None

    def composed(node, container, value):
        embedded = outer.read(outer, container)
        if is_nil(embedded):
            embedded = init_type(outer.value_type)
            if embedded is MISSING:
                raise InvalidResult(f"cannot create embedded {outer.key_string}")
        holder = pointer_maybe(embedded)
        write(node, holder, value)
        stored = holder.value if holder is not embedded else embedded
        outer.write(outer, container, stored)
    return composed
