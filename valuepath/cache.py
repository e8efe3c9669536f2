"""Type node cache: which children are reachable from a type.

Node sets are computed lazily on first request and memoized per type
identity for the life of the cache. A module-level `default_cache` backs
the convenience functions; independent caches can be created and injected
into paths and references, and `clear()` resets one (useful in tests).
"""
from __future__ import annotations
import collections.abc
import dataclasses
import inspect
import logging
from threading import RLock
from typing import Any, Callable, Dict, Iterable, List, Optional, get_args

from .accessors import (
    call_through,
    field_reader,
    field_writer,
    grow_write,
    index_read,
    map_read,
    map_write,
    method_reader,
    method_writer,
    promoted_reader,
    promoted_writer,
    property_reader,
    property_writer,
    slot_write,
)
from .box import Box, box_class, box_inner_type
from .kinds import (
    TypeKind,
    callable_shape,
    concrete_type,
    is_getter,
    is_namedtuple,
    is_setter,
    kind_of,
    strip_annotated,
    type_origin,
    unwrap_optional,
)
from .nodes import Node, NodeKind, Nodes
from .values import concrete, element_types, record_fields, to_string

logger = logging.getLogger(__name__)

_LIBRARY_MODULES = ("builtins", "typing", "enum", "abc", "collections", "collections.abc")


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


def _skip_class(klass: type) -> bool:
    if klass is Box or klass is object:
        return True
    module = klass.__module__ or ""
    return module in _LIBRARY_MODULES or module.split(".")[0] == "pydantic"


def _holder_class(tp: Any) -> Optional[type]:
    """Outermost user-defined `Box` subclass wrapping a type, if any."""
    while True:
        tp = unwrap_optional(strip_annotated(tp))
        cls = box_class(tp)
        if cls is None:
            return None
        if cls is not Box:
            return cls
        tp = box_inner_type(tp)


class TypeNodeCache:
    """Memoized `Nodes` per type, safe to share between threads."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._nodes: Dict[Any, Nodes] = {}
        self._builders: Dict[TypeKind, Callable[[Any, Nodes], None]] = {
            TypeKind.MAP: self._map_nodes,
            TypeKind.SEQUENCE: self._sequence_nodes,
            TypeKind.FIXED_SEQUENCE: self._fixed_sequence_nodes,
            TypeKind.FUNCTION: self._function_nodes,
            TypeKind.RECORD: self._record_nodes,
            TypeKind.SCALAR: lambda tp, nodes: None,
        }

    def nodes_for(self, tp: Any) -> Nodes:
        """Return the nodes reachable from `tp`, computing them once."""
        with self._lock:
            nodes = self._nodes.get(tp)
            if nodes is not None:
                return nodes

            base = concrete_type(tp)
            nodes = self._nodes.get(base)
            if nodes is None:
                nodes = Nodes()
                # registered before it is filled so self-referencing types terminate
                self._nodes[base] = nodes
                self._build(base, nodes)
                logger.debug("Discovered %d nodes for %s", len(nodes), _type_name(base))

            holder = _holder_class(tp)
            if holder is not None:
                nodes = self._holder_nodes(holder, nodes)
            self._nodes[tp] = nodes
            return nodes

    def set_type_nodes(self, tp: Any, nodes: Iterable[Node]) -> None:
        """Register an explicit node set for `tp`, replacing any computed one."""
        with self._lock:
            self._nodes[tp] = Nodes(nodes)

    def nodes_for_value(self, value: Any) -> Nodes:
        """Nodes of a concrete value: one per existing map key or list index.

        Other values fall back to the nodes of their type.
        """
        holder = type(value) if isinstance(value, Box) and type(value) is not Box else None
        target = concrete(value)
        if isinstance(target, collections.abc.Mapping):
            nodes = Nodes(
                Node(
                    key=key,
                    key_string=to_string(key),
                    key_type=type(key),
                    value_type=Any if item is None else type(item),
                    copy_only=True,
                    read=map_read,
                    write=map_write,
                    kind=NodeKind.MAP_ENTRY,
                )
                for key, item in target.items()
            )
        elif isinstance(target, (list, tuple)) and not is_namedtuple(type(target)):
            write = grow_write if isinstance(target, list) else slot_write
            nodes = Nodes(
                Node(
                    key=i,
                    key_string=str(i),
                    key_type=int,
                    value_type=Any if item is None else type(item),
                    read=index_read,
                    write=write,
                    kind=NodeKind.SLOT,
                )
                for i, item in enumerate(target)
            )
        else:
            return self.nodes_for(holder if holder is not None else type(target))

        self._add_methods(type(target), nodes)
        if holder is not None:
            self._add_methods(holder, nodes)
        return nodes

    def key_strings_for(self, value: Any) -> List[str]:
        return self.nodes_for_value(value).key_strings()

    def clear(self) -> None:
        with self._lock:
            self._nodes.clear()
        logger.debug("Type node cache cleared")

    def __contains__(self, tp: object) -> bool:
        with self._lock:
            return tp in self._nodes

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    def _build(self, tp: Any, nodes: Nodes) -> None:
        self._builders[kind_of(tp)](tp, nodes)
        origin = type_origin(tp)
        if isinstance(origin, type):
            self._add_methods(origin, nodes)

    def _holder_nodes(self, holder: type, base: Nodes) -> Nodes:
        nodes = self._nodes.get(holder)
        if nodes is None:
            nodes = base.clone()
            self._add_methods(holder, nodes)
            self._nodes[holder] = nodes
            logger.debug("Discovered %d holder nodes for %s", len(nodes), holder.__name__)
        return nodes

    def _map_nodes(self, tp: Any, nodes: Nodes) -> None:
        key_type, value_type = element_types(tp)[:2]
        nodes.add(Node(
            key_type=key_type,
            value_type=value_type,
            copy_only=True,
            read=map_read,
            write=map_write,
            kind=NodeKind.MAP_ENTRY,
        ))

    def _sequence_nodes(self, tp: Any, nodes: Nodes) -> None:
        nodes.add(Node(
            key_type=int,
            value_type=element_types(tp)[0],
            read=index_read,
            write=grow_write,
            kind=NodeKind.SLOT,
        ))

    def _fixed_sequence_nodes(self, tp: Any, nodes: Nodes) -> None:
        for i, element_type in enumerate(get_args(tp)):
            nodes.add(Node(
                key=i,
                key_string=str(i),
                key_type=int,
                value_type=element_type,
                read=index_read,
                write=slot_write,
                kind=NodeKind.SLOT,
            ))

    def _function_nodes(self, tp: Any, nodes: Nodes) -> None:
        shape = callable_shape(tp)
        if not is_getter(shape):
            return
        for inner in self.nodes_for(shape.returns):
            if inner.read is None:
                continue
            # values reached through a call are never settable
            nodes.add(dataclasses.replace(inner, read=call_through(inner.read), write=None))

    def _record_nodes(self, tp: Any, nodes: Nodes) -> None:
        for spec in record_fields(tp).values():
            field = Node(
                key=spec.name,
                key_string=spec.name,
                key_type=str,
                value_type=spec.type,
                read=field_reader(spec.name),
                write=field_writer(spec.name),
                kind=NodeKind.FIELD,
            )
            if not spec.embedded:
                nodes.add(field)
                continue
            for inner in self.nodes_for(spec.type):
                if inner.is_dynamic():
                    logger.debug("Not promoting dynamic node of embedded %s", spec.name)
                    continue
                nodes.add(dataclasses.replace(
                    inner,
                    read=promoted_reader(field, inner.read),
                    write=promoted_writer(field, inner.write),
                ))

    def _add_methods(self, cls: type, nodes: Nodes) -> None:
        """Add getter/setter nodes for the public methods and properties of `cls`."""
        seen = set()
        for klass in cls.__mro__:
            if _skip_class(klass):
                continue
            for name, attr in vars(klass).items():
                if name.startswith("_") or name in seen:
                    continue
                seen.add(name)
                node = _method_node(klass, name, attr)
                if node is not None:
                    nodes.add(node)


def _method_node(owner: type, name: str, attr: Any) -> Optional[Node]:
    if isinstance(attr, property):
        return _property_node(owner, name, attr)
    if not inspect.isfunction(attr):
        return None
    shape = callable_shape(attr, skip_self=True)
    if is_getter(shape):
        return Node(
            key=name,
            key_string=name,
            key_type=str,
            value_type=shape.returns,
            read=method_reader(name, owner),
            kind=NodeKind.GETTER,
        )
    if is_setter(shape):
        return Node(
            key=name,
            key_string=name,
            key_type=str,
            value_type=shape.params[0],
            write=method_writer(name, owner),
            kind=NodeKind.SETTER,
        )
    return None


def _property_node(owner: type, name: str, prop: property) -> Node:
    value_type: Any = Any
    if prop.fget is not None:
        shape = callable_shape(prop.fget, skip_self=True)
        if is_getter(shape):
            value_type = shape.returns
    elif prop.fset is not None:
        shape = callable_shape(prop.fset, skip_self=True)
        if shape is not None and shape.params:
            value_type = shape.params[0]
    if prop.fget is not None and prop.fset is not None:
        kind = NodeKind.ACCESSOR
    elif prop.fget is not None:
        kind = NodeKind.GETTER
    else:
        kind = NodeKind.SETTER
    return Node(
        key=name,
        key_string=name,
        key_type=str,
        value_type=value_type,
        copy_only=kind is NodeKind.ACCESSOR,
        read=property_reader(name, owner) if prop.fget is not None else None,
        write=property_writer(name, owner) if prop.fset is not None else None,
        kind=kind,
    )


default_cache = TypeNodeCache()


def nodes_for(tp: Any) -> Nodes:
    return default_cache.nodes_for(tp)


def set_type_nodes(tp: Any, nodes: Iterable[Node]) -> None:
    default_cache.set_type_nodes(tp, nodes)


def nodes_for_value(value: Any) -> Nodes:
    return default_cache.nodes_for_value(value)


def key_strings_for(value: Any) -> List[str]:
    return default_cache.key_strings_for(value)
