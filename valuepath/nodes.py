"""Node and Nodes: the uniform accessor abstraction.

A `Node` is one traversal step: a record field, a map entry, a sequence
slot, or an accessor method/property. A node without a key is *dynamic*:
it stands for "any map key" or "any index" until bound with `for_key`.
`Nodes` is the set of children reachable from one type or value.
"""
from __future__ import annotations
import dataclasses
import enum
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .accessors import NodeRead, NodeWrite
from .values import MISSING, to_string

logger = logging.getLogger(__name__)


class NodeKind(enum.Enum):
    FIELD = "field"
    MAP_ENTRY = "map_entry"
    SLOT = "slot"
    GETTER = "getter"
    SETTER = "setter"
    ACCESSOR = "accessor"


@dataclasses.dataclass(frozen=True)
class Node:
    key: Any = MISSING
    key_string: str = ""
    key_type: Any = None
    value_type: Any = None
    copy_only: bool = False
    read: Optional[NodeRead] = dataclasses.field(default=None, compare=False)
    write: Optional[NodeWrite] = dataclasses.field(default=None, compare=False)
    kind: NodeKind = NodeKind.FIELD

    def is_dynamic(self) -> bool:
        return self.key is MISSING

    def is_read_only(self) -> bool:
        return self.write is None

    def is_write_only(self) -> bool:
        return self.read is None

    def for_key(self, key: Any) -> "Node":
        """A concrete copy of a dynamic node bound to `key`; concrete nodes return themselves."""
        if not self.is_dynamic():
            return self
        return dataclasses.replace(self, key=key, key_string=to_string(key))

    def merge(self, other: "Node") -> "Node":
        """Fill the read/write sides this node lacks from `other`.

        A side both nodes define keeps this node's function; the dropped
        one is reported with a warning.
        """
        read, write = self.read, self.write
        if other.read is not None:
            if read is None:
                read = other.read
            else:
                logger.warning("Node %r already readable; ignoring later read definition", self.key_string)
        if other.write is not None:
            if write is None:
                write = other.write
            else:
                logger.warning("Node %r already writable; ignoring later write definition", self.key_string)
        if read is self.read and write is self.write:
            return self
        kind = NodeKind.ACCESSOR if self.kind in (NodeKind.GETTER, NodeKind.SETTER) else self.kind
        value_type = self.value_type if self.value_type is not None else other.value_type
        # a getter may hand out a copy, so deep writes go back through the setter
        copy_only = self.copy_only or other.copy_only or kind is NodeKind.ACCESSOR
        return dataclasses.replace(
            self, read=read, write=write, kind=kind, value_type=value_type, copy_only=copy_only
        )


class Nodes:
    """Children of a type or value, kept in order and by key string."""

    def __init__(self, initial: Iterable[Node] = ()) -> None:
        self._in_order: List[Node] = []
        self._by_key: Dict[str, Node] = {}
        self._dynamic: Optional[Node] = None
        for node in initial:
            self.add(node)

    @property
    def in_order(self) -> List[Node]:
        return list(self._in_order)

    @property
    def by_key(self) -> Dict[str, Node]:
        return dict(self._by_key)

    @property
    def dynamic(self) -> Optional[Node]:
        return self._dynamic

    def add(self, node: Node) -> None:
        if node.is_dynamic():
            if self._dynamic is None:
                self._dynamic = node
                self._in_order.append(node)
            else:
                logger.warning("Ignoring second dynamic node for %r", node.value_type)
            return
        existing = self._by_key.get(node.key_string)
        if existing is None:
            self._in_order.append(node)
            self._by_key[node.key_string] = node
            return
        merged = existing.merge(node)
        if merged is not existing:
            logger.debug("Merged node %r", node.key_string)
            position = next(i for i, n in enumerate(self._in_order) if n is existing)
            self._in_order[position] = merged
            self._by_key[node.key_string] = merged

    def for_key(self, key: Any) -> Optional[Node]:
        """Resolve `key` to a concrete node.

        An exact key-string match wins; otherwise the dynamic node, if
        any, is bound to the key.
        """
        node = self._by_key.get(to_string(key))
        if node is not None:
            return node
        if self._dynamic is not None:
            return self._dynamic.for_key(key)
        return None

    def key_strings(self) -> List[str]:
        return [n.key_string for n in self._in_order if not n.is_dynamic()]

    def clone(self) -> "Nodes":
        return Nodes(self._in_order)

    def __contains__(self, key_string: object) -> bool:
        return key_string in self._by_key

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._in_order))

    def __len__(self) -> int:
        return len(self._in_order)

    def __repr__(self) -> str:
        keys = self.key_strings()
        if self._dynamic is not None:
            keys.append("*")
        return f"Nodes({keys})"
