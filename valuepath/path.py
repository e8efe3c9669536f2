"""Paths: immutable chains of nodes rooted at a type.

A path is grown one key at a time with `next`; each call returns a new
path. `get` replays the reads over a root value. `set` replays them
forward, creating missing intermediates, performs the final write, then
walks back up storing changed children into parents that do not share
storage with them (map entries, freshly created values, immutable values
held in a `Box`).
"""
from __future__ import annotations
import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .box import Box
from .cache import TypeNodeCache, default_cache
from .decoder import Decoder, get_default_decoder
from .errors import DecodeError, InvalidResult, NoSuchPath, NotReadable, NotWritable
from .kinds import concrete_type, type_origin
from .nodes import Node, Nodes
from .values import MISSING, init_type, init_value, is_addressable, pointer_to, to_string

logger = logging.getLogger(__name__)


class Path:
    """A path of keys, fields, indices and accessors through a root type."""

    __slots__ = ("_root", "_nodes", "_cache", "_decoder")

    def __init__(
        self,
        root_type: Any,
        nodes: Iterable[Node] = (),
        cache: Optional[TypeNodeCache] = None,
        decoder: Optional[Decoder] = None,
    ) -> None:
        self._root = root_type
        self._nodes: Tuple[Node, ...] = tuple(nodes)
        self._cache = cache if cache is not None else default_cache
        self._decoder = decoder

    @classmethod
    def parse(
        cls,
        root_type: Any,
        text: str,
        separator: str = ".",
        cache: Optional[TypeNodeCache] = None,
        decoder: Optional[Decoder] = None,
    ) -> "Path":
        """Build a path from its textual form, e.g. ``"ByName.John.Name"``.

        Raises `NoSuchPath` naming the first segment that does not resolve.
        """
        path = cls(root_type, cache=cache, decoder=decoder)
        if not text:
            return path
        for key in text.split(separator):
            following = path.next(key)
            if following is None:
                raise NoSuchPath(key, path.type())
            path = following
        return path

    @property
    def root_type(self) -> Any:
        return self._root

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self._nodes

    @property
    def cache(self) -> TypeNodeCache:
        return self._cache

    @property
    def decoder(self) -> Decoder:
        return self._decoder if self._decoder is not None else get_default_decoder()

    def is_empty(self) -> bool:
        return not self._nodes

    def keys(self) -> List[Any]:
        return [n.key for n in self._nodes]

    def key_strings(self) -> List[str]:
        return [n.key_string for n in self._nodes]

    def end(self) -> Optional[Node]:
        """The last node, or None for an empty path."""
        return self._nodes[-1] if self._nodes else None

    def type(self) -> Any:
        """The type found at the end of this path."""
        end = self.end()
        return self._root if end is None else end.value_type

    def next_nodes(self) -> Nodes:
        return self._cache.nodes_for(self.type())

    def next(self, key: Any) -> Optional["Path"]:
        """A new path extended by `key`, or None if `key` does not resolve."""
        nodes = self.next_nodes()
        if to_string(key) in nodes:
            node = nodes.for_key(key)
        else:
            dynamic = nodes.dynamic
            if dynamic is None:
                return None
            key = self._coerce_key(key, dynamic.key_type)
            if key is MISSING:
                return None
            node = dynamic.for_key(key)
        return Path(self._root, self._nodes + (node,), cache=self._cache, decoder=self._decoder)

    def nexts(self, keys: Sequence[Any]) -> Optional["Path"]:
        path: Optional[Path] = self
        for key in keys:
            path = path.next(key)
            if path is None:
                return None
        return path

    def _coerce_key(self, key: Any, key_type: Any) -> Any:
        """Convert a textual key to the key type of a dynamic node."""
        base = type_origin(concrete_type(key_type))
        if key_type is None or base is Any or base is object or not isinstance(base, type):
            return key
        if isinstance(key, base) and not (isinstance(key, bool) and base is not bool):
            return key
        try:
            return self.decoder.convert(key, key_type)
        except DecodeError as err:
            logger.debug("Key %r does not convert to %s: %s", key, key_type, err)
            return MISSING

    def get(self, root: Any) -> Any:
        """Read the value at this path from `root`."""
        value = root
        for node in self._nodes:
            if node.read is None:
                raise NotReadable(f"{node.key_string!r} is write-only in path {self}")
            value = node.read(node, value)
            if value is MISSING:
                raise InvalidResult(f"no value at {node.key_string!r} in path {self}")
        return value

    def set(self, root: Any, value: Any) -> None:
        """Write `value` at this path into `root`, creating missing intermediates."""
        last = len(self._nodes) - 1
        if last == -1:
            if isinstance(root, Box):
                root.value = value
                return
            raise NotWritable("an empty path can only set a Box root")

        for i, node in enumerate(self._nodes):
            if node.write is None:
                raise NotWritable(f"{node.key_string!r} is read-only in path {self}")
            if node.read is None and i < last:
                raise NotReadable(f"{node.key_string!r} is write-only in path {self}")

        if isinstance(root, Box) and init_value(root, self._root) is MISSING:
            raise InvalidResult(f"cannot create a root value for path {self}")

        write_back_from: Optional[int] = None
        boxed = set()
        values = [root]
        for i in range(last):
            node = self._nodes[i]
            if node.copy_only and write_back_from is None:
                write_back_from = i

            child = node.read(node, values[i])
            if child is MISSING or child is None:
                child = init_type(node.value_type)
                if child is MISSING:
                    raise InvalidResult(f"cannot create a value for {node.key_string!r} in path {self}")
                logger.debug("Created %s at %r", type(child).__name__, node.key_string)
                if write_back_from is None:
                    write_back_from = i
            if not is_addressable(child):
                child = pointer_to(child)
                boxed.add(i + 1)
                if write_back_from is None:
                    write_back_from = i
            child = init_value(child, node.value_type)
            if child is MISSING:
                raise InvalidResult(f"cannot initialise {node.key_string!r} in path {self}")
            values.append(child)

        end = self._nodes[last]
        end.write(end, values[last], value)

        if write_back_from is not None:
            for k in range(last, write_back_from, -1):
                parent = self._nodes[k - 1]
                child = values[k].value if k in boxed else values[k]
                parent.write(parent, values[k - 1], child)

    def set_string(self, root: Any, text: str) -> None:
        """Decode `text` as the type at the end of this path, then `set` it."""
        self.set(root, self.decoder.decode_type(self.type(), text))

    def __len__(self) -> int:
        return len(self._nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self._root == other._root and self.key_strings() == other.key_strings()

    def __hash__(self) -> int:
        return hash((repr(self._root), tuple(self.key_strings())))

    def __str__(self) -> str:
        return ".".join(self.key_strings())

    def __repr__(self) -> str:
        return f"Path({getattr(self._root, '__name__', self._root)!s}, {self.key_strings()!r})"
