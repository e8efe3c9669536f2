from __future__ import annotations
import logging
from typing import Any, Optional, Sequence

from .cache import TypeNodeCache, default_cache
from .decoder import Decoder
from .errors import PathError
from .nodes import Nodes
from .path import Path
from .values import MISSING, is_nil, type_of

logger = logging.getLogger(__name__)


class Reference:
    """A root value bound to a path into it.

    Navigation mirrors `Path` but get/set need no root argument:

        ref = Reference(directory).nexts(["ByName", "John", "Name", "First"])
        ref.set("John")
    """

    __slots__ = ("_root", "_path")

    def __init__(
        self,
        root: Any,
        path: Optional[Path] = None,
        cache: Optional[TypeNodeCache] = None,
        decoder: Optional[Decoder] = None,
        root_type: Any = None,
    ) -> None:
        self._root = root
        if path is None:
            path = Path(
                root_type if root_type is not None else type_of(root),
                cache=cache if cache is not None else default_cache,
                decoder=decoder,
            )
        self._path = path

    @property
    def root(self) -> Any:
        return self._root

    @property
    def path(self) -> Path:
        return self._path

    def next(self, key: Any) -> Optional["Reference"]:
        path = self._path.next(key)
        if path is None:
            return None
        return Reference(self._root, path)

    def nexts(self, keys: Sequence[Any]) -> Optional["Reference"]:
        if not keys:
            return self
        path = self._path.nexts(keys)
        if path is None:
            return None
        return Reference(self._root, path)

    def get(self) -> Any:
        return self._path.get(self._root)

    def get_value(self) -> Any:
        """Like `get`, but returns `MISSING` instead of raising."""
        try:
            return self._path.get(self._root)
        except PathError as err:
            logger.debug("No value at %s: %s", self._path, err)
            return MISSING

    def set(self, value: Any) -> None:
        self._path.set(self._root, value)

    def set_string(self, text: str) -> None:
        self._path.set_string(self._root, text)

    def next_nodes(self) -> Optional[Nodes]:
        """Children of the referenced value itself (existing keys and indices)."""
        value = self.get_value()
        if is_nil(value):
            return None
        return self._path.cache.nodes_for_value(value)

    def __repr__(self) -> str:
        return f"Reference({type(self._root).__name__}, {str(self._path)!r})"
