from typing import Any, Protocol, runtime_checkable

from .nodes import Nodes


@runtime_checkable
class TextUnmarshaler(Protocol):
    """A type that parses its own text form.

    The decoder creates a fresh instance and calls `unmarshal_text` on it
    before trying any generic parsing. Implementations raise `ValueError`
    for text they reject.
    """

    def unmarshal_text(self, text: str) -> None: ...


@runtime_checkable
class TextDecoder(Protocol):
    """What `Path.set_string` needs from a decoder."""

    def decode_type(self, tp: Any, text: str) -> Any: ...

    def convert(self, value: Any, tp: Any) -> Any: ...


@runtime_checkable
class NodeSource(Protocol):
    """Anything that can list the nodes reachable from a type, e.g. `TypeNodeCache`."""

    def nodes_for(self, tp: Any) -> Nodes: ...

    def nodes_for_value(self, value: Any) -> Nodes: ...
