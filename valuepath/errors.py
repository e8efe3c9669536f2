"""Exception types raised by the path engine and the text decoder.

All errors derive from `PathError` so callers can catch the whole family.
Lookups that simply do not resolve (`Path.next`) return ``None`` instead
of raising; `NoSuchPath` is only raised by helpers that build a path from
a full list of keys.
"""
from __future__ import annotations
from typing import Any


class PathError(Exception):
    """Base class for path and decoding failures."""


class NoSuchPath(PathError, KeyError):
    """A key does not resolve to any node of the current type."""

    def __init__(self, key: Any, type_: Any = None):
        self.key = key
        self.type = type_
        where = f" on {getattr(type_, '__name__', type_)}" if type_ is not None else ""
        super().__init__(f"no such path {key!r}{where}")

    def __str__(self) -> str:
        # KeyError quotes its message otherwise
        return self.args[0]


class NotReadable(PathError):
    """A traversed node is write-only."""


class NotWritable(PathError):
    """A traversed node is read-only or the target slot cannot be set."""


class InvalidResult(PathError):
    """A read produced a missing or otherwise unusable value."""


class DecodeError(PathError, ValueError):
    """Text does not match the grammar or scalar format of the target type."""

    def __init__(self, message: str, text: str | None = None, target: Any = None):
        super().__init__(message)
        self.text = text
        self.target = target


class UnknownField(DecodeError):
    """A record literal names a field the target record does not have."""

    def __init__(self, message: str, field: str, text: str | None = None, target: Any = None):
        super().__init__(message, text=text, target=target)
        self.field = field
