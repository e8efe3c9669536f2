"""Formatting values into the grammar the default decoder reads."""
from __future__ import annotations
import collections.abc
import enum
from typing import Any

from .box import Box
from .kinds import is_namedtuple, is_record_type
from .values import record_fields

NIL = "<nil>"


def format_value(value: Any) -> str:
    """Render `value` as text that `decode_type(type(value), ...)` reads back.

    >>> format_value({"a": [1, 2]})
    'map[a:[1 2]]'
    """
    while isinstance(value, Box):
        value = value.value
    if value is None:
        return NIL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode()
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        return repr(value)
    if is_record_type(type(value)) and not isinstance(value, collections.abc.Mapping):
        fields = " ".join(f"{name}:{format_value(getattr(value, name))}" for name in _field_names(value))
        return "{" + fields + "}"
    if isinstance(value, collections.abc.Mapping):
        return "map[" + " ".join(f"{format_value(k)}:{format_value(v)}" for k, v in value.items()) + "]"
    if isinstance(value, (list, tuple)) and not is_namedtuple(type(value)):
        return "[" + " ".join(format_value(v) for v in value) + "]"
    return str(value)


def _field_names(value: Any) -> list:
    return [name for name in record_fields(type(value)) if hasattr(value, name)]
