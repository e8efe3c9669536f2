"""Leaf helpers over runtime values: dereferencing, nilness, initialisation
and record construction.

Nothing here caches; the type node cache builds on top of these.
"""
from __future__ import annotations
import copy
import dataclasses
import enum
import logging
from typing import Any, Dict, Mapping, NamedTuple, Optional, get_args

from pydantic import BaseModel

from .box import Box, box_class, box_inner_type
from .kinds import (
    EMBED,
    TypeKind,
    class_annotations,
    concrete_type,
    is_embedded,
    is_frozen_record,
    is_namedtuple,
    is_optional,
    kind_of,
    strip_annotated,
    type_args,
    type_hints,
    type_origin,
    unwrap_optional,
)

logger = logging.getLogger(__name__)


class _Missing:
    """Marker for an absent or unusable value."""

    _instance: Optional["_Missing"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

_IMMUTABLE = (tuple, str, bytes, int, float, complex, bool, frozenset, type(None), enum.Enum)


def concrete(value: Any) -> Any:
    """Dereference through `Box` layers to the held value."""
    while isinstance(value, Box):
        value = value.value
    return value


def holder_of(value: Any) -> Optional[Box]:
    """Innermost `Box` wrapping `value`, or None when it is not boxed."""
    holder = None
    while isinstance(value, Box):
        holder = value
        value = value.value
    return holder


def is_nil(value: Any) -> bool:
    return value is None or value is MISSING or (isinstance(value, Box) and is_nil(value.value))


def is_addressable(value: Any) -> bool:
    """Whether writes into `value` can happen in place."""
    if isinstance(value, Box):
        return True
    if isinstance(value, _IMMUTABLE) or isinstance(value, Mapping) and not hasattr(value, "__setitem__"):
        return False
    return not is_frozen_record(value)


def pointer_to(value: Any) -> Box:
    return Box(value)


def pointer_maybe(value: Any) -> Any:
    """Return `value` itself when addressable, otherwise a `Box` holding it."""
    return value if is_addressable(value) else pointer_to(value)


def type_of(value: Any) -> Any:
    """Best static type for a runtime value (``Box[T]`` for plain boxes)."""
    if type(value) is Box:
        inner = concrete(value)
        return Box[Any] if inner is None else Box[type_of(inner)]
    return type(value)


def to_string(value: Any) -> str:
    """Canonical string form of a key, used for by-key-string lookups."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return value.name
    return str(value)


def string_equal(a: Any, b: Any) -> bool:
    return to_string(a) == to_string(b)


class FieldSpec(NamedTuple):
    name: str
    type: Any
    has_default: bool
    embedded: bool
    init: bool = True


def record_fields(tp: Any) -> Dict[str, FieldSpec]:
    """Declared fields of a record type in declaration order."""
    cls = type_origin(concrete_type(tp))
    hints = type_hints(cls)
    fields: Dict[str, FieldSpec] = {}
    if dataclasses.is_dataclass(cls):
        for f in dataclasses.fields(cls):
            hint = hints.get(f.name, f.type)
            has_default = f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING
            embedded = bool(f.metadata.get("embed")) or is_embedded(hint)
            fields[f.name] = FieldSpec(f.name, hint, has_default, embedded, f.init)
    elif isinstance(cls, type) and issubclass(cls, BaseModel):
        for name, info in cls.model_fields.items():
            hint = hints.get(name, info.annotation)
            embedded = is_embedded(hint) or any(meta is EMBED for meta in info.metadata)
            fields[name] = FieldSpec(name, hint, not info.is_required(), embedded)
    elif is_namedtuple(cls):
        defaults = getattr(cls, "_field_defaults", {})
        for name in cls._fields:
            hint = hints.get(name, Any)
            fields[name] = FieldSpec(name, hint, name in defaults, is_embedded(hint))
    elif isinstance(cls, type):
        for name, hint in class_annotations(cls).items():
            has_default = any(name in klass.__dict__ for klass in cls.__mro__)
            fields[name] = FieldSpec(name, hint, has_default, is_embedded(hint))
    return fields


def build_record(tp: Any, values: Mapping[str, Any]) -> Any:
    """Construct a record from field values; unspecified fields keep their
    declared default or get the zero value of their type."""
    cls = type_origin(concrete_type(tp))
    fields = record_fields(cls)
    kwargs: Dict[str, Any] = {}
    late: Dict[str, Any] = {}
    for name, spec in fields.items():
        if name in values:
            value = values[name]
        elif spec.has_default:
            continue
        else:
            value = zero_value(spec.type)
        if spec.init:
            kwargs[name] = value
        else:
            late[name] = value

    if dataclasses.is_dataclass(cls) or is_namedtuple(cls):
        obj = cls(**kwargs)
    elif issubclass(cls, BaseModel):
        obj = cls.model_construct(**kwargs)
    else:
        obj = cls() if cls.__init__ is object.__init__ else cls.__new__(cls)
        late.update(kwargs)
    for name, value in late.items():
        object.__setattr__(obj, name, value)
    return obj


def set_field(obj: Any, name: str, value: Any) -> Any:
    """Set a record field and return the record to keep.

    Mutable records are changed in place and returned as-is; immutable
    ones (frozen dataclasses, NamedTuples, frozen models) yield a new copy.
    """
    if is_namedtuple(type(obj)):
        return obj._replace(**{name: value})
    if isinstance(obj, BaseModel) and obj.model_config.get("frozen"):
        return obj.model_copy(update={name: value})
    if dataclasses.is_dataclass(obj) and is_frozen_record(obj):
        new = copy.copy(obj)
        object.__setattr__(new, name, value)
        return new
    setattr(obj, name, value)
    return obj


def init_type(tp: Any) -> Any:
    """A fresh, initialised value of `tp`; `MISSING` if none can be made.

    Pointer-like layers are initialised too: ``Optional[T]`` yields an
    initialised ``T`` and ``Box[T]`` a box holding one.
    """
    base = strip_annotated(tp)
    if is_optional(base):
        return init_type(unwrap_optional(base))
    inner = box_inner_type(base)
    if inner is not None:
        held = init_type(inner)
        if held is MISSING:
            return MISSING
        return box_class(base)(held)

    kind = kind_of(base)
    origin = type_origin(base)
    if kind is TypeKind.MAP:
        return {} if origin.__module__ == "collections.abc" else origin()
    if kind is TypeKind.SEQUENCE:
        if origin is tuple:
            return ()
        return [] if origin.__module__ == "collections.abc" else origin()
    if kind is TypeKind.FIXED_SEQUENCE:
        return tuple(zero_value(arg) for arg in get_args(base))
    if kind is TypeKind.RECORD:
        return build_record(base, {})
    if kind is TypeKind.FUNCTION or not isinstance(origin, type) or origin is object:
        return MISSING
    if issubclass(origin, enum.Enum):
        members = list(origin)
        return members[0] if members else MISSING
    try:
        return origin()
    except TypeError:
        logger.debug("Type %r cannot be created without arguments", origin)
        return MISSING


def zero_value(tp: Any) -> Any:
    """The zero value of a type: None for optional types, otherwise `init_type`."""
    if is_optional(tp):
        return None
    value = init_type(tp)
    return None if value is MISSING else value


def init_value(value: Any, tp: Any) -> Any:
    """Ensure `value` has initialised internal storage.

    A nil value is replaced by `init_type(tp)`; a box holding nil gets an
    initialised content. Returns `MISSING` when initialisation fails.
    """
    if value is MISSING:
        return MISSING
    if value is None:
        return init_type(tp)
    holder = holder_of(value)
    if holder is not None and holder.value is None:
        held_type = box_inner_type(type(holder))
        if held_type is Any:
            held_type = concrete_type(tp)
        held = init_type(held_type)
        if held is MISSING:
            return MISSING
        holder.value = held
    return value


def element_types(tp: Any) -> tuple:
    """Type arguments of a container type, padded with ``Any``."""
    args = type_args(concrete_type(tp))
    return args if args else (Any, Any)
