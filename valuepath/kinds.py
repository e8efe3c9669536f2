"""Structural classification of Python types.

Every type the path engine and the decoder meet is reduced to one of the
`TypeKind` variants; node construction and decoding dispatch on the kind
instead of re-inspecting the type at every step.
"""
from __future__ import annotations
import collections.abc
import dataclasses
import enum
import inspect
import logging
import types
import typing
from typing import Any, Annotated, ClassVar, NamedTuple, Optional, Union, get_args, get_origin

from pydantic import BaseModel

from .box import Box, box_inner_type, parameterised_args

logger = logging.getLogger(__name__)

NoneType = type(None)


class TypeKind(enum.Enum):
    RECORD = "record"
    SEQUENCE = "sequence"
    FIXED_SEQUENCE = "fixed_sequence"
    MAP = "map"
    FUNCTION = "function"
    SCALAR = "scalar"


class _Embed:
    """Marks a record field whose nodes are promoted into the parent."""

    def __repr__(self) -> str:
        return "EMBED"


EMBED = _Embed()


def strip_annotated(tp: Any) -> Any:
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def is_embedded(tp: Any) -> bool:
    """True for ``Annotated[T, EMBED]``, also when wrapped in ``Optional``."""
    if get_origin(tp) in (Union, types.UnionType):
        return any(is_embedded(arg) for arg in get_args(tp))
    if get_origin(tp) is Annotated:
        return any(meta is EMBED for meta in tp.__metadata__)
    return False


def is_optional(tp: Any) -> bool:
    tp = strip_annotated(tp)
    if get_origin(tp) in (Union, types.UnionType):
        return NoneType in get_args(tp)
    return False


def unwrap_optional(tp: Any) -> Any:
    """``Optional[T]`` -> ``T``; a wider union keeps its other members."""
    tp = strip_annotated(tp)
    if not is_optional(tp):
        return tp
    rest = tuple(a for a in get_args(tp) if a is not NoneType)
    if len(rest) == 1:
        return rest[0]
    return Union[rest]


def concrete_type(tp: Any) -> Any:
    """Strip ``Annotated``, ``Optional`` and ``Box`` layers."""
    while True:
        base = unwrap_optional(strip_annotated(tp))
        inner = box_inner_type(base)
        if inner is None:
            return base
        tp = inner


def type_origin(tp: Any) -> Any:
    return get_origin(tp) or tp


def type_args(tp: Any) -> tuple:
    """Type arguments of a generic alias or of a class subclassing one."""
    args = get_args(tp)
    if args:
        return args
    origin = type_origin(tp)
    if isinstance(origin, type):
        for base in (collections.abc.Mapping, collections.abc.Sequence):
            if issubclass(origin, base):
                return parameterised_args(origin, base)
    return ()


def is_namedtuple(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, tuple) and hasattr(tp, "_fields")


def is_frozen_record(value: Any) -> bool:
    cls = type(value)
    if dataclasses.is_dataclass(cls):
        return cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
    if isinstance(value, BaseModel):
        return bool(cls.model_config.get("frozen"))
    return is_namedtuple(cls)


def _user_class(tp: Any) -> bool:
    return isinstance(tp, type) and tp.__module__ not in ("builtins", "typing", "collections", "enum")


def is_record_type(tp: Any) -> bool:
    if not isinstance(tp, type):
        return False
    if dataclasses.is_dataclass(tp) or is_namedtuple(tp):
        return True
    if issubclass(tp, BaseModel):
        return tp is not BaseModel
    if issubclass(tp, (collections.abc.Mapping, collections.abc.Sequence, Box, enum.Enum)):
        return False
    return _user_class(tp) and bool(class_annotations(tp))


def class_annotations(cls: type) -> dict[str, Any]:
    """Resolved class-level annotations, ClassVars excluded."""
    hints = type_hints(cls)
    return {name: hint for name, hint in hints.items() if get_origin(strip_annotated(hint)) is not ClassVar}


def type_hints(obj: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except (NameError, TypeError) as err:
        # unresolvable forward references: fall back to the raw annotations
        logger.debug("Could not resolve type hints of %r: %s", obj, err)
        annotations: dict[str, Any] = {}
        for klass in reversed(getattr(obj, "__mro__", (obj,))):
            annotations.update(getattr(klass, "__annotations__", {}) or {})
        return annotations


def kind_of(tp: Any) -> TypeKind:
    """Classify a type. Pointer-like layers are stripped first."""
    tp = concrete_type(tp)
    origin = type_origin(tp)

    if origin is collections.abc.Callable:
        return TypeKind.FUNCTION
    if is_record_type(origin):
        return TypeKind.RECORD
    if origin is tuple:
        args = get_args(tp)
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            return TypeKind.SEQUENCE
        return TypeKind.FIXED_SEQUENCE
    if not isinstance(origin, type):
        return TypeKind.SCALAR
    if issubclass(origin, (str, bytes, bytearray)):
        return TypeKind.SCALAR
    if issubclass(origin, collections.abc.Mapping):
        return TypeKind.MAP
    if issubclass(origin, (list, collections.abc.MutableSequence)):
        return TypeKind.SEQUENCE
    return TypeKind.SCALAR


class CallableShape(NamedTuple):
    params: tuple
    returns: Any


_NO_RETURN = inspect.Signature.empty


def callable_shape(obj: Any, skip_self: bool = False) -> Optional[CallableShape]:
    """Parameter and return types of a ``Callable[...]`` annotation or a function.

    Only required positional-or-keyword parameters count. ``returns`` is
    ``inspect.Signature.empty`` when a function has no return annotation.
    """
    if get_origin(obj) is collections.abc.Callable:
        args = get_args(obj)
        if not args or args[0] is Ellipsis:
            return None
        return CallableShape(tuple(args[0]), args[1])
    if not callable(obj):
        return None
    try:
        sig = inspect.signature(obj)
    except (TypeError, ValueError):
        return None
    hints = type_hints(obj)
    params = []
    for i, param in enumerate(sig.parameters.values()):
        if skip_self and i == 0:
            continue
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD, param.KEYWORD_ONLY):
            continue
        if param.default is not param.empty:
            continue
        params.append(hints.get(param.name, Any))
    returns = hints.get("return", _NO_RETURN) if sig.return_annotation is not _NO_RETURN else _NO_RETURN
    return CallableShape(tuple(params), returns)


def _returns_nothing(returns: Any) -> bool:
    return returns is _NO_RETURN or returns is None or returns is NoneType


def _returns_error(returns: Any) -> bool:
    base = unwrap_optional(returns)
    return isinstance(base, type) and issubclass(base, BaseException)


def is_getter(shape: Optional[CallableShape]) -> bool:
    """Zero arguments and exactly one (annotated, non-None) return value."""
    return shape is not None and not shape.params and not _returns_nothing(shape.returns)


def is_setter(shape: Optional[CallableShape]) -> bool:
    """One argument and either no return value or an exception-shaped one."""
    if shape is None or len(shape.params) != 1:
        return False
    return _returns_nothing(shape.returns) or _returns_error(shape.returns)
