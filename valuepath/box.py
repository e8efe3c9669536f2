"""Addressable single-value holder.

A `Box` plays the role a pointer plays in languages with value types: it
is a slot whose content can be replaced, so immutable values (tuples,
frozen records) can still be written through it. Subclasses of a
parameterised box, e.g. ``class PointBox(Box[Point])``, may declare their
own methods; those are exposed as extra path nodes on top of the nodes of
the held type.
"""
from __future__ import annotations
from typing import Any, Generic, Optional, TypeVar, get_args, get_origin

T = TypeVar("T")


class Box(Generic[T]):
    __slots__ = ("value",)

    def __init__(self, value: Optional[T] = None) -> None:
        self.value = value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Box):
            return self.value == other.value
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


def _box_origin(tp: Any) -> Optional[type]:
    origin = get_origin(tp) or tp
    if isinstance(origin, type) and issubclass(origin, Box):
        return origin
    return None


def parameterised_args(cls: type, base: type) -> tuple:
    """Return the type arguments `cls` binds for the generic `base`.

    Walks ``__orig_bases__`` along the MRO, so ``class Scores(dict[str, int])``
    yields ``(str, int)`` for ``base=dict``.
    """
    for klass in cls.__mro__:
        for orig in klass.__dict__.get("__orig_bases__", ()):
            origin = get_origin(orig)
            if isinstance(origin, type) and issubclass(origin, base):
                args = get_args(orig)
                if args and not any(isinstance(a, TypeVar) for a in args):
                    return args
    return ()


def is_box_type(tp: Any) -> bool:
    return _box_origin(tp) is not None


def box_class(tp: Any) -> Optional[type]:
    """The box class of a box type (``Box`` itself for ``Box[int]``)."""
    return _box_origin(tp)


def box_inner_type(tp: Any) -> Any:
    """Type held by a box type, ``Any`` when unparameterised, ``None`` if not a box."""
    origin = _box_origin(tp)
    if origin is None:
        return None
    args = get_args(tp)
    if args:
        return args[0]
    args = parameterised_args(origin, Box)
    return args[0] if args else Any
