from typing import Annotated, Any, Callable, Dict, List, Mapping, Optional, Tuple

from valuepath import EMBED, Box, TypeKind, kind_of
from valuepath.kinds import callable_shape, concrete_type, is_embedded, is_getter, is_optional, is_setter, type_args
from tests.helpers import Coord, FullName, NameBox, Registry, Server, Thermostat


def test_kind_of():
    assert kind_of(Dict[str, int]) is TypeKind.MAP
    assert kind_of(Mapping[str, int]) is TypeKind.MAP
    assert kind_of(Registry) is TypeKind.MAP
    assert kind_of(List[int]) is TypeKind.SEQUENCE
    assert kind_of(Tuple[int, ...]) is TypeKind.SEQUENCE
    assert kind_of(Tuple[int, str]) is TypeKind.FIXED_SEQUENCE
    assert kind_of(Callable[[], int]) is TypeKind.FUNCTION
    assert kind_of(FullName) is TypeKind.RECORD
    assert kind_of(Server) is TypeKind.RECORD
    assert kind_of(Coord) is TypeKind.RECORD
    assert kind_of(Optional[Box[FullName]]) is TypeKind.RECORD
    assert kind_of(str) is TypeKind.SCALAR
    assert kind_of(Thermostat) is TypeKind.SCALAR


def test_wrappers():
    assert concrete_type(Optional[Box[int]]) is int
    assert concrete_type(NameBox) is FullName
    assert concrete_type(Annotated[Optional[int], EMBED]) is int
    assert is_optional(int | None)
    assert is_embedded(Annotated[FullName, EMBED])
    assert not is_embedded(FullName)
    assert type_args(Registry) == (str, int)
    assert type_args(List[int]) == (int,)


def test_getter_and_setter_shapes():
    assert is_getter(callable_shape(FullName.Full, skip_self=True))
    assert is_setter(callable_shape(Thermostat.SetLimit, skip_self=True))
    assert is_setter(callable_shape(NameBox.Full, skip_self=True))
    assert not is_getter(callable_shape(NameBox.Full, skip_self=True))
    assert is_getter(callable_shape(Callable[[], int]))
    assert not is_getter(callable_shape(Callable[[int], int]))

    def unannotated(self):
        return 1

    assert not is_getter(callable_shape(unannotated, skip_self=True))
    assert callable_shape(Callable[..., Any]) is None
