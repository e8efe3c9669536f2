"""Sample types shared by the unit tests.

Usage in tests:
    from tests.helpers import Directory, FullName
"""
import enum
from dataclasses import dataclass, field
from typing import Annotated, Callable, Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel

from valuepath import EMBED, Box


@dataclass
class FullName:
    First: str = ""
    Last: str = ""

    def Full(self) -> str:
        return self.Last + ", " + self.First


@dataclass
class Person:
    Name: Optional[FullName] = None
    Age: int = 0


@dataclass
class Directory:
    ByName: Dict[str, Person] = field(default_factory=dict)


@dataclass(frozen=True)
class Point:
    X: int
    Y: int


@dataclass
class Plot:
    Points: Dict[str, Point] = field(default_factory=dict)


@dataclass
class XY:
    X: float = 0.0
    Y: float = 0.0


@dataclass
class Shapes:
    Pair: Tuple[int, int] = (0, 0)
    Items: List[int] = field(default_factory=list)
    People: List[Person] = field(default_factory=list)


@dataclass
class Base:
    ID: int = 0
    Label: str = ""


@dataclass
class Item:
    Meta: Annotated[Base, EMBED] = field(default_factory=Base)
    Count: int = 0


@dataclass
class LazyItem:
    Meta: Annotated[Optional[Base], EMBED] = None
    Count: int = 0


@dataclass
class Tree:
    Value: int = 0
    Children: List["Tree"] = field(default_factory=list)


class Coord(NamedTuple):
    x: int
    y: int


@dataclass
class Pin:
    At: Coord = Coord(0, 0)


@dataclass
class Source:
    Get: Callable[[], FullName]


class NameBox(Box[FullName]):
    def Full(self, full: str) -> None:
        last, first = full.split(", ")
        self.value.Last = last
        self.value.First = first


class Registry(Dict[str, int]):
    def Total(self) -> int:
        return sum(self.values())


class Thermostat:
    def __init__(self) -> None:
        self._celsius = 0.0
        self.limit = 100

    @property
    def celsius(self) -> float:
        return self._celsius

    @celsius.setter
    def celsius(self, value: float) -> None:
        self._celsius = value

    @property
    def fahrenheit(self) -> float:
        return self._celsius * 9 / 5 + 32

    def SetLimit(self, limit: int) -> Optional[ValueError]:
        if limit < 0:
            return ValueError("limit must not be negative")
        self.limit = limit
        return None

    def Configure(self, name: FullName) -> None:
        self.name = name


class Server(BaseModel):
    host: str = ""
    port: int = 0


class Color(enum.Enum):
    RED = 1
    GREEN = 2


class Version:
    def __init__(self, major: int = 0, minor: int = 0) -> None:
        self.major = major
        self.minor = minor

    def unmarshal_text(self, text: str) -> None:
        major, minor = text.split(".")
        self.major = int(major)
        self.minor = int(minor)


class Holder:
    def __init__(self) -> None:
        self._d: Dict[str, int] = {}

    @property
    def data(self) -> Dict[str, int]:
        return dict(self._d)

    @data.setter
    def data(self, value: Dict[str, int]) -> None:
        self._d = value


@dataclass
class Counter:
    n: Optional[int] = None
    m: int = 0
