"""Text decoding: turn a compact string grammar into typed values.

Grammar accepted by the default `Decoder`:

* sequences ``[a b c]`` (also ``a, b, c``; separators are whitespace,
  ``,`` or ``|``)
* maps ``map[k:v k:v]``
* records ``{Field:value Field:value}`` or the bare ``Field:value, ...``
* booleans from configurable keyword sets, case-insensitive
* bytes straight from the raw text

Splitting only happens outside nested brackets, so composite values can
be nested, e.g. ``{Name:{First:John Last:Doe} Tags:[a b]}``.
"""
from __future__ import annotations
import collections.abc
import dataclasses
import enum
import logging
import re
from typing import TYPE_CHECKING, Any, Callable, Dict, FrozenSet, List, Optional, Tuple, get_args

from .box import Box, box_class, box_inner_type
from .encoder import NIL, format_value
from .errors import DecodeError, UnknownField
from .kinds import (
    TypeKind,
    concrete_type,
    kind_of,
    strip_annotated,
    type_origin,
    unwrap_optional,
)
from .values import MISSING, FieldSpec, build_record, element_types, init_type, record_fields, type_of, zero_value

if TYPE_CHECKING:
    from .config import DecoderSettings

logger = logging.getLogger(__name__)

Parser = Callable[[str], Any]

_OPENERS = "[{("
_CLOSERS = "]})"

DEFAULT_VALUE_SEPARATOR = r"\s*[\s,|]+\s*"
DEFAULT_KEY_SEPARATOR = r":"
DEFAULT_TRUES = frozenset({"true", "t", "yes", "ya", "y", "si", "1", "x"})
DEFAULT_FALSES = frozenset({"false", "f", "no", "n", "0", ""})


def split_top_level(text: str, pattern: re.Pattern, limit: int = -1) -> List[str]:
    """Split `text` on `pattern` matches that sit outside any bracket pair.

    A positive `limit` caps the number of pieces; the last piece keeps
    the remainder unsplit.
    """
    depth = 0
    depths = []
    for ch in text:
        if ch in _OPENERS:
            depth += 1
        depths.append(depth)
        if ch in _CLOSERS and depth > 0:
            depth -= 1

    pieces: List[str] = []
    start = 0
    for match in pattern.finditer(text):
        if limit > 0 and len(pieces) == limit - 1:
            break
        if match.end() == match.start() or depths[match.start()] != 0:
            continue
        pieces.append(text[start:match.start()])
        start = match.end()
    pieces.append(text[start:])
    return pieces


def _balanced(text: str) -> bool:
    depth = 0
    for ch in text:
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


@dataclasses.dataclass
class Multi:
    """How a multi-valued text (sequence, map, record) is delimited."""

    start: str
    value_separator: re.Pattern
    key_separator: Optional[re.Pattern] = None
    end: str = ""
    strict: bool = False

    def inner(self, text: str) -> str:
        text = text.strip()
        if text.startswith(self.start) and text.endswith(self.end) and len(text) >= len(self.start) + len(self.end):
            inner = text[len(self.start):len(text) - len(self.end)]
            # "[1 2] [3 4]" starts and ends with brackets without being enclosed by them
            if _balanced(inner):
                return inner.strip()
        if self.strict:
            raise DecodeError(
                f"error parsing multi-valued value with start '{self.start}', end '{self.end}' and value '{text}'",
                text=text,
            )
        return text

    def values(self, text: str, limit: int = -1) -> List[str]:
        inner = self.inner(text)
        if not inner:
            return []
        return split_top_level(inner, self.value_separator, limit)

    def key_values(self, text: str, limit: int = -1) -> List[Tuple[str, str]]:
        if self.key_separator is None:
            raise DecodeError(f"no key separator configured to parse '{text}'", text=text)
        pairs = []
        for entry in self.values(text, limit):
            parts = self.key_separator.split(entry, maxsplit=1)
            if len(parts) != 2:
                raise DecodeError(f"error parsing key & value from '{entry}'", text=entry)
            pairs.append((parts[0], parts[1]))
        return pairs


def _default_multi(start: str, end: str, keyed: bool = False) -> Multi:
    return Multi(
        start=start,
        value_separator=re.compile(DEFAULT_VALUE_SEPARATOR),
        key_separator=re.compile(DEFAULT_KEY_SEPARATOR) if keyed else None,
        end=end,
    )


def _rebox(tp: Any, value: Any) -> Any:
    """Wrap a decoded value back into the `Box` layers `tp` declares."""
    base = unwrap_optional(strip_annotated(tp))
    inner = box_inner_type(base)
    if inner is None:
        return value
    return box_class(base)(_rebox(inner, value))


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


@dataclasses.dataclass
class Decoder:
    """Converts strings into values of a requested type.

    All parsing policy lives in the attributes, so decoders with different
    separators or boolean keywords can coexist.
    """

    sequence: Multi = dataclasses.field(default_factory=lambda: _default_multi("[", "]"))
    array: Multi = dataclasses.field(default_factory=lambda: _default_multi("[", "]"))
    mapping: Multi = dataclasses.field(default_factory=lambda: _default_multi("map[", "]", keyed=True))
    record: Multi = dataclasses.field(default_factory=lambda: _default_multi("{", "}", keyed=True))
    parsers: Dict[Any, Parser] = dataclasses.field(default_factory=dict)
    int_parser: Callable[[str], int] = int
    float_parser: Callable[[str], float] = float
    complex_parser: Callable[[str], complex] = complex
    trues: FrozenSet[str] = DEFAULT_TRUES
    falses: FrozenSet[str] = DEFAULT_FALSES
    nil: str = NIL

    @classmethod
    def from_settings(cls, settings: "DecoderSettings") -> "Decoder":
        def multi(s) -> Multi:
            return Multi(
                start=s.start,
                value_separator=re.compile(s.value_separator),
                key_separator=re.compile(s.key_separator) if s.key_separator else None,
                end=s.end,
                strict=s.strict,
            )

        return cls(
            sequence=multi(settings.sequence),
            array=multi(settings.array),
            mapping=multi(settings.mapping),
            record=multi(settings.record),
            trues=frozenset(t.lower() for t in settings.trues),
            falses=frozenset(f.lower() for f in settings.falses),
            nil=settings.nil,
        )

    def register(self, tp: Any, parser: Parser) -> None:
        """Use `parser` for every value of type `tp`."""
        self.parsers[tp] = parser

    def decode(self, holder: Box, text: str) -> None:
        """Decode `text` into `holder`, typed by what the holder declares or holds."""
        if not isinstance(holder, Box):
            raise DecodeError("decode target must be a Box", text=text, target=type(holder))
        holder.value = self.parse(text, box_inner_type(type_of(holder)))

    def decode_type(self, tp: Any, text: str) -> Any:
        return self.parse(text, tp)

    def convert(self, value: Any, tp: Any) -> Any:
        """Convert `value` to `tp`, going through its text form when needed."""
        text = value if isinstance(value, str) else format_value(value)
        return self.parse(text, tp)

    def parse(self, text: str, tp: Any) -> Any:
        """Parse `text` as a value of `tp`."""
        tp = strip_annotated(tp)
        if tp is Any or tp is object:
            return text

        base = unwrap_optional(tp)
        if base is not tp and text.strip() == self.nil:
            return None
        inner = box_inner_type(base)
        if inner is not None:
            return box_class(base)(self.parse(text, inner))
        if base is not tp:
            return self.parse(text, base)

        origin = type_origin(base)
        if isinstance(origin, type) and callable(getattr(origin, "unmarshal_text", None)):
            return self._unmarshal(text, origin)
        parser = self.parsers.get(base, self.parsers.get(origin))
        if parser is not None:
            return self._wrapped(parser, text, base, "custom parsing")

        if origin is bool:
            lower = text.lower()
            if lower in self.trues:
                return True
            if lower in self.falses:
                return False
            raise DecodeError(f"error parsing '{text}' as bool", text=text, target=base)
        if isinstance(origin, type) and issubclass(origin, enum.Enum):
            return self._enum(text, origin)
        if isinstance(origin, type) and issubclass(origin, int):
            return self._scalar(self.int_parser, text, origin)
        if isinstance(origin, type) and issubclass(origin, float):
            return self._scalar(self.float_parser, text, origin)
        if isinstance(origin, type) and issubclass(origin, complex):
            return self._scalar(self.complex_parser, text, origin)
        if isinstance(origin, type) and issubclass(origin, str):
            return text if origin is str else origin(text)
        if isinstance(origin, type) and issubclass(origin, (bytes, bytearray)):
            return origin(text.encode())

        kind = kind_of(base)
        if kind is TypeKind.FIXED_SEQUENCE:
            return self._fixed_sequence(text, base)
        if kind is TypeKind.SEQUENCE:
            return self._sequence(text, base)
        if kind is TypeKind.MAP:
            return self._map(text, base)
        if kind is TypeKind.RECORD:
            return self._record(text, base)
        raise DecodeError(f"unsupported kind {_type_name(base)}", text=text, target=base)

    def _wrapped(self, fn: Callable[[str], Any], text: str, tp: Any, what: str) -> Any:
        try:
            return fn(text)
        except (ValueError, TypeError, ArithmeticError) as err:
            raise DecodeError(f"error with {what} '{text}' as {_type_name(tp)}: {err}", text=text, target=tp) from err

    def _scalar(self, fn: Callable[[str], Any], text: str, origin: type) -> Any:
        value = self._wrapped(fn, text.strip(), origin, "parsing")
        return value if type(value) is origin else origin(value)

    def _unmarshal(self, text: str, cls: type) -> Any:
        obj = init_type(cls)
        if obj is MISSING:
            obj = cls.__new__(cls)
        try:
            obj.unmarshal_text(text)
        except (ValueError, TypeError) as err:
            raise DecodeError(f"error unmarshalling text '{text}': {err}", text=text, target=cls) from err
        return obj

    def _enum(self, text: str, cls: type) -> Any:
        members = cls.__members__
        if text in members:
            return members[text]
        for member in cls:
            if str(member.value) == text:
                return member
        raise DecodeError(f"error parsing '{text}' as {cls.__name__}: no such member", text=text, target=cls)

    def _fixed_sequence(self, text: str, tp: Any) -> tuple:
        element_types_ = get_args(tp)
        elements = self.array.values(text, len(element_types_))
        items = [self.parse(e, t) for e, t in zip(elements, element_types_)]
        items.extend(zero_value(t) for t in element_types_[len(items):])
        return tuple(items)

    def _sequence(self, text: str, tp: Any) -> Any:
        element_type = element_types(tp)[0]
        items = [self.parse(e, element_type) for e in self.sequence.values(text)]
        origin = type_origin(tp)
        if origin is tuple:
            return tuple(items)
        if origin is list or origin.__module__ == "collections.abc":
            return items
        return origin(items)

    def _map(self, text: str, tp: Any) -> Any:
        key_type, value_type = element_types(tp)[:2]
        origin = type_origin(tp)
        result = {} if origin.__module__ == "collections.abc" else origin()
        target = result if isinstance(result, collections.abc.MutableMapping) else {}
        for key_text, value_text in self.mapping.key_values(text):
            key = self.parse(key_text, key_type)
            target[key] = self.parse(value_text, value_type)
        return result if target is result else origin(target)

    def _record(self, text: str, tp: Any) -> Any:
        values: Dict[str, Any] = {}
        for name, value_text in self.record.key_values(text):
            chain = _field_chain(tp, name)
            if chain is None:
                raise UnknownField(
                    f"error parsing '{text}', unknown field '{name}'", field=name, text=text, target=tp
                )
            slot = values
            for embedded in chain[:-1]:
                slot = slot.setdefault(embedded.name, _Nested(embedded.type))
            slot[name] = self.parse(value_text, chain[-1].type)
        return _assemble(tp, values)


class _Nested(dict):
    """Field values collected for an embedded record."""

    def __init__(self, tp: Any) -> None:
        super().__init__()
        self.type = tp


def _assemble(tp: Any, values: Dict[str, Any]) -> Any:
    built = {
        name: _rebox(value.type, _assemble(value.type, value)) if isinstance(value, _Nested) else value
        for name, value in values.items()
    }
    return build_record(tp, built)


def _field_chain(tp: Any, name: str) -> Optional[List[FieldSpec]]:
    """Fields leading to `name`: the field itself, or through embedded records."""
    fields = record_fields(tp)
    spec = fields.get(name)
    if spec is not None:
        return [spec]
    for embedded in fields.values():
        if not embedded.embedded or kind_of(embedded.type) is not TypeKind.RECORD:
            continue
        chain = _field_chain(concrete_type(embedded.type), name)
        if chain is not None:
            return [embedded] + chain
    return None


_default_decoder: Optional[Decoder] = None


def get_default_decoder() -> Decoder:
    global _default_decoder
    if _default_decoder is None:
        _default_decoder = Decoder()
        logger.debug("Created default decoder")
    return _default_decoder


def decode(holder: Box, text: str) -> None:
    get_default_decoder().decode(holder, text)


def decode_type(tp: Any, text: str) -> Any:
    return get_default_decoder().decode_type(tp, text)


def parse(text: str, tp: Any) -> Any:
    return get_default_decoder().parse(text, tp)


def convert(value: Any, tp: Any) -> Any:
    return get_default_decoder().convert(value, tp)
