import re
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import pytest

from valuepath import Box, DecodeError, Decoder, Multi, UnknownField, decode, decode_type
from valuepath.decoder import split_top_level
from valuepath.interfaces import TextUnmarshaler
from tests.helpers import Base, Color, FullName, Item, Version, XY


def test_map_from_bare_key_values():
    assert decode_type(Dict[str, int], "a:2, b:5, c:6") == {"a": 2, "b": 5, "c": 6}
    assert decode_type(Dict[str, int], "map[a:2 b:5]") == {"a": 2, "b": 5}


def test_record_braced_and_bare_forms_match():
    braced = decode_type(XY, "{X:2 Y:5.4}")
    bare = decode_type(XY, "X:2, Y:5.4")
    assert braced == bare == XY(2.0, 5.4)


def test_bool_keywords_case_insensitive():
    assert decode_type(bool, "Y") is True
    assert decode_type(bool, "No") is False
    assert decode_type(bool, "") is False
    with pytest.raises(DecodeError):
        decode_type(bool, "maybe")


def test_sequence_separators():
    assert decode_type(List[bool], "1 true, false,0") == [True, True, False, False]
    assert decode_type(List[int], "[1|2 , 3]") == [1, 2, 3]
    assert decode_type(List[int], "[]") == []
    assert decode_type(Tuple[int, ...], "[4 5]") == (4, 5)


def test_fixed_tuple_pads_missing_elements():
    assert decode_type(Tuple[int, str], "[1 x]") == (1, "x")
    assert decode_type(Tuple[int, str], "[1]") == (1, "")


def test_nested_values():
    assert decode_type(Dict[str, List[int]], "map[a:[1 2] b:[3]]") == {"a": [1, 2], "b": [3]}
    assert decode_type(List[List[int]], "[[1 2] [3 4]]") == [[1, 2], [3, 4]]
    assert decode_type(List[List[int]], "[1 2] [3 4]") == [[1, 2], [3, 4]]


def test_scalars_and_wrappers():
    assert decode_type(Optional[int], "5") == 5
    assert decode_type(float, "2.5") == 2.5
    assert decode_type(complex, "1+2j") == 1 + 2j
    assert decode_type(bytes, "abc") == b"abc"
    assert decode_type(str, " keep spaces ") == " keep spaces "
    assert decode_type(Box[int], "3") == Box(3)


def test_enum_by_name_or_value():
    assert decode_type(Color, "RED") is Color.RED
    assert decode_type(Color, "2") is Color.GREEN
    with pytest.raises(DecodeError):
        decode_type(Color, "BLUE")


def test_unknown_field():
    with pytest.raises(UnknownField) as info:
        decode_type(FullName, "{First:a Middle:b}")
    assert info.value.field == "Middle"


def test_embedded_fields_by_promoted_name():
    assert decode_type(Item, "{ID:1 Count:2}") == Item(Base(1, ""), 2)
    assert decode_type(Item, "{Meta:{ID:1 Label:x} Count:2}") == Item(Base(1, "x"), 2)


def test_parse_error_chains_cause():
    with pytest.raises(DecodeError) as info:
        decode_type(int, "abc")
    assert isinstance(info.value.__cause__, ValueError)
    assert info.value.text == "abc"
    assert info.value.target is int


def test_unsupported_kind():
    with pytest.raises(DecodeError, match="unsupported"):
        decode_type(set, "x")


def test_text_unmarshaler_used_first():
    v = decode_type(Version, "1.2")
    assert isinstance(v, TextUnmarshaler)
    assert (v.major, v.minor) == (1, 2)
    with pytest.raises(DecodeError):
        decode_type(Version, "1")


def test_custom_parser():
    d = Decoder()
    d.register(Decimal, Decimal)
    assert d.decode_type(Decimal, "1.50") == Decimal("1.50")
    assert d.decode_type(List[Decimal], "[1 2.5]") == [Decimal("1"), Decimal("2.5")]


def test_decode_into_box():
    holder = Box(0)
    decode(holder, "7")
    assert holder.value == 7
    with pytest.raises(DecodeError):
        decode([], "7")


def test_convert_non_text_values():
    d = Decoder()
    assert d.convert("4", int) == 4
    assert d.convert(4, str) == "4"


def test_custom_separators():
    d = Decoder(sequence=Multi("<", re.compile(r"\s*;\s*"), end=">"))
    assert d.decode_type(List[int], "<1; 2;3>") == [1, 2, 3]


def test_multi_strict_requires_delimiters():
    m = Multi("[", re.compile(r"\s+"), end="]", strict=True)
    assert m.values("[a b]") == ["a", "b"]
    with pytest.raises(DecodeError):
        m.values("a b")


def test_key_values_need_separator():
    m = Multi("{", re.compile(r"\s+"), re.compile(":"), "}")
    assert m.key_values("{a:1 b:x:y}") == [("a", "1"), ("b", "x:y")]
    with pytest.raises(DecodeError):
        m.key_values("{a}")


def test_split_top_level_limit_and_depth():
    sep = re.compile(r"\s+")
    assert split_top_level("a b c", sep, 2) == ["a", "b c"]
    assert split_top_level("{a b} [c d] e", sep) == ["{a b}", "[c d]", "e"]
