"""Reflective path access into Python values, plus a compact text codec.

    from valuepath import Reference

    ref = Reference(directory).nexts(["ByName", "John", "Name", "First"])
    ref.set("John")
"""

from .box import Box
from .cache import TypeNodeCache, default_cache, key_strings_for, nodes_for, nodes_for_value, set_type_nodes
from .decoder import Decoder, Multi, convert, decode, decode_type, get_default_decoder, parse
from .encoder import format_value
from .errors import (
    DecodeError,
    InvalidResult,
    NoSuchPath,
    NotReadable,
    NotWritable,
    PathError,
    UnknownField,
)
from .kinds import EMBED, TypeKind, kind_of
from .nodes import Node, NodeKind, Nodes
from .path import Path
from .reference import Reference
from .values import MISSING

__all__ = [
    "Box",
    "DecodeError",
    "Decoder",
    "EMBED",
    "InvalidResult",
    "MISSING",
    "Multi",
    "NoSuchPath",
    "Node",
    "NodeKind",
    "Nodes",
    "NotReadable",
    "NotWritable",
    "Path",
    "PathError",
    "Reference",
    "TypeKind",
    "TypeNodeCache",
    "UnknownField",
    "convert",
    "decode",
    "decode_type",
    "default_cache",
    "format_value",
    "get_default_decoder",
    "key_strings_for",
    "kind_of",
    "nodes_for",
    "nodes_for_value",
    "parse",
    "set_type_nodes",
]
