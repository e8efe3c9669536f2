from valuepath import Decoder, TypeNodeCache
from valuepath.interfaces import NodeSource, TextDecoder, TextUnmarshaler
from tests.helpers import FullName, Version


def test_protocols_are_runtime_checkable():
    assert isinstance(Decoder(), TextDecoder)
    assert isinstance(TypeNodeCache(), NodeSource)
    assert isinstance(Version(), TextUnmarshaler)
    assert not isinstance(FullName(), TextUnmarshaler)
