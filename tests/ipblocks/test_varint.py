import pytest
from ipblocks.errors import ParseError
from ipblocks.varint import encode_varint, decode_varint

def test_encode():
    assert encode_varint(0) == b"\x00"
    assert encode_varint(127) == b"\x7f"
    assert encode_varint(128) == b"\x80\x01"
    assert encode_varint(300) == b"\xac\x02"
    with pytest.raises(ValueError):
        encode_varint(-1)

def test_decode_with_offset():
    data = b"\xff" + encode_varint(300) + b"\x01"
    assert decode_varint(data, 1) == (300, 3)
    assert decode_varint(data, 3) == (1, 4)

def test_decode_errors():
    with pytest.raises(ParseError):
        decode_varint(b"")
    with pytest.raises(ParseError):
        decode_varint(b"\x80")
    with pytest.raises(ParseError):
        decode_varint(b"\x81\x00")
    with pytest.raises(ParseError):
        decode_varint(b"\xff" * 11)
    with pytest.raises(ParseError):
        decode_varint(b"\x01", 1)
