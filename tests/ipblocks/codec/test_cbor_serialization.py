import base64
import math
import pytest
from ipblocks.errors import EncodingError, ParseError
from ipblocks.codec import *
from ipblocks.cid import parse_cid

def test_small_ints():
    assert encode(0) == bytes.fromhex("00")
    assert encode(23) == bytes.fromhex("17")
    assert encode(24) == bytes.fromhex("1818")
    assert encode(-25) == bytes.fromhex("3818")
    assert encode(-1) == bytes.fromhex("20")

def test_int_widths():
    assert encode(255) == bytes.fromhex("18ff")
    assert encode(256) == bytes.fromhex("190100")
    assert encode(65536) == bytes.fromhex("1a00010000")
    assert encode(2**32) == bytes.fromhex("1b0000000100000000")
    assert encode(2**63 - 1) == bytes.fromhex("1b7fffffffffffffff")
    assert encode(-2**63) == bytes.fromhex("3b7fffffffffffffff")

def test_int_out_of_range():
    with pytest.raises(EncodingError):
        encode(2**63)
    with pytest.raises(EncodingError):
        encode(-2**63 - 1)
    with pytest.raises(EncodingError):
        encode(2**64)

def test_decode_int_out_of_range():
    assert decode(bytes.fromhex("1b7fffffffffffffff")) == 2**63 - 1
    assert decode(bytes.fromhex("3b7fffffffffffffff")) == -2**63
    with pytest.raises(ParseError):
        decode(bytes.fromhex("1b8000000000000000"))
    with pytest.raises(ParseError):
        decode(bytes.fromhex("3bffffffffffffffff"))

def test_simple_values():
    assert encode(False) == bytes.fromhex("f4")
    assert encode(True) == bytes.fromhex("f5")
    assert encode(None) == bytes.fromhex("f6")
    assert decode(bytes.fromhex("f5")) is True

def test_floats_are_always_64_bit():
    for value in [0.0, 1.5, -2.25, 1e300, 3.141592653589793]:
        data = encode(value)
        assert len(data) == 9
        assert data[0] == 0xfb
        assert decode(data) == value

def test_non_finite_floats_fail():
    for value in [math.nan, math.inf, -math.inf]:
        with pytest.raises(EncodingError):
            encode(value)

def test_map_key_order():
    data = encode({"bbb": 1, "a": 2, "aa": 3, "aaa": 4})
    keys = list(decode(data).keys())
    assert keys == ["a", "aa", "aaa", "bbb"]
    #same content, different insertion order, same bytes
    assert data == encode({"aaa": 4, "aa": 3, "a": 2, "bbb": 1})

def test_map_keys_must_be_strings():
    with pytest.raises(EncodingError):
        encode({1: "one"})

def test_nested_array_vector():
    value = ["array", ["of", [5, ["nested", ["arrays", "!"]]]]]
    expected = bytes.fromhex(
        "82 65 61 72 72 61 79 82 62 6f 66 82 05 82 66 6e 65 73 74 65 64 82 66 61 72 72 61 79 73 61 21")
    assert encode(value) == expected
    assert decode(expected) == value

def test_link_vector():
    cid = parse_cid("QmQg1v4o9xdT3Q14wh4S7dxZkDjyZ9ssFzFzyep1YrVJBY")
    data = encode(cid.to_link())
    assert base64.b64encode(data).decode('ascii') == "2CpYIwASICKtYxxp7pgwlbW4rNAp/5Sv8dxsSIN4eFiakrkN/qMX"
    link = decode(data)
    assert isinstance(link, Link)
    assert link.cid == cid.to_bytes()

def test_round_trip():
    value = {
        "name": "sample",
        "size": 1024,
        "offset": -7,
        "ratio": 0.5,
        "flags": [True, False, None],
        "payload": b"\x00\x01\x02",
        "nested": {"list": [1, [2, [3]]], "empty": {}},
        "unicode": "grüße",
    }
    assert decode(encode(value)) == value

def test_decode_rejects_non_minimal_ints():
    with pytest.raises(ParseError):
        decode(bytes.fromhex("1805"))
    with pytest.raises(ParseError):
        decode(bytes.fromhex("190005"))

def test_decode_rejects_indefinite_length():
    with pytest.raises(ParseError):
        decode(bytes.fromhex("9f01ff"))

def test_decode_rejects_other_tags():
    #tag 1 (epoch time)
    with pytest.raises(ParseError):
        decode(bytes.fromhex("c11a514b67b0"))

def test_decode_rejects_truncated_and_trailing_bytes():
    with pytest.raises(ParseError):
        decode(bytes.fromhex("6461"))
    with pytest.raises(ParseError):
        decode(bytes.fromhex("0000"))

def test_decode_rejects_non_finite_floats():
    with pytest.raises(ParseError):
        decode(bytes.fromhex("fb7ff8000000000000"))

def test_decode_accepts_short_floats():
    assert decode(bytes.fromhex("f93e00")) == 1.5
    assert decode(bytes.fromhex("fa3fc00000")) == 1.5

def test_decode_rejects_duplicate_keys():
    with pytest.raises(ParseError):
        decode(bytes.fromhex("a2616101616102"))

def test_decode_rejects_deep_nesting():
    with pytest.raises(ParseError):
        decode(b'\x81' * 100000 + b'\x00')
    #tags count towards the depth too
    with pytest.raises(ParseError):
        decode(b'\xd8\x2a' * 1000 + b'\x00')
    #nesting within the limit still decodes
    value = decode(b'\x81' * 100 + b'\x00')
    for _ in range(100):
        value = value[0]
    assert value == 0

def test_encode_rejects_deep_nesting():
    value = 0
    for _ in range(1000):
        value = [value]
    with pytest.raises(EncodingError):
        encode(value)
