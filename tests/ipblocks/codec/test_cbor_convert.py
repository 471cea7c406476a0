import pytest
from pydantic import BaseModel
from ipblocks.errors import EncodingError
from ipblocks.codec import *
from ipblocks.cid import cid_for_bytes

class Sample(BaseModel):
    name:str
    reads:int
    tags:list[str]

def test_native_types():
    assert to_value((1, 2, 3)) == [1, 2, 3]
    assert to_value(bytearray(b"ab")) == b"ab"
    assert to_value({1: "one"}) == {"1": "one"}

def test_cid_becomes_link():
    cid = cid_for_bytes(b"hello")
    value = to_value({"file": cid})
    assert value["file"] == Link(cid.to_bytes())
    assert decode(encode_native({"file": cid})) == value

def test_pydantic_model():
    sample = Sample(name="s1", reads=10, tags=["a", "b"])
    assert decode(encode_native(sample)) == {"name": "s1", "reads": 10, "tags": ["a", "b"]}

def test_sets_are_ordered():
    assert encode_native({3, 1, 2}) == encode_native([1, 2, 3])

def test_key_collision():
    with pytest.raises(EncodingError):
        to_value({1: "int", "1": "str"})

def test_unsupported_type():
    with pytest.raises(EncodingError):
        to_value(object())
