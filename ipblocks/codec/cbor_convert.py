from collections.abc import Mapping
from pydantic import BaseModel
from ipblocks.errors import EncodingError
from ipblocks.codec.cbor_model import *
from ipblocks.codec.cbor_serialization import encode

def to_value(obj) -> Value:
    """Converts native Python objects into the codec's value model.

    Map keys that are not strings are stringified with str(), which is lossy:
    {1: 'a'} and {'1': 'a'} convert to the same map. If two keys collide after
    stringification, an EncodingError is raised.
    """
    # imported here because the cid package depends on the codec package
    from ipblocks.cid.cid import CID

    if obj is None or isinstance(obj, (bool, int, float, str, Link)):
        return obj
    if isinstance(obj, CID):
        return obj.to_link()
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return bytes(obj)
    if isinstance(obj, BaseModel):
        return to_value(obj.model_dump())
    if isinstance(obj, Mapping):
        result = {}
        for key, value in obj.items():
            str_key = key if isinstance(key, str) else str(key)
            if str_key in result:
                raise EncodingError(f"Map key '{key!r}' collides with another key after converting it to the string '{str_key}'.")
            result[str_key] = to_value(value)
        return result
    if isinstance(obj, (list, tuple)):
        return [to_value(item) for item in obj]
    if isinstance(obj, (set, frozenset)):
        # sets have no order, so order the items by their canonical encoding
        items = [to_value(item) for item in obj]
        return sorted(items, key=encode)
    raise EncodingError(f"Unsupported type for conversion: '{type(obj)}'.")

def encode_native(obj) -> bytes:
    """Converts and encodes a native Python object in one step."""
    return encode(to_value(obj))
