import math
import struct
from ipblocks.errors import EncodingError, ParseError
from ipblocks.codec.cbor_model import *

# Canonical DAG-CBOR encoding and strict decoding.
# Every value has exactly one valid encoding: minimal integer and length arguments,
# 64-bit floats only, map keys sorted by byte length and then bytewise, and no tags
# other than 42 (CID links).

def encode(value:Value) -> bytes:
    result = bytearray()
    _encode_into(value, result)
    return bytes(result)

def decode(data:bytes) -> Value:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ParseError(f"Expected bytes to decode, but got '{type(data)}'.")
    data = bytes(data)
    value, offset = _decode_from(data, 0, 0)
    if offset != len(data):
        raise ParseError(f"Unexpected {len(data) - offset} trailing bytes after offset {offset}.")
    return value

def map_key_sort_key(key:str) -> tuple[int, bytes]:
    key_bytes = key.encode('utf-8')
    return len(key_bytes), key_bytes

#============================================================
# Encoding
#============================================================
def _encode_head(major_type:int, argument:int, result:bytearray) -> None:
    if argument < 0 or argument > MAX_UINT64:
        raise EncodingError(f"Argument {argument} does not fit into 64 bits.")
    if argument <= 23:
        result.append((major_type << 5) | argument)
    elif argument <= 0xFF:
        result.append((major_type << 5) | AI_1_BYTE)
        result.append(argument)
    elif argument <= 0xFFFF:
        result.append((major_type << 5) | AI_2_BYTES)
        result += struct.pack('>H', argument)
    elif argument <= 0xFFFFFFFF:
        result.append((major_type << 5) | AI_4_BYTES)
        result += struct.pack('>I', argument)
    else:
        result.append((major_type << 5) | AI_8_BYTES)
        result += struct.pack('>Q', argument)

def _encode_into(value:Value, result:bytearray, depth:int=0) -> None:
    if depth > MAX_NESTING_DEPTH:
        raise EncodingError(f"Value is nested deeper than {MAX_NESTING_DEPTH} levels.")
    # bool is matched before int, since bool is a subclass of int
    match value:
        case None:
            result.append((MT_SIMPLE_OR_FLOAT << 5) | SIMPLE_NULL)
        case bool():
            result.append((MT_SIMPLE_OR_FLOAT << 5) | (SIMPLE_TRUE if value else SIMPLE_FALSE))
        case int():
            if value < MIN_INT64 or value > MAX_INT64:
                raise EncodingError(f"Integer {value} does not fit into a 64-bit signed integer.")
            if value >= 0:
                _encode_head(MT_UNSIGNED_INT, value, result)
            else:
                _encode_head(MT_NEGATIVE_INT, -1 - value, result)
        case float():
            if not math.isfinite(value):
                raise EncodingError(f"Float {value} is not supported, only finite floats can be encoded.")
            result.append((MT_SIMPLE_OR_FLOAT << 5) | AI_8_BYTES)
            result += struct.pack('>d', value)
        case str():
            data = value.encode('utf-8')
            _encode_head(MT_TEXT_STRING, len(data), result)
            result += data
        case Link(cid=bytes() | bytearray() as cid) if len(cid) > 0:
            _encode_head(MT_TAG, CID_TAG, result)
            data = CID_MULTIBASE_PREFIX + bytes(cid)
            _encode_head(MT_BYTE_STRING, len(data), result)
            result += data
        case Link():
            raise EncodingError("Link must wrap a non-empty binary CID.")
        case bytes() | bytearray():
            _encode_head(MT_BYTE_STRING, len(value), result)
            result += value
        case list():
            _encode_head(MT_ARRAY, len(value), result)
            for item in value:
                _encode_into(item, result, depth + 1)
        case dict():
            for key in value.keys():
                if not isinstance(key, str):
                    raise EncodingError(f"Map keys must be strings, but got key '{key!r}' of type '{type(key)}'.")
            _encode_head(MT_MAP, len(value), result)
            for key in sorted(value.keys(), key=map_key_sort_key):
                _encode_into(key, result, depth + 1)
                _encode_into(value[key], result, depth + 1)
        case _:
            raise EncodingError(f"Unsupported type for encoding: '{type(value)}'. Use to_value() to convert native objects first.")

#============================================================
# Decoding
#============================================================
def _take(data:bytes, offset:int, n:int) -> tuple[bytes, int]:
    end = offset + n
    if end > len(data):
        raise ParseError(f"Truncated input: needed {n} bytes at offset {offset}, but only {len(data) - offset} are left.")
    return data[offset:end], end

def _decode_head(data:bytes, offset:int) -> tuple[int, int, int, int]:
    """Returns major type, additional info, argument, and the new offset."""
    head, offset = _take(data, offset, 1)
    major_type = head[0] >> 5
    info = head[0] & 0x1f
    if info <= 23:
        return major_type, info, info, offset
    if info == AI_1_BYTE:
        raw, offset = _take(data, offset, 1)
        argument, minimum = raw[0], 24
    elif info == AI_2_BYTES:
        raw, offset = _take(data, offset, 2)
        argument, minimum = struct.unpack('>H', raw)[0], 0x100
    elif info == AI_4_BYTES:
        raw, offset = _take(data, offset, 4)
        argument, minimum = struct.unpack('>I', raw)[0], 0x10000
    elif info == AI_8_BYTES:
        raw, offset = _take(data, offset, 8)
        argument, minimum = struct.unpack('>Q', raw)[0], 0x100000000
    elif info == AI_INDEFINITE:
        raise ParseError(f"Indefinite length items are not allowed (offset {offset - 1}).")
    else:
        raise ParseError(f"Reserved additional information {info} at offset {offset - 1}.")
    # floats reuse the argument widths, they are not integers and need no minimality check
    if major_type != MT_SIMPLE_OR_FLOAT and argument < minimum:
        raise ParseError(f"Argument {argument} at offset {offset} is not minimally encoded.")
    return major_type, info, argument, offset

def _decode_from(data:bytes, offset:int, depth:int) -> tuple[Value, int]:
    start = offset
    if depth > MAX_NESTING_DEPTH:
        raise ParseError(f"Item at offset {start} is nested deeper than {MAX_NESTING_DEPTH} levels.")
    major_type, info, argument, offset = _decode_head(data, offset)
    if major_type == MT_UNSIGNED_INT:
        if argument > MAX_INT64:
            raise ParseError(f"Integer {argument} at offset {start} does not fit into a 64-bit signed integer.")
        return argument, offset
    elif major_type == MT_NEGATIVE_INT:
        if -1 - argument < MIN_INT64:
            raise ParseError(f"Integer {-1 - argument} at offset {start} does not fit into a 64-bit signed integer.")
        return -1 - argument, offset
    elif major_type == MT_BYTE_STRING:
        value, offset = _take(data, offset, argument)
        return value, offset
    elif major_type == MT_TEXT_STRING:
        raw, offset = _take(data, offset, argument)
        try:
            return raw.decode('utf-8'), offset
        except UnicodeDecodeError as e:
            raise ParseError(f"Invalid UTF-8 in text string at offset {start}.") from e
    elif major_type == MT_ARRAY:
        items = []
        for _ in range(argument):
            item, offset = _decode_from(data, offset, depth + 1)
            items.append(item)
        return items, offset
    elif major_type == MT_MAP:
        result = {}
        for _ in range(argument):
            key_offset = offset
            key, offset = _decode_from(data, offset, depth + 1)
            if not isinstance(key, str):
                raise ParseError(f"Map key at offset {key_offset} is not a string.")
            if key in result:
                raise ParseError(f"Duplicate map key '{key}' at offset {key_offset}.")
            result[key], offset = _decode_from(data, offset, depth + 1)
        return result, offset
    elif major_type == MT_TAG:
        if argument != CID_TAG:
            raise ParseError(f"Unsupported tag {argument} at offset {start}, only tag {CID_TAG} is allowed.")
        inner_offset = offset
        inner, offset = _decode_from(data, offset, depth + 1)
        if not isinstance(inner, bytes) or len(inner) < 2 or inner[:1] != CID_MULTIBASE_PREFIX:
            raise ParseError(f"Tag {CID_TAG} at offset {start} must wrap a byte string with an identity multibase prefix (offset {inner_offset}).")
        return Link(inner[1:]), offset
    else: # MT_SIMPLE_OR_FLOAT
        if info == SIMPLE_FALSE:
            return False, offset
        elif info == SIMPLE_TRUE:
            return True, offset
        elif info == SIMPLE_NULL:
            return None, offset
        elif info == AI_2_BYTES:
            value = struct.unpack('>e', data[offset - 2:offset])[0]
        elif info == AI_4_BYTES:
            value = struct.unpack('>f', data[offset - 4:offset])[0]
        elif info == AI_8_BYTES:
            value = struct.unpack('>d', data[offset - 8:offset])[0]
        else:
            raise ParseError(f"Unsupported simple value {argument} at offset {start}.")
        if not math.isfinite(value):
            raise ParseError(f"Non-finite float at offset {start}.")
        return value, offset
