from typing import Iterator
from ipblocks.errors import ParseError
from ipblocks.varint import encode_varint, decode_varint

# Minimal protobuf wire format helpers for the DAG-PB node codec.
# DAG-PB needs its links written before its data, which is not field number order,
# so these messages are framed by hand.

WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LENGTH_DELIMITED = 2
WIRE_FIXED32 = 5

def write_tag(field:int, wire_type:int, result:bytearray) -> None:
    result += encode_varint((field << 3) | wire_type)

def write_varint_field(field:int, value:int, result:bytearray) -> None:
    write_tag(field, WIRE_VARINT, result)
    result += encode_varint(value)

def write_bytes_field(field:int, value:bytes, result:bytearray) -> None:
    write_tag(field, WIRE_LENGTH_DELIMITED, result)
    result += encode_varint(len(value))
    result += value

def read_fields(data:bytes) -> Iterator[tuple[int, int, int|bytes]]:
    """Yields (field number, wire type, value) for every field in a message."""
    offset = 0
    while offset < len(data):
        key, offset = decode_varint(data, offset)
        field = key >> 3
        wire_type = key & 0x07
        if field == 0:
            raise ParseError(f"Invalid protobuf field number 0 at offset {offset}.")
        if wire_type == WIRE_VARINT:
            value, offset = decode_varint(data, offset)
        elif wire_type == WIRE_LENGTH_DELIMITED:
            length, offset = decode_varint(data, offset)
            if offset + length > len(data):
                raise ParseError(f"Truncated length-delimited field {field}: expected {length} bytes.")
            value = bytes(data[offset:offset + length])
            offset += length
        elif wire_type == WIRE_FIXED32:
            if offset + 4 > len(data):
                raise ParseError(f"Truncated fixed32 field {field}.")
            value = int.from_bytes(data[offset:offset + 4], 'little')
            offset += 4
        elif wire_type == WIRE_FIXED64:
            if offset + 8 > len(data):
                raise ParseError(f"Truncated fixed64 field {field}.")
            value = int.from_bytes(data[offset:offset + 8], 'little')
            offset += 8
        else:
            raise ParseError(f"Unsupported protobuf wire type {wire_type} for field {field}.")
        yield field, wire_type, value

def expect_wire_type(message:str, field:int, wire_type:int, expected:int) -> None:
    if wire_type != expected:
        raise ParseError(f"{message} field {field} has wire type {wire_type}, expected {expected}.")
