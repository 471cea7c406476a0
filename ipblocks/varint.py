from multiformats import varint
from ipblocks.errors import ParseError

# Unsigned varints, as used by multiformats prefixes and the protobuf wire format.
# multiformats caps varints at 9 bytes, so values must be below 2**63.

def encode_varint(value:int) -> bytes:
    return varint.encode(value)

def decode_varint(data:bytes, offset:int=0) -> tuple[int, int]:
    """Returns the decoded value and the offset just past it."""
    if offset >= len(data):
        raise ParseError(f"Truncated varint at offset {offset}.")
    try:
        value, num_bytes, _ = varint.decode_raw(memoryview(data)[offset:])
    except (ValueError, IndexError) as e:
        raise ParseError(f"Invalid varint at offset {offset}: {e}") from e
    return value, offset + num_bytes
