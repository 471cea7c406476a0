from __future__ import annotations
from typing import NamedTuple, Union

# Type aliases and structures that define the value model of the DAG-CBOR codec.
# Plain Python values carry every variant except links, which get their own tuple
# so a byte string can never be mistaken for a link.

Link = NamedTuple("Link",
    [('cid', bytes)]) # binary CID, without the identity multibase prefix

Value = Union[None, bool, int, float, str, bytes, list['Value'], dict[str, 'Value'], Link]

# major types
MT_UNSIGNED_INT = 0
MT_NEGATIVE_INT = 1
MT_BYTE_STRING = 2
MT_TEXT_STRING = 3
MT_ARRAY = 4
MT_MAP = 5
MT_TAG = 6
MT_SIMPLE_OR_FLOAT = 7

# additional information values
AI_1_BYTE = 24
AI_2_BYTES = 25
AI_4_BYTES = 26
AI_8_BYTES = 27
AI_INDEFINITE = 31

SIMPLE_FALSE = 20
SIMPLE_TRUE = 21
SIMPLE_NULL = 22

CID_TAG = 42
CID_MULTIBASE_PREFIX = b'\x00' #identity multibase

MAX_UINT64 = 0xFFFFFFFFFFFFFFFF

# integers are 64-bit signed
MIN_INT64 = -2**63
MAX_INT64 = 2**63 - 1

# arrays, maps, and tags can nest at most this deep
MAX_NESTING_DEPTH = 256
