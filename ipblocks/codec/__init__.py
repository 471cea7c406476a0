from . cbor_model import Link, Value
from . cbor_serialization import encode, decode, map_key_sort_key
from . cbor_convert import to_value, encode_native
