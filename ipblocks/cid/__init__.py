from . cid import (CID, RAW, DAG_PB, DAG_CBOR, DAG_JSON, BASE32, BASE32_UPPER, BASE58BTC, BASE16, BASES,
                   cid_for_bytes, parse_cid, parse_identifier, parse_multihash, cid_from_link, to_cid, verify, check,
                   normalize_codec)
from . hash_algorithms import DEFAULT_HASH_ALGORITHM, supported_algorithms, digest
