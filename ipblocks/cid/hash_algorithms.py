import hashlib
from typing import NamedTuple
from multiformats import multihash
from ipblocks.errors import EncodingError, UnsupportedAlgorithmError

# The explicit set of hash algorithms that can be computed.
# Other multihash codes still parse into a CID, but blocks addressed by them cannot be verified.
HashAlgorithm = NamedTuple("HashAlgorithm",
    [('name', str),
     ('hashlib_name', str),
     ('digest_size', int)])

_ALGORITHMS = [
    HashAlgorithm('sha1', 'sha1', 20),
    HashAlgorithm('sha2-256', 'sha256', 32),
    HashAlgorithm('sha2-512', 'sha512', 64),
    HashAlgorithm('sha3-512', 'sha3_512', 64),
    HashAlgorithm('sha3-384', 'sha3_384', 48),
    HashAlgorithm('sha3-256', 'sha3_256', 32),
    HashAlgorithm('sha3-224', 'sha3_224', 28),
]
_BY_NAME = {a.name: a for a in _ALGORITHMS}

DEFAULT_HASH_ALGORITHM = 'sha2-256'

def supported_algorithms() -> list[str]:
    return [a.name for a in _ALGORITHMS]

def get_algorithm(name:str) -> HashAlgorithm:
    algorithm = _BY_NAME.get(name)
    if algorithm is None:
        raise UnsupportedAlgorithmError(f"Unsupported hash algorithm '{name}'. Supported are: {', '.join(supported_algorithms())}.")
    return algorithm

def digest(data:bytes, name:str) -> bytes:
    algorithm = get_algorithm(name)
    return hashlib.new(algorithm.hashlib_name, data).digest()

def check_digest_length(name:str, digest_bytes:bytes, error_type=EncodingError) -> None:
    algorithm = _BY_NAME.get(name)
    if algorithm is not None and len(digest_bytes) != algorithm.digest_size:
        raise error_type(f"Digest for '{name}' must be {algorithm.digest_size} bytes, but was {len(digest_bytes)}.")

def wrap(name:str, digest_bytes:bytes) -> bytes:
    """Frames a digest as a multihash: varint(code) ++ varint(length) ++ digest."""
    check_digest_length(name, digest_bytes)
    try:
        return multihash.wrap(digest_bytes, name)
    except (KeyError, ValueError) as e:
        raise EncodingError(f"Cannot build a multihash for '{name}': {e}") from e
