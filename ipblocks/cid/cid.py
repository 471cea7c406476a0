from __future__ import annotations
import logging
from typing import NamedTuple
import multiformats
from multiformats import multibase
from ipblocks.errors import EncodingError, HashVerificationError, ParseError
from ipblocks.codec.cbor_model import Link
from . import hash_algorithms

logger = logging.getLogger(__name__)

RAW = 'raw'
DAG_PB = 'dag-pb'
DAG_CBOR = 'dag-cbor'
DAG_JSON = 'dag-json'

_CODECS = (RAW, DAG_PB, DAG_CBOR, DAG_JSON)
_CODEC_ALIASES = {
    'dag-protobuf': DAG_PB,
    'dagprotobuf': DAG_PB,
    'dagcbor': DAG_CBOR,
}

# multibase names for the string form of a CIDv1
BASE32 = 'base32'
BASE32_UPPER = 'base32upper'
BASE58BTC = 'base58btc'
BASE16 = 'base16'
BASES = (BASE32, BASE32_UPPER, BASE58BTC, BASE16)

# a CIDv0 is a bare sha2-256 multihash: 0x12 0x20 + 32 bytes, base58btc encoded to 46 chars starting with 'Qm'
_V0_MULTIHASH_PREFIX = b'\x12\x20'
_V0_MULTIHASH_LEN = 34
_V0_STRING_LEN = 46

def normalize_codec(codec:str) -> str:
    codec = _CODEC_ALIASES.get(codec, codec)
    if codec not in _CODECS:
        raise EncodingError(f"Unknown codec '{codec}'. Known codecs are: {', '.join(_CODECS)}.")
    return codec

class CID(NamedTuple):
    """A content identifier: version, content codec, hash algorithm, and digest.

    Instances are immutable. Two CIDs are equal if all four fields are equal, so
    the same digest under two different codecs gives two different CIDs.
    """
    version:int
    codec:str
    hash_algorithm:str
    digest:bytes

    @classmethod
    def from_digest(cls, codec:str, hash_algorithm:str, digest:bytes, version:int=1) -> CID:
        codec = normalize_codec(codec)
        hash_algorithms.get_algorithm(hash_algorithm)
        hash_algorithms.check_digest_length(hash_algorithm, digest)
        if version == 0:
            if codec != DAG_PB or hash_algorithm != hash_algorithms.DEFAULT_HASH_ALGORITHM:
                raise EncodingError(f"CIDv0 only supports dag-pb with sha2-256, not '{codec}' with '{hash_algorithm}'.")
        elif version != 1:
            raise EncodingError(f"Unsupported CID version {version}.")
        return cls(version, codec, hash_algorithm, bytes(digest))

    @property
    def multihash(self) -> bytes:
        return hash_algorithms.wrap(self.hash_algorithm, self.digest)

    def to_bytes(self) -> bytes:
        if self.version == 0:
            return self.multihash
        return bytes(self._to_multiformats(BASE32))

    def encode(self, base:str|None=None) -> str:
        if self.version == 0:
            if base not in (None, BASE58BTC):
                raise EncodingError(f"CIDv0 can only be encoded as base58btc, not '{base}'.")
            #v0 strings carry no multibase prefix
            return multibase.encode(self.multihash, BASE58BTC)[1:]
        return str(self._to_multiformats(base or BASE32))

    def to_v1(self) -> CID:
        if self.version == 1:
            return self
        return CID(1, self.codec, self.hash_algorithm, self.digest)

    def with_codec(self, codec:str) -> CID:
        return CID(1, normalize_codec(codec), self.hash_algorithm, self.digest)

    def to_link(self) -> Link:
        return Link(self.to_bytes())

    def _to_multiformats(self, base:str) -> multiformats.CID:
        try:
            return multiformats.CID(base, 1, self.codec, self.multihash)
        except (KeyError, ValueError) as e:
            raise EncodingError(f"Cannot encode CID with base '{base}': {e}") from e

    def __str__(self) -> str:
        return self.encode()

    def __repr__(self) -> str:
        return f"CID({self.encode()})"

def cid_for_bytes(data:bytes, codec:str=RAW, hash_algorithm:str=hash_algorithms.DEFAULT_HASH_ALGORITHM, version:int=1) -> CID:
    """Hashes the data and builds the CID that addresses it."""
    return CID.from_digest(codec, hash_algorithm, hash_algorithms.digest(data, hash_algorithm), version)

def parse_cid(text:str) -> CID:
    """Parses the string form of a CID (v0 or any supported multibase of v1)."""
    if not isinstance(text, str):
        raise ParseError(f"CID string must be a str, not '{type(text)}'.")
    text = text.strip()
    if not text:
        raise ParseError("Cannot parse an empty CID string.")
    if len(text) == _V0_STRING_LEN and text.startswith('Qm'):
        return parse_identifier(_decode_multibase('z' + text))
    cid = parse_identifier(_decode_multibase(text))
    if cid.version == 0:
        raise ParseError(f"CIDv0 must not carry a multibase prefix: '{text}'.")
    return cid

def parse_identifier(data:bytes) -> CID:
    """Parses the binary form of a CID. A bare sha2-256 multihash is read as a CIDv0.

    This is the single place where legacy multihashes and CIDv1 are told apart.
    """
    data = bytes(data)
    if len(data) == _V0_MULTIHASH_LEN and data[:2] == _V0_MULTIHASH_PREFIX:
        return CID(0, DAG_PB, hash_algorithms.DEFAULT_HASH_ALGORITHM, data[2:])
    if data[:1] != b'\x01':
        raise ParseError(f"Unsupported CID version in '{data[:4].hex()}...'.")
    try:
        return _from_multiformats(multiformats.CID.decode(data))
    except (KeyError, TypeError, ValueError) as e:
        raise ParseError(f"Invalid binary CID '{data.hex()}': {e}") from e

def parse_multihash(data:bytes, codec:str=RAW) -> CID:
    """Reads a bare multihash (of any algorithm) as a CIDv1 with the given codec."""
    codec = normalize_codec(codec)
    try:
        return _from_multiformats(multiformats.CID(BASE32, 1, codec, bytes(data)))
    except (KeyError, TypeError, ValueError) as e:
        raise ParseError(f"Invalid multihash '{bytes(data).hex()}': {e}") from e

def cid_from_link(link:Link) -> CID:
    return parse_identifier(link.cid)

def to_cid(value:CID|str|bytes|Link) -> CID:
    """Normalizes any accepted identifier form to a CID."""
    if isinstance(value, CID):
        return value
    if isinstance(value, Link):
        return cid_from_link(value)
    if isinstance(value, str):
        return parse_cid(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return parse_identifier(bytes(value))
    raise ParseError(f"Cannot convert '{type(value)}' to a CID.")

def verify(cid:CID, data:bytes) -> bool:
    """Recomputes the digest of data with the CID's algorithm and compares it."""
    return hash_algorithms.digest(data, cid.hash_algorithm) == cid.digest

def check(cid:CID, data:bytes) -> None:
    if not verify(cid, data):
        logger.debug(f"Hash verification failed for {cid} ({len(data)} bytes)")
        raise HashVerificationError(f"Content of {len(data)} bytes does not match the {cid.hash_algorithm} digest of {cid}.")

def _decode_multibase(text:str) -> bytes:
    try:
        return bytes(multibase.decode(text))
    except Exception as e:
        #the base codecs raise their own error types for bad characters and padding
        raise ParseError(f"Invalid multibase string '{text}': {e}") from e

def _from_multiformats(cid:multiformats.CID) -> CID:
    codec = cid.codec.name
    if codec not in _CODECS:
        raise ParseError(f"Unknown codec '{codec}' in CID.")
    hash_algorithm = cid.hashfun.name
    digest = bytes(cid.raw_digest)
    hash_algorithms.check_digest_length(hash_algorithm, digest, ParseError)
    return CID(cid.version, codec, hash_algorithm, digest)
