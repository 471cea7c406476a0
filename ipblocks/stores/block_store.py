from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from ipblocks.errors import NotFoundError, ParseError
from ipblocks.codec.cbor_model import Link
from ipblocks.cid.cid import CID, RAW, cid_for_bytes, check, parse_identifier, parse_multihash, to_cid
from ipblocks.cid.hash_algorithms import DEFAULT_HASH_ALGORITHM, get_algorithm
from ipblocks.unixfs.chunker import DEFAULT_CHUNK_SIZE
from ipblocks.unixfs.importer import UnixFsImporter, ImportResult

logger = logging.getLogger(__name__)

BlockKey = CID | str | bytes | Link

class BlockStore(ABC):
    """Interface for persisting and loading content-addressed blocks.

    Subclasses implement the raw _write, _read, and _has primitives. Hashing,
    verification, and key normalization happen here, so every backend gets the
    same write-once semantics: writing the same content twice is a no-op, and
    content that does not match its claimed CID is never stored.
    """
    def __init__(
            self,
            hash_algorithm:str=DEFAULT_HASH_ALGORITHM,
            chunk_size:int=DEFAULT_CHUNK_SIZE,
            preserve_metadata:bool=True,
            ):
        get_algorithm(hash_algorithm) #fail early if the algorithm is unsupported
        self.hash_algorithm = hash_algorithm
        self.chunk_size = chunk_size
        self.preserve_metadata = preserve_metadata

    def add(self, data:bytes, codec:str=RAW) -> CID:
        """Hashes the data with the store's algorithm and stores it under the resulting CID."""
        data = bytes(data)
        cid = cid_for_bytes(data, codec, self.hash_algorithm)
        self._write(cid, data)
        logger.debug(f"Added block {cid} ({len(data)} bytes, codec {cid.codec})")
        return cid

    def put(self, cid:BlockKey, data:bytes) -> CID:
        """Stores data under an externally computed CID, after verifying that the CID matches the data."""
        cid = to_cid(cid)
        data = bytes(data)
        check(cid, data)
        self._write(cid, data)
        logger.debug(f"Put block {cid} ({len(data)} bytes)")
        return cid

    def get(self, key:BlockKey) -> bytes:
        cid = self.key_to_cid(key)
        data = self._read(cid)
        if data is None:
            raise NotFoundError(f"Block not found: {cid}")
        return data

    def has(self, key:BlockKey) -> bool:
        return self._has(self.key_to_cid(key))

    def import_path(self, path:str) -> ImportResult:
        importer = UnixFsImporter(self, self.chunk_size, self.preserve_metadata)
        return importer.import_path(path)

    def add_path(self, path:str) -> CID:
        return self.import_path(path).cid

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @staticmethod
    def key_to_cid(key:BlockKey) -> CID:
        """Normalizes a CID, CID string, binary CID, or bare multihash to a CID."""
        if isinstance(key, (bytes, bytearray, memoryview)):
            key = bytes(key)
            try:
                return parse_identifier(key)
            except ParseError:
                return parse_multihash(key)
        return to_cid(key)

    @abstractmethod
    def _write(self, cid:CID, data:bytes) -> None:
        pass

    @abstractmethod
    def _read(self, cid:CID) -> bytes | None:
        pass

    @abstractmethod
    def _has(self, cid:CID) -> bool:
        pass
