import logging
from functools import lru_cache
import lmdb
from ipblocks.cid.cid import CID
from ipblocks.stores.block_store import BlockStore
from . shared_env import SharedEnvironment

logger = logging.getLogger(__name__)

class LmdbBlockStore(BlockStore):
    """Blocks in a single LMDB database, keyed by multihash bytes."""
    def __init__(self, shared_env:SharedEnvironment, **kwargs):
        super().__init__(**kwargs)
        if(not isinstance(shared_env, SharedEnvironment)):
            raise TypeError(f"shared_env must be of type SharedEnvironment, not '{type(shared_env)}'.")
        self._shared_env = shared_env

    def _write(self, cid:CID, data:bytes) -> None:
        key = cid.multihash
        try:
            with self._shared_env.begin_blocks_txn() as txn:
                txn.put(key, data, overwrite=False)
        except lmdb.MapFullError:
            logger.warning(f"LMDB map is full while writing block {cid}, growing it")
            self._shared_env.grow()
            #try again
            with self._shared_env.begin_blocks_txn() as txn:
                txn.put(key, data, overwrite=False)

    def _read(self, cid:CID) -> bytes | None:
        if(not self._has(cid)):
            return None
        return self._load(cid.multihash)

    def _has(self, cid:CID) -> bool:
        with self._shared_env.begin_blocks_txn(write=False) as txn:
            return txn.get(cid.multihash, default=None) is not None

    # only called for keys that exist, so a missing block is never cached
    @lru_cache(maxsize=1024*10)  # noqa: B019
    def _load(self, multihash:bytes) -> bytes:
        with self._shared_env.begin_blocks_txn(write=False) as txn:
            return bytes(txn.get(multihash))
