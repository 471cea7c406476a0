import logging
import os
import threading
from multiformats import multibase
from ipblocks.cid.cid import CID, BASE32, check
from ipblocks.stores.block_store import BlockStore

logger = logging.getLogger(__name__)

DEFAULT_SHARD_WIDTH = 2

class FileBlockStore(BlockStore):
    """Stores one file per block on the local filesystem.

    Blocks are keyed by their multihash, so the same content stored under two codecs
    is kept only once. The file name is the base32 multihash string, and files are
    grouped into sub-directories named by the last characters of that string. The
    end of the string is used because multihashes of one algorithm share a prefix.
    """
    # only the write path needs the lock: a block file either does not exist yet or is complete,
    # because it is written to a temp file and then moved into place
    _thread_lock:threading.RLock

    def __init__(self, store_path:str, shard_width:int=DEFAULT_SHARD_WIDTH, **kwargs):
        super().__init__(**kwargs)
        if shard_width < 1:
            raise ValueError(f"shard_width must be at least 1, but was {shard_width}.")
        self._thread_lock = threading.RLock()
        self.store_path = os.fspath(store_path)
        self.blocks_path = os.path.join(self.store_path, 'blocks')
        self.shard_width = shard_width
        #ensure that the paths exists
        if not os.path.exists(self.blocks_path):
            os.makedirs(self.blocks_path, exist_ok=True)
            logger.debug(f"Created block store directory: {self.blocks_path}")

    def _write(self, cid:CID, data:bytes) -> None:
        block_path = self.block_path(cid)
        #check if the block already exists, same digest means same content
        if os.path.exists(block_path):
            return
        with self._thread_lock:
            os.makedirs(os.path.dirname(block_path), exist_ok=True)
            temp_path = f"{block_path}.{os.getpid()}.{threading.get_ident()}.tmp"
            with open(temp_path, 'wb') as f:
                f.write(data)
            os.replace(temp_path, block_path)
        logger.debug(f"Stored block at: {block_path}")

    def _read(self, cid:CID) -> bytes | None:
        block_path = self.block_path(cid)
        if not os.path.exists(block_path):
            return None
        with open(block_path, 'rb') as f:
            data = f.read()
        #files on disk can be changed by anyone, so never trust them blindly
        check(cid, data)
        return data

    def _has(self, cid:CID) -> bool:
        return os.path.exists(self.block_path(cid))

    def block_path(self, cid:CID) -> str:
        key = multibase.encode(cid.multihash, BASE32)
        shard = key[-self.shard_width:]
        return os.path.join(self.blocks_path, shard, key)
