import logging
import os
import lmdb

logger = logging.getLogger(__name__)

INITIAL_MAP_SIZE = 16 * 1024 * 1024
_GIB = 1024 * 1024 * 1024

class SharedEnvironment:
    """One LMDB environment with two named databases: 'blocks' (multihash -> bytes) and 'refs' (name -> binary CID)."""
    def __init__(self, store_path:str, map_size:int=INITIAL_MAP_SIZE):
        self.store_path = os.fspath(store_path)
        os.makedirs(self.store_path, exist_ok=True)
        self.env = lmdb.Environment(self.store_path, max_dbs=2, map_size=map_size, metasync=False)
        self._blocks_db = self.env.open_db(b'blocks')
        self._refs_db = self.env.open_db(b'refs')

    @property
    def map_size(self) -> int:
        return self.env.info()['map_size']

    def begin_blocks_txn(self, write=True) -> lmdb.Transaction:
        return self.env.begin(db=self._blocks_db, write=write)

    def begin_refs_txn(self, write=True) -> lmdb.Transaction:
        return self.env.begin(db=self._refs_db, write=write)

    def grow(self) -> int:
        """Grows the map after a MapFullError: doubles it below 1 GiB, then adds half."""
        current_size = self.map_size
        new_size = current_size * 2 if current_size < _GIB else current_size + current_size // 2
        logger.info(f"Growing LMDB map at {self.store_path} from {current_size // (1024*1024)} MiB to {new_size // (1024*1024)} MiB")
        self.env.set_mapsize(new_size)
        return new_size

    def close(self) -> None:
        self.env.close()
