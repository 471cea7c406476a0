from ipblocks.cid.cid import CID
from ipblocks.stores.block_store import BlockStore

class MemoryBlockStore(BlockStore):
    #no locking needed here, because all the dict operations used here are atomic
    _store:dict[bytes, bytes]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._store = {}

    def _write(self, cid:CID, data:bytes) -> None:
        self._store.setdefault(cid.multihash, data)

    def _read(self, cid:CID) -> bytes | None:
        return self._store.get(cid.multihash)

    def _has(self, cid:CID) -> bool:
        return cid.multihash in self._store

    def __len__(self) -> int:
        return len(self._store)
