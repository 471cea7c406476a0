import logging
import lmdb
from ipblocks.cid.cid import CID, parse_identifier
from ipblocks.stores.references import References, check_ref
from .shared_env import SharedEnvironment

logger = logging.getLogger(__name__)

class LmdbReferences(References):
    """References in the 'refs' database of a shared LMDB environment, values are binary CIDs."""
    def __init__(self, shared_env:SharedEnvironment):
        super().__init__()
        if(not isinstance(shared_env, SharedEnvironment)):
            raise TypeError(f"shared_env must be of type SharedEnvironment, not '{type(shared_env)}'.")
        self._shared_env = shared_env

    def get(self, ref:str) -> CID | None:
        with self._shared_env.begin_refs_txn(write=False) as txn:
            value = txn.get(ref.encode('utf-8'), default=None)
        return parse_identifier(bytes(value)) if value is not None else None

    def get_all(self) -> dict[str, CID]:
        with self._shared_env.begin_refs_txn(write=False) as txn:
            kv = dict(txn.cursor().iternext())
        return {bytes(k).decode('utf-8'): parse_identifier(bytes(v)) for k, v in kv.items()}

    def set(self, ref:str, cid:CID) -> None:
        self._with_resize(ref, cid, lambda txn: self._put(txn, ref, cid))

    def compare_and_set(self, ref:str, expected:CID | None, cid:CID) -> bool:
        def swap(txn:lmdb.Transaction) -> bool:
            # lmdb allows a single write transaction at a time, so read and write are atomic
            current = txn.get(ref.encode('utf-8'), default=None)
            current = parse_identifier(bytes(current)) if current is not None else None
            if current != expected:
                return False
            self._put(txn, ref, cid)
            return True
        return self._with_resize(ref, cid, swap)

    def _put(self, txn:lmdb.Transaction, ref:str, cid:CID) -> None:
        check_ref(ref)
        if not txn.put(ref.encode('utf-8'), cid.to_bytes(), overwrite=True):
            raise lmdb.Error(f"Not able to set '{ref}' in lmdb 'refs' database.")

    def _with_resize(self, ref:str, cid:CID, action):
        try:
            with self._shared_env.begin_refs_txn() as txn:
                return action(txn)
        except lmdb.MapFullError:
            logger.warning(f"LMDB map is full while setting '{ref}' to {cid}, growing it")
            self._shared_env.grow()
            #try again
            with self._shared_env.begin_refs_txn() as txn:
                return action(txn)
