import threading
from ipblocks.cid.cid import CID
from ipblocks.stores.references import References, check_ref

class MemoryReferences(References):
    _ref:dict[str, CID]

    def __init__(self):
        super().__init__()
        self._ref = {}
        self._thread_lock = threading.Lock()

    def get(self, ref:str) -> CID | None:
        return self._ref.get(ref, None)

    def get_all(self) -> dict[str, CID]:
        return self._ref.copy()

    def set(self, ref:str, cid:CID) -> None:
        check_ref(ref)
        with self._thread_lock:
            self._ref[ref] = cid

    def compare_and_set(self, ref:str, expected:CID | None, cid:CID) -> bool:
        check_ref(ref)
        with self._thread_lock:
            if self._ref.get(ref, None) != expected:
                return False
            self._ref[ref] = cid
            return True
