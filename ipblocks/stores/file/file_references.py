import os
import threading
from pathlib import PureWindowsPath
from ipblocks.cid.cid import CID, parse_cid
from ipblocks.stores.references import References, check_ref

class FileReferences(References):
    """References stored as small text files holding the CID string.

    compare_and_set is atomic within one process. Separate processes that share
    the directory must coordinate on their own.
    """
    _thread_lock:threading.RLock
    _ref:dict[str, CID]

    def __init__(self, store_path:str):
        super().__init__()
        self._thread_lock = threading.RLock()
        self._ref = {}
        self.store_path = os.fspath(store_path)
        self.references_path = os.path.join(self.store_path, 'refs')
        os.makedirs(self.references_path, exist_ok=True)
        #walk the refs directory and load all the references
        for root, _dirs, files in os.walk(self.references_path):
            for file in files:
                if file.endswith('.tmp'):
                    continue
                ref = os.path.relpath(os.path.join(root, file), self.references_path)
                if os.name == "nt": #convert the path to forward slash posix path
                    ref = PureWindowsPath(ref).as_posix()
                with open(os.path.join(root, file), "r") as f:
                    self._ref[ref] = parse_cid(f.read())

    def get(self, ref:str) -> CID | None:
        return self._ref.get(ref, None)

    def get_all(self) -> dict[str, CID]:
        return self._ref.copy()

    def set(self, ref:str, cid:CID) -> None:
        check_ref(ref)
        with self._thread_lock:
            self._set_and_persist(ref, cid)

    def compare_and_set(self, ref:str, expected:CID | None, cid:CID) -> bool:
        check_ref(ref)
        with self._thread_lock:
            if self._ref.get(ref, None) != expected:
                return False
            self._set_and_persist(ref, cid)
            return True

    def _set_and_persist(self, ref:str, cid:CID) -> None:
        #save to file
        file_path = os.path.join(self.references_path, ref)
        dir_path = os.path.dirname(file_path)
        if not os.path.exists(dir_path):
            os.makedirs(dir_path, exist_ok=True)
        temp_path = f"{file_path}.tmp"
        with open(temp_path, 'w') as f:
            f.write(str(cid))
        os.replace(temp_path, file_path)
        self._ref[ref] = cid
