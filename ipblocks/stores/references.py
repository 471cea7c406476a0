from abc import ABC, abstractmethod
from ipblocks.cid.cid import CID

class References(ABC):
    """Interface for saving and querying named references to root CIDs."""
    @abstractmethod
    def get(self, ref:str) -> CID | None:
        pass

    @abstractmethod
    def get_all(self) -> dict[str, CID]:
        pass

    @abstractmethod
    def set(self, ref:str, cid:CID) -> None:
        pass

    @abstractmethod
    def compare_and_set(self, ref:str, expected:CID | None, cid:CID) -> bool:
        """Sets the reference only if it currently points at 'expected'. Returns whether it was set."""
        pass

# Helper functions to create correctly formatted references
def ref_root(name:str="main") -> str:
    return f"roots/{name}"

def check_ref(ref:str) -> None:
    """Reference names are relative, slash separated paths, like 'roots/main'."""
    if not isinstance(ref, str) or ref == "":
        raise ValueError(f"Reference name must be a non-empty string, but was '{ref!r}'.")
    if "\\" in ref or "\0" in ref:
        raise ValueError(f"Reference name must not contain backslashes or NUL characters, but was '{ref}'.")
    for part in ref.split("/"):
        if part in ("", ".", ".."):
            raise ValueError(f"Reference name segments must not be empty, '.', or '..', but name was '{ref}'.")
        if part.endswith(".tmp"):
            raise ValueError(f"Reference name segments must not end with '.tmp', but name was '{ref}'.")
