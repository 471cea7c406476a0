import logging
import threading
from ipblocks.errors import ConcurrentUpdateError, ParseError
from ipblocks.cid.cid import CID, DAG_PB, to_cid
from ipblocks.dagpb.dagpb_model import DagPbNode
from ipblocks.dagpb.dagpb_serialization import node_to_bytes, make_link, find_link, link_cid
from ipblocks.unixfs.unixfs_model import UnixFsData
from ipblocks.unixfs.unixfs_serialization import unixfs_to_bytes
from ipblocks.unixfs.tree_helpers import split_path, load_node
from ipblocks.stores.block_store import BlockStore
from ipblocks.stores.references import References, ref_root

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 10
EMPTY_DIRECTORY_MODE = 0o755

def empty_directory_node() -> DagPbNode:
    # no mtime, so every empty root has the same CID
    return DagPbNode((), unixfs_to_bytes(UnixFsData.directory(mode=EMPTY_DIRECTORY_MODE)))

class FilesystemRoot:
    """A single mutable root CID over an immutable UnixFS directory tree.

    Every add rewrites only the directories on the path to the new entry and
    returns the new root CID. All other subtrees are shared with the previous root.

    If references are given, the root is read from and published to the named
    reference with compare_and_set, so several FilesystemRoot instances (or processes
    sharing the same references) can publish into the same tree. When the reference
    moved since the fold started, the fold is repeated on top of the new root.
    """
    def __init__(
            self,
            store:BlockStore,
            root_cid:CID|str|None=None,
            references:References|None=None,
            ref:str|None=None,
            max_retries:int=DEFAULT_MAX_RETRIES,
            ):
        self._store = store
        self._references = references
        self._ref = ref or ref_root()
        self._max_retries = max_retries
        self._lock = threading.Lock()
        if root_cid is None and references is not None:
            root_cid = references.get(self._ref)
        if root_cid is None:
            root_cid = self._store.add(node_to_bytes(empty_directory_node()), DAG_PB)
            logger.debug(f"Initialized empty root: {root_cid}")
        else:
            logger.debug(f"Loaded existing root: {root_cid}")
        self._root_cid = to_cid(root_cid)

    @property
    def root_cid(self) -> CID:
        return self._root_cid

    @property
    def ref(self) -> str:
        return self._ref

    def add_file(self, path:str, cid:CID|str, tsize:int|None=None) -> CID:
        return self.add_entry(path, cid, False, tsize)

    def add_directory(self, path:str, cid:CID|str, tsize:int|None=None) -> CID:
        return self.add_entry(path, cid, True, tsize)

    def add_entry(self, path:str, cid:CID|str, is_directory:bool, tsize:int|None=None) -> CID:
        """Links 'cid' at 'path', replacing any entry with the same name, and returns the new root CID.

        Missing intermediate directories are created. Adding a directory does not look
        inside the linked content, the caller is responsible for it being a directory.
        """
        parts = split_path(path)
        if not parts:
            raise ValueError(f"Path '{path}' does not name an entry.")
        cid = to_cid(cid)
        kind = "directory" if is_directory else "file"
        with self._lock:
            previous_root = self._root_cid
            if self._references is None:
                self._root_cid = self._fold(self._root_cid, parts, cid, tsize)
            else:
                self._root_cid = self._fold_and_publish(parts, cid, tsize)
        logger.debug(f"Added {kind} /{'/'.join(parts)} -> {cid}, root: {previous_root} -> {self._root_cid}")
        return self._root_cid

    def _fold_and_publish(self, parts:list[str], cid:CID, tsize:int|None) -> CID:
        for attempt in range(self._max_retries + 1):
            current = self._references.get(self._ref)
            base = current if current is not None else self._root_cid
            new_root = self._fold(base, parts, cid, tsize)
            if self._references.compare_and_set(self._ref, current, new_root):
                logger.info(f"Published root '{self._ref}': {new_root}")
                return new_root
            logger.debug(f"Reference '{self._ref}' changed during update, retrying ({attempt+1}/{self._max_retries})")
        raise ConcurrentUpdateError(
            f"Could not publish '/{'/'.join(parts)}' to '{self._ref}' after {self._max_retries} retries.")

    #============================================================
    # Folding
    #============================================================
    def _fold(self, directory_cid:CID, parts:list[str], cid:CID, tsize:int|None) -> CID:
        node = self._load_directory(directory_cid, parts)
        name = parts[0]
        if len(parts) == 1:
            return self._replace_link(node, name, cid, tsize)
        existing = find_link(node, name)
        if existing is None:
            child_cid = self._store.add(node_to_bytes(empty_directory_node()), DAG_PB)
            logger.debug(f"Created intermediate directory: {name} -> {child_cid}")
        else:
            child_cid = link_cid(existing)
            self._ensure_directory(child_cid, name)
        new_child_cid = self._fold(child_cid, parts[1:], cid, tsize)
        return self._replace_link(node, name, new_child_cid, None)

    def _replace_link(self, node:DagPbNode, name:str, cid:CID, tsize:int|None) -> CID:
        links = [link for link in node.links if link.name != name]
        links.append(make_link(cid, name, tsize))
        return self._store.add(node_to_bytes(DagPbNode(tuple(links), node.data)), DAG_PB)

    def _load_directory(self, cid:CID, parts:list[str]) -> DagPbNode:
        node, unixfs = load_node(self._store, cid)
        if not unixfs.is_directory():
            raise ValueError(f"Cannot add '{'/'.join(parts)}', {cid} is not a directory.")
        return node

    def _ensure_directory(self, cid:CID, segment:str) -> None:
        if cid.codec != DAG_PB:
            raise ValueError(f"Path segment '{segment}' is not a directory ({cid}).")
        try:
            _node, unixfs = load_node(self._store, cid)
        except ParseError as e:
            raise ValueError(f"Path segment '{segment}' is not a directory ({cid}).") from e
        if not unixfs.is_directory():
            raise ValueError(f"Path segment '{segment}' is not a directory, it is a {unixfs.type.name.lower()} ({cid}).")
