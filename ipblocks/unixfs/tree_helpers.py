from typing import Iterable, NamedTuple
from ipblocks.errors import NotFoundError, ParseError
from ipblocks.cid.cid import CID, DAG_PB, RAW
from ipblocks.dagpb.dagpb_model import DagPbNode
from ipblocks.dagpb.dagpb_serialization import bytes_to_node, link_cid, find_link
from . unixfs_model import DataType, UnixFsData
from . unixfs_serialization import bytes_to_unixfs

# Low-level, read-only helpers for working with UnixFS trees in a block store.
# Writes to a tree go through FilesystemRoot, which folds changes into a new root.

class DirectoryEntry(NamedTuple):
    name:str
    cid:CID
    tsize:int|None

#============================================================
# Path Helpers
#============================================================
def split_path(path:str) -> list[str]:
    """Returns a list of path parts, with empty parts removed"""
    if path is None or path == "":
        return []
    parts = [part for part in path.split("/") if part != ""]
    for part in parts:
        if part in (".", ".."):
            raise ValueError(f"Path segments '.' and '..' are not supported, but path was '{path}'.")
    return parts

#============================================================
# Load Helpers
#============================================================
def load_node(store, cid:CID) -> tuple[DagPbNode, UnixFsData]:
    """Loads a DAG-PB node and decodes its UnixFS payload."""
    if cid.codec != DAG_PB:
        raise ParseError(f"{cid} is a '{cid.codec}' block, not a dag-pb node.")
    node = bytes_to_node(store.get(cid))
    if node.data is None:
        raise ParseError(f"dag-pb node {cid} has no UnixFS data.")
    return node, bytes_to_unixfs(node.data)

def load_directory(store, cid:CID) -> DagPbNode:
    node, unixfs = load_node(store, cid)
    if not unixfs.is_directory():
        raise ValueError(f"{cid} is a '{unixfs.type.name.lower()}' node, not a directory.")
    return node

def list_directory(store, cid:CID) -> list[DirectoryEntry]:
    node = load_directory(store, cid)
    return [DirectoryEntry(link.name, link_cid(link), link.tsize) for link in node.links]

def resolve_path(store, root_cid:CID, path:str) -> CID:
    """Returns the CID at the end of the path, starting from the root directory."""
    cid = root_cid
    parts = split_path(path)
    for i, name in enumerate(parts):
        node = load_directory(store, cid)
        link = find_link(node, name)
        if link is None:
            raise NotFoundError(f"Root {root_cid} path '{'/'.join(parts[:i+1])}' does not exist.")
        cid = link_cid(link)
    return cid

#============================================================
# File Helpers
#============================================================
def read_file(store, cid:CID) -> bytes:
    """Reassembles the content of a UnixFS file (or a raw block)."""
    return b''.join(iter_file_chunks(store, cid))

def iter_file_chunks(store, cid:CID) -> Iterable[bytes]:
    if cid.codec == RAW:
        yield store.get(cid)
        return
    node, unixfs = load_node(store, cid)
    if not unixfs.is_file():
        raise ValueError(f"{cid} is a '{unixfs.type.name.lower()}' node, not a file.")
    if unixfs.data:
        yield unixfs.data
    for link in node.links:
        yield from iter_file_chunks(store, link_cid(link))

#============================================================
# Walk Helpers
#============================================================
def walk(store, root_cid:CID, path:str="") -> Iterable[tuple[str, dict[str, CID], dict[str, CID]]]:
    """Yields a tuple of (path, directories, files) for each directory in the tree. Similar to os.walk.

    Directories is a dictionary of [name:cid] of sub directories, which can be edited while
    iterating to avoid descending into certain directories.
    Files is a dictionary of [name:cid] of all other entries.
    """
    directories = {}
    files = {}
    for entry in list_directory(store, root_cid):
        if entry.cid.codec == DAG_PB and load_node(store, entry.cid)[1].type == DataType.DIRECTORY:
            directories[entry.name] = entry.cid
        else:
            files[entry.name] = entry.cid
    yield (path or "/", directories, files)
    for name, cid in directories.items():
        yield from walk(store, cid, f"{path}/{name}")
