from __future__ import annotations
import logging
import os
import stat
from typing import NamedTuple
from ipblocks.cid.cid import CID, DAG_PB
from ipblocks.dagpb.dagpb_model import DagPbNode
from ipblocks.dagpb.dagpb_serialization import node_to_bytes, make_link
from . chunker import Chunker, FixedSizeChunker, FixedSizeStreamChunker, DEFAULT_CHUNK_SIZE
from . unixfs_model import UnixFsData, UnixTime
from . unixfs_serialization import unixfs_to_bytes

logger = logging.getLogger(__name__)

class ImportResult(NamedTuple):
    cid:CID
    size:int   # cumulative size of all blocks in the DAG, used as the link tsize by parents
    links:int  # number of links of the root node

class UnixFsImporter:
    """Imports files, directories, and symlinks into a block store as a UnixFS Merkle-DAG.

    Files up to chunk_size bytes become a single node. Larger files are split into
    fixed-size chunks, one leaf node per chunk, under a root node that links the
    leaves in stream order. Nodes are always stored before a parent links to them.
    """
    def __init__(self, store, chunk_size:int=DEFAULT_CHUNK_SIZE, preserve_metadata:bool=True):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, but was {chunk_size}.")
        self._store = store
        self._chunk_size = chunk_size
        self._preserve_metadata = preserve_metadata

    def import_path(self, path:str|os.PathLike) -> ImportResult:
        path = os.fspath(path)
        if os.path.islink(path):
            return self._import_symlink(path)
        elif os.path.isdir(path):
            return self._import_directory(path)
        else:
            return self._import_file(path)

    def import_bytes(self, data:bytes, mode:int|None=None, mtime:UnixTime|None=None) -> ImportResult:
        """Imports an in-memory buffer as a UnixFS file."""
        if len(data) <= self._chunk_size:
            return self._import_small_file(bytes(data), mode, mtime)
        return self._import_chunks(FixedSizeChunker(data, self._chunk_size), len(data), mode, mtime)

    #============================================================
    # Directories and symlinks
    #============================================================
    def _import_directory(self, path:str) -> ImportResult:
        logger.debug(f"Importing directory: {path}")
        links = []
        children_size = 0
        # sorted, so the same directory always produces the same node
        for name in sorted(os.listdir(path)):
            child = self.import_path(os.path.join(path, name))
            links.append(make_link(child.cid, name, child.size))
            children_size += child.size
        mode, mtime = self._metadata(os.stat(path))
        unixfs = UnixFsData.directory(mode=mode, mtime=mtime)
        return self._persist(DagPbNode(tuple(links), unixfs_to_bytes(unixfs)), children_size)

    def _import_symlink(self, path:str) -> ImportResult:
        logger.debug(f"Importing symlink: {path}")
        target = os.fsencode(os.readlink(path))
        mode, mtime = self._metadata(os.lstat(path))
        unixfs = UnixFsData.symlink(target, mode=mode, mtime=mtime)
        return self._persist(DagPbNode((), unixfs_to_bytes(unixfs)))

    #============================================================
    # Files
    #============================================================
    def _import_file(self, path:str) -> ImportResult:
        logger.debug(f"Importing file: {path}")
        st = os.stat(path)
        mode, mtime = self._metadata(st)
        if st.st_size <= self._chunk_size:
            with open(path, 'rb') as f:
                data = f.read()
            return self._import_small_file(data, mode, mtime)
        with open(path, 'rb') as f:
            chunker = FixedSizeStreamChunker(f, self._chunk_size)
            return self._import_chunks(chunker, st.st_size, mode, mtime)

    def _import_small_file(self, data:bytes, mode:int|None, mtime:UnixTime|None) -> ImportResult:
        unixfs = UnixFsData.file(data, len(data), mode=mode, mtime=mtime)
        return self._persist(DagPbNode((), unixfs_to_bytes(unixfs)))

    def _import_chunks(self, chunker:Chunker, filesize:int, mode:int|None, mtime:UnixTime|None) -> ImportResult:
        leaves:list[tuple[ImportResult, int]] = []
        for chunk in chunker:
            leaf = self._persist(DagPbNode((), unixfs_to_bytes(UnixFsData.file(chunk, len(chunk)))))
            leaves.append((leaf, len(chunk)))
        if len(leaves) == 1:
            # a single chunk needs no root, the leaf is the file
            return leaves[0][0]
        links = tuple(make_link(leaf.cid, None, leaf.size) for leaf, _ in leaves)
        blocksizes = tuple(chunk_size for _, chunk_size in leaves)
        total = sum(blocksizes)
        if total != filesize:
            logger.warning(f"File size changed while importing: expected {filesize} bytes, read {total}.")
        unixfs = UnixFsData.file(None, total, blocksizes=blocksizes, mode=mode, mtime=mtime)
        children_size = sum(leaf.size for leaf, _ in leaves)
        logger.debug(f"Importing {len(leaves)} chunks, {total} bytes")
        return self._persist(DagPbNode(links, unixfs_to_bytes(unixfs)), children_size)

    #============================================================
    # Helpers
    #============================================================
    def _persist(self, node:DagPbNode, children_size:int=0) -> ImportResult:
        block = node_to_bytes(node)
        cid = self._store.add(block, DAG_PB)
        return ImportResult(cid, len(block) + children_size, len(node.links))

    def _metadata(self, st:os.stat_result) -> tuple[int|None, UnixTime|None]:
        if not self._preserve_metadata:
            return None, None
        # unixfs keeps the permission bits only, the entry type is in the node itself
        return stat.S_IMODE(st.st_mode), UnixTime.from_ns(st.st_mtime_ns)
