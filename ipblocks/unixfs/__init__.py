from . unixfs_model import DataType, UnixTime, UnixFsData
from . unixfs_serialization import unixfs_to_bytes, bytes_to_unixfs
from . chunker import Chunker, FixedSizeChunker, FixedSizeStreamChunker, chunker_for, DEFAULT_CHUNK_SIZE
from . importer import UnixFsImporter, ImportResult
from . tree_helpers import (DirectoryEntry, split_path, load_node, load_directory, list_directory,
                            resolve_path, read_file, iter_file_chunks, walk)
