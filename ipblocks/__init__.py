from . errors import *
from . codec import Link, Value, encode, decode, to_value, encode_native
from . cid import (CID, RAW, DAG_PB, DAG_CBOR, DAG_JSON, cid_for_bytes, parse_cid, parse_identifier,
                   parse_multihash, to_cid, verify, check, DEFAULT_HASH_ALGORITHM, supported_algorithms)
from . dagpb import DagPbLink, DagPbNode, node_to_bytes, bytes_to_node, make_link, link_cid, find_link
from . unixfs import (DataType, UnixTime, UnixFsData, UnixFsImporter, ImportResult, FixedSizeChunker,
                      FixedSizeStreamChunker, DEFAULT_CHUNK_SIZE, split_path, list_directory, resolve_path,
                      read_file, walk)
from . stores import (BlockStore, References, ref_root, FileBlockStore, FileReferences, SharedEnvironment,
                      LmdbBlockStore, LmdbReferences, MemoryBlockStore, MemoryReferences, IpfsBlockStore)
from . fs import FilesystemRoot
from . config import BlocksConfig, StoreConfig, IpfsConfig, ImportConfig, RootConfig, load_config, loads_config
from . context import BlocksContext
