from . block_store import BlockStore, BlockKey
from . references import References, ref_root, check_ref
from . file import FileBlockStore, FileReferences
from . lmdb import SharedEnvironment, LmdbBlockStore, LmdbReferences
from . memory import MemoryBlockStore, MemoryReferences
from . ipfs import IpfsBlockStore, multiaddr_to_url
