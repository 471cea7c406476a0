from . shared_env import SharedEnvironment
from . lmdb_block_store import LmdbBlockStore
from . lmdb_references import LmdbReferences
__all__ = ['SharedEnvironment', 'LmdbBlockStore', 'LmdbReferences']
