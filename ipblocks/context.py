import logging
import os
from ipblocks.config import BlocksConfig, CONFIG_FILE_NAME, load_config, resolve_store_path
from ipblocks.fs.filesystem_root import FilesystemRoot
from ipblocks.stores.block_store import BlockStore
from ipblocks.stores.references import References, check_ref
from ipblocks.stores.file import FileBlockStore, FileReferences
from ipblocks.stores.lmdb import SharedEnvironment, LmdbBlockStore, LmdbReferences
from ipblocks.stores.memory import MemoryBlockStore, MemoryReferences
from ipblocks.stores.ipfs import IpfsBlockStore

logger = logging.getLogger(__name__)

class BlocksContext:
    """Wires a configuration to a block store, its references, and the filesystem roots.

    Everything opened here is owned by the context and released by close(),
    so use it as a context manager.
    """
    store:BlockStore
    references:References

    def __init__(self, config:BlocksConfig|None=None, work_dir:str|None=None):
        self.config = config if config is not None else BlocksConfig()
        self.work_dir = work_dir if work_dir is not None else os.getcwd()
        self.store_path = resolve_store_path(self.config, self.work_dir)
        self._shared_env:SharedEnvironment|None = None
        self._roots:dict[str, FilesystemRoot] = {}
        self.store = self._create_store()
        self.references = self._create_references()
        logger.debug(f"Opened '{self.config.store.type}' block store at {self.store_path}")

    @classmethod
    def from_work_dir(cls, work_dir:str, config_path:str|None=None, store_type:str|None=None) -> 'BlocksContext':
        if config_path is None:
            config_path = os.path.join(work_dir, CONFIG_FILE_NAME)
        config = load_config(config_path)
        if store_type is not None:
            config = config.model_copy(update={'store': config.store.model_copy(update={'type': store_type})})
        return cls(config, work_dir)

    def root(self, ref:str|None=None) -> FilesystemRoot:
        """Returns the filesystem root published under 'ref' (the configured root by default)."""
        ref = ref or self.config.root.ref
        check_ref(ref)
        if ref not in self._roots:
            self._roots[ref] = FilesystemRoot(self.store, references=self.references, ref=ref)
        return self._roots[ref]

    def close(self) -> None:
        self._roots.clear()
        self.store.close()
        if self._shared_env is not None:
            self._shared_env.close()
            self._shared_env = None

    def __enter__(self) -> 'BlocksContext':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _create_store(self) -> BlockStore:
        store_config = self.config.store
        options = dict(
            hash_algorithm=store_config.hash_algorithm,
            chunk_size=self.config.import_.chunk_size,
            preserve_metadata=self.config.import_.preserve_metadata,
            )
        if store_config.type == 'file':
            return FileBlockStore(self.store_path, store_config.shard_width, **options)
        elif store_config.type == 'lmdb':
            self._shared_env = SharedEnvironment(self.store_path)
            return LmdbBlockStore(self._shared_env, **options)
        elif store_config.type == 'memory':
            return MemoryBlockStore(**options)
        elif store_config.type == 'ipfs':
            return IpfsBlockStore(store_config.ipfs.url, store_config.ipfs.timeout, **options)
        else:
            raise ValueError(f"Unknown store type '{store_config.type}'.")

    def _create_references(self) -> References:
        store_type = self.config.store.type
        if store_type == 'lmdb':
            return LmdbReferences(self._shared_env)
        elif store_type == 'memory':
            return MemoryReferences()
        else:
            # the ipfs node has no named references, they are kept locally
            return FileReferences(self.store_path)
