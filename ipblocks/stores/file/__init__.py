from . file_block_store import FileBlockStore
from . file_references import FileReferences
__all__ = ['FileBlockStore', 'FileReferences']
