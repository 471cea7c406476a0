from . memory_block_store import MemoryBlockStore
from . memory_references import MemoryReferences
__all__ = ['MemoryBlockStore', 'MemoryReferences']
