from . ipfs_block_store import IpfsBlockStore, multiaddr_to_url
__all__ = ['IpfsBlockStore', 'multiaddr_to_url']
