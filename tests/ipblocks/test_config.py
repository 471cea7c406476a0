import pytest
from ipblocks.errors import ConfigError
from ipblocks.config import *

def test_defaults(tmp_path):
    config = load_config(str(tmp_path / "blocks.toml"))
    assert config.store.type == "file"
    assert config.store.hash_algorithm == "sha2-256"
    assert config.import_.chunk_size == 262144
    assert config.import_.preserve_metadata
    assert config.root.ref == "roots/main"

def test_loads():
    config = loads_config("""
[store]
type = "ipfs"
hash_algorithm = "sha2-512"

[store.ipfs]
url = "/ip4/10.0.0.5/tcp/5001"
timeout = 5.0

[import]
chunk_size = 1024
preserve_metadata = false

[root]
ref = "roots/pipeline"
""")
    assert config.store.type == "ipfs"
    assert config.store.hash_algorithm == "sha2-512"
    assert config.store.ipfs.url == "/ip4/10.0.0.5/tcp/5001"
    assert config.store.ipfs.timeout == 5.0
    assert config.import_.chunk_size == 1024
    assert not config.import_.preserve_metadata
    assert config.root.ref == "roots/pipeline"

def test_round_trip():
    config = BlocksConfig(store=StoreConfig(type="lmdb", shard_width=3), import_=ImportConfig(chunk_size=4096))
    assert loads_config(dumps_config(config)) == config

@pytest.mark.parametrize("toml", [
    "[store]\ntype = 's3'",
    "[store]\nhash_algorithm = 'md5'",
    "[store]\nshard_width = 0",
    "[import]\nchunk_size = -1",
    "[unknown]\nkey = 1",
    "[store\ntype = 'file'",
    "[root]\nref = '../outside'",
])
def test_invalid(toml):
    with pytest.raises(ConfigError):
        loads_config(toml)
