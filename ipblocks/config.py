import os
from typing import Literal
import tomlkit
from tomlkit import TOMLDocument
from tomlkit.exceptions import TOMLKitError
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from ipblocks.errors import ConfigError, UnsupportedAlgorithmError
from ipblocks.cid.hash_algorithms import DEFAULT_HASH_ALGORITHM, get_algorithm
from ipblocks.unixfs.chunker import DEFAULT_CHUNK_SIZE
from ipblocks.stores.references import check_ref

# Functions to work with a blocks.toml file
# Utilizes https://github.com/sdispater/tomlkit to read the TOML data and pydantic to validate it.
#
# The expected toml format is (all tables and keys are optional):
# --------------------------
# [store]
# type = "file" # file, lmdb, memory, or ipfs
# path = ".blocks" # relative to the work directory
# hash_algorithm = "sha2-256"
# shard_width = 2 # only used by the file store
#
# [store.ipfs]
# url = "/ip4/127.0.0.1/tcp/5001" # multiaddr or http url of the Kubo RPC api
# timeout = 30.0
#
# [import]
# chunk_size = 262144
# preserve_metadata = true
#
# [root]
# ref = "roots/main"
# --------------------------

CONFIG_FILE_NAME = "blocks.toml"

class _ConfigModel(BaseModel):
    model_config = ConfigDict(extra='forbid')

class IpfsConfig(_ConfigModel):
    url:str = "http://127.0.0.1:5001"
    timeout:float = Field(default=30.0, gt=0)

class StoreConfig(_ConfigModel):
    type:Literal['file', 'lmdb', 'memory', 'ipfs'] = 'file'
    path:str = ".blocks"
    hash_algorithm:str = DEFAULT_HASH_ALGORITHM
    shard_width:int = Field(default=2, ge=1, le=8)
    ipfs:IpfsConfig = Field(default_factory=IpfsConfig)

    @field_validator('hash_algorithm')
    @classmethod
    def _check_algorithm(cls, value:str) -> str:
        try:
            get_algorithm(value)
        except UnsupportedAlgorithmError as e:
            raise ValueError(str(e)) from e
        return value

class ImportConfig(_ConfigModel):
    chunk_size:int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)
    preserve_metadata:bool = True

class RootConfig(_ConfigModel):
    ref:str = "roots/main"

    @field_validator('ref')
    @classmethod
    def _check_ref(cls, value:str) -> str:
        check_ref(value)
        return value

class BlocksConfig(_ConfigModel):
    # 'import' is a keyword, so the field has a different name
    model_config = ConfigDict(extra='forbid', populate_by_name=True)
    store:StoreConfig = Field(default_factory=StoreConfig)
    import_:ImportConfig = Field(default_factory=ImportConfig, alias='import')
    root:RootConfig = Field(default_factory=RootConfig)

def load_config(toml_file_path:str) -> BlocksConfig:
    """Loads a config file. A missing file gives the default config."""
    if not os.path.exists(toml_file_path):
        return BlocksConfig()
    with open(toml_file_path, 'r') as f:
        return loads_config(f.read())

def loads_config(toml:str|TOMLDocument) -> BlocksConfig:
    if(isinstance(toml, str)):
        try:
            doc = tomlkit.loads(toml)
        except TOMLKitError as e:
            raise ConfigError(f"Invalid TOML: {e}") from e
    else:
        doc = toml
    try:
        return BlocksConfig.model_validate(doc.unwrap())
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

def dumps_config(config:BlocksConfig) -> str:
    """Writes a config as TOML, in the format load_config expects."""
    doc = tomlkit.document()
    doc.add(tomlkit.comment("ipblocks configuration"))
    data = config.model_dump(by_alias=True)
    for table_name in ('store', 'import', 'root'):
        table = tomlkit.table()
        for key, value in data[table_name].items():
            if isinstance(value, dict):
                sub_table = tomlkit.table()
                for sub_key, sub_value in value.items():
                    sub_table.add(sub_key, sub_value)
                table.add(key, sub_table)
            else:
                table.add(key, value)
        doc.add(table_name, table)
    return tomlkit.dumps(doc)

def resolve_store_path(config:BlocksConfig, work_dir:str) -> str:
    return os.path.normpath(os.path.join(work_dir, config.store.path))
