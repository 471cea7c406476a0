from __future__ import annotations
from enum import IntEnum
from typing import NamedTuple

# The UnixFS metadata model that is carried as the data payload of DAG-PB nodes.

class DataType(IntEnum):
    RAW = 0
    DIRECTORY = 1
    FILE = 2
    METADATA = 3
    SYMLINK = 4
    HAMT_SHARD = 5

class UnixTime(NamedTuple):
    seconds:int
    nanos:int|None = None

    @classmethod
    def from_ns(cls, ns:int) -> UnixTime:
        seconds, nanos = divmod(ns, 1_000_000_000)
        return cls(seconds, nanos or None)

    def to_ns(self) -> int:
        return self.seconds * 1_000_000_000 + (self.nanos or 0)

class UnixFsData(NamedTuple):
    type:DataType
    data:bytes|None = None
    filesize:int|None = None
    blocksizes:tuple[int, ...] = ()
    hash_type:int|None = None
    fanout:int|None = None
    mode:int|None = None
    mtime:UnixTime|None = None

    @classmethod
    def file(cls, data:bytes|None=None, filesize:int|None=None, **kwargs) -> UnixFsData:
        return cls(DataType.FILE, data, filesize, **kwargs)

    @classmethod
    def raw(cls, data:bytes) -> UnixFsData:
        return cls(DataType.RAW, data, len(data))

    @classmethod
    def directory(cls, **kwargs) -> UnixFsData:
        return cls(DataType.DIRECTORY, **kwargs)

    @classmethod
    def symlink(cls, target:bytes, **kwargs) -> UnixFsData:
        return cls(DataType.SYMLINK, target, **kwargs)

    def is_directory(self) -> bool:
        return self.type in (DataType.DIRECTORY, DataType.HAMT_SHARD)

    def is_file(self) -> bool:
        return self.type in (DataType.FILE, DataType.RAW)
