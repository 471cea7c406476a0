from google.protobuf.message import DecodeError, EncodeError
from ipblocks.errors import EncodingError, ParseError
from . import unixfs_messages
from . unixfs_model import *

# Converts between the UnixFsData tuples and the protobuf 'Data' message.

def unixfs_to_bytes(unixfs:UnixFsData) -> bytes:
    message = unixfs_messages.Data()
    try:
        message.Type = int(unixfs.type)
        # an empty payload is left out, like the reference implementations do
        if unixfs.data:
            message.Data = unixfs.data
        if unixfs.filesize is not None:
            message.filesize = unixfs.filesize
        message.blocksizes.extend(unixfs.blocksizes)
        if unixfs.hash_type is not None:
            message.hashType = unixfs.hash_type
        if unixfs.fanout is not None:
            message.fanout = unixfs.fanout
        if unixfs.mode is not None:
            message.mode = unixfs.mode & 0xFFFFFFFF
        if unixfs.mtime is not None:
            message.mtime.Seconds = unixfs.mtime.seconds
            if unixfs.mtime.nanos:
                message.mtime.FractionalNanoseconds = unixfs.mtime.nanos
        return message.SerializeToString(deterministic=True)
    except (ValueError, TypeError, EncodeError) as e:
        raise EncodingError(f"Cannot encode UnixFS {unixfs.type.name} data: {e}") from e

def bytes_to_unixfs(data:bytes) -> UnixFsData:
    message = unixfs_messages.Data()
    try:
        message.ParseFromString(bytes(data))
    except DecodeError as e:
        raise ParseError(f"Invalid UnixFS Data message: {e}") from e
    #parsing does not enforce the required fields
    if not message.IsInitialized():
        raise ParseError(f"UnixFS Data is missing required fields: {', '.join(message.FindInitializationErrors())}.")
    mtime = None
    if message.HasField("mtime"):
        nanos = message.mtime.FractionalNanoseconds if message.mtime.HasField("FractionalNanoseconds") else None
        mtime = UnixTime(message.mtime.Seconds, nanos)
    return UnixFsData(
        DataType(message.Type),
        message.Data if message.HasField("Data") else None,
        message.filesize if message.HasField("filesize") else None,
        tuple(message.blocksizes),
        message.hashType if message.HasField("hashType") else None,
        message.fanout if message.HasField("fanout") else None,
        message.mode if message.HasField("mode") else None,
        mtime)
