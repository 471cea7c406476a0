from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

# Protobuf message classes for the UnixFS schema (unixfs.proto):
#
# message Data {
#   enum DataType { Raw = 0; Directory = 1; File = 2; Metadata = 3; Symlink = 4; HAMTShard = 5; }
#   required DataType Type = 1;
#   optional bytes Data = 2;
#   optional uint64 filesize = 3;
#   repeated uint64 blocksizes = 4;
#   optional uint64 hashType = 5;
#   optional uint64 fanout = 6;
#   optional uint32 mode = 7;
#   optional UnixTime mtime = 8;
# }
# message UnixTime { required int64 Seconds = 1; optional fixed32 FractionalNanoseconds = 2; }
#
# The descriptor is built here instead of being compiled with protoc, so there is no codegen step.

_PACKAGE = "unixfs.pb"
_Field = descriptor_pb2.FieldDescriptorProto

def _add_field(message, name:str, number:int, field_type:int, label:int=_Field.LABEL_OPTIONAL, type_name:str|None=None):
    field = message.field.add(name=name, number=number, type=field_type, label=label)
    if type_name is not None:
        field.type_name = f".{_PACKAGE}.{type_name}"

def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file = descriptor_pb2.FileDescriptorProto(name="ipblocks/unixfs.proto", package=_PACKAGE, syntax="proto2")

    data = file.message_type.add(name="Data")
    data_type = data.enum_type.add(name="DataType")
    for number, name in enumerate(["Raw", "Directory", "File", "Metadata", "Symlink", "HAMTShard"]):
        data_type.value.add(name=name, number=number)
    _add_field(data, "Type", 1, _Field.TYPE_ENUM, _Field.LABEL_REQUIRED, "Data.DataType")
    _add_field(data, "Data", 2, _Field.TYPE_BYTES)
    _add_field(data, "filesize", 3, _Field.TYPE_UINT64)
    _add_field(data, "blocksizes", 4, _Field.TYPE_UINT64, _Field.LABEL_REPEATED)
    _add_field(data, "hashType", 5, _Field.TYPE_UINT64)
    _add_field(data, "fanout", 6, _Field.TYPE_UINT64)
    _add_field(data, "mode", 7, _Field.TYPE_UINT32)
    _add_field(data, "mtime", 8, _Field.TYPE_MESSAGE, type_name="UnixTime")

    unix_time = file.message_type.add(name="UnixTime")
    _add_field(unix_time, "Seconds", 1, _Field.TYPE_INT64, _Field.LABEL_REQUIRED)
    _add_field(unix_time, "FractionalNanoseconds", 2, _Field.TYPE_FIXED32)
    return file

_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file_descriptor().SerializeToString())

Data = message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{_PACKAGE}.Data"))
UnixTime = message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{_PACKAGE}.UnixTime"))
