from ipblocks.errors import EncodingError, ParseError
from ipblocks.cid.cid import CID, parse_identifier
from . dagpb_model import *
from . protobuf_wire import *

# PBNode { repeated PBLink Links = 2; optional bytes Data = 1; }
# PBLink { optional bytes Hash = 1; optional string Name = 2; optional uint64 Tsize = 3; }
#
# Links are written in the order given, then the data. Nothing is sorted here:
# callers decide the link order.

_NODE_DATA = 1
_NODE_LINKS = 2
_LINK_HASH = 1
_LINK_NAME = 2
_LINK_TSIZE = 3

# varints are capped at 9 bytes
_MAX_TSIZE = 1 << 63

def node_to_bytes(node:DagPbNode) -> bytes:
    _enforce_unique_names(node.links, EncodingError)
    result = bytearray()
    for link in node.links:
        write_bytes_field(_NODE_LINKS, _link_to_bytes(link), result)
    if node.data is not None:
        write_bytes_field(_NODE_DATA, node.data, result)
    return bytes(result)

def bytes_to_node(data:bytes) -> DagPbNode:
    links = []
    node_data = None
    for field, wire_type, value in read_fields(data):
        if field == _NODE_LINKS:
            expect_wire_type("PBNode", field, wire_type, WIRE_LENGTH_DELIMITED)
            if node_data is not None:
                raise ParseError("PBNode links must come before the data field.")
            links.append(_bytes_to_link(value))
        elif field == _NODE_DATA:
            expect_wire_type("PBNode", field, wire_type, WIRE_LENGTH_DELIMITED)
            if node_data is not None:
                raise ParseError("PBNode has more than one data field.")
            node_data = value
        else:
            raise ParseError(f"Unknown PBNode field {field}.")
    _enforce_unique_names(links, ParseError)
    return DagPbNode(tuple(links), node_data)

def link_cid(link:DagPbLink) -> CID:
    return parse_identifier(link.hash)

def make_link(cid:CID, name:str|None=None, tsize:int|None=None) -> DagPbLink:
    return DagPbLink(cid.to_bytes(), name, tsize)

def find_link(node:DagPbNode, name:str) -> DagPbLink | None:
    for link in node.links:
        if link.name == name:
            return link
    return None

def _link_to_bytes(link:DagPbLink) -> bytes:
    if not link.hash:
        raise EncodingError(f"Link '{link.name}' has no hash.")
    result = bytearray()
    write_bytes_field(_LINK_HASH, link.hash, result)
    if link.name is not None:
        write_bytes_field(_LINK_NAME, link.name.encode('utf-8'), result)
    if link.tsize is not None:
        if link.tsize < 0 or link.tsize >= _MAX_TSIZE:
            raise EncodingError(f"Link '{link.name}' has size {link.tsize}, which is out of range.")
        write_varint_field(_LINK_TSIZE, link.tsize, result)
    return bytes(result)

def _bytes_to_link(data:bytes) -> DagPbLink:
    hash = None
    name = None
    tsize = None
    for field, wire_type, value in read_fields(data):
        if field == _LINK_HASH:
            expect_wire_type("PBLink", field, wire_type, WIRE_LENGTH_DELIMITED)
            hash = value
        elif field == _LINK_NAME:
            expect_wire_type("PBLink", field, wire_type, WIRE_LENGTH_DELIMITED)
            try:
                name = value.decode('utf-8')
            except UnicodeDecodeError as e:
                raise ParseError("PBLink name is not valid UTF-8.") from e
        elif field == _LINK_TSIZE:
            expect_wire_type("PBLink", field, wire_type, WIRE_VARINT)
            tsize = value
        else:
            raise ParseError(f"Unknown PBLink field {field}.")
    if hash is None:
        raise ParseError("PBLink has no hash.")
    return DagPbLink(hash, name, tsize)

def _enforce_unique_names(links, error_type) -> None:
    seen = set()
    for link in links:
        if not link.name:
            continue
        if link.name in seen:
            raise error_type(f"Duplicate link name '{link.name}' in node.")
        seen.add(link.name)
