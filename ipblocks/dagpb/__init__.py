from . dagpb_model import DagPbLink, DagPbNode
from . dagpb_serialization import node_to_bytes, bytes_to_node, link_cid, make_link, find_link
