from typing import NamedTuple

# The DAG-PB node model. A node is immutable: changing a directory means building a new node.

class DagPbLink(NamedTuple):
    hash:bytes              # binary CID (or bare multihash for CIDv0 targets)
    name:str|None = None
    tsize:int|None = None   # cumulative byte size of the target DAG

class DagPbNode(NamedTuple):
    links:tuple[DagPbLink, ...] = ()
    data:bytes|None = None
