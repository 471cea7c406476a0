import os
import pytest
from ipblocks.cid import cid_for_bytes
from ipblocks.stores.file import FileReferences
from ipblocks.stores import ref_root

def test_read_write(tmp_path):
    references = FileReferences(str(tmp_path))
    cid_1 = cid_for_bytes(b"one")
    cid_2 = cid_for_bytes(b"two")
    references.set(ref_root(), cid_1)
    references.set("other", cid_2)
    assert references.get(ref_root()) == cid_1
    assert references.get("other") == cid_2
    assert references.get("missing") is None

    #reload from disk
    references = FileReferences(str(tmp_path))
    assert references.get_all() == {"roots/main": cid_1, "other": cid_2}
    with open(tmp_path / "refs" / "roots" / "main") as f:
        assert f.read() == str(cid_1)

def test_compare_and_set(tmp_path):
    references = FileReferences(str(tmp_path))
    cid_1 = cid_for_bytes(b"one")
    cid_2 = cid_for_bytes(b"two")
    assert references.compare_and_set("ref", None, cid_1)
    assert not references.compare_and_set("ref", None, cid_2)
    assert references.compare_and_set("ref", cid_1, cid_2)
    assert FileReferences(str(tmp_path)).get("ref") == cid_2

@pytest.mark.parametrize("ref", ["", "/abs", "../../x", "roots/../../x", "roots//main", "./main", "roots\\main", "main.tmp"])
def test_invalid_names(tmp_path, ref):
    references = FileReferences(str(tmp_path / "store"))
    cid = cid_for_bytes(b"one")
    with pytest.raises(ValueError):
        references.set(ref, cid)
    with pytest.raises(ValueError):
        references.compare_and_set(ref, None, cid)
    assert references.get_all() == {}
    #nothing was written outside the refs directory
    assert os.listdir(tmp_path) == ["store"]
