import threading
import pytest
from ipblocks.errors import ConcurrentUpdateError
from ipblocks.cid import DAG_PB
from ipblocks.dagpb import find_link
from ipblocks.unixfs import list_directory, load_directory, read_file, resolve_path, UnixFsImporter
from ipblocks.stores.file import FileBlockStore
from ipblocks.stores.memory import MemoryBlockStore, MemoryReferences
from ipblocks.fs import FilesystemRoot

def _file(store, content:bytes):
    return UnixFsImporter(store, preserve_metadata=False).import_bytes(content).cid

def test_empty_root_is_deterministic(tmp_path):
    store = FileBlockStore(str(tmp_path))
    root_1 = FilesystemRoot(store)
    root_2 = FilesystemRoot(store)
    assert root_1.root_cid == root_2.root_cid
    assert root_1.root_cid.codec == DAG_PB
    assert list_directory(store, root_1.root_cid) == []

def test_add_file():
    store = MemoryBlockStore()
    root = FilesystemRoot(store)
    initial = root.root_cid
    cid = _file(store, b"Hello, world!")
    new_root = root.add_file("/test.txt", cid)
    assert new_root != initial
    assert root.root_cid == new_root
    assert resolve_path(store, new_root, "test.txt") == cid

def test_nested_directories_are_created():
    store = MemoryBlockStore()
    root = FilesystemRoot(store)
    cid = _file(store, b"deep")
    root.add_file("/a/b/c/d/e/f/deep.txt", cid)
    assert read_file(store, resolve_path(store, root.root_cid, "a/b/c/d/e/f/deep.txt")) == b"deep"
    assert [e.name for e in list_directory(store, resolve_path(store, root.root_cid, "a/b/c"))] == ["d"]

def test_folding_independence():
    store = MemoryBlockStore()
    root = FilesystemRoot(store)
    x = _file(store, b"x content")
    y = _file(store, b"y content")
    root.add_file("/a/x.txt", x)
    root.add_file("/a/y.txt", y)
    a = resolve_path(store, root.root_cid, "a")
    assert {e.name: e.cid for e in list_directory(store, a)} == {"x.txt": x, "y.txt": y}

    #replacing x leaves the link to y untouched
    y_link = find_link(load_directory(store, a), "y.txt")
    x2 = _file(store, b"new x content")
    root.add_file("/a/x.txt", x2)
    a2 = resolve_path(store, root.root_cid, "a")
    assert find_link(load_directory(store, a2), "y.txt") == y_link
    assert resolve_path(store, root.root_cid, "a/x.txt") == x2
    assert len(list_directory(store, a2)) == 2

def test_untouched_subtrees_are_shared():
    store = MemoryBlockStore()
    root = FilesystemRoot(store)
    root.add_file("/results/sample1/data.txt", _file(store, b"1"))
    sample1 = resolve_path(store, root.root_cid, "results/sample1")
    root.add_file("/results/sample2/data.txt", _file(store, b"2"))
    root.add_file("/results/analysis.txt", _file(store, b"3"))
    assert resolve_path(store, root.root_cid, "results/sample1") == sample1
    assert [e.name for e in list_directory(store, resolve_path(store, root.root_cid, "results"))] == [
        "sample1", "sample2", "analysis.txt"]

def test_replaced_entry_moves_to_the_end():
    store = MemoryBlockStore()
    root = FilesystemRoot(store)
    root.add_file("a", _file(store, b"a"))
    root.add_file("b", _file(store, b"b"))
    root.add_file("a", _file(store, b"a2"))
    assert [e.name for e in list_directory(store, root.root_cid)] == ["b", "a"]

def test_add_directory(tmp_path):
    (tmp_path / "one.txt").write_bytes(b"one")
    store = MemoryBlockStore(preserve_metadata=False)
    result = store.import_path(str(tmp_path))
    root = FilesystemRoot(store)
    root.add_directory("/results/subdir", result.cid, result.size)
    assert read_file(store, resolve_path(store, root.root_cid, "results/subdir/one.txt")) == b"one"
    subdir = list_directory(store, resolve_path(store, root.root_cid, "results"))[0]
    assert subdir.tsize == result.size

def test_path_forms():
    store = MemoryBlockStore()
    root = FilesystemRoot(store)
    cid = _file(store, b"root file")
    root.add_file("rootfile.txt", cid)
    root.add_file("//dir//file.txt/", cid)
    assert resolve_path(store, root.root_cid, "/rootfile.txt") == cid
    assert resolve_path(store, root.root_cid, "dir/file.txt") == cid
    for path in ["", "/", "a/../b", "./a"]:
        with pytest.raises(ValueError):
            root.add_file(path, cid)

def test_file_in_the_way():
    store = MemoryBlockStore()
    root = FilesystemRoot(store)
    root.add_file("/a", _file(store, b"a file"))
    with pytest.raises(ValueError, match="'a'"):
        root.add_file("/a/b.txt", _file(store, b"b"))

def test_existing_root():
    store = MemoryBlockStore()
    root = FilesystemRoot(store)
    root.add_file("/test.txt", _file(store, b"test"))
    loaded = FilesystemRoot(store, str(root.root_cid))
    assert loaded.root_cid == root.root_cid

def test_published_to_references():
    store = MemoryBlockStore()
    references = MemoryReferences()
    root = FilesystemRoot(store, references=references, ref="roots/run")
    cid = root.add_file("/a.txt", _file(store, b"a"))
    assert references.get("roots/run") == cid
    #a second instance picks up the published root
    other = FilesystemRoot(store, references=references, ref="roots/run")
    assert other.root_cid == cid

def test_concurrent_instances_do_not_lose_updates():
    store = MemoryBlockStore()
    references = MemoryReferences()
    root_1 = FilesystemRoot(store, references=references)
    root_2 = FilesystemRoot(store, references=references)
    root_1.add_file("/one.txt", _file(store, b"1"))
    root_2.add_file("/two.txt", _file(store, b"2"))
    names = [e.name for e in list_directory(store, references.get("roots/main"))]
    assert names == ["one.txt", "two.txt"]

def test_threads():
    store = MemoryBlockStore()
    references = MemoryReferences()
    roots = [FilesystemRoot(store, references=references, max_retries=100) for _ in range(4)]
    files = [_file(store, str(i).encode()) for i in range(20)]
    def publish(worker:int):
        for i in range(worker, 20, 4):
            roots[worker].add_file(f"/out/{i}.txt", files[i])
    threads = [threading.Thread(target=publish, args=(w,)) for w in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    out = resolve_path(store, references.get("roots/main"), "out")
    assert sorted(e.name for e in list_directory(store, out)) == sorted(f"{i}.txt" for i in range(20))

class StubbornReferences(MemoryReferences):
    """Never accepts a compare_and_set."""
    def compare_and_set(self, ref, expected, cid):
        return False

def test_retries_are_bounded():
    store = MemoryBlockStore()
    root = FilesystemRoot(store, references=StubbornReferences(), max_retries=3)
    with pytest.raises(ConcurrentUpdateError):
        root.add_file("/a.txt", _file(store, b"a"))
