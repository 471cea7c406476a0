import io
import os
import pytest
from ipblocks.unixfs import *

def test_fixed_size_chunks():
    data = os.urandom(598016)
    chunks = list(FixedSizeChunker(data, 256*1024))
    assert [len(c) for c in chunks] == [262144, 262144, 73728]
    assert b"".join(chunks) == data

def test_600kb():
    chunks = list(FixedSizeChunker(bytes(614400), 256*1024))
    assert [len(c) for c in chunks] == [262144, 262144, 90112]

def test_exact_multiple():
    chunks = list(FixedSizeChunker(bytes(300), 100))
    assert [len(c) for c in chunks] == [100, 100, 100]

def test_empty_input():
    assert list(FixedSizeChunker(b"", 100)) == []
    assert list(FixedSizeStreamChunker(io.BytesIO(b""), 100)) == []

class TrickleStream(io.RawIOBase):
    """Returns at most 7 bytes per read."""
    def __init__(self, data:bytes):
        self._data = io.BytesIO(data)
    def readable(self):
        return True
    def read(self, size=-1):
        return self._data.read(min(size, 7) if size >= 0 else 7)

def test_stream_short_reads_are_filled():
    data = os.urandom(1000)
    chunks = list(FixedSizeStreamChunker(TrickleStream(data), 128))
    assert [len(c) for c in chunks] == [128]*7 + [104]
    assert b"".join(chunks) == data

def test_reset():
    data = os.urandom(250)
    chunker = chunker_for(io.BytesIO(data), 100)
    first = list(chunker)
    chunker.reset()
    assert list(chunker) == first
    memory_chunker = chunker_for(data, 100)
    assert list(memory_chunker) == first
    memory_chunker.reset()
    assert memory_chunker.next_chunk() == data[:100]

def test_reset_requires_seekable_stream():
    chunker = FixedSizeStreamChunker(TrickleStream(b"abc"), 2)
    with pytest.raises(io.UnsupportedOperation):
        chunker.reset()

def test_invalid_chunk_size():
    with pytest.raises(ValueError):
        FixedSizeChunker(b"abc", 0)
    with pytest.raises(ValueError):
        FixedSizeStreamChunker(io.BytesIO(b"abc"), -1)
