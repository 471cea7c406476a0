import io
from abc import ABC, abstractmethod
from typing import BinaryIO, Iterator

DEFAULT_CHUNK_SIZE = 256 * 1024

class Chunker(ABC):
    """Interface for file chunking strategies."""
    @abstractmethod
    def next_chunk(self) -> bytes | None:
        """Returns the next chunk, or None if there are no more chunks."""
        pass

    @abstractmethod
    def reset(self) -> None:
        pass

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self.next_chunk()
            if chunk is None:
                return
            yield chunk

def _enforce_chunk_size(chunk_size:int) -> int:
    if not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ValueError(f"chunk_size must be a positive integer, but was '{chunk_size}'.")
    return chunk_size

class FixedSizeChunker(Chunker):
    """Fixed-size windows over an in-memory buffer. The last window may be shorter."""
    def __init__(self, data:bytes, chunk_size:int=DEFAULT_CHUNK_SIZE):
        self._data = memoryview(data)
        self._chunk_size = _enforce_chunk_size(chunk_size)
        self._position = 0

    def next_chunk(self) -> bytes | None:
        if self._position >= len(self._data):
            return None
        end = min(self._position + self._chunk_size, len(self._data))
        chunk = self._data[self._position:end].tobytes()
        self._position = end
        return chunk

    def reset(self) -> None:
        self._position = 0

class FixedSizeStreamChunker(Chunker):
    """Fixed-size windows over a binary stream. Short reads are filled up until the stream ends."""
    def __init__(self, stream:BinaryIO, chunk_size:int=DEFAULT_CHUNK_SIZE):
        self._stream = stream
        self._chunk_size = _enforce_chunk_size(chunk_size)
        self._finished = False
        self._start = stream.tell() if stream.seekable() else None

    def next_chunk(self) -> bytes | None:
        if self._finished:
            return None
        buffer = bytearray()
        while len(buffer) < self._chunk_size:
            data = self._stream.read(self._chunk_size - len(buffer))
            if not data:
                self._finished = True
                break
            buffer += data
        if len(buffer) == 0:
            return None
        return bytes(buffer)

    def reset(self) -> None:
        if self._start is None:
            raise io.UnsupportedOperation("This stream does not support reset, it is not seekable.")
        self._stream.seek(self._start)
        self._finished = False

def chunker_for(source:bytes|BinaryIO, chunk_size:int=DEFAULT_CHUNK_SIZE) -> Chunker:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return FixedSizeChunker(source, chunk_size)
    return FixedSizeStreamChunker(source, chunk_size)
