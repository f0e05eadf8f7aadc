import io
from io import BytesIO

import numpy as np
from construct import Int16ul, Int32ul, StreamError

from formtool.errors import TruncatedRead
from formtool.formstructs import int32ul

class ByteCursor:
    """Random-access little-endian reader over a seekable binary stream.

    Seeking past the end is allowed; the next read is what fails.
    """
    __slots__ = "stream", "_size"

    def __init__(self, stream):
        self.stream = stream
        self._size = stream.seek(0, io.SEEK_END)
        stream.seek(0)

    @classmethod
    def from_bytes(cls, data):
        return cls(BytesIO(data))

    def size(self):
        return self._size

    def position(self):
        return self.stream.tell()

    def remaining(self):
        return max(0, self._size - self.position())

    def seek(self, offset):
        if offset < 0:
            raise TruncatedRead("seek to negative offset %d" % offset)
        self.stream.seek(offset)

    def read_bytes(self, n):
        start = self.position()
        if n > self.remaining():
            raise TruncatedRead("need %d bytes at 0x%x, only %d available"
                % (n, start, self.remaining()))
        data = self.stream.read(n)
        if len(data) != n:
            raise TruncatedRead("need %d bytes at 0x%x, got %d" % (n, start, len(data)))
        return data

    def read_u16le(self):
        return Int16ul.parse(self.read_bytes(2))

    def read_u32le(self):
        return Int32ul.parse(self.read_bytes(4))

    def read_u32_table(self, count):
        return np.frombuffer(self.read_bytes(count * 4), dtype=int32ul).tolist()

    def parse(self, layout):
        start = self.position()
        try:
            return layout.parse_stream(self.stream)
        except StreamError as e:
            raise TruncatedRead("%s at 0x%x" % (e, start)) from e

    def require(self, offset, length):
        if offset + length > self._size:
            raise TruncatedRead("%d bytes at 0x%x run past the end of the archive (0x%x)"
                % (length, offset, self._size))

# Every name in the archive is stored as a u32 length followed by the bytes,
# and referenced by the offset of the bytes, not of the length.
def prefixed_length(cursor, pointer):
    if pointer < 4:
        raise TruncatedRead("pointer 0x%x has no room for a length prefix" % pointer)
    cursor.seek(pointer - 4)
    return cursor.read_u32le()

def resolve_string(cursor, pointer):
    return cursor.read_bytes(prefixed_length(cursor, pointer))

__all__ = ["ByteCursor", "prefixed_length", "resolve_string"]
