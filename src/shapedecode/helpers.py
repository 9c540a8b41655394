from __future__ import annotations

import array
from collections.abc import Iterator, Sequence
from struct import Struct
from typing import Generic, TypeVar

from .exceptions import ShortReadError
from .types import ReadableBinStream

# Helpers

unpack_2_int32_be = Struct(">2i").unpack


def read_exact(b_io: ReadableBinStream, size: int) -> bytes:
    """Reads exactly size bytes, or raises ShortReadError if the
    stream ends first. Streams may return fewer bytes than asked
    for without being at their end, so keep reading until they
    return nothing."""
    data = b_io.read(size)
    if len(data) == size:
        return data
    chunks = [data]
    got = len(data)
    while data and got < size:
        data = b_io.read(size - got)
        chunks.append(data)
        got += len(data)
    if got != size:
        raise ShortReadError(size, got)
    return b"".join(chunks)


class ByteCursor:
    """Forward-only view of a binary stream that counts the bytes
    consumed, so that errors can report where they happened.
    Only ever calls read() on the wrapped stream.

    >>> import io
    >>> cursor = ByteCursor(io.BytesIO(b"abcdef"))
    >>> cursor.read_exact(4)
    b'abcd'
    >>> cursor.offset
    4
    """

    def __init__(self, stream: ReadableBinStream, offset: int = 0):
        self.stream = stream
        self.offset = offset

    def read(self, size: int = -1) -> bytes:
        data = self.stream.read(size)
        self.offset += len(data)
        return data

    def read_exact(self, size: int) -> bytes:
        try:
            data = read_exact(self.stream, size)
        except ShortReadError as e:
            self.offset += e.got
            raise
        self.offset += size
        return data


# Begin

ARR_TYPE = TypeVar("ARR_TYPE", int, float)


# In Python 3.12 we can do:
# class _Array(array.array[ARR_TYPE], Generic[ARR_TYPE]):
class _Array(array.array, Generic[ARR_TYPE]):  # type: ignore[type-arg]
    """Converts python tuples to lists of the appropriate type.
    Used to unpack different shapefile record parts."""

    def __repr__(self) -> str:
        return str(self.tolist())


def part_ranges(parts: Sequence[int], nPoints: int) -> Iterator[tuple[int, int]]:
    """Yields the [start, end) point index range of each part.
    The last part ends at nPoints.

    >>> list(part_ranges([0, 5, 7], 10))
    [(0, 5), (5, 7), (7, 10)]
    """
    for i, start in enumerate(parts):
        end = parts[i + 1] if i + 1 < len(parts) else nPoints
        yield start, end
