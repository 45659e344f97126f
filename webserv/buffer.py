"""A fixed-capacity byte buffer."""

from __future__ import annotations

from typing import BinaryIO, Union

BytesLike = Union[bytes, bytearray, memoryview, "Buffer", int]


class Buffer:
    """Holds up to ``capacity`` bytes."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = capacity
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __repr__(self) -> str:
        return f"Buffer({self._capacity}, {bytes(self._data)!r})"

    def capacity(self) -> int:
        """Maximum number of bytes the buffer holds."""
        return self._capacity

    def clear(self) -> None:
        """Discard the contents."""
        self._data.clear()

    def push_back(self, data: BytesLike) -> int:
        """Append ``data`` if it fits entirely.

        Returns the number of bytes appended, which is 0 if it does not fit.
        An int is taken as a single byte.
        """
        chunk = bytes([data]) if isinstance(data, int) else bytes(data)
        if len(chunk) > self._capacity - len(self._data):
            return 0
        self._data += chunk
        return len(chunk)

    def get(self, stream: BinaryIO) -> int:
        """Replace the contents with up to ``capacity`` bytes from ``stream``."""
        self._data = bytearray(stream.read(self._capacity) or b"")
        return len(self._data)

    def put(self, stream: BinaryIO) -> int:
        """Write the contents to ``stream`` and return the number written."""
        stream.write(bytes(self._data))
        return len(self._data)