# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""In-memory backing store adapter.

Implements BackingStorePort over a bytearray. Used for tests and for
callers that want the store semantics without a file.
"""

from seqstore.domain.errors import StorageIOError


class InMemoryBackingStore:
    """Backing store held entirely in a bytearray."""

    def __init__(self, initial: bytes = b"") -> None:
        self._buf = bytearray(initial)
        self._closed = False

    def read(self, offset: int, length: int) -> bytes:
        self._check_open()
        if offset < 0 or length < 0:
            raise StorageIOError(f"invalid read range [{offset}, {length}]")
        data = bytes(self._buf[offset : offset + length])
        if len(data) != length:
            raise StorageIOError(
                f"short read at offset {offset}: wanted {length} bytes, got {len(data)}"
            )
        return data

    def write(self, offset: int, data: bytes) -> None:
        self._check_open()
        if offset < 0:
            raise StorageIOError(f"invalid write offset {offset}")
        end = offset + len(data)
        if end > len(self._buf):
            self._buf.extend(bytes(end - len(self._buf)))
        self._buf[offset:end] = data

    def truncate_or_extend(self, new_length: int) -> None:
        self._check_open()
        if new_length < 0:
            raise StorageIOError(f"invalid length {new_length}")
        if new_length < len(self._buf):
            del self._buf[new_length:]
        else:
            self._buf.extend(bytes(new_length - len(self._buf)))

    def current_length(self) -> int:
        self._check_open()
        return len(self._buf)

    def close(self) -> None:
        self._closed = True

    def getvalue(self) -> bytes:
        """Snapshot of the whole buffer."""
        return bytes(self._buf)

    def _check_open(self) -> None:
        if self._closed:
            raise StorageIOError("backing store is closed")
