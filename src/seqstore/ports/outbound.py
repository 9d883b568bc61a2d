# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Outbound port interfaces (driven adapters).

These ports define the contracts for the application core to interact
with external systems. Implementations are provided by outbound adapters
(file on disk, in-memory buffer).

All interfaces use Protocol (PEP 544) for structural typing, allowing
implicit implementation without inheritance.
"""

from typing import Protocol


class BackingStorePort(Protocol):
    """Port for a byte-addressable random-access store.

    The store holds a flat run of packed records with no header, magic
    number or delimiters. Record boundaries are known only through the
    handles held by callers.
    """

    def read(self, offset: int, length: int) -> bytes:
        """Read exactly ``length`` bytes starting at ``offset``.

        Raises:
            StorageIOError: If the read fails or returns fewer bytes.
        """
        ...

    def write(self, offset: int, data: bytes) -> None:
        """Write ``data`` starting at ``offset``.

        Raises:
            StorageIOError: If the write fails.
        """
        ...

    def truncate_or_extend(self, new_length: int) -> None:
        """Set the store length, zero-filling when it grows.

        Raises:
            StorageIOError: If the resize fails.
        """
        ...

    def current_length(self) -> int:
        """Current length of the store in bytes.

        Raises:
            StorageIOError: If the length cannot be determined.
        """
        ...

    def close(self) -> None:
        """Release the underlying resource. Idempotent."""
        ...
