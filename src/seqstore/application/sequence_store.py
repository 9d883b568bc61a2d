# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Sequence store: codec + free-list allocator over a backing store.

Orchestrates the three collaborators:
    insert(seq)  -> encode -> plan allocation -> (extend) -> write -> commit -> Handle
    get_entry(h) -> read h.byte_length bytes at h.offset -> decode h.base_count bases
    remove(h)    -> plan release -> (truncate on shrink) -> commit

Allocator state is committed only after the backing store I/O for the
operation has succeeded, so an I/O failure leaves the free list exactly as
it was. One re-entrant lock guards both the allocator and the backing
store's cursor; an allocation decision and its physical write are atomic as
a unit.

The free list is not persisted. After a restart it is either rebuilt from
the handles the caller still holds (``rebuild``) or lost.
"""

import threading
from collections.abc import Iterable
from pathlib import Path

import structlog

from seqstore.adapters.config.settings import StorageSettings
from seqstore.adapters.outbound.file_backing_store import FileBackingStore
from seqstore.domain.allocator import FreeListAllocator
from seqstore.domain.codec import SequenceCodec
from seqstore.domain.errors import StorageIOError
from seqstore.domain.value_objects import FreeBlock, Handle
from seqstore.ports.outbound import BackingStorePort

logger = structlog.get_logger(__name__)

EMPTY_HANDLE = Handle(offset=0, byte_length=0, base_count=0)


class SequenceStore:
    """Stores 2-bit packed nucleotide sequences addressed by Handle.

    Handles are capabilities: the store does no liveness tracking. A handle
    presented after ``remove`` decodes whatever bytes occupy its range now,
    or fails with StorageIOError if the range was truncated away.

    Args:
        backing: Byte-addressable store holding the records.
        allocator: Free-list allocator. Defaults to one whose extent is the
            current backing length with no free blocks (every existing byte
            treated as live).
        check_invariants: Validate the free list after every mutation.
    """

    def __init__(
        self,
        backing: BackingStorePort,
        allocator: FreeListAllocator | None = None,
        *,
        check_invariants: bool = False,
    ) -> None:
        self._backing = backing
        if allocator is None:
            allocator = FreeListAllocator(extent=backing.current_length())
        self._allocator = allocator
        self._check = check_invariants
        self._codec = SequenceCodec()
        self._lock = threading.RLock()

    @classmethod
    def open_file(
        cls,
        path: Path | str | None = None,
        settings: StorageSettings | None = None,
    ) -> "SequenceStore":
        """Open (or create) a file-backed store configured from settings.

        Args:
            path: Backing file. Defaults to ``settings.data_path``.
            settings: Storage settings. Defaults to values from the environment.
        """
        settings = settings or StorageSettings()
        backing = FileBackingStore(path or settings.data_path, fsync_on_write=settings.fsync_on_write)
        try:
            allocator = FreeListAllocator(
                extent=backing.current_length(),
                shrink_on_release=settings.shrink_on_release,
            )
        except Exception:
            backing.close()
            raise
        logger.info(
            "store_opened",
            path=str(backing.path),
            extent=allocator.extent,
            shrink_on_release=settings.shrink_on_release,
        )
        return cls(backing, allocator, check_invariants=settings.check_invariants)

    def __enter__(self) -> "SequenceStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def insert(self, sequence: str) -> Handle:
        """Pack and store a sequence.

        Raises:
            InvalidSymbolError: Sequence contains a symbol outside {A, C, G, T}.
                Nothing is written and the allocator is unchanged.
            StorageIOError: The backing store failed. The allocator is unchanged.
        """
        data, base_count = self._codec.encode(sequence)
        if base_count == 0:
            return EMPTY_HANDLE

        with self._lock:
            plan = self._allocator.plan_allocation(len(data))
            old_length = self._backing.current_length()
            extended = plan.extent_after > old_length
            if extended:
                self._backing.truncate_or_extend(plan.extent_after)
            try:
                self._backing.write(plan.offset, data)
            except StorageIOError:
                if extended:
                    self._rollback_extend(old_length)
                raise
            self._allocator.commit_allocation(plan)
            self._maybe_check()

        handle = Handle(offset=plan.offset, byte_length=len(data), base_count=base_count)
        logger.debug(
            "sequence_inserted",
            offset=handle.offset,
            byte_length=handle.byte_length,
            base_count=base_count,
            extent=plan.extent_after,
        )
        return handle

    def remove(self, handle: Handle) -> None:
        """Return a record's range to the free list.

        The record bytes are not zeroed. When the released range reaches the
        end of the store and the allocator shrinks its extent, the backing
        store is truncated to match.

        Raises:
            AllocatorInvariantError: The range is outside the store or
                overlaps free space (for example a second remove).
            StorageIOError: Truncation failed. The allocator is unchanged.
        """
        if handle.is_empty:
            return

        with self._lock:
            plan = self._allocator.plan_release(handle.offset, handle.byte_length)
            if plan.shrinks_extent and self._backing.current_length() > plan.extent_after:
                self._backing.truncate_or_extend(plan.extent_after)
            self._allocator.commit_release(plan)
            self._maybe_check()

        logger.debug(
            "sequence_removed",
            offset=handle.offset,
            byte_length=handle.byte_length,
            extent=plan.extent_after,
        )

    def get_entry(self, handle: Handle) -> str:
        """Read and decode the record a handle points at.

        No liveness check is made.

        Raises:
            StorageIOError: The range cannot be read in full.
        """
        if handle.is_empty:
            return ""
        with self._lock:
            data = self._backing.read(handle.offset, handle.byte_length)
        logger.debug("sequence_read", offset=handle.offset, byte_length=handle.byte_length)
        return self._codec.decode(data, handle.base_count)

    def rebuild(self, live_handles: Iterable[Handle]) -> None:
        """Reconstruct the free list from the handles still in use.

        Every byte of the backing store not covered by a live handle becomes
        free space. Under the shrink policy the unused tail of the store is
        truncated.

        Raises:
            AllocatorInvariantError: Handles overlap or exceed the store.
            StorageIOError: Reading the length or truncating failed.
        """
        handles = list(live_handles)
        with self._lock:
            length = self._backing.current_length()
            allocator = FreeListAllocator.from_live_ranges(
                length,
                ((h.offset, h.byte_length) for h in handles),
                shrink_on_release=self._allocator.shrink_on_release,
            )
            if allocator.extent < length:
                self._backing.truncate_or_extend(allocator.extent)
            self._allocator = allocator
            self._maybe_check()
        logger.info(
            "free_list_rebuilt",
            live=len(handles),
            free_blocks=len(allocator),
            extent=allocator.extent,
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def allocator(self) -> FreeListAllocator:
        return self._allocator

    @property
    def free_blocks(self) -> tuple[FreeBlock, ...]:
        return self._allocator.free_blocks

    @property
    def extent(self) -> int:
        return self._allocator.extent

    def describe_free_list(self) -> str:
        return self._allocator.describe()

    def close(self) -> None:
        with self._lock:
            self._backing.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _rollback_extend(self, old_length: int) -> None:
        try:
            self._backing.truncate_or_extend(old_length)
        except StorageIOError as e:
            logger.warning("extend_rollback_failed", length=old_length, error=str(e))

    def _maybe_check(self) -> None:
        if self._check:
            self._allocator.check_invariants()
