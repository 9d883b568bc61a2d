"""Unit tests for allocator rollback when backing store I/O fails."""

from unittest.mock import Mock

import pytest

from seqstore.adapters.outbound.memory_backing_store import InMemoryBackingStore
from seqstore.application.sequence_store import SequenceStore
from seqstore.domain.allocator import FreeListAllocator
from seqstore.domain.errors import StorageIOError
from seqstore.domain.value_objects import FreeBlock

pytestmark = pytest.mark.unit


def failing_backing(**failures: Exception) -> Mock:
    """In-memory backing whose named methods raise the given errors."""
    real = InMemoryBackingStore()
    mock = Mock(wraps=real)
    for name, error in failures.items():
        getattr(mock, name).side_effect = error
    return mock


class TestInsertRollback:
    def test_failed_write_leaves_allocator_unchanged(self) -> None:
        backing = failing_backing(write=StorageIOError("disk full"))
        store = SequenceStore(backing)

        with pytest.raises(StorageIOError, match="disk full"):
            store.insert("ACGT")

        assert store.extent == 0
        assert store.free_blocks == ()
        assert store.allocator.version == 0

    def test_failed_write_truncates_extension_back(self) -> None:
        backing = failing_backing(write=StorageIOError("disk full"))
        store = SequenceStore(backing)

        with pytest.raises(StorageIOError):
            store.insert("ACGTACGT")

        assert backing.truncate_or_extend.call_args_list[-1].args == (0,)
        assert backing.current_length() == 0

    def test_failed_write_into_free_block_keeps_block(self) -> None:
        real = InMemoryBackingStore(b"\x00" * 4)
        backing = Mock(wraps=real)
        backing.write.side_effect = StorageIOError("bad sector")
        allocator = FreeListAllocator(extent=4, free_blocks=[FreeBlock(0, 2)])
        store = SequenceStore(backing, allocator)

        with pytest.raises(StorageIOError):
            store.insert("ACGT")

        assert store.free_blocks == (FreeBlock(0, 2),)
        backing.truncate_or_extend.assert_not_called()

    def test_failed_extend_leaves_allocator_unchanged(self) -> None:
        backing = failing_backing(truncate_or_extend=StorageIOError("quota exceeded"))
        store = SequenceStore(backing)

        with pytest.raises(StorageIOError, match="quota"):
            store.insert("ACGT")

        assert store.extent == 0
        backing.write.assert_not_called()

    def test_failed_rollback_still_raises_original_error(self) -> None:
        real = InMemoryBackingStore()
        backing = Mock(wraps=real)
        backing.write.side_effect = StorageIOError("write failed")
        backing.truncate_or_extend.side_effect = [None, StorageIOError("truncate failed")]
        store = SequenceStore(backing)

        with pytest.raises(StorageIOError, match="write failed"):
            store.insert("ACGT")

        assert store.extent == 0

    def test_store_usable_after_failure(self) -> None:
        real = InMemoryBackingStore()
        backing = Mock(wraps=real)
        backing.write.side_effect = [StorageIOError("transient"), None]
        store = SequenceStore(backing)

        with pytest.raises(StorageIOError):
            store.insert("ACGT")
        backing.write.side_effect = None
        handle = store.insert("ACGT")

        assert handle.offset == 0
        assert store.get_entry(handle) == "ACGT"


class TestRemoveRollback:
    def test_failed_truncate_keeps_record_allocated(self) -> None:
        real = InMemoryBackingStore()
        backing = Mock(wraps=real)
        store = SequenceStore(backing)
        head = store.insert("ACGT")
        tail = store.insert("ACGTACGT")
        version = store.allocator.version

        backing.truncate_or_extend.side_effect = StorageIOError("read-only filesystem")
        with pytest.raises(StorageIOError):
            store.remove(tail)

        assert store.extent == 3
        assert store.free_blocks == ()
        assert store.allocator.version == version
        assert store.get_entry(tail) == "ACGTACGT"
        assert store.get_entry(head) == "ACGT"

    def test_remove_in_middle_needs_no_io(self) -> None:
        real = InMemoryBackingStore()
        backing = Mock(wraps=real)
        store = SequenceStore(backing)
        middle = store.insert("ACGT")
        store.insert("ACGT")
        backing.reset_mock()

        store.remove(middle)

        backing.truncate_or_extend.assert_not_called()
        backing.write.assert_not_called()


class TestReadFailure:
    def test_read_error_propagates(self) -> None:
        backing = failing_backing(read=StorageIOError("io error"))
        store = SequenceStore(backing)
        handle = store.insert("ACGT")

        with pytest.raises(StorageIOError, match="io error"):
            store.get_entry(handle)
