# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""First-fit free-list allocator over a growable byte extent.

The allocator only does bookkeeping: it decides offsets and never touches
the backing store. Every mutation is split into a pure ``plan_*`` step and
a ``commit_*`` step so the caller can perform the physical I/O in between
and leave the free list untouched when that I/O fails.

Invariants (checked by ``check_invariants``):
- free blocks are sorted by offset, non-empty, and pairwise neither
  overlap nor touch (adjacent ranges are always coalesced)
- every free block lies inside [0, extent)
"""

from bisect import bisect_left
from collections.abc import Iterable

from seqstore.domain.errors import AllocatorInvariantError
from seqstore.domain.value_objects import AllocationPlan, FreeBlock, ReleasePlan


class FreeListAllocator:
    """Tracks reusable byte ranges and the logical end of the store.

    Args:
        extent: Current logical length of the store.
        free_blocks: Initial free ranges (any order; must satisfy the
            invariants once sorted).
        shrink_on_release: When a released range reaches the end of the
            extent, drop it and shrink the extent instead of keeping a
            trailing free block.
    """

    def __init__(
        self,
        extent: int = 0,
        free_blocks: Iterable[FreeBlock] = (),
        shrink_on_release: bool = True,
    ) -> None:
        if extent < 0:
            raise AllocatorInvariantError(f"extent must be >= 0, got {extent}")
        self._extent = extent
        self._free: list[FreeBlock] = sorted(free_blocks, key=lambda b: b.offset)
        self.shrink_on_release = shrink_on_release
        self._version = 0
        self.check_invariants()

    @classmethod
    def from_live_ranges(
        cls,
        extent: int,
        live: Iterable[tuple[int, int]],
        shrink_on_release: bool = True,
    ) -> "FreeListAllocator":
        """Rebuild the free list from the ranges still in use.

        Every gap between live ranges becomes a free block. The gap after the
        last live range is dropped (extent shrinks) under the shrink policy,
        otherwise it is kept as a trailing free block.

        Args:
            extent: Length of the backing store.
            live: ``(offset, byte_length)`` pairs of records still referenced.
                Zero-length ranges are ignored.
            shrink_on_release: Policy for the rebuilt allocator.

        Raises:
            AllocatorInvariantError: If live ranges overlap or exceed extent.
        """
        ranges = sorted((o, n) for o, n in live if n > 0)
        free: list[FreeBlock] = []
        cursor = 0
        for offset, length in ranges:
            if offset < cursor:
                raise AllocatorInvariantError(
                    f"live range [{offset}, {length}] overlaps previous range ending at {cursor}"
                )
            if offset + length > extent:
                raise AllocatorInvariantError(
                    f"live range [{offset}, {length}] exceeds extent {extent}"
                )
            if offset > cursor:
                free.append(FreeBlock(cursor, offset - cursor))
            cursor = offset + length
        if cursor < extent:
            if shrink_on_release:
                extent = cursor
            else:
                free.append(FreeBlock(cursor, extent - cursor))
        return cls(extent=extent, free_blocks=free, shrink_on_release=shrink_on_release)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def extent(self) -> int:
        return self._extent

    @property
    def free_blocks(self) -> tuple[FreeBlock, ...]:
        return tuple(self._free)

    @property
    def free_bytes(self) -> int:
        return sum(b.byte_length for b in self._free)

    @property
    def largest_free_block(self) -> int:
        return max((b.byte_length for b in self._free), default=0)

    @property
    def version(self) -> int:
        """Incremented on every committed change."""
        return self._version

    def __len__(self) -> int:
        return len(self._free)

    def describe(self) -> str:
        """Free list as ``[offset, length] -> [offset, length]``."""
        if not self._free:
            return "(empty)"
        return " -> ".join(str(b) for b in self._free)

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    def plan_allocation(self, byte_length: int) -> AllocationPlan:
        """Decide where ``byte_length`` bytes go, without mutating state.

        Policy, in order:
        1. First block (ascending offset) with enough room. An exact fit
           removes the block; a larger block is consumed from its front.
        2. A trailing free block that touches the extent: start there and
           grow the extent by the shortfall.
        3. Append at the current extent.
        """
        if byte_length <= 0:
            raise AllocatorInvariantError(f"byte_length must be > 0, got {byte_length}")

        free = list(self._free)
        for i, block in enumerate(free):
            if block.byte_length >= byte_length:
                if block.byte_length == byte_length:
                    del free[i]
                else:
                    free[i] = FreeBlock(block.offset + byte_length, block.byte_length - byte_length)
                return self._allocation_plan(block.offset, byte_length, self._extent, free)

        if free and free[-1].end == self._extent:
            last = free.pop()
            shortfall = byte_length - last.byte_length
            return self._allocation_plan(last.offset, byte_length, self._extent + shortfall, free)

        return self._allocation_plan(self._extent, byte_length, self._extent + byte_length, free)

    def commit_allocation(self, plan: AllocationPlan) -> int:
        """Apply a plan from ``plan_allocation`` and return its offset.

        Raises:
            AllocatorInvariantError: If the allocator changed since the plan.
        """
        self._ensure_current(plan.version)
        self._free = list(plan.free_after)
        self._extent = plan.extent_after
        self._version += 1
        return plan.offset

    def allocate(self, byte_length: int) -> int:
        """Plan and commit in one step (no I/O in between)."""
        return self.commit_allocation(self.plan_allocation(byte_length))

    # ------------------------------------------------------------------
    # Release
    # ------------------------------------------------------------------

    def plan_release(self, offset: int, byte_length: int) -> ReleasePlan:
        """Compute the free list after returning a range, without mutating state.

        The range is inserted at its sorted position and coalesced with the
        previous and next blocks when they touch it. If the merged block ends
        at the extent and the shrink policy is on, the block is dropped and
        the extent shrinks to its start.

        Raises:
            AllocatorInvariantError: If the range is out of bounds or overlaps
                a free block (for example a double release).
        """
        if offset < 0 or byte_length <= 0:
            raise AllocatorInvariantError(
                f"cannot release [{offset}, {byte_length}]: offset must be >= 0, length > 0"
            )
        end = offset + byte_length
        if end > self._extent:
            raise AllocatorInvariantError(
                f"cannot release [{offset}, {byte_length}]: exceeds extent {self._extent}"
            )

        free = list(self._free)
        idx = bisect_left([b.offset for b in free], offset)
        prev = free[idx - 1] if idx > 0 else None
        nxt = free[idx] if idx < len(free) else None
        if (prev is not None and prev.end > offset) or (nxt is not None and nxt.offset < end):
            raise AllocatorInvariantError(
                f"cannot release [{offset}, {byte_length}]: overlaps a free block"
            )

        start = offset
        if prev is not None and prev.end == offset:
            start = prev.offset
            idx -= 1
            del free[idx]
        if nxt is not None and nxt.offset == end:
            end = nxt.end
            del free[idx]

        extent = self._extent
        if end == extent and self.shrink_on_release:
            extent = start
        else:
            free.insert(idx, FreeBlock(start, end - start))

        return ReleasePlan(
            offset=offset,
            byte_length=byte_length,
            extent_before=self._extent,
            extent_after=extent,
            free_after=tuple(free),
            version=self._version,
        )

    def commit_release(self, plan: ReleasePlan) -> None:
        self._ensure_current(plan.version)
        self._free = list(plan.free_after)
        self._extent = plan.extent_after
        self._version += 1

    def release(self, offset: int, byte_length: int) -> None:
        """Plan and commit a release in one step."""
        self.commit_release(self.plan_release(offset, byte_length))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def check_invariants(self, live: Iterable[tuple[int, int]] | None = None) -> None:
        """Validate free-list structure, and tiling when live ranges are given.

        With ``live``, free blocks plus live ranges plus the unused trailing
        gap must tile [0, extent) exactly: no overlap and no hole.

        Raises:
            AllocatorInvariantError: On the first violation found.
        """
        prev: FreeBlock | None = None
        for block in self._free:
            if block.end > self._extent:
                raise AllocatorInvariantError(f"free block {block} exceeds extent {self._extent}")
            if prev is not None:
                if block.offset < prev.end:
                    raise AllocatorInvariantError(f"free blocks {prev} and {block} overlap")
                if block.offset == prev.end:
                    raise AllocatorInvariantError(
                        f"free blocks {prev} and {block} touch but were not coalesced"
                    )
            prev = block

        if live is None:
            return

        ranges = sorted(
            [(b.offset, b.byte_length) for b in self._free] + [(o, n) for o, n in live if n > 0]
        )
        cursor = 0
        for offset, length in ranges:
            if offset != cursor:
                kind = "overlap" if offset < cursor else "hole"
                raise AllocatorInvariantError(
                    f"ranges do not tile [0, {self._extent}): {kind} at offset {min(offset, cursor)}"
                )
            cursor = offset + length
        if cursor > self._extent:
            raise AllocatorInvariantError(
                f"ranges extend to {cursor}, past extent {self._extent}"
            )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _allocation_plan(
        self, offset: int, byte_length: int, extent_after: int, free: list[FreeBlock]
    ) -> AllocationPlan:
        return AllocationPlan(
            offset=offset,
            byte_length=byte_length,
            extent_before=self._extent,
            extent_after=extent_after,
            free_after=tuple(free),
            version=self._version,
        )

    def _ensure_current(self, version: int) -> None:
        if version != self._version:
            raise AllocatorInvariantError(
                f"stale plan: computed at version {version}, allocator is at {self._version}"
            )
