# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Domain value objects (immutable data structures)."""

from dataclasses import dataclass
from typing import Any

from seqstore.domain.codec import packed_length
from seqstore.domain.errors import InvalidHandleError


@dataclass(frozen=True)
class Handle:
    """Opaque reference to one stored record.

    A Handle is a capability, not a lookup key: the store keeps no record of
    which handles are live. Presenting a handle after ``remove`` reads
    whatever bytes now occupy its range.

    Attributes:
        offset: Byte offset of the record in the backing store.
        byte_length: Packed record size, always ``ceil(base_count / 4)``.
        base_count: Number of bases in the original sequence. Needed to tell
            real trailing 'A' bases apart from padding.
    """

    offset: int
    byte_length: int
    base_count: int

    def __post_init__(self) -> None:
        """Validate handle invariants."""
        if self.offset < 0:
            raise InvalidHandleError(f"offset must be >= 0, got {self.offset}")
        if self.base_count < 0:
            raise InvalidHandleError(f"base_count must be >= 0, got {self.base_count}")
        expected = packed_length(self.base_count)
        if self.byte_length != expected:
            raise InvalidHandleError(
                f"byte_length ({self.byte_length}) must equal ceil(base_count / 4) "
                f"= {expected} for base_count {self.base_count}"
            )

    @property
    def end(self) -> int:
        """First byte offset past the record."""
        return self.offset + self.byte_length

    @property
    def is_empty(self) -> bool:
        """Whether the handle refers to a zero-length sequence."""
        return self.base_count == 0

    def to_dict(self) -> dict[str, int]:
        return {
            "offset": self.offset,
            "byte_length": self.byte_length,
            "base_count": self.base_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Handle":
        try:
            offset = int(data["offset"])
            byte_length = int(data["byte_length"])
            base_count = int(data["base_count"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidHandleError(f"Malformed handle mapping {data!r}: {e}") from e
        return cls(offset=offset, byte_length=byte_length, base_count=base_count)

    def to_token(self) -> str:
        """Compact text form ``offset:byte_length:base_count``."""
        return f"{self.offset}:{self.byte_length}:{self.base_count}"

    @classmethod
    def from_token(cls, token: str) -> "Handle":
        """Parse the form produced by ``to_token``.

        Raises:
            InvalidHandleError: If the token is not three colon-separated
                integers or the fields are inconsistent.
        """
        parts = token.strip().split(":")
        if len(parts) != 3:
            raise InvalidHandleError(
                f"Malformed handle token {token!r}: expected offset:byte_length:base_count"
            )
        try:
            offset, byte_length, base_count = (int(p) for p in parts)
        except ValueError as e:
            raise InvalidHandleError(f"Malformed handle token {token!r}: {e}") from e
        return cls(offset=offset, byte_length=byte_length, base_count=base_count)


@dataclass(frozen=True)
class FreeBlock:
    """A reclaimable byte range inside the backing store."""

    offset: int
    byte_length: int

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise InvalidHandleError(f"offset must be >= 0, got {self.offset}")
        if self.byte_length <= 0:
            raise InvalidHandleError(f"byte_length must be > 0, got {self.byte_length}")

    @property
    def end(self) -> int:
        return self.offset + self.byte_length

    def __str__(self) -> str:
        return f"[{self.offset}, {self.byte_length}]"


@dataclass(frozen=True)
class AllocationPlan:
    """Outcome of a first-fit decision, not yet applied to the allocator.

    The caller performs the physical write first and commits the plan only
    after it succeeds. A plan is bound to the allocator version it was
    computed against and cannot be committed after any other change.

    Attributes:
        offset: Where the record goes.
        byte_length: Requested size.
        extent_before: Allocator extent when the plan was made.
        extent_after: Extent once the plan is committed.
        free_after: Sorted free list once the plan is committed.
        version: Allocator version the plan was computed against.
    """

    offset: int
    byte_length: int
    extent_before: int
    extent_after: int
    free_after: tuple[FreeBlock, ...]
    version: int

    @property
    def grows_extent(self) -> bool:
        return self.extent_after > self.extent_before


@dataclass(frozen=True)
class ReleasePlan:
    """Outcome of returning a range to the free list, not yet applied."""

    offset: int
    byte_length: int
    extent_before: int
    extent_after: int
    free_after: tuple[FreeBlock, ...]
    version: int

    @property
    def shrinks_extent(self) -> bool:
        return self.extent_after < self.extent_before
