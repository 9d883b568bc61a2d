# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Domain error hierarchy.

All errors raised by seqstore derive from SeqStoreError so callers can
catch the whole family with one clause. Errors are always propagated to the
immediate caller; no operation returns a sentinel value on failure.
"""


class SeqStoreError(Exception):
    """Base exception for all seqstore errors."""


class InvalidSymbolError(SeqStoreError, ValueError):
    """A character outside {A, C, G, T} was given to the codec.

    Attributes:
        symbols: Sorted distinct offending characters.
        position: Index of the first offending character.
    """

    def __init__(self, symbols: list[str], position: int) -> None:
        self.symbols = symbols
        self.position = position
        shown = ", ".join(repr(s) for s in symbols[:10])
        super().__init__(
            f"Invalid nucleotide symbol(s) {shown} (first at position {position}); "
            "allowed: A, C, G, T"
        )


class InvalidHandleError(SeqStoreError, ValueError):
    """Handle fields are malformed or inconsistent with the packed data."""


class StorageIOError(SeqStoreError):
    """The backing store failed to read, write, extend or truncate."""


class ScriptError(SeqStoreError):
    """A command script line could not be parsed or executed."""

    def __init__(self, line_no: int, message: str) -> None:
        self.line_no = line_no
        super().__init__(f"line {line_no}: {message}")


class AllocatorInvariantError(SeqStoreError):
    """Free-list state is malformed (overlap, stale plan, out of bounds).

    Fatal: indicates a bug or a caller presenting an invalid range,
    never expected in correct operation.
    """
