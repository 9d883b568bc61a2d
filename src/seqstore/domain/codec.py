# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""2-bit nucleotide codec.

Packing: A=00, C=01, G=10, T=11. Four bases per byte, the first base in the
two most-significant bits. The last byte is padded with A (00) in its unused
low-order slots, so the packed bytes alone cannot tell real trailing A bases
from padding; callers must keep the base count.

All functions are pure: no I/O, no state.
"""

from typing import NoReturn

from seqstore.domain.errors import InvalidHandleError, InvalidSymbolError

BASES_PER_BYTE = 4
ALPHABET = "ACGT"

_INVALID = 0xFF


def _make_translate_table() -> bytes:
    table = bytearray([_INVALID] * 256)
    for code, base in enumerate(ALPHABET):
        table[ord(base)] = code
        table[ord(base.lower())] = code
    return bytes(table)


_ENCODE_TABLE = _make_translate_table()

# One 4-base string per possible packed byte value
_DECODE_TABLE = tuple(
    "".join(ALPHABET[(value >> shift) & 0b11] for shift in (6, 4, 2, 0)) for value in range(256)
)


def packed_length(base_count: int) -> int:
    """Bytes needed for ``base_count`` bases (ceiling division)."""
    return (base_count + BASES_PER_BYTE - 1) // BASES_PER_BYTE


def _raise_invalid(sequence: str) -> NoReturn:
    bad = sorted({ch for ch in sequence if ch not in ALPHABET and ch not in ALPHABET.lower()})
    position = next(i for i, ch in enumerate(sequence) if ch in bad)
    raise InvalidSymbolError(bad, position)


class SequenceCodec:
    """Converts nucleotide strings to and from packed bytes."""

    @staticmethod
    def encode(sequence: str) -> tuple[bytes, int]:
        """Pack a sequence into 2-bit codes.

        Args:
            sequence: Bases over {A, C, G, T}, either case.

        Returns:
            Tuple of (packed bytes, base count).

        Raises:
            InvalidSymbolError: If any character is outside the alphabet.
        """
        try:
            raw = sequence.encode("ascii")
        except UnicodeEncodeError:
            _raise_invalid(sequence)
        codes = raw.translate(_ENCODE_TABLE)
        if _INVALID in codes:
            _raise_invalid(sequence)

        n = len(codes)
        out = bytearray(packed_length(n))
        for i, code in enumerate(codes):
            out[i >> 2] |= code << (6 - 2 * (i & 3))
        return bytes(out), n

    @staticmethod
    def decode(data: bytes, base_count: int) -> str:
        """Unpack exactly ``base_count`` bases from ``data``.

        Raises:
            InvalidHandleError: If ``base_count`` is negative or ``data`` is
                too short to hold that many bases.
        """
        if base_count < 0:
            raise InvalidHandleError(f"base_count must be >= 0, got {base_count}")
        needed = packed_length(base_count)
        if len(data) < needed:
            raise InvalidHandleError(
                f"{len(data)} bytes cannot hold {base_count} bases ({needed} bytes needed)"
            )
        return "".join(_DECODE_TABLE[b] for b in data[:needed])[:base_count]

    @staticmethod
    def packed_length(base_count: int) -> int:
        return packed_length(base_count)
