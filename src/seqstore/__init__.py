# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""seqstore: Compact on-disk store for nucleotide sequences.

2-bit packed records with a first-fit free-list allocator.

Each base of a sequence over {A, C, G, T} is packed into 2 bits and written
as a flat record into a byte-addressable backing store. Reusable byte ranges
are tracked in memory by a coalescing free list.

Architecture: Hexagonal (Ports & Adapters)
- Domain core: codec, allocator, value objects (no external dependencies)
- Ports: Protocol-based backing store interface
- Adapters: file and in-memory backing stores, settings, logging
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
