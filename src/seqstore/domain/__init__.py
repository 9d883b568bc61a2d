"""Domain layer for packed sequence storage.

This package contains pure logic with zero external dependencies.
All domain code uses only Python stdlib (typing, dataclasses, bisect) and
internal seqstore.domain imports.

Modules:
    codec: 2-bit nucleotide packing (SequenceCodec)
    value_objects: Immutable value objects (Handle, FreeBlock, plans)
    allocator: First-fit coalescing free list (FreeListAllocator)
    errors: Domain exception hierarchy
"""
