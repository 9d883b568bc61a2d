"""Pytest configuration and shared fixtures.

This module defines:
- Test markers (unit, integration, property)
- Shared fixtures for in-memory and file-backed stores
- Logging/settings isolation between tests
"""

import logging

import pytest
import structlog

from seqstore.adapters.config import settings as settings_module
from seqstore.adapters.outbound.memory_backing_store import InMemoryBackingStore
from seqstore.application.sequence_store import SequenceStore
from seqstore.domain.allocator import FreeListAllocator


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "unit: Fast unit tests with in-memory backing stores",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests with real files on disk",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (hypothesis)",
    )


@pytest.fixture(autouse=True)
def _isolate_logging_and_settings():
    """Undo structlog/settings state a test may have configured."""
    yield
    structlog.reset_defaults()
    for handler in list(logging.root.handlers):
        logging.root.removeHandler(handler)
    settings_module._settings = None


@pytest.fixture
def backing() -> InMemoryBackingStore:
    """Empty in-memory backing store."""
    return InMemoryBackingStore()


@pytest.fixture
def store(backing: InMemoryBackingStore) -> SequenceStore:
    """Store over an empty in-memory backing, default shrink policy, invariant checks on."""
    return SequenceStore(backing, check_invariants=True)


@pytest.fixture
def keep_tail_store(backing: InMemoryBackingStore) -> SequenceStore:
    """Store that keeps trailing free blocks instead of shrinking."""
    allocator = FreeListAllocator(extent=0, shrink_on_release=False)
    return SequenceStore(backing, allocator, check_invariants=True)
