# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""File backing store adapter.

Implements BackingStorePort over a single binary file opened for
random access. Every OSError is wrapped in StorageIOError so the
application layer only sees domain errors.
"""

import os
from pathlib import Path

import structlog

from seqstore.domain.errors import StorageIOError

logger = structlog.get_logger(__name__)


class FileBackingStore:
    """Random-access file holding packed sequence records.

    The file is created when missing and opened unbuffered in ``r+b`` mode.
    It stays open until ``close()``; use the instance as a context manager
    to close it on every exit path.

    Args:
        path: File location (``~`` is expanded, parent directories created).
        fsync_on_write: Call ``os.fsync`` after every write and resize.
    """

    def __init__(self, path: Path | str, fsync_on_write: bool = False) -> None:
        self.path = Path(path).expanduser()
        self.fsync_on_write = fsync_on_write
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self.path.touch()
                logger.info("backing_file_created", path=str(self.path))
            self._f = open(self.path, "r+b", buffering=0)  # noqa: SIM115
        except OSError as e:
            raise StorageIOError(f"Failed to open backing file {self.path}: {e}") from e

    def __enter__(self) -> "FileBackingStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._f.closed

    def read(self, offset: int, length: int) -> bytes:
        self._check_open()
        try:
            self._f.seek(offset)
            data = self._f.read(length)
        except (OSError, ValueError) as e:
            raise StorageIOError(f"Read of {length} bytes at offset {offset} failed: {e}") from e
        if data is None or len(data) != length:
            got = 0 if data is None else len(data)
            raise StorageIOError(
                f"short read at offset {offset}: wanted {length} bytes, got {got}"
            )
        return data

    def write(self, offset: int, data: bytes) -> None:
        self._check_open()
        try:
            self._f.seek(offset)
            view = memoryview(data)
            while view:
                written = self._f.write(view)
                if not written:
                    raise OSError(f"write returned {written}")
                view = view[written:]
            self._sync()
        except (OSError, ValueError) as e:
            raise StorageIOError(
                f"Write of {len(data)} bytes at offset {offset} failed: {e}"
            ) from e

    def truncate_or_extend(self, new_length: int) -> None:
        self._check_open()
        try:
            self._f.truncate(new_length)
            self._sync()
        except (OSError, ValueError) as e:
            raise StorageIOError(f"Resize of {self.path} to {new_length} bytes failed: {e}") from e

    def current_length(self) -> int:
        self._check_open()
        try:
            return os.fstat(self._f.fileno()).st_size
        except OSError as e:
            raise StorageIOError(f"Failed to stat {self.path}: {e}") from e

    def close(self) -> None:
        if self._f.closed:
            return
        try:
            self._f.close()
        except OSError as e:
            raise StorageIOError(f"Failed to close {self.path}: {e}") from e

    def _sync(self) -> None:
        if self.fsync_on_write:
            os.fsync(self._f.fileno())

    def _check_open(self) -> None:
        if self._f.closed:
            raise StorageIOError(f"backing file {self.path} is closed")
