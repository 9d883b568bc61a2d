# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Command script interpreter.

Runs a sequence of store commands in one process so the free list lives
across them. One command per line:

    insert <SEQUENCE>     print the new handle token
    remove <REF>          release a record
    get <REF>             print the decoded sequence
    print                 print the free list

``<REF>`` is either a handle token (``offset:byte_length:base_count``) or
``$N``, the handle produced by the N-th insert of the script (1-based).
Blank lines and lines starting with ``#`` are ignored.
"""

from collections.abc import Callable, Iterable

from seqstore.application.sequence_store import SequenceStore
from seqstore.domain.errors import ScriptError, SeqStoreError
from seqstore.domain.value_objects import Handle


class ScriptRunner:
    """Executes command script lines against a SequenceStore.

    Args:
        store: Target store.
        emit: Called with each output line.
    """

    def __init__(self, store: SequenceStore, emit: Callable[[str], None]) -> None:
        self.store = store
        self.emit = emit
        self.inserted: list[Handle] = []

    def run(self, lines: Iterable[str]) -> int:
        """Execute every line; return the number of commands run.

        Raises:
            ScriptError: On the first failing line. Commands before it have
                already been applied.
        """
        executed = 0
        for line_no, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            try:
                self._execute(line_no, line)
            except ScriptError:
                raise
            except SeqStoreError as e:
                raise ScriptError(line_no, str(e)) from e
            executed += 1
        return executed

    def _execute(self, line_no: int, line: str) -> None:
        command, _, arg = line.partition(" ")
        command = command.lower()
        arg = arg.strip()

        if command == "insert":
            if not arg:
                raise ScriptError(line_no, "insert requires a sequence")
            handle = self.store.insert(arg)
            self.inserted.append(handle)
            self.emit(handle.to_token())
        elif command == "remove":
            self.store.remove(self._resolve(line_no, arg))
        elif command == "get":
            self.emit(self.store.get_entry(self._resolve(line_no, arg)))
        elif command == "print":
            self.emit(self.store.describe_free_list())
        else:
            raise ScriptError(line_no, f"unknown command {command!r}")

    def _resolve(self, line_no: int, ref: str) -> Handle:
        if not ref:
            raise ScriptError(line_no, "missing handle reference")
        if ref.startswith("$"):
            try:
                index = int(ref[1:])
            except ValueError as e:
                raise ScriptError(line_no, f"bad handle reference {ref!r}") from e
            if not 1 <= index <= len(self.inserted):
                raise ScriptError(
                    line_no, f"{ref} does not name one of the {len(self.inserted)} inserts so far"
                )
            return self.inserted[index - 1]
        return Handle.from_token(ref)
