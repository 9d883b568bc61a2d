# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""CLI entrypoint for seqstore.

Usage:
    seqstore insert ACGTACGT --data sequences.bin
    seqstore get 0:2:8 --data sequences.bin
    seqstore run commands.txt --data sequences.bin

The free list is held in memory only, so ``insert`` and ``get`` run as
separate processes always append. Use ``run`` to execute a whole command
script against one store instance.
"""

from pathlib import Path
from typing import NoReturn

import typer

from seqstore import __version__
from seqstore.adapters.config.logging import configure_logging, get_logger
from seqstore.adapters.config.settings import get_settings
from seqstore.application.command_script import ScriptRunner
from seqstore.application.sequence_store import SequenceStore
from seqstore.domain.errors import SeqStoreError
from seqstore.domain.value_objects import Handle

app = typer.Typer(
    name="seqstore",
    help="Compact 2-bit on-disk store for nucleotide sequences",
    add_completion=False,
)


def _open_store(data: str | None) -> SequenceStore:
    settings = get_settings()
    configure_logging(settings.logging.level, json_output=settings.logging.json_output)
    return SequenceStore.open_file(data, settings.storage)


def _fail(message: str) -> NoReturn:
    get_logger(__name__).error("command_failed", error=message)
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


@app.command()
def insert(
    sequence: str = typer.Argument(..., help="Bases over A, C, G, T (either case)"),
    data: str = typer.Option(
        None,
        "--data",
        "-d",
        help="Backing file (default: from settings)",
    ),
) -> None:
    """Store a sequence and print its handle token."""
    try:
        with _open_store(data) as store:
            handle = store.insert(sequence)
    except SeqStoreError as e:
        _fail(str(e))
    typer.echo(handle.to_token())


@app.command()
def get(
    token: str = typer.Argument(..., help="Handle token offset:byte_length:base_count"),
    data: str = typer.Option(
        None,
        "--data",
        "-d",
        help="Backing file (default: from settings)",
    ),
) -> None:
    """Print the sequence stored under a handle token."""
    try:
        handle = Handle.from_token(token)
        with _open_store(data) as store:
            sequence = store.get_entry(handle)
    except SeqStoreError as e:
        _fail(str(e))
    typer.echo(sequence)


@app.command()
def run(
    script: Path = typer.Argument(..., help="Command script (insert/remove/get/print)"),
    data: str = typer.Option(
        None,
        "--data",
        "-d",
        help="Backing file (default: from settings)",
    ),
) -> None:
    """Execute a command script against one store instance.

    Example:
        $ cat commands.txt
        insert ACGT
        insert ACGTA
        remove $1
        print
        $ seqstore run commands.txt --data seq.bin
    """
    try:
        lines = script.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        _fail(f"cannot read script {script}: {e}")
    try:
        with _open_store(data) as store:
            ScriptRunner(store, typer.echo).run(lines)
    except SeqStoreError as e:
        _fail(str(e))


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"seqstore v{__version__}")


@app.command()
def config() -> None:
    """Show current configuration."""
    settings = get_settings()

    typer.echo("=" * 60)
    typer.echo("seqstore - Configuration")
    typer.echo("=" * 60)
    typer.echo()
    typer.echo("[Storage]")
    typer.echo(f"  Data path: {settings.storage.data_path}")
    typer.echo(f"  Shrink on release: {settings.storage.shrink_on_release}")
    typer.echo(f"  Check invariants: {settings.storage.check_invariants}")
    typer.echo(f"  Fsync on write: {settings.storage.fsync_on_write}")
    typer.echo()
    typer.echo("[Logging]")
    typer.echo(f"  Level: {settings.logging.level}")
    typer.echo(f"  JSON output: {settings.logging.json_output}")
    typer.echo("=" * 60)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
