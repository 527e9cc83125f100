"""
bucketstore CLI entry point.

Commands:
    bucketstore open          — Check (and bootstrap) the configured store
    bucketstore put KEY VALUE — Write a record
    bucketstore get KEY       — Read a record
    bucketstore rm KEY        — Delete a record
    bucketstore has KEY       — Check a key
    bucketstore ls [PREFIX]   — Query keys under a prefix
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

import typer
from rich.console import Console
from rich.table import Table

from bucketstore import __version__

app = typer.Typer(
    name="bucketstore",
    help="bucketstore — a key/value datastore on top of a cloud bucket.",
    add_completion=False,
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    root: str = typer.Option(None, "--root", "-r", help="Override store root"),
    provider: str = typer.Option(None, "--provider", "-p", help="memory, sqlite or gcs"),
    create: bool = typer.Option(
        None, "--create/--no-create", help="Create the bucket if missing"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
) -> None:
    """Global options shared by every command."""
    overrides: dict[str, Any] = {}
    if root is not None:
        overrides.setdefault("store", {})["root"] = root
    if create is not None:
        overrides.setdefault("store", {})["create_if_missing"] = create
    if provider is not None:
        overrides.setdefault("backend", {})["provider"] = provider
    ctx.obj = {"overrides": overrides, "verbose": verbose}


@app.command()
def version() -> None:
    """Show the bucketstore version."""
    console.print(f"bucketstore {__version__}")


@app.command("open")
def open_store(ctx: typer.Context) -> None:
    """Open the store, bootstrapping the bucket if needed."""

    async def action(store) -> None:
        metadata = await store.client.get_metadata()
        console.print(f"[green]Store open[/green] at {store.root!r} in bucket {metadata.name}")

    _run(ctx, action)


@app.command()
def put(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to write, e.g. /a/b"),
    value: str = typer.Argument(None, help="Value as text"),
    file: Path = typer.Option(None, "--file", "-f", help="Read the value from a file"),
) -> None:
    """Write a record."""
    if (value is None) == (file is None):
        console.print("[red]Give exactly one of VALUE or --file[/red]")
        raise typer.Exit(2)
    data = file.read_bytes() if file is not None else value.encode("utf-8")

    async def action(store) -> None:
        await store.put(key, data)
        console.print(f"[green]Wrote[/green] {key} ({len(data)} bytes)")

    _run(ctx, action)


@app.command()
def get(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to read"),
    out: Path = typer.Option(None, "--out", "-o", help="Write the value to a file"),
) -> None:
    """Read a record."""

    async def action(store) -> None:
        data = await store.get(key)
        if out is not None:
            out.write_bytes(data)
            console.print(f"[green]Saved[/green] {key} to {out}")
        else:
            typer.echo(data, nl=False)

    _run(ctx, action)


@app.command()
def rm(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to delete"),
) -> None:
    """Delete a record."""

    async def action(store) -> None:
        await store.delete(key)
        console.print(f"[green]Deleted[/green] {key}")

    _run(ctx, action)


@app.command()
def has(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to check"),
) -> None:
    """Check whether a key exists. Exits 1 when it does not."""

    async def action(store) -> None:
        found = await store.has(key)
        console.print("yes" if found else "no")
        if not found:
            raise typer.Exit(1)

    _run(ctx, action)


@app.command()
def ls(
    ctx: typer.Context,
    prefix: str = typer.Argument("", help="Key prefix, e.g. /blocks"),
    keys_only: bool = typer.Option(False, "--keys-only", "-k", help="Do not fetch values"),
    offset: int = typer.Option(None, "--offset", help="Skip this many results"),
    limit: int = typer.Option(None, "--limit", "-n", help="Return at most this many"),
) -> None:
    """List records under a prefix, ordered by key."""
    from bucketstore.store.query import Query, order_by_key

    query = Query(
        prefix=prefix,
        orders=[order_by_key()],
        offset=offset,
        limit=limit,
        keys_only=keys_only,
    )

    async def action(store) -> None:
        entries = await store.query(query).collect()
        if keys_only:
            for entry in entries:
                console.print(str(entry.key), highlight=False)
            return
        table = Table(show_header=True, header_style="bold")
        table.add_column("Key")
        table.add_column("Bytes", justify="right")
        for entry in entries:
            table.add_row(str(entry.key), str(len(entry.value or b"")))
        console.print(table)

    _run(ctx, action)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Internal Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _run(ctx: typer.Context, action: Callable[[Any], Awaitable[None]]) -> None:
    """Load config, open the store, run action, report errors."""
    from bucketstore.core.errors import BucketStoreError

    try:
        asyncio.run(_with_store(ctx.obj or {}, action))
    except BucketStoreError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)


async def _with_store(options: dict[str, Any], action: Callable[[Any], Awaitable[None]]) -> None:
    from bucketstore.core.config import BucketStoreConfig
    from bucketstore.core.logging import setup_logging_from_config
    from bucketstore.store.bucket import BucketDatastore

    config = BucketStoreConfig.load(overrides=options.get("overrides"))

    setup_logging_from_config(
        config, console_level=logging.DEBUG if options.get("verbose") else None
    )
    logger = logging.getLogger("bucketstore")

    store = BucketDatastore.from_config(config)
    logger.debug(f"Using {config.backend.provider} backend, root {config.store.root!r}")
    try:
        async with store:
            await action(store)
    finally:
        await store.client.close()
