"""CLI for modelops-cas."""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import load_config
from .errors import CASError, InvalidTierConfigError
from .hashing import compute_file_blob_id
from .storage.factory import make_content_store
from .storage.memory import MemoryContentStore
from .storage.tiered import TieredContentStore
from .utils import format_timestamp, humanize_size, short_id


app = typer.Typer(help="""\
Content-addressable blob store diagnostics. Inspect how tiers of a
multi-tier store are ordered, compute blob ids, and exercise the
local-cache + remote composition.""")

console = Console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging for all commands."""
    debug = verbose or bool(os.environ.get("DEBUG"))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _tier_table(title: str, bindings, kinds: Dict[str, str]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Tier", style="cyan")
    table.add_column("Priority", justify="right")
    table.add_column("Read")
    table.add_column("Write")
    table.add_column("Kind", style="dim")
    for binding in bindings:
        table.add_row(
            binding.id or "-",
            str(binding.priority),
            "[green]✓[/green]" if binding.read else "[dim]-[/dim]",
            "[green]✓[/green]" if binding.write else "[dim]-[/dim]",
            kinds.get(binding.id, "-"),
        )
    return table


@app.command()
def tiers(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to tier configuration YAML"),
):
    """Show readable and writable tiers in the order they are used."""
    try:
        cfg = load_config(config)
        stores = {t.id: MemoryContentStore() for t in cfg.tiers if t.kind == "external"}
        store = make_content_store(cfg, stores=stores)
    except InvalidTierConfigError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(1)

    # store.bindings follows cfg.tiers order
    kinds = {binding.id: tier.kind for binding, tier in zip(store.bindings, cfg.tiers)}

    if not store.readables:
        console.print("[yellow]⚠ No readable tier: fetch/list/exists will fail[/yellow]")
    else:
        console.print(_tier_table("Read order", store.readables, kinds))

    if not store.writables:
        console.print("[yellow]⚠ No writable tier: store/delete will fail[/yellow]")
    else:
        console.print(_tier_table("Write fan-out", store.writables, kinds))


@app.command("hash")
def hash_files(
    files: List[Path] = typer.Argument(..., help="Files to compute blob ids for"),
):
    """Print the blob id (SHA256 hex) and size of each file."""
    failed = False
    for path in files:
        if not path.is_file():
            console.print(f"[red]✗[/red] Not a file: {escape(str(path))}")
            failed = True
            continue
        blob_id, size = compute_file_blob_id(path)
        console.print(f"{blob_id}  {humanize_size(size):>10}  {escape(str(path))}")
    if failed:
        raise typer.Exit(1)


@app.command()
def demo(
    text: str = typer.Argument("hello", help="Content to seed the remote tier with"),
):
    """Run the local-cache + remote example and show which tier serves reads."""
    store = TieredContentStore.example()
    remote = next(b for b in store.bindings if b.id == "remote")
    local = next(b for b in store.bindings if b.id == "local")

    try:
        # Remote tier is read-only inside the composition; seed it directly
        seeded = remote.store.store(text)
        console.print(f"Seeded remote with {short_id(seeded.blob_id)} ({humanize_size(seeded.size)})")
        console.print(f"Local has blob before fetch: {local.store.exists(seeded.blob_id)}")

        for attempt in ("first", "second"):
            result, served_by = store.fetch_with_tier(seeded.blob_id)
            console.print(
                f"{attempt.capitalize()} fetch: {len(result.content)} bytes from tier "
                f"[cyan]{served_by}[/cyan], created {format_timestamp(result.properties.created_at)}"
            )
            if attempt == "first":
                console.print(f"Local has blob after fetch:  {local.store.exists(seeded.blob_id)}")

        listing = store.list_blobs()
        console.print(f"Merged listing: {len(listing.blobs)} blob(s)")
    except CASError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(1)
    finally:
        remote.store.close()


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
