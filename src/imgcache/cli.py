"""Click CLI for imgcache — fetch, inspect and manage cached images."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from imgcache.config.hierarchy import load_config_hierarchy
from imgcache.config.schema import ImageCacheConfig
from imgcache.errors.exceptions import FetchError, ImageCacheError

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level."""
    level = logging.getLevelName(default_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _load_config(**overrides: Any) -> ImageCacheConfig:
    return ImageCacheConfig.from_mapping(load_config_hierarchy(**overrides))


@click.group()
@click.version_option(package_name="imgcache")
def cli() -> None:
    """imgcache — cache remote images on local disk."""


@cli.command()
@click.argument("url")
@click.option("--no-cache", is_flag=True, default=False, help="Load from network without caching.")
@click.option("--timeout", type=int, default=None, help="Fetch timeout in milliseconds.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def fetch(url: str, no_cache: bool, timeout: int | None, verbose: int) -> None:
    """Load URL through the cache and describe the image."""
    config = _load_config(local_storage=False if no_cache else None, timeout_ms=timeout)
    _setup_logging(verbose, config.log_level)

    from imgcache.core import ImageCache

    async def _run() -> dict[str, str]:
        async with ImageCache(config) as cache:
            path = cache.resolve_local_path(url)
            was_cached = cache.local_storage and path.is_file()
            if not url:
                await cache.init_default_image()
            handle = await cache.load_url_image(url)
            width, height = handle.size
            return {
                "URL": url,
                "Size": f"{width}x{height}",
                "Mode": handle.mode,
                "Local path": str(path) if cache.local_storage and url else "-",
                "Cache hit": "yes" if was_cached else "no",
            }

    try:
        info = asyncio.run(_run())
    except FetchError as e:
        error_console.print(f"[red]Fetch failed ({e.cause}):[/red] {e}")
        sys.exit(1)
    except ImageCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    table = Table(title="Image", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for field, value in info.items():
        table.add_row(field, value)
    console.print(table)


@cli.command()
@click.argument("url")
def path(url: str) -> None:
    """Print the local file URL is cached under."""
    from imgcache.cache.keys import PathResolver

    config = _load_config()
    resolver = PathResolver(config.cache_dir, extension=config.file_extension)
    console.print(str(resolver.resolve(url)), soft_wrap=True)


@cli.command()
@click.argument("url_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--workers", type=int, default=None, help="Concurrent downloads.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def warm(url_file: str, workers: int | None, verbose: int) -> None:
    """Preload every URL listed (one per line) in URL_FILE."""
    config = _load_config(local_storage=True)
    _setup_logging(verbose, config.log_level)

    lines = Path(url_file).read_text().splitlines()
    urls = [line.strip() for line in lines if not line.lstrip().startswith("#")]

    from imgcache.core import ImageCache

    async def _run():
        async with ImageCache(config) as cache:
            return await cache.warm(urls, max_concurrent=workers)

    try:
        result = asyncio.run(_run())
    except ImageCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    table = Table(title="Warm Summary", show_header=True)
    table.add_column("Outcome", style="cyan")
    table.add_column("Count")
    table.add_row("Downloaded", str(result.downloaded))
    table.add_row("Already cached", str(result.cached))
    table.add_row("Failed", str(result.failed))
    table.add_row("Empty", str(result.no_url))
    console.print(table)
    if result.failed:
        sys.exit(1)


@cli.group()
def cache() -> None:
    """Cache management commands."""


@cache.command("stats")
def cache_stats() -> None:
    """Show on-disk cache statistics."""
    from imgcache.cache.store import LocalStore

    config = _load_config()
    store = LocalStore(config.cache_dir, extension=config.file_extension)

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    table.add_row("Directory", str(store.cache_dir))
    table.add_row("Entries", str(len(store.entries())))
    table.add_row("Size (MB)", f"{store.size_bytes() / (1024 * 1024):.1f}")

    console.print(table)


@cache.command("clear")
@click.confirmation_option(prompt="Are you sure you want to clear the image cache?")
def cache_clear() -> None:
    """Delete all cached image files."""
    from imgcache.cache.store import LocalStore

    config = _load_config()
    store = LocalStore(config.cache_dir, extension=config.file_extension)
    try:
        removed = store.clear()
    except ImageCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    console.print(f"[green]Removed {removed} cached images.[/green]")


def main() -> None:
    """Entry point for the CLI."""
    cli()
