"""CLI interface for Docshelf.

Command-line tool for serving, checking and rendering documentation.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from docshelf.config import Config
from docshelf.core.cache import FileCache
from docshelf.core.renderer import MarkdownRenderer, PageRenderer
from docshelf.core.routes import RouteTableError
from docshelf.core.sources import DocumentLoadError, HttpSource

CONFIG_HELP = "Path to configuration file (default: auto-discover docshelf.toml)"


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def cli(verbose: bool) -> None:
    """Docshelf - Markdown documentation viewer."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=CONFIG_HELP,
)
@click.option(
    "--source-dir",
    "-s",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Documentation source directory (overrides config)",
)
@click.option(
    "--cache-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Cache directory (overrides config)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
@click.option(
    "--cache/--no-cache",
    default=None,
    help="Enable/disable caching (overrides config, default: enabled)",
)
@click.option(
    "--clear-cache",
    is_flag=True,
    help="Remove cached pages before starting",
)
def serve(
    config_path: Path | None,
    source_dir: Path | None,
    cache_dir: Path | None,
    host: str | None,
    port: int | None,
    live_reload: bool | None,
    cache: bool | None,
    clear_cache: bool,
) -> None:
    """Start the documentation server."""
    from docshelf.server import run_server

    config = _load_config(config_path).with_overrides(
        host=host,
        port=port,
        source_dir=source_dir,
        cache_dir=cache_dir,
        cache_enabled=cache,
        live_reload_enabled=live_reload,
    )

    if clear_cache:
        FileCache(config.docs.cache_dir).clear()
        click.echo(f"Cleared cache: {config.docs.cache_dir}")

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Source directory: {config.docs.source_dir}")
    if config.docs.cache_enabled:
        click.echo(f"Cache directory: {config.docs.cache_dir}")
    else:
        click.echo("Cache: disabled")
    click.echo(f"Highlight style: {config.highlight.style}")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    try:
        run_server(config)
    except RouteTableError as e:
        _fail_routes(e)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=CONFIG_HELP,
)
def check(config_path: Path | None) -> None:
    """Validate that every route references an existing document."""
    from docshelf.core.navigation import Navigation

    config = _load_config(config_path)
    try:
        navigation = Navigation(config.navigation)
        navigation.routes.validate(config.docs.source_dir)
    except RouteTableError as e:
        _fail_routes(e)
    except ValueError as e:
        _fail(str(e))

    click.echo(
        click.style(f"All {len(navigation.routes)} routes resolve to documents.", fg="green"),
    )


@cli.command()
@click.argument("route")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=CONFIG_HELP,
)
def render(route: str, config_path: Path | None) -> None:
    """Render the document behind ROUTE and print its HTML."""
    from docshelf.core.navigation import Navigation

    config = _load_config(config_path)
    navigation = Navigation(config.navigation)

    document = navigation.select(route)
    if document is None:
        _fail(f"No route matches {route}")

    renderer = PageRenderer(
        config.docs.source_dir,
        MarkdownRenderer(
            style=config.highlight.style,
            allow_raw_html=config.docs.allow_raw_html,
        ),
    )
    try:
        result = renderer.render(document)
    except (FileNotFoundError, DocumentLoadError) as e:
        _fail(str(e))

    click.echo(result.html, nl=False)


@cli.command()
@click.argument("base_url")
@click.argument("identifiers", nargs=-1, required=True)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=CONFIG_HELP,
)
def fetch(base_url: str, identifiers: tuple[str, ...], config_path: Path | None) -> None:
    """Load IDENTIFIERS in order from a running server at BASE_URL.

    Each identifier supersedes the previous one; the HTML of whatever is
    displayed at the end is printed. Failed loads are logged, not fatal.
    """
    config = _load_config(config_path)
    html, displayed = asyncio.run(_fetch(base_url, identifiers, config))

    if displayed is None:
        _fail("Nothing could be loaded")
    if displayed != identifiers[-1]:
        click.echo(
            click.style(f"Warning: showing {displayed}, {identifiers[-1]} failed", fg="yellow"),
            err=True,
        )
    click.echo(html, nl=False)


async def _fetch(
    base_url: str,
    identifiers: tuple[str, ...],
    config: Config,
) -> tuple[str, str | None]:
    from docshelf.core.page import ContentPage

    markdown = MarkdownRenderer(
        style=config.highlight.style,
        allow_raw_html=config.docs.allow_raw_html,
    )
    async with HttpSource(base_url, timeout=config.fetch.timeout) as source:
        page = ContentPage(source, markdown)
        for identifier in identifiers:
            # Wait per identifier so a failed load falls back to the previous one
            page.load(identifier)
            await page.wait()
        return page.html, page.displayed_identifier


def _load_config(config_path: Path | None) -> Config:
    try:
        return Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


def _fail(message: str) -> NoReturn:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


def _fail_routes(error: RouteTableError) -> NoReturn:
    click.echo(click.style(f"Error: {error}", fg="red"), err=True)
    for problem in error.problems:
        click.echo(f"  - {problem}", err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
