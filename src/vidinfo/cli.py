"""Command-line interface for vidinfo."""

import json
from typing import Annotated

import typer

from . import __version__
from .cache import FileVideoStore
from .config import Settings, get_settings
from .exceptions import (
    OutOfQuotaError,
    ProviderError,
    UnresolvableReferenceError,
    UnsupportedMimeTypeError,
)
from .logging import setup_logging
from .models import Video
from .providers.registry import build_registry
from .resolver import MetadataResolver, QueryResolver

app = typer.Typer(
    name="vidinfo",
    help="Video metadata resolver - normalized, cached video info from URLs and searches",
    add_completion=False,
)


def _load_settings() -> Settings:
    try:
        return get_settings()
    except Exception as e:
        typer.echo(f"❌ Configuration error: {e}", err=True)
        raise typer.Exit(1) from e


def _build_resolvers(settings: Settings) -> tuple[MetadataResolver, QueryResolver]:
    store = FileVideoStore(settings.cache_dir, ttl_hours=settings.cache_ttl_hours)
    registry = build_registry(settings)
    metadata = MetadataResolver(registry, store, settings.supported_mime_set)
    return metadata, QueryResolver(registry, metadata, store)


def _dump(result: Video | list[Video]) -> str:
    if isinstance(result, list):
        return json.dumps([v.model_dump(mode="json") for v in result], indent=2)
    return json.dumps(result.model_dump(mode="json"), indent=2)


def _fail(e: ProviderError) -> typer.Exit:
    """Report a resolution error and return the exit to raise."""
    if isinstance(e, UnresolvableReferenceError):
        typer.echo(f"❌ Cannot resolve: {e}", err=True)
    elif isinstance(e, UnsupportedMimeTypeError):
        typer.echo(f"❌ Unplayable video: {e}", err=True)
    elif isinstance(e, OutOfQuotaError):
        typer.echo(f"❌ {e}", err=True)
        typer.echo("💡 The provider's API quota is exhausted. Try again later.", err=True)
    else:
        typer.echo(f"❌ Failed to fetch video info: {e}", err=True)
    return typer.Exit(1)


@app.command()
def resolve(
    query: Annotated[str, typer.Argument(help="Video/playlist URL or free-text search query")],
    search_service: Annotated[
        str | None,
        typer.Option(
            "--search-service",
            "-s",
            help="Service used for search queries (default: from DEFAULT_SEARCH_SERVICE)",
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable verbose logging")] = False,
) -> None:
    """Resolve a URL or search query and print the video metadata as JSON.

    Examples:
        vidinfo resolve https://www.youtube.com/watch?v=dQw4w9WgXcQ
        vidinfo resolve "https://www.youtube.com/playlist?list=PL123"
        vidinfo resolve "lofi hip hop" --search-service dailymotion
    """
    setup_logging(verbose)
    settings = _load_settings()
    _, resolver = _build_resolvers(settings)

    try:
        result = resolver.resolve(query, search_service or settings.default_search_service)
    except ProviderError as e:
        raise _fail(e) from e

    typer.echo(_dump(result))


@app.command()
def info(
    service: Annotated[str, typer.Argument(help="Service id (youtube, vimeo, ...)")],
    video_id: Annotated[str, typer.Argument(help="Service-scoped video id")],
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable verbose logging")] = False,
) -> None:
    """Print metadata for a single video, using the cache where possible."""
    setup_logging(verbose)
    settings = _load_settings()
    resolver, _ = _build_resolvers(settings)

    try:
        video = resolver.resolve(service, video_id)
    except ProviderError as e:
        raise _fail(e) from e

    typer.echo(_dump(video))


@app.command("cache-stats")
def cache_stats() -> None:
    """Show cache statistics."""
    settings = _load_settings()
    store = FileVideoStore(settings.cache_dir, ttl_hours=settings.cache_ttl_hours)
    stats = store.stats()

    typer.echo(f"📦 Cache: {stats['cache_dir']}")
    typer.echo(f"   Total entries: {stats['total_files']}")
    typer.echo(f"   Valid: {stats['valid']}")
    typer.echo(f"   Expired: {stats['expired']}")
    typer.echo(f"   Corrupted: {stats['corrupted']}")
    for service, count in sorted(stats["by_service"].items()):
        typer.echo(f"   {service}: {count}")


@app.command("cache-clear")
def cache_clear(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Remove every cached video."""
    settings = _load_settings()
    store = FileVideoStore(settings.cache_dir, ttl_hours=settings.cache_ttl_hours)

    if not yes and not typer.confirm(f"Remove all cached videos in {store.cache_dir}?"):
        typer.echo("Aborted.")
        raise typer.Exit(0)

    count = store.clear()
    typer.echo(f"🗑️  Removed {count} cached video(s)")


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"vidinfo v{__version__}")
    typer.echo("Video metadata resolver")


if __name__ == "__main__":
    app()
