import asyncio
import json

import click

from . import __version__
from .cache import FileCacheStore
from .config import get_settings
from .services import SettingsStore


def get_version():
    return __version__


def run_server(host="0.0.0.0", port=5002, reload=False):
    from .server import run_server as serve_app

    serve_app(host=host, port=port, reload=reload)


@click.group()
def cli():
    pass


@cli.command()
@click.option("--format", default="text", type=click.Choice(["text", "json"]))
def version(format):
    if format == "json":
        click.echo(json.dumps({"version": get_version()}))
    else:
        click.echo(f"v{get_version()}")


@cli.command()
def settings():
    """Print the AI settings the process starts with."""
    snapshot = SettingsStore.from_settings(get_settings()).get()
    click.echo(json.dumps(snapshot.model_dump(mode="json"), indent=2))


@cli.command("cache-clear")
@click.option("--dir", "cache_dir", default=None, help="Cache directory (defaults to AI_CACHE_DIR)")
def cache_clear(cache_dir):
    """Delete every cached AI result."""
    store = FileCacheStore(cache_dir or get_settings().ai_cache_dir)
    removed = asyncio.run(store.clear())
    click.echo(f"Removed {removed} cache entries")


@cli.command()
@click.option("--host", default="0.0.0.0")
@click.option("--port", default=5002)
@click.option("--reload", is_flag=True)
def serve(host, port, reload):
    run_server(host, port, reload)


if __name__ == "__main__":
    cli()
