import asyncio
import logging
from pathlib import Path

import typer
from rich import print

from graphgarden.config import DEFAULT_CACHE_PATH, DEFAULT_CONFIG_PATH, load_config
from graphgarden.errors import GraphGardenError
from graphgarden.models.cache import FetchCache
from graphgarden.services.builder import build_site, read_public_file, write_public_file
from graphgarden.services.friends import compile_graph, load_compiled, sync_friends, write_compiled

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="graphgarden",
    help="Turn web rings into explorable node graphs.",
    no_args_is_help=True,
)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr.")):
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)


@app.command("build")
def build(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to graphgarden.toml"),
):
    """Walk a built site, extract links, and write .well-known/graphgarden.json."""
    try:
        site_config = load_config(config)
        document = build_site(site_config)
        destination = write_public_file(document, Path(site_config.output.dir))
    except GraphGardenError as exc:
        print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    print(
        f"[green]✔[/green] wrote {destination} "
        f"({len(document.nodes)} nodes, {len(document.edges)} edges)"
    )


@app.command("sync")
def sync(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to graphgarden.toml"),
    cache: Path = typer.Option(DEFAULT_CACHE_PATH, "--cache", help="Path to the friend fetch cache"),
):
    """Fetch friend graphs and write .well-known/graphgarden.compiled.json."""
    try:
        site_config = load_config(config)
        output_dir = Path(site_config.output.dir)
        own = read_public_file(output_dir)
        fetch_cache = FetchCache.load(cache)
        previous = load_compiled(output_dir)
    except FileNotFoundError as exc:
        print(f"[bold red]Error:[/bold red] {exc.filename} does not exist.")
        print("Run [bold]graphgarden build[/bold] first.")
        raise typer.Exit(code=1)
    except GraphGardenError as exc:
        print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    report = asyncio.run(sync_friends(site_config.friends, fetch_cache, previous))
    fetch_cache.save(cache)
    destination = write_compiled(compile_graph(own, report.graphs), output_dir)

    for result in report.results:
        colour = {"fresh": "green", "cached": "blue", "error": "red"}[result.status]
        print(f"[{colour}]{result.status:>6}[/{colour}] {result.friend} {result.detail}")
    print(f"[green]✔[/green] wrote {destination}")

    if any(result.status == "error" for result in report.results):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
