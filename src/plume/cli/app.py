"""Main Typer application for Plume."""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from plume.cli.errorhandler import handle_cli_errors
from plume.core.config import PlumeConfig
from plume.core.config_loader import ConfigLoader
from plume.core.logging import configure_logging, console
from plume.core.registry import Registry, format_address
from plume.engine.run import run_build
from plume.infra.tools import MarkdownConverter, XsltProcessor

app = typer.Typer(
    name="plume",
    help="Build a stable-address site tree from a directory of posts",
    add_completion=False,
)

SiteRoot = Annotated[
    Path | None,
    typer.Option("--site-root", help="Site directory (defaults to the current directory)"),
]
Debug = Annotated[bool, typer.Option("--debug", help="Show full tracebacks on errors")]


@app.callback()
def main(
    log_level: Annotated[str | None, typer.Option("--log-level", help="Logging level")] = None,
) -> None:
    """Configure logging for every command."""
    configure_logging(log_level)


def _load_config(site_root: Path | None) -> PlumeConfig:
    return ConfigLoader(site_root.resolve() if site_root else None).load()


def _status_icon(ok: bool) -> str:
    return "[bold green]✔[/bold green]" if ok else "[bold red]✘[/bold red]"


@app.command()
def build(site_root: SiteRoot = None, debug: Debug = False) -> None:
    """Render every post and tag, then persist the identifier registry."""
    with handle_cli_errors(debug=debug):
        config = _load_config(site_root)
        result = run_build(config)

    console.print(
        f"[bold green]Built[/bold green] {len(result.source)} posts and "
        f"{len(result.taxonomy.tags)} tags into {config.paths.abs_xml_dir}"
    )


@app.command()
def registry(site_root: SiteRoot = None, debug: Debug = False) -> None:
    """List the identifiers recorded in the lock file."""
    with handle_cli_errors(debug=debug):
        config = _load_config(site_root)
        keys = Registry.load(config.paths.abs_lock_file)

        table = Table(title=f"Registry ({len(keys)} keys)")
        table.add_column("Address", style="bold cyan")
        table.add_column("Id", justify="right")
        table.add_column("Key")
        for key in keys:
            table.add_row(format_address(key.id), str(key.id), key.value)

    console.print(table)


@app.command()
def doctor(site_root: SiteRoot = None, debug: Debug = False) -> None:
    """Check input directories and external tools."""
    with handle_cli_errors(debug=debug):
        config = _load_config(site_root)

    paths = config.paths
    table = Table(title="Plume Health Report")
    table.add_column("Check", style="bold cyan")
    table.add_column("Status", style="bold")
    table.add_column("Details")

    table.add_row("Posts", _status_icon(paths.abs_posts_dir.is_dir()), str(paths.abs_posts_dir))
    table.add_row("Statics", _status_icon(paths.abs_statics_dir.is_dir()), str(paths.abs_statics_dir))
    table.add_row("Styles", _status_icon(paths.abs_styles_dir.is_dir()), str(paths.abs_styles_dir))
    table.add_row("Registry", _status_icon(paths.abs_lock_file.is_file()), str(paths.abs_lock_file))

    for name, tool in (
        ("Markdown converter", MarkdownConverter(config.tools.markdown)),
        ("XSLT processor", XsltProcessor(config.tools.xslt)),
    ):
        found = tool.locate()
        table.add_row(name, _status_icon(found is not None), found or ", ".join(tool.candidates))

    console.print(table)


if __name__ == "__main__":
    app()
