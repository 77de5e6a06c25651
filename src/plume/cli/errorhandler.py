"""CLI error handling utilities."""

from collections.abc import Generator
from contextlib import contextmanager

import typer
from pydantic import ValidationError
from rich.markup import escape

from plume.core.exceptions import (
    AddressOverflowError,
    BuildError,
    LoaderError,
    PlumeError,
    RegistryError,
    ToolError,
)
from plume.core.logging import console


@contextmanager
def handle_cli_errors(*, debug: bool = False) -> Generator[None, None, None]:
    """Context manager to handle CLI errors gracefully.

    Args:
        debug: If True, re-raise so the full traceback is shown.

    """
    try:
        yield
    except (KeyboardInterrupt, SystemExit, typer.Exit):
        raise
    except RegistryError as e:
        if debug:
            raise
        console.print(f"[bold red]Registry Error:[/bold red] {escape(str(e))}")
        console.print("The lock file must not be hand-edited; restore it from version control.")
        raise typer.Exit(1) from e
    except LoaderError as e:
        if debug:
            raise
        console.print(f"[bold red]Post Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except AddressOverflowError as e:
        if debug:
            raise
        console.print(f"[bold red]Address Space Exhausted:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except ToolError as e:
        if debug:
            raise
        console.print(f"[bold red]External Tool Error:[/bold red] {escape(str(e))}")
        console.print("Run [bold]plume doctor[/bold] to check which tools are installed.")
        raise typer.Exit(1) from e
    except BuildError as e:
        if debug:
            raise
        console.print(f"[bold red]Build Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except (ValidationError, ValueError) as e:
        if debug:
            raise
        console.print(f"[bold red]Configuration Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except PlumeError as e:
        if debug:
            raise
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except Exception as e:
        if debug:
            console.print_exception(show_locals=False)
            raise typer.Exit(1) from e

        console.print(f"[bold red]An unexpected error occurred:[/bold red] {escape(str(e))}")
        console.print("[dim]Run with [bold]--debug[/bold] for more details.[/dim]")
        raise typer.Exit(1) from e
