"""Shared CLI application context and setup helpers."""

from __future__ import annotations

import sys

import typer
from loguru import logger
from rich.console import Console

from inspectsonar import __logo__, __version__

app = typer.Typer(
    name="inspectsonar",
    help=f"{__logo__} inspectsonar - InspectCode reports as SonarQube rules and issues",
    no_args_is_help=True,
)

console = Console()


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} inspectsonar v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-V", callback=version_callback, is_eager=True),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
) -> None:
    """inspectsonar - InspectCode reports as SonarQube rules and issues."""
    configure_logging(verbose)
