"""Command-line entry point for lnplugin."""

from __future__ import annotations

import importlib
import sys
from typing import Annotated

import typer
from rich.console import Console

from lnplugin import __version__
from lnplugin.exceptions import StartupIOError
from lnplugin.manifest import build_manifest
from lnplugin.plugin import Plugin

app = typer.Typer(
    name="lnplugin",
    help="lnplugin - run and inspect JSON-RPC host plugins",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()
# stdout belongs to the host protocol while a plugin runs
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"lnplugin version: {__version__}")
        raise typer.Exit(0)


def load_plugin(target: str) -> Plugin:
    """Import a plugin from a ``module:attribute`` reference.

    The attribute may be a Plugin instance or a zero-argument factory
    returning one.

    Raises:
        typer.BadParameter: If the reference cannot be resolved to a Plugin
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise typer.BadParameter(f"Expected 'module:attribute', got '{target}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"Cannot import module '{module_name}': {e}") from e

    try:
        obj = getattr(module, attr)
    except AttributeError as e:
        raise typer.BadParameter(f"Module '{module_name}' has no attribute '{attr}'") from e

    if callable(obj) and not isinstance(obj, Plugin):
        obj = obj()
    if not isinstance(obj, Plugin):
        raise typer.BadParameter(f"'{target}' is not a Plugin")
    return obj


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    lnplugin - run and inspect JSON-RPC host plugins.

    Use 'lnplugin COMMAND --help' for help with specific commands.
    """
    pass


@app.command()
def run(
    target: Annotated[str, typer.Argument(help="Plugin reference, 'module:attribute'")],
) -> None:
    """Serve a plugin on stdin/stdout until the host disconnects."""
    plugin = load_plugin(target)
    try:
        plugin.start(sys.stdin, sys.stdout)
    except StartupIOError as e:
        err_console.print(f"[red]Startup aborted: {e}[/red]")
        raise typer.Exit(1) from e


@app.command()
def manifest(
    target: Annotated[str, typer.Argument(help="Plugin reference, 'module:attribute'")],
) -> None:
    """Print the manifest a plugin would return to the host."""
    plugin = load_plugin(target)
    console.print_json(data=build_manifest(plugin).model_dump(mode="json"))


def cli_main() -> None:
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        err_console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
