"""
Bay Navigator - Command Line Interface

Operate the Bay Navigator safety layer from a terminal. Built with Typer
for the command-line experience and Rich for output.

Usage:
    $ bay-navigator --help
    $ bay-navigator safety status
    $ bay-navigator safety quick-exit --enable --url https://www.weather.gov
    $ bay-navigator --network wifi safety network

Sub-command Groups:
    safety   - Quick exit, incognito, history, tips, network and disguise

For detailed help on any command:
    $ bay-navigator <group> --help
    $ bay-navigator <group> <command> --help
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from bay_navigator import __version__

# Create main console for output
console = Console()
err_console = Console(stderr=True)

# Create main application
app = typer.Typer(
    name="bay-navigator",
    help="Bay Navigator - safety and privacy tools for the resource directory",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)

# Create sub-command groups
safety_app = typer.Typer(
    name="safety",
    help="Quick exit, incognito mode, history, safety tips and disguise",
    no_args_is_help=True,
)

disguise_app = typer.Typer(
    name="disguise",
    help="Disguised app icon commands",
    no_args_is_help=True,
)

# Register sub-commands
app.add_typer(safety_app, name="safety")
safety_app.add_typer(disguise_app, name="disguise")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Bay Navigator version {__version__}")
        raise typer.Exit()


def verbose_callback(value: bool) -> None:
    """Set verbose mode."""
    if value:
        logging.basicConfig(level=logging.DEBUG)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        callback=verbose_callback,
        help="Enable verbose output.",
    ),
    preferences: Optional[Path] = typer.Option(
        None,
        "--preferences",
        "-p",
        help="Path to the preferences JSON file.",
        envvar="BAY_NAVIGATOR_PREFERENCES_PATH",
    ),
    platform: Optional[str] = typer.Option(
        None,
        "--platform",
        help="Platform to report disguise results for: android, ios, web, desktop.",
    ),
    network: Optional[str] = typer.Option(
        None,
        "--network",
        "-n",
        help="Comma-separated connectivity reading (wifi, mobile, vpn, none) instead of inspecting interfaces.",
    ),
) -> None:
    """
    Bay Navigator - safety and privacy tools

    Manage the quick exit, incognito history, safety tips, network privacy
    warnings and disguised app mode used by the Bay Navigator apps.
    """
    from bay_navigator.config.settings import Settings
    from bay_navigator.safety import parse_reading

    overrides: dict[str, object] = {}
    if preferences is not None:
        overrides["PREFERENCES_PATH"] = preferences
    if platform is not None:
        if platform not in ("android", "ios", "web", "desktop"):
            raise typer.BadParameter(f"Unknown platform {platform!r}", param_hint="--platform")
        overrides["PLATFORM"] = platform

    reading = None
    if network is not None:
        try:
            reading = parse_reading(network.split(","))
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--network") from exc

    settings = Settings(**overrides)
    if not verbose:
        logging.basicConfig(level=settings.LOG_LEVEL)

    ctx.obj = {"settings": settings, "network": reading}


# Import subcommand modules to register their commands
# These are imported at the end to avoid circular imports
def _register_subcommands() -> None:
    """Register all subcommand modules."""
    from bay_navigator.cli import safety  # noqa: F401


_register_subcommands()


# Expose the apps for use in submodules
__all__ = [
    "app",
    "safety_app",
    "disguise_app",
    "console",
    "err_console",
    "__version__",
]


def cli() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
