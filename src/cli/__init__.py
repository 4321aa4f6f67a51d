"""Main CLI application module.

This module provides the main entry point for the landscape installer CLI.

Commands:
- install: Install or upgrade a landscape
- status: Show the persisted landscape state
- versions: List supported versions
- resolve: Show the version band of a version
"""

import typer

from .commands import install, resolve, status, versions

# Create the main CLI application
app = typer.Typer(
    help="🌱 Gardener landscape installer",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command()(install)
app.command()(status)
app.command()(versions)
app.command()(resolve)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
