"""Version registry commands."""

from typing import Annotated

import typer
from rich.table import Table

from src.app.versions import get_registry
from src.cli.shared.console import console, with_error_handling


@with_error_handling
def versions() -> None:
    """List the supported versions and the band that installs each of them.

    Examples:
        landscape-cli versions
    """
    registry = get_registry()
    first, last = registry.supported_range()

    table = Table(title=f"Supported versions ({first} - {last})")
    table.add_column("Pattern", style="cyan")
    table.add_column("Version band", style="green")
    table.add_column("Migration steps")
    for band in registry.bands():
        steps = band.factory.band.chain()
        table.add_row(
            band.pattern.raw,
            band.factory.band.name,
            ", ".join(str(step) for step in steps) or "-",
        )
    console.print(table)


@with_error_handling
def resolve(
    version: Annotated[
        str,
        typer.Argument(help="Target version, e.g. v1.80.3"),
    ],
) -> None:
    """Show which version band installs a version.

    Examples:
        landscape-cli resolve v1.80.3
    """
    band = get_registry().find(version)
    console.ok(
        f"{version} matches {band.pattern.raw} and is installed by band "
        f"{band.factory.band.name}"
    )
