"""CLI context and dependency container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click
import typer

from src.cli.shared.console import CLIConsole, console
from src.infra.constants import DEFAULT_PATHS, DeploymentConstants, DeploymentPaths
from src.infra.helm import CommandRunner, HelmCommands
from src.utils.paths import get_project_root


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    project_root: Path
    helm: HelmCommands
    constants: DeploymentConstants
    paths: DeploymentPaths


def build_cli_context(gen_dir: Path | None = None) -> CLIContext:
    """Build a fresh CLIContext.

    Args:
        gen_dir: Directory for generated files (default: <project>/gen)
    """
    project_root = get_project_root()
    paths = DeploymentPaths(gen_dir) if gen_dir else DEFAULT_PATHS

    return CLIContext(
        console=console,
        project_root=project_root,
        helm=HelmCommands(CommandRunner(project_root)),
        constants=DeploymentConstants(),
        paths=paths,
    )


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, falling back to a new instance."""
    context = ctx or click.get_current_context(silent=True)
    if context and isinstance(context.obj, CLIContext):
        return context.obj
    return build_cli_context()
