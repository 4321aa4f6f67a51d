"""Helm CLI abstractions.

Usage:
    from src.infra.helm import CommandRunner, HelmCommands

    helm = HelmCommands(CommandRunner(Path(".")))
    helm.upgrade_install("gardener-runtime", chart_path, "garden")
"""

from .commands import HelmCommands
from .runner import CommandRunner
from .types import CommandResult

__all__ = [
    "CommandResult",
    "CommandRunner",
    "HelmCommands",
]
