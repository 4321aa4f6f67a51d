"""Helm command abstractions.

This module provides the Helm CLI operation used by the installer:
idempotent release deployment with `helm upgrade --install`.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class HelmCommands:
    """Helm-related shell commands."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Helm commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    # =========================================================================
    # Release Management
    # =========================================================================

    def upgrade_install(
        self,
        release_name: str,
        chart_path: Path,
        namespace: str,
        *,
        value_files: list[Path] | None = None,
        kubeconfig: Path | None = None,
        timeout: str = "10m",
        wait: bool = True,
        create_namespace: bool = True,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Deploy or upgrade a Helm release.

        Uses `helm upgrade --install` so that re-running an installation
        after a partial failure updates what already exists.

        Args:
            release_name: Name for the Helm release (e.g., "gardener-runtime")
            chart_path: Path to the Helm chart directory
            namespace: Kubernetes namespace for deployment
            value_files: Optional list of values files
            kubeconfig: Kubeconfig of the target cluster (default: helm's own)
            timeout: Maximum time to wait for deployment
            wait: Whether to wait for resources to be ready
            create_namespace: Whether to create namespace if it doesn't exist
            on_output: Optional callback for real-time output streaming

        Returns:
            CommandResult with deployment status

        Example:
            >>> helm.upgrade_install(
            ...     "gardener-application",
            ...     Path("./gen/charts/application"),
            ...     "garden",
            ...     value_files=[Path("./gen/values/gardener-application.yaml")],
            ... )
        """
        cmd = [
            "helm",
            "upgrade",
            "--install",
            release_name,
            str(chart_path),
            "--namespace",
            namespace,
        ]

        if kubeconfig is not None:
            cmd.extend(["--kubeconfig", str(kubeconfig)])
        if create_namespace:
            cmd.append("--create-namespace")
        if wait:
            cmd.append("--wait")
        cmd.extend(["--timeout", timeout])

        for vf in value_files or []:
            cmd.extend(["-f", str(vf)])

        if on_output:
            return self._runner.run_streaming(cmd, on_output=on_output)
        return self._runner.run(cmd, capture_output=True)
