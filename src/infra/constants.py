"""Installer constants and configuration.

This module centralizes all magic strings, paths, and configuration values
used throughout a landscape installation.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from src.utils.paths import get_project_root


@dataclass(frozen=True)
class DeploymentConstants:
    """Constants for landscape installation.

    All attributes are class-level and immutable.
    """

    # Helm release names
    GARDENER_APPLICATION_RELEASE: str = "gardener-application"
    GARDENER_RUNTIME_RELEASE: str = "gardener-runtime"

    # Timeouts
    HELM_TIMEOUT: str = "10m"
    VIRTUAL_CLUSTER_POLL_INTERVAL_SECONDS: float = 5.0

    # Gardener release archives
    GARDENER_REPO_ZIP_URL: str = (
        "https://github.com/gardener/gardener/archive/refs/tags/{version}.zip"
    )
    GARDENER_CONTROLPLANE_CHARTS: str = "charts/gardener/controlplane/charts"

    # Relative path fragments for generated files
    GEN_DIR: str = "gen"
    STATE_FILE: str = "state.yaml"
    VALUES_SNAPSHOT_FILE: str = "values.yaml"
    CHARTS_DIR: str = "charts"
    RENDERED_VALUES_DIR: str = "values"

    # Default landscape configuration file
    LANDSCAPE_FILE: str = "landscape.yaml"

    # Environment variables overriding the CLI defaults
    GEN_DIR_ENV: str = "LANDSCAPE_GEN_DIR"
    STATE_FILE_ENV: str = "LANDSCAPE_STATE_FILE"
    CONFIG_FILE_ENV: str = "LANDSCAPE_CONFIG"


class DeploymentPaths:
    """Path resolver for files generated during an installation.

    All paths are derived from the generation directory.
    """

    def __init__(self, gen_dir: Path) -> None:
        """Initialize deployment paths.

        Args:
            gen_dir: Directory that holds generated files
        """
        self._gen_dir = gen_dir
        self._constants = DEFAULT_CONSTANTS

    @property
    def gen_dir(self) -> Path:
        """Get path to the generation directory."""
        return self._gen_dir

    @property
    def state_file(self) -> Path:
        """Get path to the persisted landscape state."""
        return self._gen_dir / self._constants.STATE_FILE

    @property
    def values_snapshot(self) -> Path:
        """Get path to the snapshot of the last applied values."""
        return self._gen_dir / self._constants.VALUES_SNAPSHOT_FILE

    @property
    def charts_dir(self) -> Path:
        """Get path to downloaded and extracted chart archives."""
        return self._gen_dir / self._constants.CHARTS_DIR

    @property
    def rendered_values_dir(self) -> Path:
        """Get path to rendered Helm values files."""
        return self._gen_dir / self._constants.RENDERED_VALUES_DIR


DEFAULT_CONSTANTS = DeploymentConstants()
DEFAULT_PATHS = DeploymentPaths(gen_dir=get_project_root() / DEFAULT_CONSTANTS.GEN_DIR)
