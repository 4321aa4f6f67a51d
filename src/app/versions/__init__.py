"""Version resolution and the chained state-migration installer.

Usage:
    from src.app.versions import resolve

    factory = resolve("v1.80.3")
    installation = factory(state_storage, kube_client, helm, config)
    await installation.install(flow, prior_state, values)
"""

from .installation import (
    Installation,
    InstallationConfig,
    InstallationFactory,
    InstallationState,
)
from .migrations import BANDS, ApiserverVersionFloor, Band, MigrationStep
from .registry import (
    VersionBand,
    VersionRegistry,
    convert_state_values,
    get_registry,
    resolve,
)

__all__ = [
    "Installation",
    "InstallationConfig",
    "InstallationFactory",
    "InstallationState",
    "BANDS",
    "Band",
    "MigrationStep",
    "ApiserverVersionFloor",
    "VersionBand",
    "VersionRegistry",
    "convert_state_values",
    "get_registry",
    "resolve",
]
