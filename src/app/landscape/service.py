"""Installation entry point.

Ties together the state store, the state validator, the version registry and
the installer chain for one installation run.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from src.app.core.services.storage import StateStorage
from src.app.flow import Flow
from src.app.landscape.errors import VersionNotFoundError
from src.app.landscape.models import LandscapeValues, StateValues
from src.app.landscape.state import validate_state
from src.app.plugins.helm import HelmClient
from src.app.versions import (
    InstallationConfig,
    VersionRegistry,
    convert_state_values,
    get_registry,
)
from src.infra.k8s.controller import KubernetesController


async def install_landscape(
    values: LandscapeValues,
    storage: StateStorage,
    *,
    kube_client: KubernetesController,
    helm: HelmClient,
    config: InstallationConfig,
    registry: VersionRegistry | None = None,
    flow: Flow | None = None,
) -> StateValues:
    """Install or upgrade a landscape to the version of the given values.

    Args:
        values: Desired landscape values
        storage: Store the prior state is loaded from and the result stored to
        kube_client: Controller of the host cluster
        helm: Helm client used for chart applies
        config: Installer configuration
        registry: Version registry (default: the built-in registry)
        flow: Task executor (default: a new Flow honouring config.dry_run)

    Returns:
        The reconciled state

    Raises:
        MalformedStateError: If the persisted state has an unexpected structure
        VersionNotFoundError: If the state's or the target version is unsupported
        StateConversionNotSupportedError: If the state needs a schema conversion
        StateValidationError: If the state cannot satisfy the target's floors
        TaskFailedError: If a deployment task fails
    """
    registry = registry or get_registry()

    raw_state = await storage.load()
    state: StateValues | None = None
    if raw_state is not None:
        state = validate_state(raw_state)
        state = convert_state_values(state, values.version, registry)
        logger.info(f"Upgrading landscape from {state.version} to {values.version}")
    else:
        logger.info(f"Installing new landscape at version {values.version}")

    factory = registry.resolve(values.version)
    installation = factory(storage, kube_client, helm, config)
    return await installation.install(
        flow or Flow(dry_run=config.dry_run), state, values
    )


@dataclass(frozen=True)
class LandscapeStatus:
    """Summary of the persisted state of a landscape.

    Attributes:
        location: Where the state is stored
        state: The persisted state, or None if the landscape was never installed
        band: Version band of the persisted state, or None if unsupported
    """

    location: str
    state: StateValues | None
    band: str | None


async def landscape_status(
    storage: StateStorage,
    registry: VersionRegistry | None = None,
) -> LandscapeStatus:
    """Read and validate the persisted state without touching any cluster.

    Raises:
        MalformedStateError: If the persisted state has an unexpected structure
    """
    registry = registry or get_registry()
    raw_state = await storage.load()
    if raw_state is None:
        return LandscapeStatus(location=storage.describe(), state=None, band=None)

    state = validate_state(raw_state)
    try:
        band: str | None = registry.resolve(state.version).band.name
    except VersionNotFoundError:
        band = None
    return LandscapeStatus(location=storage.describe(), state=state, band=band)
