"""Installer chain.

An Installation is bound to one version band. Installing runs the band's
migration chain (its own steps first, then those of each older band) over a
working copy of the state, checks every step's post-condition and only then
performs the single terminal reconciliation against the cluster.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from loguru import logger

from src.app.components.gardener import GardenerTask
from src.app.landscape.models import LandscapeValues, StateValues
from src.app.landscape.state import normalize
from src.app.versions.migrations import Band, MigrationStep

if TYPE_CHECKING:
    from src.app.flow import Flow
    from src.app.plugins.helm import HelmClient
    from src.infra.k8s.controller import KubernetesController


@dataclass(frozen=True)
class InstallationConfig:
    """Per-run installer configuration.

    Attributes:
        gen_dir: Directory for generated files (rendered values, charts)
        dry_run: Skip cluster-mutating calls and state persistence
    """

    gen_dir: Path
    dry_run: bool = False


class InstallationState(Protocol):
    """Persistence handle the installer stores the resulting state with."""

    async def store(self, state: StateValues, values: LandscapeValues) -> None: ...


class Installation:
    """Installer for one version band.

    Attributes:
        band: The version band this installer is bound to
        steps: Migration steps applied before reconciliation, newest first
    """

    def __init__(
        self,
        band: Band,
        state: InstallationState,
        kube_client: KubernetesController,
        helm: HelmClient,
        config: InstallationConfig,
    ) -> None:
        self.band = band
        self.steps: tuple[MigrationStep, ...] = band.chain()
        self.state = state
        self.kube_client = kube_client
        self.helm = helm
        self.config = config

    async def install(
        self,
        flow: Flow,
        state_values: StateValues | dict[str, Any] | None,
        input_values: LandscapeValues,
    ) -> StateValues:
        """Migrate the state and reconcile the landscape.

        Args:
            flow: Executor for the deployment tasks
            state_values: Prior state, or None for a fresh install
            input_values: Desired landscape values

        Returns:
            The state that was reconciled (and stored unless dry-run)

        Raises:
            MalformedStateError: If the prior state has an unexpected structure
            StateValidationError: If a band's requirements cannot be met
            TaskFailedError: If a deployment task fails
        """
        state = normalize(state_values, input_values)
        if state.apiserver.version is None:
            # fresh install: the chain raises the configured version to the floors
            state.apiserver.version = input_values.virtual_cluster.version
        self.migrate(state)
        await self.reconcile(flow, state, input_values)
        return state

    def migrate(self, state: StateValues) -> None:
        """Apply every step of the chain once, then verify all of them."""
        for step in self.steps:
            step.apply(state)
        for step in self.steps:
            step.verify(state)
        logger.debug(
            f"Applied {len(self.steps)} migration step(s) for version band {self.band.name}"
        )

    async def reconcile(
        self,
        flow: Flow,
        state: StateValues,
        values: LandscapeValues,
    ) -> None:
        """Deploy the landscape and persist the resulting state."""
        logger.info(f"Installing landscape {values.landscape_name} at version {values.version}")
        await flow.execute(
            GardenerTask(
                host_client=self.kube_client,
                helm=self.helm,
                values=values,
                dry_run=self.config.dry_run,
                virtual_cluster_version=state.apiserver.version,
            )
        )

        state.version = values.version

        if self.config.dry_run:
            logger.info("Dry run: not persisting landscape state")
            return
        await self.state.store(state, values)


class InstallationFactory:
    """Constructs the Installation of one version band."""

    def __init__(self, band: Band) -> None:
        self.band = band

    @property
    def state_schema(self) -> str:
        return self.band.state_schema

    def __call__(
        self,
        state: InstallationState,
        kube_client: KubernetesController,
        helm: HelmClient,
        config: InstallationConfig,
    ) -> Installation:
        return Installation(self.band, state, kube_client, helm, config)

    def __repr__(self) -> str:
        return f"InstallationFactory(band={self.band.name!r})"
