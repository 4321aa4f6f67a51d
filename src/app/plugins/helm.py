"""Helm charts and the async client that applies them.

Charts render their values from the desired landscape values and point to a
chart source (a local directory or a directory inside a remote zip archive).
The HelmClient writes the rendered values to the generation directory and,
unless in dry-run mode, runs `helm upgrade --install`.
"""

from __future__ import annotations

import asyncio
import hashlib
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import yaml  # type: ignore[import-untyped]
from loguru import logger

from src.app.landscape.errors import DeploymentError
from src.app.landscape.models import GARDENER_NAMESPACE, LandscapeValues
from src.infra.constants import DEFAULT_CONSTANTS, DeploymentPaths
from src.infra.helm import HelmCommands

Values = dict[str, Any]


# =============================================================================
# Chart Sources
# =============================================================================


class ChartSource(ABC):
    """Where a chart's files come from."""

    @abstractmethod
    async def fetch(self, charts_dir: Path) -> Path:
        """Make the chart available locally and return its directory."""
        ...


@dataclass(frozen=True)
class LocalChart(ChartSource):
    path: Path

    async def fetch(self, charts_dir: Path) -> Path:
        if not self.path.is_dir():
            raise DeploymentError(f"Chart directory {self.path} does not exist")
        return self.path


@dataclass(frozen=True)
class RemoteChartFromZip(ChartSource):
    """A chart inside a zip archive, e.g. a GitHub release tarball.

    The archive is downloaded and extracted once per URL into the charts
    directory and reused afterwards.
    """

    url: str
    chart_path: str
    timeout: float = 120.0

    def _cache_dir(self, charts_dir: Path) -> Path:
        digest = hashlib.sha256(self.url.encode()).hexdigest()[:16]
        return charts_dir / digest

    async def fetch(self, charts_dir: Path) -> Path:
        target = self._cache_dir(charts_dir)
        chart_dir = target / self.chart_path
        if chart_dir.is_dir():
            logger.debug(f"Using cached chart {chart_dir}")
            return chart_dir

        archive = target.with_suffix(".zip")
        archive.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading chart archive {self.url}")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, follow_redirects=True
            ) as client:
                response = await client.get(self.url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise DeploymentError(
                f"Failed to download chart archive {self.url}", details=str(e)
            ) from e
        archive.write_bytes(response.content)

        await asyncio.to_thread(_extract, archive, target)
        if not chart_dir.is_dir():
            raise DeploymentError(
                f"Chart path {self.chart_path} not found in archive {self.url}"
            )
        return chart_dir


def _extract(archive: Path, target: Path) -> None:
    with zipfile.ZipFile(archive) as zf:
        zf.extractall(target)


# =============================================================================
# Charts
# =============================================================================


@dataclass
class HelmReleaseSpec:
    """A rendered release, ready to be applied."""

    name: str
    namespace: str
    chart: ChartSource
    values: Values = field(default_factory=dict)


class Chart(ABC):
    """A named chart whose values are rendered from the landscape values."""

    def __init__(
        self,
        release_name: str,
        source: ChartSource,
        namespace: str = GARDENER_NAMESPACE,
    ) -> None:
        self.release_name = release_name
        self.source = source
        self.namespace = namespace

    @abstractmethod
    async def render_values(self, values: LandscapeValues) -> Values:
        """Render the Helm values of this chart."""
        ...

    async def get_release(self, values: LandscapeValues) -> HelmReleaseSpec:
        return HelmReleaseSpec(
            name=self.release_name,
            namespace=self.namespace,
            chart=self.source,
            values=await self.render_values(values),
        )


# =============================================================================
# Client
# =============================================================================


class HelmClient:
    """Applies rendered releases with `helm upgrade --install`.

    Attributes:
        commands: Helm CLI abstraction
        paths: Generated file locations
        dry_run: Only write rendered values, never contact a cluster
        timeout: Helm timeout per release
        host_kubeconfig: Kubeconfig of the host cluster (default: helm's own)
    """

    def __init__(
        self,
        commands: HelmCommands,
        paths: DeploymentPaths,
        *,
        dry_run: bool = False,
        timeout: str = DEFAULT_CONSTANTS.HELM_TIMEOUT,
        host_kubeconfig: Path | None = None,
    ) -> None:
        self.commands = commands
        self.paths = paths
        self.dry_run = dry_run
        self.timeout = timeout
        self.host_kubeconfig = host_kubeconfig

    def write_values(self, release: HelmReleaseSpec) -> Path:
        """Write the release's values to the generation directory."""
        values_dir = self.paths.rendered_values_dir
        values_dir.mkdir(parents=True, exist_ok=True)
        values_file = values_dir / f"{release.name}.yaml"
        with open(values_file, "w") as f:
            yaml.safe_dump(release.values, f, default_flow_style=False, sort_keys=False)
        return values_file

    async def create_or_update(
        self,
        release: HelmReleaseSpec,
        kubeconfig: Path | None = None,
    ) -> None:
        """Install or upgrade a release.

        Args:
            release: Rendered release
            kubeconfig: Kubeconfig of the target cluster (default: host cluster)

        Raises:
            DeploymentError: If the chart cannot be fetched or helm fails
        """
        values_file = self.write_values(release)
        if self.dry_run:
            logger.info(
                f"Dry run: rendered values of release {release.name} to {values_file}"
            )
            return

        chart_path = await release.chart.fetch(self.paths.charts_dir)
        logger.info(f"Applying Helm release {release.namespace}/{release.name}")

        def log_helm_output(line: str) -> None:
            logger.debug(f"[helm {release.name}] {line.strip()}")

        result = await asyncio.to_thread(
            self.commands.upgrade_install,
            release.name,
            chart_path,
            release.namespace,
            value_files=[values_file],
            kubeconfig=kubeconfig or self.host_kubeconfig,
            timeout=self.timeout,
            on_output=log_helm_output,
        )
        if not result.success:
            raise DeploymentError(
                f"Helm release {release.name} failed",
                details=result.stderr or result.stdout,
            )
        logger.info(f"Helm release {release.name} applied")
