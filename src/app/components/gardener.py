"""Gardener control plane deployment.

Installs the gardener control plane in two phases:

1. The application chart is applied to the virtual cluster. It creates the
   API registrations, RBAC and the service accounts of the components.
2. A kubeconfig is minted for each component's service account, and the
   runtime chart (Deployments, Services) is applied to the host cluster with
   those kubeconfigs wired in.
"""

from __future__ import annotations

import ipaddress
from pathlib import Path
from typing import Any

from loguru import logger

from src.app.components.virtual_cluster import (
    ensure_virtual_cluster_version,
    wait_until_virtual_cluster_is_ready,
)
from src.app.flow import Task
from src.app.landscape.models import GARDENER_NAMESPACE, LandscapeValues
from src.app.plugins.helm import Chart, HelmClient, RemoteChartFromZip, Values
from src.app.utils.deep_merge import deep_merge
from src.infra.constants import DEFAULT_CONSTANTS
from src.infra.k8s.controller import KubernetesController
from src.infra.k8s.kubeconfig import get_kubeconfig_for_service_account

DEFAULT_RESOURCES: dict[str, dict[str, Any]] = {
    "apiserver": {
        "limits": {"cpu": "300m", "memory": "256Mi"},
        "requests": {"cpu": "100m", "memory": "100Mi"},
    },
    "admission": {
        "limits": {"cpu": "300m", "memory": "512Mi"},
        "requests": {"cpu": "100m", "memory": "200Mi"},
    },
    "controller": {
        "limits": {"cpu": "750m", "memory": "512Mi"},
        "requests": {"cpu": "100m", "memory": "100Mi"},
    },
    "scheduler": {
        "limits": {"cpu": "300m", "memory": "256Mi"},
        "requests": {"cpu": "50m", "memory": "50Mi"},
    },
}

# Component key in the chart values -> service account name
SERVICE_ACCOUNTS: dict[str, str] = {
    "apiserver": "gardener-apiserver",
    "controller": "gardener-controller-manager",
    "scheduler": "gardener-scheduler",
    "admission": "gardener-admission-controller",
}

# Offset of the virtual garden's cluster IP within the service CIDR
VIRTUAL_GARDEN_CLUSTER_IP_INDEX = 20


def gardener_image_tag(version: str) -> str:
    """Gardener release tags carry a leading ``v``."""
    return version if version.startswith("v") else f"v{version}"


def gardener_repo_zip_url(version: str) -> str:
    return DEFAULT_CONSTANTS.GARDENER_REPO_ZIP_URL.format(version=gardener_image_tag(version))


def gardener_chart_path(version: str, chart: str) -> str:
    """Path of a control plane chart inside the release archive."""
    archive_root = f"gardener-{gardener_image_tag(version).removeprefix('v')}"
    return f"{archive_root}/{DEFAULT_CONSTANTS.GARDENER_CONTROLPLANE_CHARTS}/{chart}"


class GardenerValuesRenderer:
    """Renders the control plane chart values from the landscape values."""

    def __init__(self, values: LandscapeValues) -> None:
        self.values = values
        self.image_tag = gardener_image_tag(values.version)

    def render(self) -> Values:
        values = self.values
        dns = {"provider": values.dns.provider, "credentials": dict(values.dns.credentials)}
        service_cidr = ipaddress.ip_network(
            values.host_cluster.network.service_cidr, strict=False
        )
        return {
            "global": {
                "apiserver": self.apiserver_values(),
                "controller": self.controller_values(),
                "admission": self.admission_values(),
                "scheduler": self.scheduler_values(),
                "defaultDomains": [
                    {"domain": f"{values.gardener.shoot_domain_prefix}.{values.host}", **dns}
                ],
                "internalDomain": {"domain": f"internal.{values.host}", **dns},
                "deployment": {
                    "virtualGarden": {
                        "enabled": True,
                        "clusterIP": str(service_cidr[VIRTUAL_GARDEN_CLUSTER_IP_INDEX]),
                    },
                },
            },
        }

    def apiserver_values(self) -> Values:
        certs = self.values.gardener.certs
        etcd_tls = self.values.etcd.tls
        return deep_merge(
            {
                "enabled": True,
                "clusterIdentity": self.values.landscape_name,
                "kubeconfig": "dummy",  # replaced before the runtime chart is applied
                "image": {"tag": self.image_tag},
                "caBundle": certs.ca.cert,
                "tls": {
                    "crt": certs.apiserver.cert,
                    "key": certs.apiserver.private_key,
                },
                "etcd": {
                    "servers": f"https://garden-etcd-main.{GARDENER_NAMESPACE}.svc:2379",
                    "useSidecar": False,
                    "caBundle": etcd_tls.ca.cert,
                    "tls": {
                        "crt": etcd_tls.client.cert,
                        "key": etcd_tls.client.private_key,
                    },
                },
                "resources": DEFAULT_RESOURCES["apiserver"],
                "groupPriorityMinimum": 10000,
                "insecureSkipTLSVerify": False,
                "replicaCount": 1,
                "serviceAccountName": SERVICE_ACCOUNTS["apiserver"],
                "versionPriority": 20,
            },
            self.values.gardener.apiserver,
        )

    def controller_values(self) -> Values:
        certs = self.values.gardener.certs
        client_connection = {
            "acceptContentTypes": "application/json",
            "contentType": "application/json",
            "qps": 100,
            "burst": 130,
        }
        return deep_merge(
            {
                "enabled": True,
                "kubeconfig": "dummy",
                "image": {"tag": self.image_tag},
                "resources": DEFAULT_RESOURCES["controller"],
                "replicaCount": 1,
                "serviceAccountName": SERVICE_ACCOUNTS["controller"],
                "additionalVolumeMounts": [],
                "additionalVolumes": [],
                "alerting": [],
                "config": {
                    "clientConnection": client_connection,
                    "logLevel": "info",
                    "controllers": {
                        "seed": {"concurrentSyncs": 5, "syncPeriod": "1m"},
                        "shootMaintenance": {"concurrentSyncs": 5},
                        "shootQuota": {"concurrentSyncs": 5, "syncPeriod": "60m"},
                    },
                    "featureGates": {},
                    "leaderElection": {
                        "leaderElect": True,
                        "leaseDuration": "15s",
                        "renewDeadline": "10s",
                        "resourceLock": "leases",
                        "retryPeriod": "2s",
                    },
                    "server": {
                        "http": {"bindAddress": "0.0.0.0", "port": 2718},
                        "https": {
                            "bindAddress": "0.0.0.0",
                            "port": 2719,
                            "tls": {
                                "caBundle": certs.ca.cert,
                                "crt": certs.controller_manager.cert,
                                "key": certs.controller_manager.private_key,
                            },
                        },
                    },
                },
            },
            self.values.gardener.controller,
        )

    def admission_values(self) -> Values:
        certs = self.values.gardener.certs
        return deep_merge(
            {
                "enabled": True,
                "kubeconfig": "dummy",
                "image": {"tag": self.image_tag},
                "resources": DEFAULT_RESOURCES["admission"],
                "replicaCount": 1,
                "serviceAccountName": SERVICE_ACCOUNTS["admission"],
                "config": {
                    "gardenClientConnection": {
                        "acceptContentTypes": "application/json",
                        "contentType": "application/json",
                        "qps": 100,
                        "burst": 130,
                    },
                    "server": {
                        "https": {
                            "bindAddress": "0.0.0.0",
                            "port": 2719,
                            "tls": {
                                "caBundle": certs.ca.cert,
                                "crt": certs.admission_controller.cert,
                                "key": certs.admission_controller.private_key,
                            },
                        },
                    },
                },
            },
            self.values.gardener.admission,
        )

    def scheduler_values(self) -> Values:
        return deep_merge(
            {
                "enabled": True,
                "kubeconfig": "dummy",
                "image": {"tag": self.image_tag},
                "resources": DEFAULT_RESOURCES["scheduler"],
                "replicaCount": 1,
                "serviceAccountName": SERVICE_ACCOUNTS["scheduler"],
                "config": {
                    "schedulers": {
                        "shoot": {
                            "retrySyncPeriod": "1s",
                            "concurrentSyncs": 5,
                            "candidateDeterminationStrategy": (
                                self.values.gardener.seed_candidate_determination_strategy
                            ),
                        },
                    },
                },
            },
            self.values.gardener.scheduler,
        )


class _RenderedChart(Chart):
    """A control plane chart whose values are rendered up front."""

    def __init__(self, release_name: str, chart: str, version: str, values: Values) -> None:
        super().__init__(
            release_name,
            RemoteChartFromZip(gardener_repo_zip_url(version), gardener_chart_path(version, chart)),
        )
        self._values = values

    async def render_values(self, values: LandscapeValues) -> Values:
        return self._values


class ApplicationChart(_RenderedChart):
    def __init__(self, version: str, values: Values) -> None:
        super().__init__(
            DEFAULT_CONSTANTS.GARDENER_APPLICATION_RELEASE, "application", version, values
        )


class RuntimeChart(_RenderedChart):
    def __init__(self, version: str, values: Values) -> None:
        super().__init__(DEFAULT_CONSTANTS.GARDENER_RUNTIME_RELEASE, "runtime", version, values)


class GardenerTask(Task):
    """Deploys the gardener control plane of a landscape.

    When virtual_cluster_version is given, the virtual cluster must report at
    least that version before any chart is applied.
    """

    def __init__(
        self,
        host_client: KubernetesController,
        helm: HelmClient,
        values: LandscapeValues,
        dry_run: bool,
        virtual_client: KubernetesController | None = None,
        virtual_cluster_version: str | None = None,
    ) -> None:
        super().__init__("Gardener")
        self.host_client = host_client
        self.helm = helm
        self.values = values
        self.dry_run = dry_run
        self._virtual_client = virtual_client
        self.virtual_cluster_version = virtual_cluster_version

    async def do(self) -> None:
        version = gardener_image_tag(self.values.version)
        logger.info(f"Installing Gardener version {version}")

        virtual_client: KubernetesController | None = None
        virtual_kubeconfig: Path | None = None
        if not self.dry_run:
            context = await self.host_client.get_current_context()
            logger.debug(f"Host cluster context: {context}")
            virtual_client = await wait_until_virtual_cluster_is_ready(
                self.values, self._virtual_client
            )
            if self.virtual_cluster_version:
                await ensure_virtual_cluster_version(virtual_client, self.virtual_cluster_version)
            if self.values.virtual_cluster.kubeconfig:
                virtual_kubeconfig = Path(self.values.virtual_cluster.kubeconfig)

        logger.info("Installing Gardener control plane")
        gardener_values = GardenerValuesRenderer(self.values).render()

        application_chart = ApplicationChart(version, gardener_values)
        await self.helm.create_or_update(
            await application_chart.get_release(self.values), kubeconfig=virtual_kubeconfig
        )

        for component, service_account in SERVICE_ACCOUNTS.items():
            gardener_values["global"][component]["kubeconfig"] = (
                await self._kubeconfig_for_service_account(virtual_client, service_account)
            )

        runtime_chart = RuntimeChart(version, gardener_values)
        await self.helm.create_or_update(await runtime_chart.get_release(self.values))

    async def _kubeconfig_for_service_account(
        self,
        virtual_client: KubernetesController | None,
        name: str,
    ) -> str:
        if virtual_client is None:
            return f"dummy-{name}"
        return await get_kubeconfig_for_service_account(
            virtual_client, GARDENER_NAMESPACE, name
        )
