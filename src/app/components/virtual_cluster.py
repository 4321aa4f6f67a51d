"""Readiness of the virtual garden cluster."""

from __future__ import annotations

import asyncio
import time

from loguru import logger

from src.app.landscape.errors import DeploymentError
from src.app.landscape.models import LandscapeValues
from src.app.utils.semver import InvalidVersionError, compare_main
from src.infra.constants import DEFAULT_CONSTANTS
from src.infra.k8s.controller import KubernetesController
from src.infra.k8s.kr8s_controller import Kr8sController


def virtual_cluster_controller(values: LandscapeValues) -> KubernetesController:
    """Controller connected to the virtual cluster of the landscape.

    Raises:
        DeploymentError: If no kubeconfig for the virtual cluster is configured
    """
    kubeconfig = values.virtual_cluster.kubeconfig
    if not kubeconfig:
        raise DeploymentError(
            "No kubeconfig configured for the virtual cluster",
            details="Set landscape.virtualCluster.kubeconfig in the landscape file.",
        )
    return Kr8sController(kubeconfig=kubeconfig)


async def wait_until_virtual_cluster_is_ready(
    values: LandscapeValues,
    controller: KubernetesController | None = None,
    *,
    poll_interval: float = DEFAULT_CONSTANTS.VIRTUAL_CLUSTER_POLL_INTERVAL_SECONDS,
) -> KubernetesController:
    """Block until the virtual cluster's API server answers.

    Args:
        values: Landscape values with the virtual cluster settings
        controller: Controller to poll (default: built from the values)
        poll_interval: Seconds between readiness checks

    Returns:
        The controller connected to the ready virtual cluster

    Raises:
        DeploymentError: If the cluster is not ready within the configured timeout
    """
    controller = controller or virtual_cluster_controller(values)
    timeout = values.virtual_cluster.ready_timeout_seconds
    deadline = time.monotonic() + timeout

    logger.info("Waiting for the virtual cluster to become ready")
    while not await controller.is_api_ready():
        if time.monotonic() >= deadline:
            raise DeploymentError(
                f"Virtual cluster not ready after {timeout}s",
                details="Check the kube-apiserver of the virtual cluster on the host cluster.",
            )
        await asyncio.sleep(poll_interval)

    logger.info("Virtual cluster is ready")
    return controller


async def ensure_virtual_cluster_version(
    controller: KubernetesController, minimum: str
) -> str:
    """Check that the virtual cluster runs at least the given version.

    Returns:
        The version reported by the virtual cluster

    Raises:
        DeploymentError: If the reported version is older or not a semantic version
    """
    running = await controller.get_server_version()
    try:
        older = compare_main(running, minimum) < 0
    except InvalidVersionError as e:
        raise DeploymentError(
            f"Virtual cluster reports an invalid version {running!r}", details=str(e)
        ) from e
    if older:
        raise DeploymentError(
            f"Virtual cluster runs {running} but at least {minimum} is required",
            details="Upgrade the virtual kube-apiserver before installing this Gardener version.",
        )
    logger.debug(f"Virtual cluster version {running} satisfies {minimum}")
    return running
