"""Kubeconfig generation for service accounts."""

from __future__ import annotations

from typing import Any

import yaml  # type: ignore[import-untyped]
from loguru import logger

from .controller import ClusterEndpoint, KubernetesController


def build_kubeconfig(
    endpoint: ClusterEndpoint,
    user: str,
    token: str,
    *,
    namespace: str | None = None,
    cluster_name: str = "default",
) -> str:
    """Render a single-context kubeconfig authenticating with a bearer token.

    Args:
        endpoint: API server URL and CA of the cluster
        user: Name of the kubeconfig user entry
        token: Bearer token of the user
        namespace: Default namespace of the context
        cluster_name: Name of the cluster and context entries

    Returns:
        The kubeconfig as YAML
    """
    cluster: dict[str, Any] = {"server": endpoint.server}
    if endpoint.ca_data:
        cluster["certificate-authority-data"] = endpoint.ca_data
    if endpoint.insecure:
        cluster["insecure-skip-tls-verify"] = True

    context: dict[str, Any] = {"cluster": cluster_name, "user": user}
    if namespace:
        context["namespace"] = namespace

    config = {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [{"name": cluster_name, "cluster": cluster}],
        "users": [{"name": user, "user": {"token": token}}],
        "contexts": [{"name": cluster_name, "context": context}],
        "current-context": cluster_name,
    }
    rendered: str = yaml.safe_dump(config, default_flow_style=False, sort_keys=False)
    return rendered


async def get_kubeconfig_for_service_account(
    controller: KubernetesController,
    namespace: str,
    name: str,
    *,
    expiration_seconds: int = 3600 * 24 * 365,
) -> str:
    """Mint a token for a service account and wrap it into a kubeconfig.

    Args:
        controller: Controller connected to the cluster hosting the account
        namespace: Namespace of the service account
        name: Service account name
        expiration_seconds: Requested token lifetime

    Returns:
        The kubeconfig as YAML
    """
    logger.info(f"Requesting kubeconfig for service account {namespace}/{name}")
    endpoint = await controller.get_cluster_endpoint()
    token = await controller.create_service_account_token(
        namespace, name, expiration_seconds=expiration_seconds
    )
    return build_kubeconfig(endpoint, name, token, namespace=namespace)
