"""Kr8s-based implementation of KubernetesController.

Uses the kr8s library for native async Kubernetes operations.
"""

from __future__ import annotations

import asyncio
import base64
import json
from pathlib import Path
from typing import Any

import kr8s.asyncio

from .controller import ClusterEndpoint, KubernetesController


class Kr8sController(KubernetesController):
    """Kubernetes controller using kr8s library.

    All methods are natively async, leveraging kr8s's async API.

    Note: The kr8s API client is NOT cached because it's tied to the event loop
    that was running when created. When using run_sync() which calls asyncio.run(),
    each call creates a new event loop, making the cached API unusable.
    """

    def __init__(self, kubeconfig: str | None = None, context: str | None = None) -> None:
        """Initialize the kr8s controller.

        Args:
            kubeconfig: Path to a kubeconfig file (default: kr8s discovery)
            context: Context to use from the kubeconfig
        """
        self.kubeconfig = kubeconfig
        self.context = context

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        """Create a kr8s API client for the configured kubeconfig.

        Creates a new API client each call because kr8s clients are bound
        to the event loop they were created in.
        """
        return await kr8s.asyncio.api(kubeconfig=self.kubeconfig, context=self.context)

    # =========================================================================
    # Cluster Context
    # =========================================================================

    async def get_current_context(self) -> str:
        """Get the current kubeconfig context name."""
        try:
            api = await self._get_api()
            return api.auth.active_context or "unknown"
        except Exception:
            return "unknown"

    async def is_api_ready(self) -> bool:
        """Check whether the API server answers its version endpoint."""
        try:
            api = await self._get_api()
            await api.version()
            return True
        except Exception:
            return False

    async def get_server_version(self) -> str:
        """Get the gitVersion from the server's version endpoint."""
        api = await self._get_api()
        info = await api.version()
        version: str = info["gitVersion"]
        return version

    async def get_cluster_endpoint(self) -> ClusterEndpoint:
        """Get the API server URL and CA bundle from the kr8s auth config."""
        api = await self._get_api()
        auth = api.auth
        ca_data: str | None = None
        ca_file = getattr(auth, "server_ca_file", None)
        if ca_file:
            content = await asyncio.to_thread(Path(ca_file).read_bytes)
            ca_data = base64.b64encode(content).decode()
        return ClusterEndpoint(
            server=auth.server,
            ca_data=ca_data,
            insecure=bool(getattr(auth, "_insecure_skip_tls_verify", False)),
        )

    # =========================================================================
    # Service Account Operations
    # =========================================================================

    async def create_service_account_token(
        self,
        namespace: str,
        name: str,
        *,
        expiration_seconds: int = 3600,
    ) -> str:
        """Request a token through the TokenRequest subresource."""
        api = await self._get_api()
        token_request = {
            "apiVersion": "authentication.k8s.io/v1",
            "kind": "TokenRequest",
            "spec": {"expirationSeconds": expiration_seconds},
        }
        async with api.call_api(
            "POST",
            version="v1",
            url=f"serviceaccounts/{name}/token",
            namespace=namespace,
            data=json.dumps(token_request),
        ) as response:
            data = response.json()
        token: str = data["status"]["token"]
        return token
