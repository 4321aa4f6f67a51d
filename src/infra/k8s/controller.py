"""Abstract Kubernetes controller interface.

Defines the contract for the Kubernetes operations the installer needs,
independent of the client library used to implement them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

# =============================================================================
# Data Types
# =============================================================================


@dataclass
class ClusterEndpoint:
    """Connection details of a cluster's API server."""

    server: str
    ca_data: str | None = None  # base64 encoded PEM
    insecure: bool = False


# =============================================================================
# Abstract Controller
# =============================================================================


class KubernetesController(ABC):
    """Abstract base class for Kubernetes operations.

    All methods are async. Use `run_sync()` to call from synchronous code.

    Example:
        from src.infra.k8s import Kr8sController, run_sync

        controller = Kr8sController()
        ready = run_sync(controller.is_api_ready())
    """

    # =========================================================================
    # Cluster Context
    # =========================================================================

    @abstractmethod
    async def get_current_context(self) -> str:
        """Get the current kubeconfig context name.

        Returns:
            Context name, or "unknown" if detection fails
        """
        ...

    @abstractmethod
    async def is_api_ready(self) -> bool:
        """Check whether the API server answers requests.

        Returns:
            True if the server's version endpoint responds, False otherwise
        """
        ...

    @abstractmethod
    async def get_server_version(self) -> str:
        """Get the Kubernetes version the API server reports.

        Returns:
            The server's gitVersion, e.g. "v1.24.8"
        """
        ...

    @abstractmethod
    async def get_cluster_endpoint(self) -> ClusterEndpoint:
        """Get the API server URL and CA bundle of the connected cluster.

        Returns:
            ClusterEndpoint with server URL and CA data
        """
        ...

    # =========================================================================
    # Service Account Operations
    # =========================================================================

    @abstractmethod
    async def create_service_account_token(
        self,
        namespace: str,
        name: str,
        *,
        expiration_seconds: int = 3600,
    ) -> str:
        """Request a bound token for a service account.

        Args:
            namespace: Namespace of the service account
            name: Service account name
            expiration_seconds: Requested token lifetime

        Returns:
            The bearer token

        Raises:
            Exception: Client errors propagate unchanged
        """
        ...
