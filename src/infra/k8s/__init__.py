"""Kubernetes infrastructure abstraction layer.

This module provides a narrow abstraction over the Kubernetes operations the
landscape installer needs: API readiness checks, cluster endpoint discovery
and service-account token requests.

Example:
    from src.infra.k8s import Kr8sController, run_sync

    controller = Kr8sController(kubeconfig="virtual-garden.kubeconfig")
    ready = run_sync(controller.is_api_ready())
"""

from .controller import ClusterEndpoint, KubernetesController
from .kr8s_controller import Kr8sController
from .kubeconfig import build_kubeconfig, get_kubeconfig_for_service_account
from .utils import run_sync

__all__ = [
    # Controller classes
    "KubernetesController",
    "Kr8sController",
    # Data classes
    "ClusterEndpoint",
    # Utilities
    "build_kubeconfig",
    "get_kubeconfig_for_service_account",
    "run_sync",
]
