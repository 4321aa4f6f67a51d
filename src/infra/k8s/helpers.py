from __future__ import annotations

import os

from cachetools.func import lru_cache  # type: ignore

from src.infra.k8s.controller import KubernetesController


@lru_cache(maxsize=1)
def get_k8s_controller() -> KubernetesController:
    """Get the controller for the host cluster.

    Uses the kubeconfig from LANDSCAPE_KUBECONFIG when set, otherwise the
    default kubeconfig discovery of kr8s.

    Returns:
        An instance of KubernetesController
    """
    from src.infra.k8s.kr8s_controller import Kr8sController

    return Kr8sController(kubeconfig=os.environ.get("LANDSCAPE_KUBECONFIG"))

