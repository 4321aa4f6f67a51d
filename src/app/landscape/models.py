"""Pydantic models for landscape state and desired values."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

GARDENER_NAMESPACE = "garden"


class ApiserverState(BaseModel):
    """Recorded state of the virtual cluster's kube-apiserver.

    A version of None means no virtual cluster version has been recorded yet,
    which is the case for a freshly synthesized state.
    """

    model_config = ConfigDict(extra="allow")

    version: str | None = None


class StateValues(BaseModel):
    """The last successfully applied configuration of a landscape."""

    model_config = ConfigDict(extra="allow")

    version: str = Field(min_length=1)
    apiserver: ApiserverState = Field(default_factory=ApiserverState)


# =============================================================================
# Desired values
# =============================================================================


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class TLS(_FrozenModel):
    """A PEM encoded certificate with its private key."""

    cert: str
    private_key: str = Field(alias="privateKey")


class CA(_FrozenModel):
    """A PEM encoded certificate authority."""

    cert: str
    private_key: str | None = Field(default=None, alias="privateKey")


class GardenerCertificates(_FrozenModel):
    """Certificate authority and leaf certificates of the gardener components."""

    ca: CA
    apiserver: TLS
    controller_manager: TLS = Field(alias="controllerManager")
    admission_controller: TLS = Field(alias="admissionController")


class DNSValues(_FrozenModel):
    provider: str
    credentials: dict[str, Any] = Field(default_factory=dict)


class NetworkValues(_FrozenModel):
    service_cidr: str = Field(default="10.96.0.0/12", alias="serviceCIDR")


class HostClusterValues(_FrozenModel):
    network: NetworkValues = Field(default_factory=NetworkValues)


class EtcdTLSValues(_FrozenModel):
    ca: CA
    client: TLS


class EtcdValues(_FrozenModel):
    tls: EtcdTLSValues


class GardenerValues(_FrozenModel):
    """Gardener specific configuration and per-component overrides."""

    shoot_domain_prefix: str = Field(default="shoot", alias="shootDomainPrefix")
    seed_candidate_determination_strategy: str = Field(
        default="SameRegion", alias="seedCandidateDeterminationStrategy"
    )
    certs: GardenerCertificates
    apiserver: dict[str, Any] = Field(default_factory=dict)
    controller: dict[str, Any] = Field(default_factory=dict)
    admission: dict[str, Any] = Field(default_factory=dict)
    scheduler: dict[str, Any] = Field(default_factory=dict)


class VirtualClusterValues(_FrozenModel):
    """Access to the virtual garden cluster the control plane runs against."""

    version: str = "v1.23.16"
    kubeconfig: str | None = None
    ready_timeout_seconds: int = Field(default=600, alias="readyTimeoutSeconds")


class LandscapeValues(_FrozenModel):
    """The desired landscape configuration for one installation run."""

    version: str = Field(min_length=1)
    landscape_name: str = Field(alias="landscapeName")
    host: str
    dns: DNSValues
    host_cluster: HostClusterValues = Field(
        default_factory=HostClusterValues, alias="hostCluster"
    )
    etcd: EtcdValues
    gardener: GardenerValues
    virtual_cluster: VirtualClusterValues = Field(
        default_factory=VirtualClusterValues, alias="virtualCluster"
    )
