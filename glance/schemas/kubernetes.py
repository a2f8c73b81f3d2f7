from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, matching the Kubernetes JSON style."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UpdateModel(CamelModel):
    # Optional concurrency token; when sent, a stale write fails with Conflict
    resource_version: str | None = None

    def supplied(self) -> dict[str, Any]:
        """Fields present in the request body with a non-null value."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "resource_version" and getattr(self, name) is not None
        }


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class EnvVarSpec(CamelModel):
    name: str
    value: str = ""


class ServicePortSpec(CamelModel):
    name: str | None = None
    port: int
    target_port: int | str | None = None
    node_port: int | None = None
    protocol: str = "TCP"

    @field_validator("target_port", mode="before")
    @classmethod
    def _numeric_target_port(cls, value):
        # "8080" is a port number; only non-numeric strings name a container port
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        return value


class IngressPathSpec(CamelModel):
    path: str = "/"
    path_type: str = "Prefix"
    service_name: str
    service_port: int


class IngressRuleSpec(CamelModel):
    host: str | None = None
    paths: list[IngressPathSpec] = Field(default_factory=list)


class IngressTLSSpec(CamelModel):
    hosts: list[str] = Field(default_factory=list)
    secret_name: str | None = None


class ConfigMapCreate(CamelModel):
    name: str
    data: dict[str, str] = Field(default_factory=dict)
    binary_data: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class ConfigMapUpdate(UpdateModel):
    data: dict[str, str] | None = None
    binary_data: dict[str, str] | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None


class SecretCreate(CamelModel):
    name: str
    type: str = "Opaque"
    string_data: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class SecretUpdate(UpdateModel):
    string_data: dict[str, str] | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None


class DeploymentCreate(CamelModel):
    name: str
    image: str
    replicas: int = Field(ge=0)
    container_port: int | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    env_vars: list[EnvVarSpec] = Field(default_factory=list)


class DeploymentUpdate(UpdateModel):
    image: str | None = None
    replicas: int | None = Field(default=None, ge=0)
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None
    env_vars: list[EnvVarSpec] | None = None


class ServiceCreate(CamelModel):
    name: str
    type: str = "ClusterIP"
    ports: list[ServicePortSpec]
    selector: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    external_ips: list[str] = Field(default_factory=list, alias="externalIPs")


class ServiceUpdate(UpdateModel):
    type: str | None = None
    ports: list[ServicePortSpec] | None = None
    selector: dict[str, str] | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None
    external_ips: list[str] | None = Field(default=None, alias="externalIPs")


class IngressCreate(CamelModel):
    name: str
    class_name: str | None = None
    rules: list[IngressRuleSpec]
    tls: list[IngressTLSSpec] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class IngressUpdate(UpdateModel):
    class_name: str | None = None
    rules: list[IngressRuleSpec] | None = None
    tls: list[IngressTLSSpec] | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None


# ---------------------------------------------------------------------------
# Derived reports
# ---------------------------------------------------------------------------


class UsageEvidence(CamelModel):
    volume_mounts: list[str] = Field(default_factory=list)
    env_from: list[str] = Field(default_factory=list)
    env_vars: list[str] = Field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.volume_mounts or self.env_from or self.env_vars)


class PodUsage(CamelModel):
    name: str
    status: str
    usage: UsageEvidence


class UsageReport(CamelModel):
    resource: str
    kind: Literal["ConfigMap", "Secret"]
    namespace: str
    pods: list[PodUsage] = Field(default_factory=list)
    total_pods: int = 0


class SecretKeys(CamelModel):
    name: str
    namespace: str
    type: str | None = None
    keys: list[str] = Field(default_factory=list)


class ReplicaCounts(CamelModel):
    desired: int = 0
    current: int = 0
    updated: int = 0
    ready: int = 0
    available: int = 0


class DeploymentCondition(CamelModel):
    type: str
    status: str
    last_update_time: datetime | None = None
    last_transition_time: datetime | None = None
    reason: str | None = None
    message: str | None = None


class DeploymentStatusReport(CamelModel):
    name: str
    namespace: str
    replicas: ReplicaCounts
    conditions: list[DeploymentCondition] = Field(default_factory=list)
    strategy: str | None = None
    age: str


class LoadBalancerIngress(CamelModel):
    ip: str | None = None
    hostname: str | None = None


class ServicePortStatus(CamelModel):
    name: str | None = None
    protocol: str | None = None
    port: int
    target_port: int | str | None = None
    node_port: int | None = None


class EndpointAddress(CamelModel):
    ip: str
    hostname: str | None = None
    node_name: str | None = None
    target_ref: dict[str, Any] | None = None


class ServiceStatusReport(CamelModel):
    name: str
    namespace: str
    type: str | None = None
    cluster_ip: str | None = Field(default=None, alias="clusterIP")
    external_ips: list[str] = Field(default_factory=list, alias="externalIPs")
    load_balancer: list[LoadBalancerIngress] | None = None
    ports: list[ServicePortStatus] = Field(default_factory=list)
    endpoints: list[EndpointAddress] = Field(default_factory=list)
    selector: dict[str, str] = Field(default_factory=dict)
    session_affinity: str | None = None


class IngressPathStatus(CamelModel):
    path: str | None = None
    path_type: str | None = None
    backend: dict[str, Any] = Field(default_factory=dict)


class IngressRuleStatus(CamelModel):
    host: str | None = None
    paths: list[IngressPathStatus] = Field(default_factory=list)


class IngressTLSStatus(CamelModel):
    hosts: list[str] = Field(default_factory=list)
    secret_name: str | None = None


class IngressStatusReport(CamelModel):
    name: str
    namespace: str
    load_balancer: list[LoadBalancerIngress] = Field(default_factory=list)
    rules: list[IngressRuleStatus] = Field(default_factory=list)
    tls: list[IngressTLSStatus] = Field(default_factory=list)
    class_name: str | None = Field(default=None, alias="class")
    annotations: dict[str, str] = Field(default_factory=dict)


class ContainerStateReport(CamelModel):
    ready: bool
    restart_count: int
    state: str


class PodConditionReport(CamelModel):
    type: str
    status: str
    reason: str | None = None
    message: str | None = None


class ContainerRequests(CamelModel):
    name: str
    cpu: str
    memory: str


class PodMetricsReport(CamelModel):
    name: str
    namespace: str
    phase: str | None = None
    host_ip: str | None = Field(default=None, alias="hostIP")
    pod_ip: str | None = Field(default=None, alias="podIP")
    start_time: datetime | None = None
    containers: dict[str, ContainerStateReport] = Field(default_factory=dict)
    conditions: list[PodConditionReport] = Field(default_factory=list)
    resource_requests: list[ContainerRequests] = Field(default_factory=list)


class NamespaceMetricsReport(CamelModel):
    name: str
    pod_count: int
    status: dict[str, int]
