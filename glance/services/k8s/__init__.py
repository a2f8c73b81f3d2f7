"""
Kubernetes resource modules.

- client: connection, liveness probe, typed API accessors
- base_operations: remote-call plumbing and the read-modify-write contract
- namespace_operations / pod_operations / deployment_ops / service_operations
- config_operations: ConfigMaps and (redacted) Secrets
- network_operations: Ingresses
- usage: ConfigMap/Secret usage scans over pods
"""

from dataclasses import dataclass

from .client import ClusterClient, connect_cluster
from .config_operations import ConfigMapOperations, SecretOperations
from .deployment_ops import DeploymentOperations
from .namespace_operations import NamespaceOperations
from .network_operations import IngressOperations
from .pod_operations import PodOperations
from .service_operations import ServiceOperations


@dataclass(frozen=True)
class ClusterOperations:
    namespaces: NamespaceOperations
    pods: PodOperations
    deployments: DeploymentOperations
    services: ServiceOperations
    configmaps: ConfigMapOperations
    secrets: SecretOperations
    ingresses: IngressOperations

    @classmethod
    def for_cluster(cls, cluster: ClusterClient) -> "ClusterOperations":
        return cls(
            namespaces=NamespaceOperations(cluster),
            pods=PodOperations(cluster),
            deployments=DeploymentOperations(cluster),
            services=ServiceOperations(cluster),
            configmaps=ConfigMapOperations(cluster),
            secrets=SecretOperations(cluster),
            ingresses=IngressOperations(cluster),
        )


__all__ = [
    "ClusterClient",
    "ClusterOperations",
    "ConfigMapOperations",
    "DeploymentOperations",
    "IngressOperations",
    "NamespaceOperations",
    "PodOperations",
    "SecretOperations",
    "ServiceOperations",
    "connect_cluster",
]
