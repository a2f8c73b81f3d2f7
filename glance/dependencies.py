from fastapi import Request

from glance.services.k8s import (
    ClusterOperations,
    ConfigMapOperations,
    DeploymentOperations,
    IngressOperations,
    NamespaceOperations,
    PodOperations,
    SecretOperations,
    ServiceOperations,
)


# Everything hangs off app.state, set once by create_app()
def get_operations(request: Request) -> ClusterOperations:
    return request.app.state.operations


def get_namespace_operations(request: Request) -> NamespaceOperations:
    return get_operations(request).namespaces


def get_pod_operations(request: Request) -> PodOperations:
    return get_operations(request).pods


def get_deployment_operations(request: Request) -> DeploymentOperations:
    return get_operations(request).deployments


def get_service_operations(request: Request) -> ServiceOperations:
    return get_operations(request).services


def get_configmap_operations(request: Request) -> ConfigMapOperations:
    return get_operations(request).configmaps


def get_secret_operations(request: Request) -> SecretOperations:
    return get_operations(request).secrets


def get_ingress_operations(request: Request) -> IngressOperations:
    return get_operations(request).ingresses
