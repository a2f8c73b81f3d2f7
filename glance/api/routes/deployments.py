from fastapi import APIRouter, Depends, Query, status
from kubernetes.client import V1Deployment

from glance.dependencies import get_deployment_operations
from glance.exceptions import AppException
from glance.schemas.common import APIResponse, deleted, ok
from glance.schemas.kubernetes import DeploymentCreate, DeploymentUpdate
from glance.services.k8s import DeploymentOperations
from glance.services.k8s.deployment_ops import deployment_from_request, deployment_overlay
from glance.services.k8s.utils import calculate_age, safe_dict, to_plain


router = APIRouter(prefix="/deployments/namespaces/{namespace}", tags=["deployments"])


def _summary(dep: V1Deployment) -> dict:
    md = dep.metadata
    containers = dep.spec.template.spec.containers or []
    return {
        "name": md.name,
        "namespace": md.namespace,
        "replicas": dep.spec.replicas or 0,
        "readyReplicas": getattr(dep.status, "ready_replicas", None) or 0,
        "availableReplicas": getattr(dep.status, "available_replicas", None) or 0,
        "images": [c.image for c in containers],
        "creationTime": md.creation_timestamp,
        "age": calculate_age(md.creation_timestamp),
        "labels": safe_dict(md.labels),
    }


def _detail(dep: V1Deployment) -> dict:
    return {
        **_summary(dep),
        "annotations": safe_dict(dep.metadata.annotations),
        "selector": safe_dict(dep.spec.selector.match_labels) if dep.spec.selector else {},
        "strategy": getattr(dep.spec.strategy, "type", None),
        "containers": to_plain(dep.spec.template.spec.containers or []),
        "resourceVersion": dep.metadata.resource_version,
    }


@router.get("", response_model=APIResponse, summary="List deployments")
async def list_deployments(
    namespace: str, ops: DeploymentOperations = Depends(get_deployment_operations)
) -> APIResponse:
    return ok([_summary(d) for d in await ops.list_deployments(namespace)])


@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED, summary="Create a deployment")
async def create_deployment(
    namespace: str,
    payload: DeploymentCreate,
    ops: DeploymentOperations = Depends(get_deployment_operations),
) -> APIResponse:
    created = await ops.create_deployment(namespace, deployment_from_request(namespace, payload))
    return ok(_detail(created))


@router.get("/{name}", response_model=APIResponse, summary="Get a deployment")
async def get_deployment(
    namespace: str, name: str, ops: DeploymentOperations = Depends(get_deployment_operations)
) -> APIResponse:
    return ok(_detail(await ops.get_deployment(namespace, name)))


@router.put("/{name}", response_model=APIResponse, summary="Partially update a deployment")
async def update_deployment(
    namespace: str,
    name: str,
    payload: DeploymentUpdate,
    ops: DeploymentOperations = Depends(get_deployment_operations),
) -> APIResponse:
    updated = await ops.update_deployment(
        namespace, name, deployment_overlay(payload), resource_version=payload.resource_version
    )
    return ok(_detail(updated))


@router.delete("/{name}", response_model=APIResponse, summary="Delete a deployment")
async def delete_deployment(
    namespace: str, name: str, ops: DeploymentOperations = Depends(get_deployment_operations)
) -> APIResponse:
    await ops.delete_deployment(namespace, name)
    return deleted("Deployment", namespace, name)


@router.get("/{name}/status", response_model=APIResponse, summary="Replica and rollout status")
async def get_deployment_status(
    namespace: str, name: str, ops: DeploymentOperations = Depends(get_deployment_operations)
) -> APIResponse:
    return ok(await ops.get_deployment_status(namespace, name))


@router.put("/{name}/scale", response_model=APIResponse, summary="Scale a deployment")
async def scale_deployment(
    namespace: str,
    name: str,
    replicas: str = Query(...),
    ops: DeploymentOperations = Depends(get_deployment_operations),
) -> APIResponse:
    try:
        count = int(replicas)
    except ValueError:
        count = -1
    if count < 0:
        raise AppException("Invalid replicas value", status_code=400, code="INVALID_REPLICAS")
    scaled = await ops.scale_deployment(namespace, name, count)
    return ok({"name": name, "namespace": namespace, "replicas": scaled.spec.replicas})
