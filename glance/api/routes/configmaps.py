from fastapi import APIRouter, Depends, status
from kubernetes.client import V1ConfigMap

from glance.dependencies import get_configmap_operations
from glance.schemas.common import APIResponse, deleted, ok
from glance.schemas.kubernetes import ConfigMapCreate, ConfigMapUpdate
from glance.services.k8s import ConfigMapOperations
from glance.services.k8s.config_operations import configmap_from_request, configmap_overlay
from glance.services.k8s.utils import calculate_age, safe_dict


router = APIRouter(prefix="/configmaps/namespaces/{namespace}", tags=["configmaps"])


# Values never leave the service; callers see key names only
def _summary(cm: V1ConfigMap) -> dict:
    md = cm.metadata
    return {
        "name": md.name,
        "namespace": md.namespace,
        "dataCount": len(cm.data or {}) + len(cm.binary_data or {}),
        "creationTime": md.creation_timestamp,
        "age": calculate_age(md.creation_timestamp),
        "labels": safe_dict(md.labels),
    }


def _detail(cm: V1ConfigMap) -> dict:
    return {
        **_summary(cm),
        "annotations": safe_dict(cm.metadata.annotations),
        "dataKeys": sorted((cm.data or {}).keys()),
        "binaryDataKeys": sorted((cm.binary_data or {}).keys()),
        "resourceVersion": cm.metadata.resource_version,
    }


@router.get("", response_model=APIResponse, summary="List config maps")
async def list_configmaps(
    namespace: str, ops: ConfigMapOperations = Depends(get_configmap_operations)
) -> APIResponse:
    return ok([_summary(cm) for cm in await ops.list_configmaps(namespace)])


@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED, summary="Create a config map")
async def create_configmap(
    namespace: str,
    payload: ConfigMapCreate,
    ops: ConfigMapOperations = Depends(get_configmap_operations),
) -> APIResponse:
    created = await ops.create_configmap(namespace, configmap_from_request(namespace, payload))
    return ok(_detail(created))


@router.get("/{name}", response_model=APIResponse, summary="Get a config map")
async def get_configmap(
    namespace: str, name: str, ops: ConfigMapOperations = Depends(get_configmap_operations)
) -> APIResponse:
    return ok(_detail(await ops.get_configmap(namespace, name)))


@router.put("/{name}", response_model=APIResponse, summary="Partially update a config map")
async def update_configmap(
    namespace: str,
    name: str,
    payload: ConfigMapUpdate,
    ops: ConfigMapOperations = Depends(get_configmap_operations),
) -> APIResponse:
    updated = await ops.update_configmap(
        namespace, name, configmap_overlay(payload), resource_version=payload.resource_version
    )
    return ok(_detail(updated))


@router.delete("/{name}", response_model=APIResponse, summary="Delete a config map")
async def delete_configmap(
    namespace: str, name: str, ops: ConfigMapOperations = Depends(get_configmap_operations)
) -> APIResponse:
    await ops.delete_configmap(namespace, name)
    return deleted("ConfigMap", namespace, name)


@router.get("/{name}/usage", response_model=APIResponse, summary="Pods referencing a config map")
async def get_configmap_usage(
    namespace: str, name: str, ops: ConfigMapOperations = Depends(get_configmap_operations)
) -> APIResponse:
    return ok(await ops.get_configmap_usage(namespace, name))
