from fastapi import APIRouter, Depends, status
from kubernetes.client import V1Service

from glance.dependencies import get_service_operations
from glance.schemas.common import APIResponse, deleted, ok
from glance.schemas.kubernetes import ServiceCreate, ServiceUpdate
from glance.services.k8s import ServiceOperations
from glance.services.k8s.service_operations import service_from_request, service_overlay
from glance.services.k8s.utils import calculate_age, safe_dict, safe_list, to_plain


router = APIRouter(prefix="/services/namespaces/{namespace}", tags=["services"])


def _summary(svc: V1Service) -> dict:
    md = svc.metadata
    return {
        "name": md.name,
        "namespace": md.namespace,
        "type": svc.spec.type,
        "clusterIP": svc.spec.cluster_ip,
        "externalIPs": safe_list(svc.spec.external_ips),
        "ports": to_plain(svc.spec.ports or []),
        "creationTime": md.creation_timestamp,
        "age": calculate_age(md.creation_timestamp),
        "labels": safe_dict(md.labels),
    }


def _detail(svc: V1Service) -> dict:
    return {
        **_summary(svc),
        "annotations": safe_dict(svc.metadata.annotations),
        "selector": safe_dict(svc.spec.selector),
        "sessionAffinity": svc.spec.session_affinity,
        "resourceVersion": svc.metadata.resource_version,
    }


@router.get("", response_model=APIResponse, summary="List services")
async def list_services(namespace: str, ops: ServiceOperations = Depends(get_service_operations)) -> APIResponse:
    return ok([_summary(s) for s in await ops.list_services(namespace)])


@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED, summary="Create a service")
async def create_service(
    namespace: str,
    payload: ServiceCreate,
    ops: ServiceOperations = Depends(get_service_operations),
) -> APIResponse:
    created = await ops.create_service(namespace, service_from_request(namespace, payload))
    return ok(_detail(created))


@router.get("/{name}", response_model=APIResponse, summary="Get a service")
async def get_service(
    namespace: str, name: str, ops: ServiceOperations = Depends(get_service_operations)
) -> APIResponse:
    return ok(_detail(await ops.get_service(namespace, name)))


@router.put("/{name}", response_model=APIResponse, summary="Partially update a service")
async def update_service(
    namespace: str,
    name: str,
    payload: ServiceUpdate,
    ops: ServiceOperations = Depends(get_service_operations),
) -> APIResponse:
    updated = await ops.update_service(
        namespace, name, service_overlay(payload), resource_version=payload.resource_version
    )
    return ok(_detail(updated))


@router.delete("/{name}", response_model=APIResponse, summary="Delete a service")
async def delete_service(
    namespace: str, name: str, ops: ServiceOperations = Depends(get_service_operations)
) -> APIResponse:
    await ops.delete_service(namespace, name)
    return deleted("Service", namespace, name)


@router.get("/{name}/status", response_model=APIResponse, summary="Ports and endpoint addresses")
async def get_service_status(
    namespace: str, name: str, ops: ServiceOperations = Depends(get_service_operations)
) -> APIResponse:
    return ok(await ops.get_service_status(namespace, name))
