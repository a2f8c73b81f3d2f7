from fastapi import APIRouter, Depends, status
from kubernetes.client import V1Ingress

from glance.dependencies import get_ingress_operations
from glance.schemas.common import APIResponse, deleted, ok
from glance.schemas.kubernetes import IngressCreate, IngressUpdate
from glance.services.k8s import IngressOperations
from glance.services.k8s.network_operations import ingress_from_request, ingress_overlay, ingress_rule_table
from glance.services.k8s.utils import calculate_age, safe_dict


router = APIRouter(prefix="/namespaces/{namespace}/ingresses", tags=["ingresses"])


def _summary(ing: V1Ingress) -> dict:
    md = ing.metadata
    rules = ingress_rule_table(ing)
    return {
        "name": md.name,
        "namespace": md.namespace,
        "className": getattr(ing.spec, "ingress_class_name", None),
        "hosts": [r.host for r in rules if r.host],
        "creationTime": md.creation_timestamp,
        "age": calculate_age(md.creation_timestamp),
        "labels": safe_dict(md.labels),
    }


def _detail(ing: V1Ingress) -> dict:
    return {
        **_summary(ing),
        "annotations": safe_dict(ing.metadata.annotations),
        "rules": ingress_rule_table(ing),
        "tls": [
            {"hosts": t.hosts or [], "secretName": t.secret_name}
            for t in (getattr(ing.spec, "tls", None) or [])
        ],
        "resourceVersion": ing.metadata.resource_version,
    }


@router.get("", response_model=APIResponse, summary="List ingresses")
async def list_ingresses(namespace: str, ops: IngressOperations = Depends(get_ingress_operations)) -> APIResponse:
    return ok([_summary(i) for i in await ops.list_ingresses(namespace)])


@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED, summary="Create an ingress")
async def create_ingress(
    namespace: str,
    payload: IngressCreate,
    ops: IngressOperations = Depends(get_ingress_operations),
) -> APIResponse:
    created = await ops.create_ingress(namespace, ingress_from_request(namespace, payload))
    return ok(_detail(created))


@router.get("/{name}", response_model=APIResponse, summary="Get an ingress")
async def get_ingress(
    namespace: str, name: str, ops: IngressOperations = Depends(get_ingress_operations)
) -> APIResponse:
    return ok(_detail(await ops.get_ingress(namespace, name)))


@router.put("/{name}", response_model=APIResponse, summary="Partially update an ingress")
async def update_ingress(
    namespace: str,
    name: str,
    payload: IngressUpdate,
    ops: IngressOperations = Depends(get_ingress_operations),
) -> APIResponse:
    updated = await ops.update_ingress(
        namespace, name, ingress_overlay(payload), resource_version=payload.resource_version
    )
    return ok(_detail(updated))


@router.delete("/{name}", response_model=APIResponse, summary="Delete an ingress")
async def delete_ingress(
    namespace: str, name: str, ops: IngressOperations = Depends(get_ingress_operations)
) -> APIResponse:
    await ops.delete_ingress(namespace, name)
    return deleted("Ingress", namespace, name)


@router.get("/{name}/status", response_model=APIResponse, summary="Rules, TLS and load balancer status")
async def get_ingress_status(
    namespace: str, name: str, ops: IngressOperations = Depends(get_ingress_operations)
) -> APIResponse:
    return ok(await ops.get_ingress_status(namespace, name))
