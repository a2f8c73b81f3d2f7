from fastapi import APIRouter, Depends
from kubernetes.client import V1Namespace

from glance.dependencies import get_namespace_operations
from glance.schemas.common import APIResponse, ok
from glance.services.k8s import NamespaceOperations
from glance.services.k8s.utils import calculate_age, safe_dict


router = APIRouter(prefix="/namespaces", tags=["namespaces"])


def _summary(ns: V1Namespace) -> dict:
    md = ns.metadata
    return {
        "name": md.name,
        "status": getattr(ns.status, "phase", None),
        "creationTime": md.creation_timestamp,
        "age": calculate_age(md.creation_timestamp),
        "labels": safe_dict(md.labels),
    }


@router.get("", response_model=APIResponse, summary="List namespaces")
async def list_namespaces(ops: NamespaceOperations = Depends(get_namespace_operations)) -> APIResponse:
    return ok([_summary(ns) for ns in await ops.list_namespaces()])


@router.get("/{name}", response_model=APIResponse, summary="Get a namespace")
async def get_namespace(name: str, ops: NamespaceOperations = Depends(get_namespace_operations)) -> APIResponse:
    ns = await ops.get_namespace(name)
    return ok({**_summary(ns), "annotations": safe_dict(ns.metadata.annotations)})


@router.get("/{name}/metrics", response_model=APIResponse, summary="Pod counts by phase")
async def get_namespace_metrics(
    name: str, ops: NamespaceOperations = Depends(get_namespace_operations)
) -> APIResponse:
    return ok(await ops.get_namespace_metrics(name))
