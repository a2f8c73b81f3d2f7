from fastapi import APIRouter, Depends
from kubernetes.client import V1Pod

from glance.dependencies import get_pod_operations
from glance.schemas.common import APIResponse, deleted, ok
from glance.services.k8s import PodOperations
from glance.services.k8s.utils import calculate_age, safe_dict, to_plain


router = APIRouter(prefix="/pods/namespaces/{namespace}", tags=["pods"])


def _summary(pod: V1Pod) -> dict:
    md = pod.metadata
    statuses = getattr(pod.status, "container_statuses", None) or []
    return {
        "name": md.name,
        "namespace": md.namespace,
        "status": getattr(pod.status, "phase", None),
        "podIP": getattr(pod.status, "pod_ip", None),
        "nodeName": getattr(pod.spec, "node_name", None),
        "ready": f"{sum(1 for cs in statuses if cs.ready)}/{len(pod.spec.containers or [])}",
        "restarts": sum(cs.restart_count or 0 for cs in statuses),
        "creationTime": md.creation_timestamp,
        "age": calculate_age(md.creation_timestamp),
        "labels": safe_dict(md.labels),
    }


@router.get("", response_model=APIResponse, summary="List pods")
async def list_pods(namespace: str, ops: PodOperations = Depends(get_pod_operations)) -> APIResponse:
    return ok([_summary(p) for p in await ops.list_pods(namespace)])


@router.get("/{name}", response_model=APIResponse, summary="Get a pod")
async def get_pod(namespace: str, name: str, ops: PodOperations = Depends(get_pod_operations)) -> APIResponse:
    pod = await ops.get_pod(namespace, name)
    return ok(
        {
            **_summary(pod),
            "annotations": safe_dict(pod.metadata.annotations),
            "hostIP": getattr(pod.status, "host_ip", None),
            "containers": to_plain(pod.spec.containers or []),
            "containerStatuses": to_plain(getattr(pod.status, "container_statuses", None) or []),
        }
    )


@router.get("/{name}/metrics", response_model=APIResponse, summary="Pod status metrics")
async def get_pod_metrics(namespace: str, name: str, ops: PodOperations = Depends(get_pod_operations)) -> APIResponse:
    return ok(await ops.get_pod_metrics(namespace, name))


@router.delete("/{name}", response_model=APIResponse, summary="Delete a pod")
async def delete_pod(namespace: str, name: str, ops: PodOperations = Depends(get_pod_operations)) -> APIResponse:
    await ops.delete_pod(namespace, name)
    return deleted("Pod", namespace, name)
