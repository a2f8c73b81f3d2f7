"""
Pod operations: list, get, delete, and a metrics view assembled from pod status.
"""

from __future__ import annotations

from typing import Any

from kubernetes.client import V1Pod

from ...schemas.kubernetes import (
    ContainerRequests,
    ContainerStateReport,
    PodConditionReport,
    PodMetricsReport,
)
from .base_operations import ResourceOperations


def describe_container_state(state: Any) -> str:
    if state is None:
        return "Unknown"
    if state.running is not None:
        return "Running"
    if state.waiting is not None:
        return f"Waiting ({state.waiting.reason or ''})"
    if state.terminated is not None:
        return f"Terminated ({state.terminated.reason or ''})"
    return "Unknown"


def build_pod_metrics(pod: V1Pod) -> PodMetricsReport:
    status = pod.status
    containers = {
        cs.name: ContainerStateReport(
            ready=bool(cs.ready),
            restart_count=cs.restart_count or 0,
            state=describe_container_state(cs.state),
        )
        for cs in (getattr(status, "container_statuses", None) or [])
    }
    conditions = [
        PodConditionReport(type=c.type, status=c.status, reason=c.reason, message=c.message)
        for c in (getattr(status, "conditions", None) or [])
    ]
    requests = []
    for container in pod.spec.containers or []:
        wanted = getattr(container.resources, "requests", None) or {}
        requests.append(
            ContainerRequests(
                name=container.name,
                cpu=str(wanted.get("cpu", "0")),
                memory=str(wanted.get("memory", "0")),
            )
        )
    return PodMetricsReport(
        name=pod.metadata.name,
        namespace=pod.metadata.namespace,
        phase=getattr(status, "phase", None),
        host_ip=getattr(status, "host_ip", None),
        pod_ip=getattr(status, "pod_ip", None),
        start_time=getattr(status, "start_time", None),
        containers=containers,
        conditions=conditions,
        resource_requests=requests,
    )


class PodOperations(ResourceOperations):
    async def list_pods(self, namespace: str) -> list[V1Pod]:
        result = await self._call("list pods", self._cluster.core_v1.list_namespaced_pod, namespace=namespace)
        return list(result.items)

    async def get_pod(self, namespace: str, name: str) -> V1Pod:
        return await self._call(
            "get pod", self._cluster.core_v1.read_namespaced_pod, name=name, namespace=namespace
        )

    async def delete_pod(self, namespace: str, name: str) -> None:
        await self._call(
            "delete pod", self._cluster.core_v1.delete_namespaced_pod, name=name, namespace=namespace
        )

    async def get_pod_metrics(self, namespace: str, name: str) -> PodMetricsReport:
        pod = await self.get_pod(namespace, name)
        return build_pod_metrics(pod)
