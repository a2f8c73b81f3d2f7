"""
Namespace operations: list, get, and pod phase metrics.
"""

from __future__ import annotations

from kubernetes.client import V1Namespace

from ...schemas.kubernetes import NamespaceMetricsReport
from .base_operations import ResourceOperations


POD_PHASES = ("running", "pending", "failed", "succeeded", "unknown")


class NamespaceOperations(ResourceOperations):
    async def list_namespaces(self) -> list[V1Namespace]:
        result = await self._call("list namespaces", self._cluster.core_v1.list_namespace)
        return list(result.items)

    async def get_namespace(self, name: str) -> V1Namespace:
        return await self._call("get namespace", self._cluster.core_v1.read_namespace, name=name)

    async def get_namespace_metrics(self, name: str) -> NamespaceMetricsReport:
        pods = await self._call(
            "list pods for namespace metrics",
            self._cluster.core_v1.list_namespaced_pod,
            namespace=name,
        )
        counts = dict.fromkeys(POD_PHASES, 0)
        for pod in pods.items:
            phase = (getattr(pod.status, "phase", None) or "Unknown").lower()
            counts[phase] = counts.get(phase, 0) + 1
        return NamespaceMetricsReport(name=name, pod_count=len(pods.items), status=counts)
