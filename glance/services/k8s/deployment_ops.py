"""
Deployment operations: CRUD, scaling, and the replica/condition status view.
"""

from __future__ import annotations

from kubernetes import client
from kubernetes.client import V1Deployment

from ...schemas.kubernetes import (
    DeploymentCondition,
    DeploymentCreate,
    DeploymentStatusReport,
    DeploymentUpdate,
    ReplicaCounts,
)
from .base_operations import Overlay, ResourceOperations
from .utils import calculate_age


def deployment_from_request(namespace: str, req: DeploymentCreate) -> V1Deployment:
    """One container named after the deployment, selected by ``app=<name>``."""
    selector_labels = {"app": req.name}
    container = client.V1Container(
        name=req.name,
        image=req.image,
        env=[client.V1EnvVar(name=e.name, value=e.value) for e in req.env_vars] or None,
    )
    if req.container_port:
        container.ports = [client.V1ContainerPort(container_port=req.container_port)]

    return client.V1Deployment(
        api_version="apps/v1",
        kind="Deployment",
        metadata=client.V1ObjectMeta(
            name=req.name,
            namespace=namespace,
            labels=req.labels or None,
            annotations=req.annotations or None,
        ),
        spec=client.V1DeploymentSpec(
            replicas=req.replicas,
            selector=client.V1LabelSelector(match_labels=selector_labels),
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(labels=dict(selector_labels)),
                spec=client.V1PodSpec(containers=[container]),
            ),
        ),
    )


def deployment_overlay(changes: DeploymentUpdate) -> Overlay:
    fields = changes.supplied()

    def _apply(dep: V1Deployment) -> None:
        if "labels" in fields:
            dep.metadata.labels = fields["labels"]
        if "annotations" in fields:
            dep.metadata.annotations = fields["annotations"]
        if "replicas" in fields:
            dep.spec.replicas = fields["replicas"]
        containers = dep.spec.template.spec.containers or []
        if containers and "image" in fields:
            containers[0].image = fields["image"]
        if containers and "env_vars" in fields:
            containers[0].env = [client.V1EnvVar(name=e.name, value=e.value) for e in fields["env_vars"]]

    return _apply


def build_deployment_status(dep: V1Deployment) -> DeploymentStatusReport:
    status = dep.status
    spec = dep.spec
    strategy = getattr(spec, "strategy", None)
    return DeploymentStatusReport(
        name=dep.metadata.name,
        namespace=dep.metadata.namespace,
        replicas=ReplicaCounts(
            desired=spec.replicas or 0,
            current=getattr(status, "replicas", None) or 0,
            updated=getattr(status, "updated_replicas", None) or 0,
            ready=getattr(status, "ready_replicas", None) or 0,
            available=getattr(status, "available_replicas", None) or 0,
        ),
        conditions=[
            DeploymentCondition(
                type=c.type,
                status=c.status,
                last_update_time=c.last_update_time,
                last_transition_time=c.last_transition_time,
                reason=c.reason,
                message=c.message,
            )
            for c in (getattr(status, "conditions", None) or [])
        ],
        strategy=getattr(strategy, "type", None),
        age=calculate_age(dep.metadata.creation_timestamp),
    )


class DeploymentOperations(ResourceOperations):
    async def list_deployments(self, namespace: str) -> list[V1Deployment]:
        result = await self._call(
            "list deployments", self._cluster.apps_v1.list_namespaced_deployment, namespace=namespace
        )
        return list(result.items)

    async def get_deployment(self, namespace: str, name: str) -> V1Deployment:
        return await self._call(
            "get deployment", self._cluster.apps_v1.read_namespaced_deployment, name=name, namespace=namespace
        )

    async def create_deployment(self, namespace: str, body: V1Deployment) -> V1Deployment:
        return await self._call(
            "create deployment", self._cluster.apps_v1.create_namespaced_deployment, namespace=namespace, body=body
        )

    async def update_deployment(
        self, namespace: str, name: str, overlay: Overlay, resource_version: str | None = None
    ) -> V1Deployment:
        return await self._merge_update(
            "deployment",
            namespace,
            name,
            overlay,
            read=self._cluster.apps_v1.read_namespaced_deployment,
            replace=self._cluster.apps_v1.replace_namespaced_deployment,
            resource_version=resource_version,
        )

    async def delete_deployment(self, namespace: str, name: str) -> None:
        await self._call(
            "delete deployment", self._cluster.apps_v1.delete_namespaced_deployment, name=name, namespace=namespace
        )

    async def scale_deployment(self, namespace: str, name: str, replicas: int) -> V1Deployment:
        def _scale(dep: V1Deployment) -> None:
            dep.spec.replicas = replicas

        return await self.update_deployment(namespace, name, _scale)

    async def get_deployment_status(self, namespace: str, name: str) -> DeploymentStatusReport:
        dep = await self.get_deployment(namespace, name)
        return build_deployment_status(dep)
