"""
Service operations.

The status view needs a second read (the service's Endpoints), so the service
fields and the addresses it reports may come from two different moments.
"""

from __future__ import annotations

from typing import Any

from kubernetes import client
from kubernetes.client import V1Endpoints, V1Service

from ...exceptions import ClusterAPIError
from ...schemas.kubernetes import (
    EndpointAddress,
    LoadBalancerIngress,
    ServiceCreate,
    ServicePortSpec,
    ServicePortStatus,
    ServiceStatusReport,
    ServiceUpdate,
)
from .base_operations import Overlay, ResourceOperations
from .utils import to_plain


def _service_ports(ports: list[ServicePortSpec]) -> list[client.V1ServicePort]:
    built = []
    for p in ports:
        port = client.V1ServicePort(
            name=p.name,
            port=p.port,
            protocol=p.protocol or "TCP",
            target_port=p.target_port if p.target_port not in (None, 0, "") else p.port,
        )
        if p.node_port and p.node_port > 0:
            port.node_port = p.node_port
        built.append(port)
    return built


def service_from_request(namespace: str, req: ServiceCreate) -> V1Service:
    return client.V1Service(
        api_version="v1",
        kind="Service",
        metadata=client.V1ObjectMeta(
            name=req.name,
            namespace=namespace,
            labels=req.labels or None,
            annotations=req.annotations or None,
        ),
        spec=client.V1ServiceSpec(
            type=req.type,
            ports=_service_ports(req.ports),
            selector=req.selector or None,
            external_ips=req.external_ips or None,
        ),
    )


def service_overlay(changes: ServiceUpdate) -> Overlay:
    fields = changes.supplied()

    def _apply(svc: V1Service) -> None:
        if "labels" in fields:
            svc.metadata.labels = fields["labels"]
        if "annotations" in fields:
            svc.metadata.annotations = fields["annotations"]
        if "type" in fields:
            svc.spec.type = fields["type"]
        if "ports" in fields:
            svc.spec.ports = _service_ports(fields["ports"])
        if "selector" in fields:
            svc.spec.selector = fields["selector"]
        if "external_ips" in fields:
            svc.spec.external_ips = fields["external_ips"]

    return _apply


def _load_balancer_points(status: Any) -> list[LoadBalancerIngress]:
    lb = getattr(status, "load_balancer", None)
    return [
        LoadBalancerIngress(ip=i.ip, hostname=i.hostname)
        for i in (getattr(lb, "ingress", None) or [])
    ]


def build_service_status(svc: V1Service, endpoints: V1Endpoints | None) -> ServiceStatusReport:
    spec = svc.spec
    addresses: list[EndpointAddress] = []
    for subset in (getattr(endpoints, "subsets", None) or []):
        for addr in subset.addresses or []:
            addresses.append(
                EndpointAddress(
                    ip=addr.ip,
                    hostname=addr.hostname,
                    node_name=addr.node_name,
                    target_ref=to_plain(addr.target_ref) if addr.target_ref else None,
                )
            )
    return ServiceStatusReport(
        name=svc.metadata.name,
        namespace=svc.metadata.namespace,
        type=spec.type,
        cluster_ip=spec.cluster_ip,
        external_ips=spec.external_ips or [],
        load_balancer=_load_balancer_points(svc.status) if spec.type == "LoadBalancer" else None,
        ports=[
            ServicePortStatus(
                name=p.name,
                protocol=p.protocol,
                port=p.port,
                target_port=p.target_port,
                node_port=p.node_port,
            )
            for p in spec.ports or []
        ],
        endpoints=addresses,
        selector=spec.selector or {},
        session_affinity=spec.session_affinity,
    )


class ServiceOperations(ResourceOperations):
    async def list_services(self, namespace: str) -> list[V1Service]:
        result = await self._call("list services", self._cluster.core_v1.list_namespaced_service, namespace=namespace)
        return list(result.items)

    async def get_service(self, namespace: str, name: str) -> V1Service:
        return await self._call(
            "get service", self._cluster.core_v1.read_namespaced_service, name=name, namespace=namespace
        )

    async def create_service(self, namespace: str, body: V1Service) -> V1Service:
        return await self._call(
            "create service", self._cluster.core_v1.create_namespaced_service, namespace=namespace, body=body
        )

    async def update_service(
        self, namespace: str, name: str, overlay: Overlay, resource_version: str | None = None
    ) -> V1Service:
        return await self._merge_update(
            "service",
            namespace,
            name,
            overlay,
            read=self._cluster.core_v1.read_namespaced_service,
            replace=self._cluster.core_v1.replace_namespaced_service,
            resource_version=resource_version,
        )

    async def delete_service(self, namespace: str, name: str) -> None:
        await self._call(
            "delete service", self._cluster.core_v1.delete_namespaced_service, name=name, namespace=namespace
        )

    async def get_service_status(self, namespace: str, name: str) -> ServiceStatusReport:
        svc = await self.get_service(namespace, name)
        try:
            endpoints = await self._call(
                "get service endpoints",
                self._cluster.core_v1.read_namespaced_endpoints,
                name=name,
                namespace=namespace,
            )
        except ClusterAPIError as exc:
            # Not created yet by the endpoints controller
            if not exc.is_not_found:
                raise
            endpoints = None
        return build_service_status(svc, endpoints)
