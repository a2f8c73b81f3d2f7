"""
Ingress operations. The status view is assembled from a single read.
"""

from __future__ import annotations

from typing import Any

from kubernetes import client
from kubernetes.client import V1Ingress

from ...schemas.kubernetes import (
    IngressCreate,
    IngressPathStatus,
    IngressRuleSpec,
    IngressRuleStatus,
    IngressStatusReport,
    IngressTLSSpec,
    IngressTLSStatus,
    IngressUpdate,
    LoadBalancerIngress,
)
from .base_operations import Overlay, ResourceOperations


def _ingress_rules(rules: list[IngressRuleSpec]) -> list[client.V1IngressRule]:
    return [
        client.V1IngressRule(
            host=rule.host or None,
            http=client.V1HTTPIngressRuleValue(
                paths=[
                    client.V1HTTPIngressPath(
                        path=p.path,
                        path_type=p.path_type,
                        backend=client.V1IngressBackend(
                            service=client.V1IngressServiceBackend(
                                name=p.service_name,
                                port=client.V1ServiceBackendPort(number=p.service_port),
                            )
                        ),
                    )
                    for p in rule.paths
                ]
            ),
        )
        for rule in rules
    ]


def _ingress_tls(tls: list[IngressTLSSpec]) -> list[client.V1IngressTLS]:
    return [client.V1IngressTLS(hosts=t.hosts or None, secret_name=t.secret_name) for t in tls]


def ingress_from_request(namespace: str, req: IngressCreate) -> V1Ingress:
    return client.V1Ingress(
        api_version="networking.k8s.io/v1",
        kind="Ingress",
        metadata=client.V1ObjectMeta(
            name=req.name,
            namespace=namespace,
            labels=req.labels or None,
            annotations=req.annotations or None,
        ),
        spec=client.V1IngressSpec(
            ingress_class_name=req.class_name or None,
            rules=_ingress_rules(req.rules),
            tls=_ingress_tls(req.tls) or None,
        ),
    )


def ingress_overlay(changes: IngressUpdate) -> Overlay:
    fields = changes.supplied()

    def _apply(ing: V1Ingress) -> None:
        if "labels" in fields:
            ing.metadata.labels = fields["labels"]
        if "annotations" in fields:
            ing.metadata.annotations = fields["annotations"]
        if ing.spec is None and fields.keys() & {"class_name", "rules", "tls"}:
            ing.spec = client.V1IngressSpec()
        if "class_name" in fields:
            ing.spec.ingress_class_name = fields["class_name"] or None
        if "rules" in fields:
            ing.spec.rules = _ingress_rules(fields["rules"])
        if "tls" in fields:
            ing.spec.tls = _ingress_tls(fields["tls"])

    return _apply


def _backend_view(backend: Any) -> dict[str, Any]:
    service = getattr(backend, "service", None)
    if service is None:
        return {}
    port = service.port
    return {
        "service": {
            "name": service.name,
            "port": {"number": getattr(port, "number", None), "name": getattr(port, "name", None)},
        }
    }


def ingress_rule_table(ing: V1Ingress) -> list[IngressRuleStatus]:
    rules = []
    for rule in (getattr(ing.spec, "rules", None) or []):
        http = rule.http
        rules.append(
            IngressRuleStatus(
                host=rule.host,
                paths=[
                    IngressPathStatus(path=p.path, path_type=p.path_type, backend=_backend_view(p.backend))
                    for p in (getattr(http, "paths", None) or [])
                ],
            )
        )
    return rules


def build_ingress_status(ing: V1Ingress) -> IngressStatusReport:
    lb = getattr(ing.status, "load_balancer", None)
    spec = ing.spec
    return IngressStatusReport(
        name=ing.metadata.name,
        namespace=ing.metadata.namespace,
        load_balancer=[
            LoadBalancerIngress(ip=i.ip, hostname=i.hostname) for i in (getattr(lb, "ingress", None) or [])
        ],
        rules=ingress_rule_table(ing),
        tls=[
            IngressTLSStatus(hosts=t.hosts or [], secret_name=t.secret_name)
            for t in (getattr(spec, "tls", None) or [])
        ],
        class_name=getattr(spec, "ingress_class_name", None),
        annotations=ing.metadata.annotations or {},
    )


class IngressOperations(ResourceOperations):
    async def list_ingresses(self, namespace: str) -> list[V1Ingress]:
        result = await self._call(
            "list ingresses", self._cluster.networking_v1.list_namespaced_ingress, namespace=namespace
        )
        return list(result.items)

    async def get_ingress(self, namespace: str, name: str) -> V1Ingress:
        return await self._call(
            "get ingress", self._cluster.networking_v1.read_namespaced_ingress, name=name, namespace=namespace
        )

    async def create_ingress(self, namespace: str, body: V1Ingress) -> V1Ingress:
        return await self._call(
            "create ingress", self._cluster.networking_v1.create_namespaced_ingress, namespace=namespace, body=body
        )

    async def update_ingress(
        self, namespace: str, name: str, overlay: Overlay, resource_version: str | None = None
    ) -> V1Ingress:
        return await self._merge_update(
            "ingress",
            namespace,
            name,
            overlay,
            read=self._cluster.networking_v1.read_namespaced_ingress,
            replace=self._cluster.networking_v1.replace_namespaced_ingress,
            resource_version=resource_version,
        )

    async def delete_ingress(self, namespace: str, name: str) -> None:
        await self._call(
            "delete ingress", self._cluster.networking_v1.delete_namespaced_ingress, name=name, namespace=namespace
        )

    async def get_ingress_status(self, namespace: str, name: str) -> IngressStatusReport:
        return build_ingress_status(await self.get_ingress(namespace, name))
