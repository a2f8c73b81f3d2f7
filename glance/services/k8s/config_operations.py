"""
ConfigMap and Secret operations.

Secrets are redacted as soon as they are fetched: ``data`` and
``string_data`` are cleared on every object this module returns. Only the
private raw read (used for key listing and read-modify-write) sees values.
"""

from __future__ import annotations

from kubernetes import client
from kubernetes.client import V1ConfigMap, V1Secret

from ...schemas.kubernetes import (
    ConfigMapCreate,
    ConfigMapUpdate,
    SecretCreate,
    SecretKeys,
    SecretUpdate,
    UsageReport,
)
from .base_operations import Overlay, ResourceOperations
from .usage import build_usage_report


def _metadata(namespace: str, name: str, labels: dict, annotations: dict) -> client.V1ObjectMeta:
    return client.V1ObjectMeta(
        name=name,
        namespace=namespace,
        labels=labels or None,
        annotations=annotations or None,
    )


# ========== ConfigMap ==========


def configmap_from_request(namespace: str, req: ConfigMapCreate) -> V1ConfigMap:
    return client.V1ConfigMap(
        api_version="v1",
        kind="ConfigMap",
        metadata=_metadata(namespace, req.name, req.labels, req.annotations),
        data=req.data or None,
        binary_data=req.binary_data or None,
    )


def configmap_overlay(changes: ConfigMapUpdate) -> Overlay:
    fields = changes.supplied()

    def _apply(cm: V1ConfigMap) -> None:
        if "labels" in fields:
            cm.metadata.labels = fields["labels"]
        if "annotations" in fields:
            cm.metadata.annotations = fields["annotations"]
        if "data" in fields:
            cm.data = fields["data"]
        if "binary_data" in fields:
            cm.binary_data = fields["binary_data"]

    return _apply


class ConfigMapOperations(ResourceOperations):
    async def list_configmaps(self, namespace: str) -> list[V1ConfigMap]:
        result = await self._call(
            "list configmaps", self._cluster.core_v1.list_namespaced_config_map, namespace=namespace
        )
        return list(result.items)

    async def get_configmap(self, namespace: str, name: str) -> V1ConfigMap:
        return await self._call(
            "get configmap", self._cluster.core_v1.read_namespaced_config_map, name=name, namespace=namespace
        )

    async def create_configmap(self, namespace: str, body: V1ConfigMap) -> V1ConfigMap:
        return await self._call(
            "create configmap", self._cluster.core_v1.create_namespaced_config_map, namespace=namespace, body=body
        )

    async def update_configmap(
        self, namespace: str, name: str, overlay: Overlay, resource_version: str | None = None
    ) -> V1ConfigMap:
        return await self._merge_update(
            "configmap",
            namespace,
            name,
            overlay,
            read=self._cluster.core_v1.read_namespaced_config_map,
            replace=self._cluster.core_v1.replace_namespaced_config_map,
            resource_version=resource_version,
        )

    async def delete_configmap(self, namespace: str, name: str) -> None:
        await self._call(
            "delete configmap", self._cluster.core_v1.delete_namespaced_config_map, name=name, namespace=namespace
        )

    async def get_configmap_usage(self, namespace: str, name: str) -> UsageReport:
        pods = await self._call(
            "list pods for configmap usage", self._cluster.core_v1.list_namespaced_pod, namespace=namespace
        )
        return build_usage_report(pods.items, "ConfigMap", namespace, name)


# ========== Secret ==========


def redact_secret(secret: V1Secret) -> V1Secret:
    secret.data = None
    secret.string_data = None
    return secret


def secret_from_request(namespace: str, req: SecretCreate) -> V1Secret:
    return client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=_metadata(namespace, req.name, req.labels, req.annotations),
        type=req.type or "Opaque",
        string_data=req.string_data or None,
    )


def secret_overlay(changes: SecretUpdate) -> Overlay:
    """``stringData`` keys are merged over the existing data, never replacing it wholesale."""
    fields = changes.supplied()

    def _apply(secret: V1Secret) -> None:
        if "labels" in fields:
            secret.metadata.labels = fields["labels"]
        if "annotations" in fields:
            secret.metadata.annotations = fields["annotations"]
        if "string_data" in fields:
            secret.string_data = {**(secret.string_data or {}), **fields["string_data"]}

    return _apply


class SecretOperations(ResourceOperations):
    async def _read_raw(self, namespace: str, name: str) -> V1Secret:
        return await self._call(
            "get secret", self._cluster.core_v1.read_namespaced_secret, name=name, namespace=namespace
        )

    async def list_secrets(self, namespace: str) -> list[V1Secret]:
        result = await self._call("list secrets", self._cluster.core_v1.list_namespaced_secret, namespace=namespace)
        return [redact_secret(s) for s in result.items]

    async def get_secret(self, namespace: str, name: str) -> V1Secret:
        return redact_secret(await self._read_raw(namespace, name))

    async def get_secret_keys(self, namespace: str, name: str) -> SecretKeys:
        secret = await self._read_raw(namespace, name)
        keys = sorted((secret.data or {}).keys())
        return SecretKeys(name=name, namespace=namespace, type=secret.type, keys=keys)

    async def create_secret(self, namespace: str, body: V1Secret) -> V1Secret:
        created = await self._call(
            "create secret", self._cluster.core_v1.create_namespaced_secret, namespace=namespace, body=body
        )
        return redact_secret(created)

    async def update_secret(
        self, namespace: str, name: str, overlay: Overlay, resource_version: str | None = None
    ) -> V1Secret:
        updated = await self._merge_update(
            "secret",
            namespace,
            name,
            overlay,
            read=self._cluster.core_v1.read_namespaced_secret,
            replace=self._cluster.core_v1.replace_namespaced_secret,
            resource_version=resource_version,
        )
        return redact_secret(updated)

    async def delete_secret(self, namespace: str, name: str) -> None:
        await self._call(
            "delete secret", self._cluster.core_v1.delete_namespaced_secret, name=name, namespace=namespace
        )

    async def get_secret_usage(self, namespace: str, name: str) -> UsageReport:
        pods = await self._call(
            "list pods for secret usage", self._cluster.core_v1.list_namespaced_pod, namespace=namespace
        )
        return build_usage_report(pods.items, "Secret", namespace, name)
