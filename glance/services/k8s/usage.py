"""
Usage lookup shared by config maps and secrets.

A pod "uses" a config map or secret when any of three reference points
names it: a volume source, a container's ``envFrom`` import, or a single
``env[].valueFrom`` key reference. Each matching pod is reported once with
all of its evidence, in pod listing order.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Literal

from ...schemas.kubernetes import PodUsage, UsageEvidence, UsageReport


TargetKind = Literal["ConfigMap", "Secret"]


def _volume_ref(volume: Any, kind: TargetKind) -> str | None:
    if kind == "ConfigMap":
        source = getattr(volume, "config_map", None)
        return getattr(source, "name", None) if source else None
    source = getattr(volume, "secret", None)
    return getattr(source, "secret_name", None) if source else None


def _env_from_ref(env_from: Any, kind: TargetKind) -> str | None:
    ref = getattr(env_from, "config_map_ref" if kind == "ConfigMap" else "secret_ref", None)
    return getattr(ref, "name", None) if ref else None


def _env_var_ref(env: Any, kind: TargetKind) -> str | None:
    value_from = getattr(env, "value_from", None)
    if not value_from:
        return None
    ref = getattr(value_from, "config_map_key_ref" if kind == "ConfigMap" else "secret_key_ref", None)
    return getattr(ref, "name", None) if ref else None


def scan_pod_usage(pod: Any, kind: TargetKind, name: str) -> UsageEvidence | None:
    """Evidence that ``pod`` references the named object, or None."""
    spec = getattr(pod, "spec", None)
    if spec is None:
        return None

    evidence = UsageEvidence()
    for volume in spec.volumes or []:
        if _volume_ref(volume, kind) == name:
            evidence.volume_mounts.append(volume.name)

    for container in spec.containers or []:
        for env_from in container.env_from or []:
            if _env_from_ref(env_from, kind) == name:
                evidence.env_from.append(container.name)
        for env in container.env or []:
            if _env_var_ref(env, kind) == name:
                evidence.env_vars.append(f"{container.name}:{env.name}")

    return evidence if evidence.found else None


def build_usage_report(pods: Iterable[Any], kind: TargetKind, namespace: str, name: str) -> UsageReport:
    using: list[PodUsage] = []
    for pod in pods:
        evidence = scan_pod_usage(pod, kind, name)
        if evidence is None:
            continue
        status = getattr(pod, "status", None)
        using.append(
            PodUsage(
                name=pod.metadata.name,
                status=getattr(status, "phase", None) or "Unknown",
                usage=evidence,
            )
        )
    return UsageReport(resource=name, kind=kind, namespace=namespace, pods=using, total_pods=len(using))
