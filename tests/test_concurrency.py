"""Read-modify-write races on the same object.

A barrier in the store's read path holds both writers until each has read
the same version, so the interleaving is fixed rather than left to timing.
"""

from __future__ import annotations

import asyncio
import threading

from glance.exceptions import ClusterAPIError, ClusterErrorKind
from glance.schemas.kubernetes import ConfigMapUpdate
from glance.services.k8s import ConfigMapOperations
from glance.services.k8s.config_operations import configmap_overlay
from tests.fakes import make_configmap


def _hold_reads_until(barrier: threading.Barrier):
    def _hook(kind: str, namespace: str, name: str) -> None:
        if kind == "config_map":
            barrier.wait(timeout=5)

    return _hook


async def _race(ops: ConfigMapOperations, *updates: ConfigMapUpdate, resource_version: str | None = None):
    return await asyncio.gather(
        *(
            ops.update_configmap("default", "shared", configmap_overlay(u), resource_version=resource_version)
            for u in updates
        ),
        return_exceptions=True,
    )


def test_overlapping_updates_are_last_write_wins(cluster):
    cluster.store.add("config_map", make_configmap("shared", data={"k": "v"}, labels={"owner": "nobody"}))
    cluster.store.read_hooks.append(_hold_reads_until(threading.Barrier(2)))
    ops = ConfigMapOperations(cluster)  # type: ignore[arg-type]

    results = asyncio.run(
        _race(
            ops,
            ConfigMapUpdate(labels={"owner": "alice"}),
            ConfigMapUpdate(labels={"owner": "bob"}),
        )
    )

    assert not any(isinstance(r, Exception) for r in results)
    final = cluster.store.get("config_map", "default", "shared")
    # Both writes landed on the same stale read; the later one replaced the earlier
    assert final.metadata.labels in ({"owner": "alice"}, {"owner": "bob"})
    assert len(cluster.store.calls) == 2
    assert final.data == {"k": "v"}


def test_stale_disjoint_update_is_lost_without_a_token(cluster):
    cluster.store.add("config_map", make_configmap("shared", data={"k": "v"}, labels={"a": "1"}))
    cluster.store.read_hooks.append(_hold_reads_until(threading.Barrier(2)))
    ops = ConfigMapOperations(cluster)  # type: ignore[arg-type]

    asyncio.run(
        _race(
            ops,
            ConfigMapUpdate(labels={"a": "2"}),
            ConfigMapUpdate(data={"k": "changed"}),
        )
    )

    final = cluster.store.get("config_map", "default", "shared")
    label_applied = final.metadata.labels == {"a": "2"}
    data_applied = final.data == {"k": "changed"}
    # Each writer re-submits the whole object it read, so exactly one change survives
    assert label_applied != data_applied


def test_resource_version_token_rejects_the_stale_writer(cluster):
    stored = cluster.store.add("config_map", make_configmap("shared", labels={"owner": "nobody"}))
    ops = ConfigMapOperations(cluster)  # type: ignore[arg-type]

    results = asyncio.run(
        _race(
            ops,
            ConfigMapUpdate(labels={"owner": "alice"}),
            ConfigMapUpdate(labels={"owner": "bob"}),
            resource_version=stored.metadata.resource_version,
        )
    )

    errors = [r for r in results if isinstance(r, Exception)]
    assert len(errors) == 1
    assert isinstance(errors[0], ClusterAPIError)
    assert errors[0].kind is ClusterErrorKind.CONFLICT
    assert errors[0].operation == "update configmap"
    assert cluster.store.get("config_map", "default", "shared").metadata.labels in (
        {"owner": "alice"},
        {"owner": "bob"},
    )
