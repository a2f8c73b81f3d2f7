"""
Common plumbing for the per-kind resource modules.

Every remote call goes through ``ResourceOperations._call``: the blocking
client method runs in a worker thread, and any failure comes back as a
``ClusterAPIError`` carrying the operation name. Calls are attempted once.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from kubernetes.client.rest import ApiException

from ...exceptions import ClusterAPIError
from .client import ClusterClient


logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Applied to the freshly read object before it is written back
Overlay = Callable[[Any], None]


class ResourceOperations:
    def __init__(self, cluster: ClusterClient) -> None:
        self._cluster = cluster

    async def _call(self, operation: str, fn: Callable[..., T], /, **kwargs: Any) -> T:
        logger.debug(
            "kubernetes.call",
            operation=operation,
            namespace=kwargs.get("namespace"),
            name=kwargs.get("name"),
        )
        try:
            return await asyncio.to_thread(fn, **kwargs)
        except ApiException as exc:
            error = ClusterAPIError.from_api_exception(operation, exc)
        except Exception as exc:
            error = ClusterAPIError.from_transport_error(operation, exc)
        logger.warning(
            "cluster.operation_failed",
            operation=operation,
            kind=error.kind.value,
            code=error.remote_code,
            reason=error.reason,
            details=error.remote_message,
        )
        raise error

    async def _merge_update(
        self,
        kind: str,
        namespace: str,
        name: str,
        overlay: Overlay,
        *,
        read: Callable[..., T],
        replace: Callable[..., T],
        resource_version: str | None = None,
    ) -> T:
        """Read-modify-write.

        ``overlay`` mutates only the field groups the caller supplied. Without
        ``resource_version`` the write is unconditional and the last writer
        wins; with it the API server rejects a stale write with a Conflict.
        """
        current = await self._call(f"get {kind}", read, name=name, namespace=namespace)
        overlay(current)
        current.metadata.resource_version = resource_version
        return await self._call(f"update {kind}", replace, name=name, namespace=namespace, body=current)
