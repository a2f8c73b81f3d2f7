"""
Cluster client adapter.

Builds one ``ApiClient`` from either an explicit host/bearer-token pair or a
kubeconfig file, probes it once, and hands out typed API accessors. The
library's global default configuration is never touched; every component
receives the ``ClusterClient`` it should use.
"""

from __future__ import annotations

import os

import structlog
from kubernetes import client, config
from kubernetes.client import ApiClient
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from ...config import Settings
from ...exceptions import ClusterConnectionError


logger = structlog.get_logger(__name__)


class ClusterClient:
    """Typed accessors over a single live API client."""

    def __init__(self, api_client: ApiClient, *, display_name: str = "default") -> None:
        self.api_client = api_client
        self.display_name = display_name
        self.core_v1 = client.CoreV1Api(api_client)
        self.apps_v1 = client.AppsV1Api(api_client)
        self.networking_v1 = client.NetworkingV1Api(api_client)
        self.version = client.VersionApi(api_client)

    def probe(self) -> None:
        """Bounded list call proving the credentials reach a live API server."""
        try:
            self.core_v1.list_node(limit=1)
        except ApiException as exc:
            raise ClusterConnectionError(
                f"cluster liveness probe failed: {exc.status} {exc.reason}"
            ) from exc
        except Exception as exc:
            raise ClusterConnectionError(f"cluster liveness probe failed: {exc}") from exc

    def server_version(self) -> str:
        try:
            info = self.version.get_code()
        except Exception as exc:  # noqa: BLE001 - informational only
            logger.warning("kubernetes.version_unavailable", error=str(exc))
            return "unknown"
        return getattr(info, "git_version", None) or "unknown"

    def close(self) -> None:
        self.api_client.close()


def build_api_client(settings: Settings) -> tuple[ApiClient, str]:
    """Create an ``ApiClient`` from settings, returning it with a display name."""
    if settings.uses_token_auth:
        if not settings.k8s_host:
            raise ClusterConnectionError("K8S_HOST environment variable is required when K8S_TOKEN is set")
        if not settings.k8s_token:
            raise ClusterConnectionError("K8S_TOKEN environment variable is required when K8S_HOST is set")

        configuration = client.Configuration()
        configuration.host = settings.k8s_host
        configuration.api_key = {"authorization": settings.k8s_token}
        configuration.api_key_prefix = {"authorization": "Bearer"}
        configuration.verify_ssl = not settings.k8s_insecure_skip_tls_verify
        return ApiClient(configuration), settings.k8s_host

    path = settings.resolved_kube_config_path
    if not os.path.exists(path):
        raise ClusterConnectionError(f"kubeconfig file not found at {path}")
    try:
        api_client = config.new_client_from_config(config_file=path, context=settings.kube_context)
    except ConfigException as exc:
        raise ClusterConnectionError(f"failed to load kubeconfig {path}: {exc}") from exc
    return api_client, settings.kube_context or "default"


def connect_cluster(settings: Settings) -> ClusterClient:
    """Connect and probe once. Raises ``ClusterConnectionError`` on any failure."""
    api_client, display_name = build_api_client(settings)
    cluster = ClusterClient(api_client, display_name=display_name)
    try:
        cluster.probe()
    except ClusterConnectionError:
        cluster.close()
        raise
    logger.info(
        "kubernetes.connected",
        cluster=display_name,
        version=cluster.server_version(),
        token_auth=settings.uses_token_auth,
    )
    return cluster
