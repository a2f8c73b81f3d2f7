from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.rest import ApiException

from glance.config import Settings
from glance.exceptions import ClusterConnectionError
from glance.services.k8s import client as cluster_client
from glance.services.k8s.client import ClusterClient, build_api_client, connect_cluster


def _settings(**env) -> Settings:
    return Settings(_env_file=None, **env)


def test_token_credentials_build_bearer_client():
    api_client, name = build_api_client(
        _settings(K8S_HOST="https://10.0.0.1:6443", K8S_TOKEN="tok", K8S_INSECURE_SKIP_TLS_VERIFY=True)
    )

    cfg = api_client.configuration
    assert name == "https://10.0.0.1:6443"
    assert cfg.host == "https://10.0.0.1:6443"
    assert cfg.api_key == {"authorization": "tok"}
    assert cfg.api_key_prefix == {"authorization": "Bearer"}
    assert cfg.verify_ssl is False


def test_tls_verification_can_stay_on_for_token_path():
    api_client, _ = build_api_client(
        _settings(K8S_HOST="https://10.0.0.1:6443", K8S_TOKEN="tok", K8S_INSECURE_SKIP_TLS_VERIFY=False)
    )

    assert api_client.configuration.verify_ssl is True


@pytest.mark.parametrize(
    ("env", "missing"),
    [({"K8S_HOST": "https://h"}, "K8S_TOKEN"), ({"K8S_TOKEN": "t"}, "K8S_HOST")],
)
def test_half_a_token_pair_fails_fast(env, missing):
    with pytest.raises(ClusterConnectionError, match=missing):
        build_api_client(_settings(**env))


def test_missing_kubeconfig_fails_fast(tmp_path):
    with pytest.raises(ClusterConnectionError, match="kubeconfig file not found"):
        build_api_client(_settings(KUBECONFIG=str(tmp_path / "absent")))


def test_kubeconfig_is_loaded_into_a_dedicated_client(tmp_path):
    path = tmp_path / "config"
    path.write_text("apiVersion: v1\nkind: Config\n")
    sentinel = MagicMock()

    with patch.object(cluster_client.config, "new_client_from_config", return_value=sentinel) as loader:
        api_client, name = build_api_client(_settings(KUBECONFIG=str(path), KUBE_CONTEXT="staging"))

    loader.assert_called_once_with(config_file=str(path), context="staging")
    assert api_client is sentinel
    assert name == "staging"


def test_probe_failure_prevents_startup():
    settings = _settings(K8S_HOST="https://10.0.0.1:6443", K8S_TOKEN="tok")
    core = MagicMock()
    core.list_node.side_effect = ApiException(status=401, reason="Unauthorized")

    with patch.object(cluster_client.client, "CoreV1Api", return_value=core):
        with pytest.raises(ClusterConnectionError, match="401 Unauthorized"):
            connect_cluster(settings)

    core.list_node.assert_called_once_with(limit=1)


def test_transport_failure_during_probe_prevents_startup():
    cluster = ClusterClient(MagicMock())
    cluster.core_v1 = MagicMock()
    cluster.core_v1.list_node.side_effect = OSError("connection refused")

    with pytest.raises(ClusterConnectionError, match="connection refused"):
        cluster.probe()


def test_successful_connect_probes_exactly_once():
    settings = _settings(K8S_HOST="https://10.0.0.1:6443", K8S_TOKEN="tok")
    core = MagicMock()

    with patch.object(cluster_client.client, "CoreV1Api", return_value=core), patch.object(
        cluster_client.client, "VersionApi"
    ) as version_api:
        version_api.return_value.get_code.return_value.git_version = "v1.30.1"
        cluster = connect_cluster(settings)

    assert core.list_node.call_count == 1
    assert cluster.core_v1 is core
    assert cluster.server_version() == "v1.30.1"


def test_serializer_is_built_once_on_first_use():
    from glance.services.k8s import utils

    utils._serializer.cache_clear()
    with patch.object(utils, "ApiClient") as api_client_cls:
        api_client_cls.return_value.sanitize_for_serialization.side_effect = lambda obj: {"plain": obj}
        assert not api_client_cls.called

        assert utils.to_plain(1) == {"plain": 1}
        assert utils.to_plain(2) == {"plain": 2}

    api_client_cls.assert_called_once_with()
    utils._serializer.cache_clear()
