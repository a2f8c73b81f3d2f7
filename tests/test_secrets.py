from __future__ import annotations

import asyncio
import base64

from kubernetes import client

from glance.services.k8s import SecretOperations
from tests.fakes import make_pod, make_secret


BASE = "/api/v1/secrets/namespaces/default"


def _decoded(secret) -> dict[str, str]:
    return {k: base64.b64decode(v).decode() for k, v in (secret.data or {}).items()}


def test_list_and_get_never_carry_values(api, cluster):
    cluster.store.add("secret", make_secret("db", data={"password": "s3cr3t-value"}))

    listed = api.get(BASE)
    got = api.get(f"{BASE}/db")

    assert listed.status_code == 200
    assert got.status_code == 200
    encoded = base64.b64encode(b"s3cr3t-value").decode()
    for resp in (listed, got):
        assert "s3cr3t-value" not in resp.text
        assert encoded not in resp.text
    assert got.json()["data"]["type"] == "Opaque"


def test_redaction_happens_inside_the_module(cluster):
    cluster.store.add("secret", make_secret("db", data={"password": "pw"}))
    ops = SecretOperations(cluster)  # type: ignore[arg-type]

    listed = asyncio.run(ops.list_secrets("default"))
    fetched = asyncio.run(ops.get_secret("default", "db"))

    for secret in (*listed, fetched):
        assert secret.data is None
        assert secret.string_data is None


def test_create_defaults_to_opaque_and_redacts_result(api, cluster):
    resp = api.post(BASE, json={"name": "api-token", "stringData": {"token": "abc123"}})

    assert resp.status_code == 201
    assert resp.json()["data"]["type"] == "Opaque"
    assert "abc123" not in resp.text
    assert _decoded(cluster.store.get("secret", "default", "api-token")) == {"token": "abc123"}


def test_keys_endpoint_returns_names_only(api, cluster):
    cluster.store.add("secret", make_secret("db", data={"username": "admin", "password": "pw"}))

    resp = api.get(f"{BASE}/db/keys")

    assert resp.status_code == 200
    assert resp.json()["data"] == {"name": "db", "namespace": "default", "type": "Opaque", "keys": ["password", "username"]}
    assert "admin" not in resp.text


def test_empty_update_keeps_existing_values(api, cluster):
    cluster.store.add("secret", make_secret("db", data={"password": "pw"}))

    resp = api.put(f"{BASE}/db", json={})

    assert resp.status_code == 200
    assert _decoded(cluster.store.get("secret", "default", "db")) == {"password": "pw"}


def test_string_data_is_merged_over_existing_keys(api, cluster):
    cluster.store.add("secret", make_secret("db", data={"username": "admin", "password": "old"}))

    resp = api.put(f"{BASE}/db", json={"stringData": {"password": "new"}})

    assert resp.status_code == 200
    assert "new" not in resp.json()["data"].values()
    assert _decoded(cluster.store.get("secret", "default", "db")) == {"username": "admin", "password": "new"}


def test_usage_endpoint_is_routed(api, cluster):
    cluster.store.add("secret", make_secret("db"))
    cluster.store.add(
        "pod",
        make_pod(
            "api-1",
            containers=[
                client.V1Container(
                    name="api",
                    image="api:1",
                    env_from=[client.V1EnvFromSource(secret_ref=client.V1SecretEnvSource(name="db"))],
                )
            ],
        ),
    )

    resp = api.get(f"{BASE}/db/usage")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["kind"] == "Secret"
    assert data["totalPods"] == 1
    assert data["pods"][0]["usage"]["envFrom"] == ["api"]


def test_missing_secret_keys_is_a_remote_error(api):
    resp = api.get(f"{BASE}/nope/keys")

    assert resp.status_code == 500
    assert 'secrets "nope" not found' in resp.json()["error"]
