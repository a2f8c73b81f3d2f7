"""Shared fixtures."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from kubernetes import client

from glance.config import Settings
from glance.main import create_app
from tests.fakes import FakeCluster


# ============ fixtures ============


@pytest.fixture()
def cluster() -> FakeCluster:
    fake = FakeCluster()
    fake.store.add(
        "namespace",
        client.V1Namespace(
            metadata=client.V1ObjectMeta(name="default", labels={"team": "core"}),
            status=client.V1NamespaceStatus(phase="Active"),
        ),
    )
    return fake


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None, ENV="test", KUBECONFIG="/nonexistent/kubeconfig")


@pytest.fixture()
def app(cluster: FakeCluster, settings: Settings):
    return create_app(cluster, settings)  # type: ignore[arg-type]


@pytest.fixture()
def api(app) -> TestClient:
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
