from __future__ import annotations

from datetime import datetime, timezone

from kubernetes import client

from tests.fakes import make_pod


def _pod_with_status(name: str) -> client.V1Pod:
    pod = make_pod(
        name,
        containers=[
            client.V1Container(
                name="app",
                image="app:1",
                resources=client.V1ResourceRequirements(requests={"cpu": "250m", "memory": "64Mi"}),
            ),
            client.V1Container(name="sidecar", image="proxy:1"),
        ],
    )
    pod.status = client.V1PodStatus(
        phase="Running",
        host_ip="192.168.1.4",
        pod_ip="10.1.0.9",
        start_time=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        container_statuses=[
            client.V1ContainerStatus(
                name="app",
                image="app:1",
                image_id="sha256:aaa",
                ready=True,
                restart_count=2,
                state=client.V1ContainerState(running=client.V1ContainerStateRunning()),
            ),
            client.V1ContainerStatus(
                name="sidecar",
                image="proxy:1",
                image_id="sha256:bbb",
                ready=False,
                restart_count=0,
                state=client.V1ContainerState(
                    waiting=client.V1ContainerStateWaiting(reason="CrashLoopBackOff")
                ),
            ),
        ],
        conditions=[client.V1PodCondition(type="Ready", status="False", reason="ContainersNotReady")],
    )
    return pod


def test_health_is_static_and_enveloped(api):
    resp = api.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": {"status": "ok"}}


def test_list_and_get_namespace(api):
    listed = api.get("/api/v1/namespaces")
    got = api.get("/api/v1/namespaces/default")

    assert listed.status_code == 200
    assert [n["name"] for n in listed.json()["data"]] == ["default"]
    assert got.json()["data"]["status"] == "Active"
    assert got.json()["data"]["labels"] == {"team": "core"}


def test_namespace_metrics_counts_phases_in_lowercase(api, cluster):
    for name, phase in [("a", "Running"), ("b", "Running"), ("c", "Pending"), ("d", "Failed")]:
        cluster.store.add("pod", make_pod(name, phase=phase))

    resp = api.get("/api/v1/namespaces/default/metrics")

    assert resp.status_code == 200
    assert resp.json()["data"] == {
        "name": "default",
        "podCount": 4,
        "status": {"running": 2, "pending": 1, "failed": 1, "succeeded": 0, "unknown": 0},
    }


def test_pod_metrics(api, cluster):
    cluster.store.add("pod", _pod_with_status("web-0"))

    resp = api.get("/api/v1/pods/namespaces/default/web-0/metrics")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["phase"] == "Running"
    assert data["hostIP"] == "192.168.1.4"
    assert data["podIP"] == "10.1.0.9"
    assert data["startTime"].startswith("2024-05-01T12:00:00")
    assert data["containers"] == {
        "app": {"ready": True, "restartCount": 2, "state": "Running"},
        "sidecar": {"ready": False, "restartCount": 0, "state": "Waiting (CrashLoopBackOff)"},
    }
    assert data["conditions"][0]["reason"] == "ContainersNotReady"
    assert data["resourceRequests"] == [
        {"name": "app", "cpu": "250m", "memory": "64Mi"},
        {"name": "sidecar", "cpu": "0", "memory": "0"},
    ]


def test_list_get_delete_pod(api, cluster):
    cluster.store.add("pod", _pod_with_status("web-0"))

    listed = api.get("/api/v1/pods/namespaces/default")
    got = api.get("/api/v1/pods/namespaces/default/web-0")
    removed = api.delete("/api/v1/pods/namespaces/default/web-0")

    assert listed.json()["data"][0]["ready"] == "1/2"
    assert listed.json()["data"][0]["restarts"] == 2
    assert got.json()["data"]["containers"][0]["name"] == "app"
    assert removed.status_code == 200
    assert cluster.store.get("pod", "default", "web-0") is None
