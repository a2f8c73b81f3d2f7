from __future__ import annotations

from kubernetes import client


BASE = "/api/v1/services/namespaces/default"


def _create_web(api):
    return api.post(
        BASE,
        json={
            "name": "web",
            "type": "ClusterIP",
            "ports": [{"name": "http", "port": 80, "targetPort": 8080}],
            "selector": {"app": "web", "tier": "frontend"},
        },
    )


def test_new_service_status_has_its_port_and_no_endpoints(api):
    created = _create_web(api)
    assert created.status_code == 201

    resp = api.get(f"{BASE}/web/status")

    assert resp.status_code == 200
    status = resp.json()["data"]
    assert status["ports"] == [
        {"name": "http", "protocol": "TCP", "port": 80, "targetPort": 8080, "nodePort": None}
    ]
    assert status["selector"] == {"app": "web", "tier": "frontend"}
    assert status["endpoints"] == []
    assert status["type"] == "ClusterIP"
    assert status["clusterIP"]
    assert status["loadBalancer"] is None


def test_status_lists_ready_endpoint_addresses(api, cluster):
    _create_web(api)
    endpoints = cluster.store.get("endpoints", "default", "web")
    endpoints.subsets = [
        client.V1EndpointSubset(
            addresses=[
                client.V1EndpointAddress(
                    ip="10.1.0.5",
                    node_name="node-a",
                    target_ref=client.V1ObjectReference(kind="Pod", name="web-abc", namespace="default"),
                )
            ]
        )
    ]

    resp = api.get(f"{BASE}/web/status")

    [address] = resp.json()["data"]["endpoints"]
    assert address["ip"] == "10.1.0.5"
    assert address["nodeName"] == "node-a"
    assert address["targetRef"]["name"] == "web-abc"


def test_status_without_endpoints_object_is_empty(api, cluster):
    cluster.store.add(
        "service",
        client.V1Service(
            metadata=client.V1ObjectMeta(name="headless", namespace="default"),
            spec=client.V1ServiceSpec(ports=[client.V1ServicePort(port=53, protocol="UDP")]),
        ),
    )

    resp = api.get(f"{BASE}/headless/status")

    assert resp.status_code == 200
    assert resp.json()["data"]["endpoints"] == []


def test_node_port_only_set_when_positive(api, cluster):
    resp = api.post(
        BASE,
        json={
            "name": "np",
            "type": "NodePort",
            "ports": [{"port": 80, "nodePort": 30080}, {"port": 443, "nodePort": 0}],
        },
    )

    assert resp.status_code == 201
    ports = cluster.store.get("service", "default", "np").spec.ports
    assert [p.node_port for p in ports] == [30080, None]
    assert [p.protocol for p in ports] == ["TCP", "TCP"]


def test_update_replaces_ports_but_keeps_selector(api, cluster):
    _create_web(api)

    resp = api.put(f"{BASE}/web", json={"ports": [{"name": "https", "port": 443, "targetPort": 8443}]})

    assert resp.status_code == 200
    svc = cluster.store.get("service", "default", "web")
    assert [(p.name, p.port) for p in svc.spec.ports] == [("https", 443)]
    assert svc.spec.selector == {"app": "web", "tier": "frontend"}


def test_external_ips_use_kubernetes_casing(api, cluster):
    resp = api.post(
        BASE,
        json={"name": "ext", "type": "ClusterIP", "ports": [{"port": 80}], "externalIPs": ["203.0.113.7"]},
    )

    assert resp.status_code == 201
    assert resp.json()["data"]["externalIPs"] == ["203.0.113.7"]
    assert cluster.store.get("service", "default", "ext").spec.external_ips == ["203.0.113.7"]


def test_create_requires_ports(api):
    resp = api.post(BASE, json={"name": "noports", "type": "ClusterIP"})

    assert resp.status_code == 400
    assert "ports" in resp.json()["error"]


def test_numeric_string_target_port_is_sent_as_number(api):
    resp = api.post(
        BASE,
        json={
            "name": "mixed",
            "type": "ClusterIP",
            "ports": [{"name": "web", "port": 80, "targetPort": "8080"}, {"name": "admin", "port": 81, "targetPort": "http"}],
            "selector": {"app": "mixed"},
        },
    )
    assert resp.status_code == 201

    ports = api.get(f"{BASE}/mixed/status").json()["data"]["ports"]

    assert [p["targetPort"] for p in ports] == [8080, "http"]
