"""容器接口的集成测试。"""

from fastapi.testclient import TestClient

BASE = "/api/v1/containers"


def _ensure(client: TestClient, headers, pathname: str) -> dict:
    response = client.post(BASE, headers=headers, json={"pathname": pathname})
    assert response.status_code == 200, response.text
    return response.json()["data"]


def test_requires_bearer_token(client: TestClient):
    response = client.get(f"{BASE}/tree")
    assert response.status_code == 401
    assert response.json()["code"] == 401

    response = client.get(f"{BASE}/tree", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_ensure_normalizes_and_is_idempotent(client: TestClient, headers):
    created = _ensure(client, headers, "/Garage/Shelf 1/")
    again = _ensure(client, headers, "garage//shelf_1")

    assert created["pathname"] == "/garage/shelf_1"
    assert created["path"] == "shelf_1"
    assert created["id"] == again["id"]

    pathname = client.get(f"{BASE}/{created['id']}/pathname", headers=headers).json()["data"]
    assert pathname == {"container_id": created["id"], "pathname": "/garage/shelf_1"}


def test_ensure_with_tags_and_visibility(client: TestClient, headers):
    response = client.post(
        BASE,
        headers=headers,
        json={"pathname": "/kitchen/drawer", "is_public": True, "tags": [" tools ", "", "metal"]},
    )
    data = response.json()["data"]

    assert data["is_public"] is True
    assert data["tags"] == ["metal", "tools"]


def test_search_and_resolve(client: TestClient, headers):
    for path in ("/garage/shelf_1", "/garage/shelf_2", "/garage/bin"):
        _ensure(client, headers, path)

    roots = client.get(f"{BASE}/search", headers=headers, params={"query": "/"}).json()["data"]
    assert [c["path"] for c in roots] == ["garage"]

    children = client.get(f"{BASE}/search", headers=headers, params={"query": "/Garage/"}).json()["data"]
    assert [c["pathname"] for c in children] == ["/garage/bin", "/garage/shelf_1", "/garage/shelf_2"]

    partial = client.get(f"{BASE}/search", headers=headers, params={"query": "/garage/sh"}).json()["data"]
    assert [c["path"] for c in partial] == ["shelf_1", "shelf_2"]

    missing = client.get(f"{BASE}/search", headers=headers, params={"query": "/nowhere/x"}).json()["data"]
    assert missing == []

    resolved = client.get(f"{BASE}/resolve", headers=headers, params={"pathname": "/garage/bin"})
    assert resolved.json()["data"]["path"] == "bin"
    assert client.get(f"{BASE}/resolve", headers=headers, params={"pathname": "/nowhere"}).status_code == 404


def test_directory_tree(client: TestClient, headers):
    shelf = _ensure(client, headers, "/garage/shelf_1")
    client.post(
        "/api/v1/items", headers=headers, json={"name": "Hammer", "pathname": "/garage/shelf_1"}
    )

    tree = client.get(f"{BASE}/tree", headers=headers).json()["data"]
    assert tree["container"]["id"] == 0
    assert tree["container"]["pathname"] == "/"
    garage = tree["children"][0]
    assert garage["container"]["pathname"] == "/garage"
    shelf_node = garage["children"][0]
    assert shelf_node["container"]["id"] == shelf["id"]
    assert [item["name"] for item in shelf_node["items"]] == ["hammer"]
    assert shelf_node["items"][0]["pathname"] == "/garage/shelf_1"

    subtree = client.get(f"{BASE}/tree", headers=headers, params={"containerId": shelf["id"]}).json()["data"]
    assert subtree["container"]["pathname"] == "/garage/shelf_1"

    assert client.get(f"{BASE}/tree", headers=headers, params={"containerId": 987654321}).status_code == 404


def test_rename_and_conflicts(client: TestClient, headers):
    a = _ensure(client, headers, "/a")
    b = _ensure(client, headers, "/b")

    renamed = client.put(f"{BASE}/{b['id']}/name", headers=headers, json={"name": "Big Box"})
    assert renamed.status_code == 200
    assert renamed.json()["data"]["pathname"] == "/big_box"

    conflict = client.put(f"{BASE}/{b['id']}/name", headers=headers, json={"name": "a"})
    assert conflict.status_code == 409

    # 已删除的同名容器依旧占用名称
    client.delete(f"{BASE}/{a['id']}", headers=headers)
    still_taken = client.put(f"{BASE}/{b['id']}/name", headers=headers, json={"name": "a"})
    assert still_taken.status_code == 409

    assert client.put(f"{BASE}/0/name", headers=headers, json={"name": "x"}).status_code == 412
    assert client.put(f"{BASE}/{b['id']}/name", headers=headers, json={"name": "x/y"}).status_code == 422

    dotted = client.put(f"{BASE}/{b['id']}/name", headers=headers, json={"name": ".."})
    assert dotted.status_code == 400
    assert dotted.json()["code"] == 400


def test_move_container(client: TestClient, headers):
    box = _ensure(client, headers, "/garage/box")
    _ensure(client, headers, "/garage/box/inner")

    moved = client.post(f"{BASE}/{box['id']}/move", headers=headers, json={"pathname": "/attic"})
    assert moved.status_code == 200
    assert moved.json()["data"]["pathname"] == "/attic/box"

    inner = client.get(f"{BASE}/resolve", headers=headers, params={"pathname": "/attic/box/inner"})
    assert inner.status_code == 200

    cycle = client.post(f"{BASE}/{box['id']}/move", headers=headers, json={"pathname": "/attic/box/inner"})
    assert cycle.status_code == 412
    assert client.get(f"{BASE}/resolve", headers=headers, params={"pathname": "/attic/box"}).status_code == 200

    to_root = client.post(f"{BASE}/{box['id']}/move", headers=headers, json={"pathname": "/"})
    assert to_root.json()["data"]["pathname"] == "/box"
    assert to_root.json()["data"]["parent_id"] == 0


def test_update_visibility(client: TestClient, headers):
    box = _ensure(client, headers, "/box")

    response = client.patch(f"{BASE}/{box['id']}", headers=headers, json={"is_public": True, "tags": ["fragile"]})

    assert response.status_code == 200
    assert response.json()["data"]["is_public"] is True
    assert response.json()["data"]["tags"] == ["fragile"]


def test_delete_workflow(client: TestClient, headers):
    box = _ensure(client, headers, "/garage/box")
    client.post("/api/v1/items", headers=headers, json={"name": "saw", "pathname": "/garage/box"})

    blocked = client.delete(f"{BASE}/{box['id']}", headers=headers)
    assert blocked.status_code == 412
    assert blocked.json()["data"]["item_count"] == 1

    deleted = client.delete(
        f"{BASE}/{box['id']}", headers=headers, params={"destinationPathname": "/Garage/Shelf 2"}
    )
    assert deleted.status_code == 200
    payload = deleted.json()["data"]
    assert payload["moved_items"] == 1
    assert payload["destination_pathname"] == "/garage/shelf_2"

    assert client.get(f"{BASE}/{box['id']}", headers=headers).status_code == 404
    assert client.delete(f"{BASE}/0", headers=headers).status_code == 412


def test_owner_isolation(client: TestClient, headers, make_headers, other_owner_id):
    box = _ensure(client, headers, "/private")
    other = make_headers(other_owner_id)

    assert client.get(f"{BASE}/{box['id']}", headers=other).status_code == 404
    assert client.get(f"{BASE}/search", headers=other, params={"query": "/"}).json()["data"] == []
    assert client.delete(f"{BASE}/{box['id']}", headers=other).status_code == 404


def test_health_and_request_id_echo(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-42"})

    assert response.status_code == 200
    assert response.json()["data"] == {"status": "healthy", "package": "inventory"}
    assert response.headers["x-request-id"] == "req-42"
    assert client.get("/health").headers["x-request-id"]
