"""物品接口的集成测试。"""

from fastapi.testclient import TestClient

BASE = "/api/v1/items"


def _create(client: TestClient, headers, **body) -> dict:
    response = client.post(BASE, headers=headers, json=body)
    assert response.status_code == 200, response.text
    return response.json()["data"]


def test_create_item_creates_container_path(client: TestClient, headers):
    item = _create(client, headers, name="Power Drill", pathname="/Garage/Shelf 1", count=2, tags=["tools"])

    assert item["name"] == "power_drill"
    assert item["count"] == 2
    assert item["pathname"] == "/garage/shelf_1"
    assert item["tags"] == ["tools"]

    fetched = client.get(f"{BASE}/{item['id']}", headers=headers).json()["data"]
    assert fetched["container_id"] == item["container_id"]


def test_create_item_validation(client: TestClient, headers):
    at_root = client.post(BASE, headers=headers, json={"name": "cup", "pathname": "/"})
    assert at_root.status_code == 400

    zero = client.post(BASE, headers=headers, json={"name": "cup", "pathname": "/kitchen", "count": 0})
    assert zero.status_code == 422
    assert zero.json()["code"] == 422

    _create(client, headers, name="cup", pathname="/kitchen")
    duplicate = client.post(BASE, headers=headers, json={"name": "Cup", "pathname": "/kitchen"})
    assert duplicate.status_code == 409


def test_list_and_update(client: TestClient, headers):
    cup = _create(client, headers, name="cup", pathname="/kitchen")
    _create(client, headers, name="plate", pathname="/kitchen")
    _create(client, headers, name="rake", pathname="/garage")

    in_kitchen = client.get(BASE, headers=headers, params={"containerId": cup["container_id"]}).json()["data"]
    assert [item["name"] for item in in_kitchen] == ["cup", "plate"]
    assert len(client.get(BASE, headers=headers).json()["data"]) == 3

    updated = client.patch(
        f"{BASE}/{cup['id']}",
        headers=headers,
        json={"pathname": "/dining/cabinet", "description": "  blue  ", "count": 4},
    ).json()["data"]
    assert updated["pathname"] == "/dining/cabinet"
    assert updated["description"] == "blue"
    assert updated["count"] == 4
    assert updated["name"] == "cup"


def test_delete_item(client: TestClient, headers):
    cup = _create(client, headers, name="cup", pathname="/kitchen")

    assert client.delete(f"{BASE}/{cup['id']}", headers=headers).status_code == 200
    assert client.get(f"{BASE}/{cup['id']}", headers=headers).status_code == 404
    assert client.delete(f"{BASE}/{cup['id']}", headers=headers).status_code == 404

    # 删除后名称可以重新使用
    _create(client, headers, name="cup", pathname="/kitchen")


def test_move_all_items(client: TestClient, headers):
    cup = _create(client, headers, name="cup", pathname="/kitchen")
    _create(client, headers, name="plate", pathname="/kitchen")

    moved = client.post(
        f"{BASE}/move", headers=headers, json={"container_id": cup["container_id"], "pathname": "/boxes/move_1"}
    )
    assert moved.json()["data"] == {"moved": True}

    items = client.get(BASE, headers=headers).json()["data"]
    assert {item["pathname"] for item in items} == {"/boxes/move_1"}

    nothing = client.post(
        f"{BASE}/move", headers=headers, json={"container_id": cup["container_id"], "pathname": "/boxes/move_1"}
    )
    assert nothing.json()["data"] == {"moved": False}


def test_orphaned_items_endpoints(client: TestClient, headers):
    assert client.get(f"{BASE}/orphaned", headers=headers).json()["data"] == []

    moved = client.post(f"{BASE}/orphaned/move", headers=headers, json={"item_ids": [], "pathname": "/lost"})
    assert moved.json()["data"] == {"moved": False}

    unknown = client.post(f"{BASE}/orphaned/move", headers=headers, json={"item_ids": [987654321], "pathname": "/lost"})
    assert unknown.status_code == 404


def test_garage_scenario(client: TestClient, headers):
    hammer = _create(client, headers, name="hammer", pathname="/garage/shelf_1/bin_a")
    bin_a = hammer["container_id"]

    deleted = client.delete(
        f"/api/v1/containers/{bin_a}", headers=headers, params={"destinationPathname": "/garage/shelf_2"}
    )
    assert deleted.status_code == 200

    revived = client.post("/api/v1/containers", headers=headers, json={"pathname": "/garage/shelf_1/bin_a"})
    assert revived.json()["data"]["id"] == bin_a

    item = client.get(f"{BASE}/{hammer['id']}", headers=headers).json()["data"]
    assert item["pathname"] == "/garage/shelf_2"


def test_tag_search(client: TestClient, headers):
    _create(client, headers, name="drill", pathname="/garage", tags=["power", "tools"])
    _create(client, headers, name="saw", pathname="/garage", tags=["power_tools"])

    tags = client.get("/api/v1/tags/search", headers=headers, params={"query": "tools"}).json()["data"]
    assert [tag["name"] for tag in tags] == ["tools", "power_tools"]
