import pytest
from fastapi.testclient import TestClient

from conftest import auth, package_archive, settle

UPLOAD_PATH = "/api/packages/versions/newUpload"


def _publish(client: TestClient, user: str, name: str = "widgets", version: str = "1.0.0", **headers):
    response = client.post(
        UPLOAD_PATH,
        content=package_archive(name, version),
        headers={**auth(user), **headers},
    )
    assert response.status_code == 200, response.text
    return response


@pytest.mark.parametrize(
    "method, path",
    [
        ("GET", "/api/admin/packages"),
        ("PUT", "/api/admin/packages/widgets/uploaders"),
        ("PUT", "/api/admin/packages/widgets/discontinued"),
        ("GET", "/api/admin/audit-logs"),
    ],
)
def test_admin_routes_require_admin(client: TestClient, method, path):
    body = {"userIds": []} if path.endswith("uploaders") else {"discontinued": True}
    json_body = body if method == "PUT" else None

    anonymous = client.request(method, path, json=json_body)
    as_user = client.request(method, path, json=json_body, headers=auth("alice"))

    assert anonymous.status_code == 401
    assert as_user.status_code == 403
    assert as_user.json() == {"error": "forbidden", "message": "Administrator access required"}


def test_list_packages_with_counts(client: TestClient):
    _publish(client, "alice", "widgets", "1.0.0")
    _publish(client, "alice", "widgets", "1.1.0")
    _publish(client, "bob", "gears", "0.1.0")

    response = client.get("/api/admin/packages", headers=auth("admin"))

    assert response.status_code == 200
    packages = response.json()["packages"]
    assert [(p["name"], p["versionCount"], p["uploaderCount"]) for p in packages] == [
        ("gears", 1, 1),
        ("widgets", 2, 1),
    ]
    assert packages[0]["isPrivate"] is True

    searched = client.get("/api/admin/packages", params={"search": "widg"}, headers=auth("admin"))
    assert [p["name"] for p in searched.json()["packages"]] == ["widgets"]


def test_update_uploaders_replaces_grants(client: TestClient, api_users):
    alice, bob = api_users["alice"], api_users["bob"]
    _publish(client, "alice")

    response = client.put(
        "/api/admin/packages/widgets/uploaders",
        json={"userIds": [bob.user_id]},
        headers=auth("admin"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["package"] == "widgets"
    assert [(u["id"], u["email"]) for u in body["uploaders"]] == [(bob.user_id, "bob@example.com")]

    assert _publish(client, "bob", "widgets", "1.1.0").status_code == 200
    denied = client.post(UPLOAD_PATH, content=package_archive("widgets", "1.2.0"), headers=auth("alice"))
    assert denied.status_code == 403

    both = client.put(
        "/api/admin/packages/widgets/uploaders",
        json={"userIds": [bob.user_id, alice.user_id, alice.user_id]},
        headers=auth("admin"),
    )
    assert [u["id"] for u in both.json()["uploaders"]] == sorted([alice.user_id, bob.user_id])


def test_update_uploaders_rejects_unknown_users(client: TestClient, api_users):
    _publish(client, "alice")

    response = client.put(
        "/api/admin/packages/widgets/uploaders",
        json={"userIds": [api_users["bob"].user_id, 9999]},
        headers=auth("admin"),
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Unknown user id(s): 9999"
    uploaders = client.put(
        "/api/admin/packages/widgets/uploaders",
        json={"userIds": [api_users["alice"].user_id]},
        headers=auth("admin"),
    ).json()["uploaders"]
    assert [u["id"] for u in uploaders] == [api_users["alice"].user_id]


def test_update_uploaders_of_unknown_package(client: TestClient):
    response = client.put(
        "/api/admin/packages/nothing/uploaders",
        json={"userIds": []},
        headers=auth("admin"),
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Package not found: nothing"


def test_discontinue_package(client: TestClient):
    _publish(client, "alice")

    response = client.put(
        "/api/admin/packages/widgets/discontinued",
        json={"discontinued": True, "replacedBy": "gears"},
        headers=auth("admin"),
    )

    assert response.status_code == 200
    assert response.json()["isDiscontinued"] is True
    assert response.json()["replacedBy"] == "gears"
    detail = client.get("/api/packages/widgets").json()
    assert detail["isDiscontinued"] is True

    restored = client.put(
        "/api/admin/packages/widgets/discontinued",
        json={"discontinued": False},
        headers=auth("admin"),
    )
    assert restored.json()["isDiscontinued"] is False
    assert "replacedBy" not in restored.json()


def test_audit_log_records_publishes_and_admin_actions(client: TestClient, api_users):
    alice = api_users["alice"]
    _publish(client, "alice", "widgets", "1.0.0", **{"X-Forwarded-For": "198.51.100.4, 10.0.0.1", "User-Agent": "registry-cli/1.0"})
    _publish(client, "alice", "widgets", "1.1.0")
    client.put(
        "/api/admin/packages/widgets/uploaders",
        json={"userIds": [alice.user_id]},
        headers=auth("admin"),
    )
    settle(client)

    response = client.get("/api/admin/audit-logs", headers=auth("admin"))

    assert response.status_code == 200
    body = response.json()
    assert (body["limit"], body["offset"]) == (100, 0)
    actions = [entry["action"] for entry in body["logs"]]
    assert actions == [
        "admin.package.uploader_change",
        "package.version.publish",
        "package.publish",
    ]

    first_publish = client.get(
        "/api/admin/audit-logs",
        params={"action": "package.publish"},
        headers=auth("admin"),
    ).json()["logs"]
    assert len(first_publish) == 1
    entry = first_publish[0]
    assert entry["userId"] == alice.user_id
    assert entry["resourceType"] == "package"
    assert entry["ipAddress"] == "198.51.100.4"
    assert entry["userAgent"] == "registry-cli/1.0"

    versions = client.get(
        "/api/admin/audit-logs",
        params={"resourceType": "version", "userId": alice.user_id},
        headers=auth("admin"),
    ).json()["logs"]
    assert [entry["action"] for entry in versions] == ["package.version.publish"]

    paged = client.get(
        "/api/admin/audit-logs",
        params={"limit": 1, "offset": 1},
        headers=auth("admin"),
    ).json()
    assert [entry["action"] for entry in paged["logs"]] == ["package.version.publish"]
    assert (paged["limit"], paged["offset"]) == (1, 1)


def test_audit_log_limit_is_bounded(client: TestClient):
    response = client.get("/api/admin/audit-logs", params={"limit": 501}, headers=auth("admin"))

    assert response.status_code == 422


def test_seeded_admin_token_has_admin_access(client: TestClient):
    response = client.get("/api/admin/packages", headers=auth("root"))

    assert response.status_code == 200
    assert response.json() == {"packages": []}
