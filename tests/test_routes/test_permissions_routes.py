"""HTTP tests for /permissions through the FastAPI test client."""
from __future__ import annotations

import pytest

from ticketdesk.authz.capabilities import default_role_permissions


@pytest.fixture
def people(make_identity):
    return {
        "root": make_identity("sysadmin"),
        "admin": make_identity("administrator"),
        "tech": make_identity("technician", email="tech@example.com"),
        "user": make_identity("user"),
    }


def test_list_requires_authentication(client):
    resp = client.get("/permissions")

    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["kind"] == "unauthorized"
    assert body["reason"] == "missing_authentication"


def test_list_requires_elevation(client, people, bearer):
    resp = client.get("/permissions", headers=bearer(people["tech"]))

    assert resp.status_code == 403
    assert resp.json()["reason"] == "insufficient_role"


def test_list_returns_roles_ordered_by_name(client, people, bearer):
    resp = client.get("/permissions", headers=bearer(people["admin"]))

    assert resp.status_code == 200
    names = [r["name"] for r in resp.json()["permissions"]]
    assert names == ["administrator", "sysadmin", "technician", "user"]
    first = resp.json()["permissions"][0]
    assert first["isCustom"] is False
    assert "updatedAt" in first


def test_get_single_role_needs_only_authentication(client, people, bearer):
    resp = client.get("/permissions/technician", headers=bearer(people["user"]))

    assert resp.status_code == 200
    assert resp.json()["permissions"]["permissions"] == default_role_permissions("technician")


def test_get_unknown_role_is_404(client, people, bearer):
    resp = client.get("/permissions/ghost", headers=bearer(people["tech"]))

    assert resp.status_code == 404
    assert resp.json()["kind"] == "not_found"


def test_malformed_authorization_header_is_400(client, people):
    resp = client.get("/permissions/technician", headers={"Authorization": "Token 1"})

    assert resp.status_code == 400
    assert resp.json()["reason"] == "malformed_authorization"


def test_unapproved_identity_is_unauthorized(client, make_identity, bearer):
    pending = make_identity("technician", approved=False)

    resp = client.get("/permissions/technician", headers=bearer(pending))

    assert resp.status_code == 401
    assert resp.json()["reason"] == "unapproved_identity"


def test_update_permissions(client, people, bearer):
    resp = client.put(
        "/permissions/technician",
        json={"permissions": {"deleteTickets": True}},
        headers=bearer(people["admin"]),
    )

    assert resp.status_code == 200
    assert resp.json()["permissions"]["permissions"]["deleteTickets"] is True

    # The technician's very next request sees the change.
    me = client.get("/me", headers=bearer(people["tech"]))
    assert me.json()["permissions"]["deleteTickets"] is True


def test_update_permissions_rejects_malformed_body(client, people, bearer):
    resp = client.put("/permissions/technician", json={"perms": {}}, headers=bearer(people["admin"]))
    assert resp.status_code == 400
    assert resp.json()["kind"] == "validation_error"

    resp = client.put(
        "/permissions/technician",
        json={"permissions": {"launchRockets": True}},
        headers=bearer(people["admin"]),
    )
    assert resp.status_code == 400
    assert resp.json()["reason"] == "unknown_capability"


def test_only_super_role_may_edit_super_role(client, people, bearer):
    body = {"permissions": {"viewTickets": False}}

    denied = client.put("/permissions/sysadmin", json=body, headers=bearer(people["admin"]))
    assert denied.status_code == 403
    assert denied.json()["reason"] == "super_role_only"

    allowed = client.put("/permissions/sysadmin", json=body, headers=bearer(people["root"]))
    assert allowed.status_code == 200


def test_create_role(client, people, bearer):
    resp = client.post(
        "/permissions/roles",
        json={"roleName": "field-tech", "basedOn": "technician"},
        headers=bearer(people["admin"]),
    )

    assert resp.status_code == 201
    role = resp.json()["permissions"]
    assert role["name"] == "field-tech"
    assert role["isCustom"] is True
    assert role["permissions"] == default_role_permissions("technician")


@pytest.mark.parametrize(
    ("name", "status", "kind"),
    [
        ("administrator", 403, "forbidden"),
        ("field tech", 400, "invalid_name"),
        ("technician", 403, "forbidden"),
    ],
)
def test_create_role_errors(client, people, bearer, name, status, kind):
    resp = client.post("/permissions/roles", json={"roleName": name}, headers=bearer(people["admin"]))

    assert resp.status_code == status
    assert resp.json()["kind"] == kind


def test_create_duplicate_role_is_409(client, people, bearer):
    client.post("/permissions/roles", json={"roleName": "field-tech"}, headers=bearer(people["admin"]))
    resp = client.post("/permissions/roles", json={"roleName": "field-tech"}, headers=bearer(people["admin"]))

    assert resp.status_code == 409
    assert resp.json()["kind"] == "conflict"


def test_create_role_requires_elevation(client, people, bearer):
    resp = client.post("/permissions/roles", json={"roleName": "x"}, headers=bearer(people["tech"]))
    assert resp.status_code == 403


def test_rename_role_reports_migrated_identities(client, people, make_identity, bearer):
    headers = bearer(people["admin"])
    client.post("/permissions/roles", json={"roleName": "field-tech", "basedOn": "technician"}, headers=headers)
    holders = [make_identity("field-tech") for _ in range(3)]

    resp = client.put("/permissions/roles/field-tech/rename", json={"newRoleName": "field-agent"}, headers=headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["usersUpdated"] == 3
    assert body["role"]["name"] == "field-agent"

    assert client.get("/permissions/field-tech", headers=headers).status_code == 404
    me = client.get("/me", headers=bearer(holders[0]))
    assert me.json()["identity"]["role"] == "field-agent"
    assert me.json()["permissions"] == default_role_permissions("technician")


@pytest.mark.parametrize(
    ("old", "new", "status"),
    [
        ("technician", "field-agent", 403),
        ("field-tech", "sysadmin", 403),
        ("ghost", "spirit", 404),
        ("field-tech", "field-tech", 409),
    ],
)
def test_rename_errors(client, people, bearer, old, new, status):
    headers = bearer(people["admin"])
    client.post("/permissions/roles", json={"roleName": "field-tech"}, headers=headers)

    resp = client.put(f"/permissions/roles/{old}/rename", json={"newRoleName": new}, headers=headers)

    assert resp.status_code == status


def test_delete_role_and_orphan_report(client, people, make_identity, bearer):
    headers = bearer(people["admin"])
    client.post("/permissions/roles", json={"roleName": "field-tech"}, headers=headers)
    holder = make_identity("field-tech")

    resp = client.delete("/permissions/roles/field-tech", headers=headers)
    assert resp.status_code == 200

    orphans = client.get("/permissions/roles/orphans", headers=headers)
    assert orphans.status_code == 200
    assert [i["id"] for i in orphans.json()["identities"]] == [holder.id]

    # The orphaned identity is still authenticated, but holds no capability.
    me = client.get("/me", headers=bearer(holder))
    assert me.status_code == 200
    assert me.json()["permissions"] == {}


def test_orphan_report_requires_elevation(client, people, bearer):
    resp = client.get("/permissions/roles/orphans", headers=bearer(people["tech"]))
    assert resp.status_code == 403


@pytest.mark.parametrize("name", ["user", "technician", "administrator", "sysadmin"])
def test_delete_reserved_role_is_403(client, people, bearer, name):
    resp = client.delete(f"/permissions/roles/{name}", headers=bearer(people["root"]))

    assert resp.status_code == 403
    assert resp.json()["reason"] == "reserved_role"


def test_migrate_after_partial_rename(client, people, make_identity, bearer):
    headers = bearer(people["admin"])
    client.post("/permissions/roles", json={"roleName": "field-agent"}, headers=headers)
    stuck = make_identity("field-tech")

    resp = client.post(
        "/permissions/roles/field-agent/migrate",
        json={"fromRoleName": "field-tech"},
        headers=headers,
    )

    assert resp.status_code == 200
    assert resp.json()["usersUpdated"] == 1
    assert client.get("/me", headers=bearer(stuck)).json()["identity"]["role"] == "field-agent"


def test_reset_role(client, people, bearer):
    headers = bearer(people["admin"])
    client.put("/permissions/technician", json={"permissions": {"deleteTickets": True}}, headers=headers)

    resp = client.post("/permissions/reset/technician", headers=headers)

    assert resp.status_code == 200
    assert resp.json()["permissions"]["permissions"] == default_role_permissions("technician")
    assert client.post("/permissions/reset/sysadmin", headers=headers).status_code == 403


def test_role_named_orphans_is_readable(client, people, bearer):
    created = client.post("/permissions/roles", json={"roleName": "orphans"}, headers=bearer(people["admin"]))
    assert created.status_code == 201

    resp = client.get("/permissions/orphans", headers=bearer(people["tech"]))

    assert resp.status_code == 200
    assert resp.json()["permissions"]["name"] == "orphans"
