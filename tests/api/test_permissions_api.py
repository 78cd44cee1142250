"""Permissions API tests: caller capabilities, checks, matrix and statistics."""

from httpx import AsyncClient


async def test_me_requires_bearer_token(client: AsyncClient) -> None:
    response = await client.get("/api/v1/permissions/me")
    assert response.status_code == 401
    assert response.json()["error"] == "AUTHENTICATION_ERROR"


async def test_me_rejects_invalid_token(client: AsyncClient, seeded) -> None:
    response = await client.get(
        "/api/v1/permissions/me", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401


async def test_me_returns_role_capabilities(client: AsyncClient, bearer) -> None:
    response = await client.get(
        "/api/v1/permissions/me", headers=bearer("employee", user_id=5, team_id=7)
    )
    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == 5
    assert data["team_id"] == 7
    assert data["role_name"] == "employee"
    assert data["role_hierarchy"] == 1
    assert data["permissions"]["entries:create"] == "own"
    assert "teams:delete" not in data["permissions"]


async def test_check_reports_each_pair(client: AsyncClient, bearer) -> None:
    response = await client.post(
        "/api/v1/permissions/check",
        headers=bearer("employee"),
        json={
            "checks": [
                {"resource": "entries", "action": "read"},
                {"resource": "teams", "action": "delete"},
            ]
        },
    )
    assert response.status_code == 200
    assert response.json()["results"] == {"entries:read": True, "teams:delete": False}


async def test_check_unknown_resource_is_client_error(client: AsyncClient, bearer) -> None:
    response = await client.post(
        "/api/v1/permissions/check",
        headers=bearer("admin"),
        json={"checks": [{"resource": "invoices", "action": "read"}]},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "UNKNOWN_PERMISSION_TARGET"


async def test_matrix_forbidden_without_settings_update(client: AsyncClient, bearer) -> None:
    response = await client.get("/api/v1/permissions/matrix", headers=bearer("team_leader"))
    assert response.status_code == 403
    body = response.json()
    assert body["error"] == "PERMISSION_DENIED"
    assert body["details"] == {"resource": "settings", "action": "update"}


async def test_matrix_returns_every_cell(client: AsyncClient, bearer) -> None:
    response = await client.get("/api/v1/permissions/matrix", headers=bearer("admin"))
    assert response.status_code == 200
    data = response.json()
    assert len(data["roles"]) == 3
    assert len(data["cells"]) == 3 * 7 * 7


async def test_matrix_batch_applies_and_counts(client: AsyncClient, bearer, seeded) -> None:
    response = await client.patch(
        "/api/v1/permissions/matrix",
        headers=bearer("admin"),
        json={
            "role_id": seeded.roles["employee"],
            "updates": [
                {
                    "resource_id": seeded.resources["teams"],
                    "action_id": seeded.actions["delete"],
                    "granted": True,
                    "scope": "own",
                },
                {
                    "resource_id": seeded.resources["entries"],
                    "action_id": seeded.actions["read"],
                    "granted": True,
                    "scope": "own",
                },
            ],
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["updated_count"] == 1
    assert data["changes"][0]["resource"] == "teams"
    assert data["changes"][0]["old_granted"] is None

    me = await client.get("/api/v1/permissions/me", headers=bearer("employee"))
    assert me.json()["permissions"]["teams:delete"] == "own"


async def test_matrix_batch_validation_error(client: AsyncClient, bearer, seeded) -> None:
    response = await client.patch(
        "/api/v1/permissions/matrix",
        headers=bearer("admin"),
        json={
            "role_id": seeded.roles["employee"],
            "updates": [
                {
                    "resource_id": seeded.resources["teams"],
                    "action_id": seeded.actions["delete"],
                    "granted": True,
                    "scope": "everyone",
                }
            ],
        },
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "BATCH_VALIDATION_ERROR"
    assert body["details"]["errors"][0]["field"] == "scope"


async def test_statistics(client: AsyncClient, bearer) -> None:
    response = await client.get("/api/v1/permissions/statistics", headers=bearer("admin"))
    assert response.status_code == 200
    data = response.json()
    assert data["total_roles"] == 3
    assert data["total_permissions"] == 46
    assert data["scope_counts"] == {"own": 10, "team": 9, "all": 27}
