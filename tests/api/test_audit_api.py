"""Permission audit API tests: history, CSV export and chain verification."""

import csv
import io

from httpx import AsyncClient


async def _grant_teams_delete(client: AsyncClient, bearer, seeded) -> None:
    response = await client.patch(
        f"/api/v1/roles/{seeded.roles['employee']}/permissions",
        headers={**bearer("admin", user_id=1), "X-Request-ID": "req-audit-1"},
        json={
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
                    "scope": "team",
                },
            ]
        },
    )
    assert response.status_code == 200
    assert response.json()["updated_count"] == 2


async def test_history_records_actor_and_change(client: AsyncClient, bearer, seeded) -> None:
    await _grant_teams_delete(client, bearer, seeded)
    response = await client.get(
        "/api/v1/permissions/audit",
        headers=bearer("admin"),
        params={"role_id": seeded.roles["employee"]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    newest, oldest = data["items"]
    assert newest["sequence"] > oldest["sequence"]
    assert oldest["action"] == "granted"
    assert oldest["resource_type"] == "teams"
    assert oldest["new_value"] == {"granted": True, "scope": "own"}
    assert newest["action"] == "updated"
    assert newest["old_value"] == {"granted": True, "scope": "own"}
    for item in data["items"]:
        assert item["actor_id"] == 1
        assert item["actor_name"] == "admin user"
        assert item["actor_email"] == "admin@example.com"
        assert item["request_id"] == "req-audit-1"


async def test_history_filters_by_action(client: AsyncClient, bearer, seeded) -> None:
    await _grant_teams_delete(client, bearer, seeded)
    response = await client.get(
        "/api/v1/permissions/audit",
        headers=bearer("admin"),
        params={"action": "updated"},
    )
    assert [i["resource_type"] for i in response.json()["items"]] == ["entries"]


async def test_history_forbidden_for_team_leader(client: AsyncClient, bearer) -> None:
    response = await client.get("/api/v1/permissions/audit", headers=bearer("team_leader"))
    assert response.status_code == 403


async def test_export_csv(client: AsyncClient, bearer, seeded) -> None:
    await _grant_teams_delete(client, bearer, seeded)
    response = await client.get("/api/v1/permissions/audit/export", headers=bearer("admin"))
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0][0] == "Timestamp"
    assert len(rows) == 3
    assert rows[1][1] == "admin user"


async def test_verify_chain(client: AsyncClient, bearer, seeded) -> None:
    await _grant_teams_delete(client, bearer, seeded)
    response = await client.get("/api/v1/permissions/audit/verify", headers=bearer("admin"))
    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is True
    assert data["total_entries"] == 2
