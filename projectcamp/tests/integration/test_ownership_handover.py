"""所有权交接场景

owner 转移所有权 -> 原 owner 离开 -> 项目始终恰好一个 owner，且 owner 可以继续管理。
"""

from httpx import AsyncClient
from projectcamp.core.invariants import check_invariants


class TestOwnershipHandover:
    async def test_handover_then_leave(self, client: AsyncClient, register, integration_app):
        owner_id, owner_headers = await register("olivia")
        alice_id, alice_headers = await register("alice")
        await register("bob")

        project_id = (
            await client.post("/api/projects", json={"name": "Apollo"}, headers=owner_headers)
        ).json()["project_id"]
        await client.post(
            f"/api/projects/{project_id}/members",
            json={"email": "alice@example.com"},
            headers=owner_headers,
        )

        resp = await client.post(
            f"/api/projects/{project_id}/transfer-ownership",
            json={"new_owner_id": alice_id},
            headers=owner_headers,
        )
        assert resp.status_code == 200

        resp = await client.post(f"/api/projects/{project_id}/leave", headers=owner_headers)
        assert resp.status_code == 200
        members = resp.json()["members"]
        assert [(m["user_id"], m["role"]) for m in members] == [(alice_id, "owner")]

        # 新 owner 可以继续邀请
        resp = await client.post(
            f"/api/projects/{project_id}/invitations",
            json={"email": "bob@example.com"},
            headers=alice_headers,
        )
        assert resp.status_code == 201

        # 原 owner 已无权访问
        resp = await client.get(f"/api/projects/{project_id}", headers=owner_headers)
        assert resp.status_code == 403

        resp = await client.get(
            f"/api/projects/{project_id}/activities",
            params={"type": "OWNERSHIP_TRANSFERRED"},
            headers=alice_headers,
        )
        entry = resp.json()["items"][0]
        assert entry["metadata"]["old_owner_id"] == owner_id
        assert entry["metadata"]["new_owner_id"] == alice_id
        assert entry["metadata"]["new_owner"]["username"] == "alice"

        assert await check_invariants(integration_app.state.store_group) == []
