"""邀请路由测试

测试内容：
1. 发送邀请 + 邮件通知
2. 接受 / 拒绝 / 重复 pending
3. 截止时间已过的邀请惰性标记为 expired
"""

from httpx import AsyncClient


async def _invite(client: AsyncClient, team, email: str = "bob@example.com"):
    _, headers = team["owner"]
    return await client.post(
        f"/api/projects/{team['project_id']}/invitations",
        json={"email": email},
        headers=headers,
    )


class TestSendInvitation:
    async def test_send_returns_pending(self, app, client: AsyncClient, team, mailbox):
        resp = await _invite(client, team)
        assert resp.status_code == 201
        data = resp.json()
        assert data["invitation_status"] == "pending"
        assert data["invited_user"] == team["bob"][0]
        assert data["role"] == "member"

        await app.state.notifier.drain()
        assert [m.to for m in mailbox.sent] == ["bob@example.com"]
        assert "Apollo" in mailbox.sent[0].subject

    async def test_second_pending_conflict(self, client: AsyncClient, team):
        assert (await _invite(client, team)).status_code == 201
        resp = await _invite(client, team)
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "INVITATION_ALREADY_PENDING"

    async def test_invite_existing_member(self, client: AsyncClient, team):
        resp = await _invite(client, team, "alice@example.com")
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "ALREADY_MEMBER"

    async def test_owner_role_rejected(self, client: AsyncClient, team):
        _, headers = team["owner"]
        resp = await client.post(
            f"/api/projects/{team['project_id']}/invitations",
            json={"email": "bob@example.com", "role": "owner"},
            headers=headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_INVITATION_ROLE"

    async def test_member_cannot_invite(self, client: AsyncClient, team):
        _, headers = team["alice"]
        resp = await client.post(
            f"/api/projects/{team['project_id']}/invitations",
            json={"email": "bob@example.com"},
            headers=headers,
        )
        assert resp.status_code == 403

    async def test_unknown_invitee(self, client: AsyncClient, team):
        resp = await _invite(client, team, "ghost@example.com")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "USER_NOT_FOUND"


class TestRespond:
    """接受与拒绝"""

    async def test_accept_joins_project(self, client: AsyncClient, team):
        invitation_id = (await _invite(client, team)).json()["invitation_id"]
        bob_id, bob_headers = team["bob"]

        resp = await client.post(
            f"/api/invitations/{invitation_id}/accept", headers=bob_headers
        )
        assert resp.status_code == 200
        assert bob_id in [m["user_id"] for m in resp.json()["members"]]

        resp = await client.post(
            f"/api/invitations/{invitation_id}/accept", headers=bob_headers
        )
        assert resp.status_code == 409

    async def test_other_user_forbidden(self, client: AsyncClient, team):
        invitation_id = (await _invite(client, team)).json()["invitation_id"]
        _, alice_headers = team["alice"]
        resp = await client.post(
            f"/api/invitations/{invitation_id}/accept", headers=alice_headers
        )
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "NOT_INVITEE"

    async def test_reject(self, client: AsyncClient, team):
        invitation_id = (await _invite(client, team)).json()["invitation_id"]
        _, bob_headers = team["bob"]
        resp = await client.post(
            f"/api/invitations/{invitation_id}/reject", headers=bob_headers
        )
        assert resp.status_code == 200
        assert resp.json()["invitation_status"] == "rejected"

        resp = await client.post(
            f"/api/invitations/{invitation_id}/accept", headers=bob_headers
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "INVITATION_NOT_PENDING"

        # 拒绝后可以重新邀请
        assert (await _invite(client, team)).status_code == 201

    async def test_unknown_invitation(self, client: AsyncClient, team):
        _, bob_headers = team["bob"]
        resp = await client.post(
            "/api/invitations/01JNOPE0000000000000000000/accept", headers=bob_headers
        )
        assert resp.status_code == 404


class TestExpiry:
    async def test_lazy_expiry_on_accept(self, client: AsyncClient, team, clock):
        invitation_id = (await _invite(client, team)).json()["invitation_id"]
        _, bob_headers = team["bob"]
        clock.advance(days=7, seconds=1)

        resp = await client.post(
            f"/api/invitations/{invitation_id}/accept", headers=bob_headers
        )
        assert resp.status_code == 410
        assert resp.json()["error"]["code"] == "INVITATION_EXPIRED"

        resp = await client.get("/api/invitations", headers=bob_headers)
        items = resp.json()["items"]
        assert [i["invitation_status"] for i in items] == ["expired"]

        # 再次访问依旧是 Gone
        resp = await client.post(
            f"/api/invitations/{invitation_id}/reject", headers=bob_headers
        )
        assert resp.status_code == 410

    async def test_new_invitation_after_expiry(self, client: AsyncClient, team, clock):
        invitation_id = (await _invite(client, team)).json()["invitation_id"]
        _, bob_headers = team["bob"]
        clock.advance(days=8)
        await client.post(f"/api/invitations/{invitation_id}/accept", headers=bob_headers)

        resp = await _invite(client, team)
        assert resp.status_code == 201


class TestListInvitations:
    async def test_list_excludes_decided(self, client: AsyncClient, team, register):
        first = (await _invite(client, team)).json()["invitation_id"]
        _, bob_headers = team["bob"]

        resp = await client.get("/api/invitations", headers=bob_headers)
        assert resp.status_code == 200
        assert [i["invitation_id"] for i in resp.json()["items"]] == [first]

        await client.post(f"/api/invitations/{first}/reject", headers=bob_headers)
        resp = await client.get("/api/invitations", headers=bob_headers)
        assert resp.json()["total"] == 0
