"""活动日志路由测试

测试内容：
1. 项目日志仅 owner 可读，默认最新在前
2. type / from / to 过滤（to 含当天）
3. 任务日志对 assignee 与 owner 开放
"""

from httpx import AsyncClient


class TestProjectActivities:
    async def test_owner_reads_log(self, client: AsyncClient, team):
        _, headers = team["owner"]
        resp = await client.get(
            f"/api/projects/{team['project_id']}/activities", headers=headers
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 2
        assert [e["type"] for e in data["items"]] == ["MEMBER_ADDED", "PROJECT_CREATED"]
        assert [e["seq"] for e in data["items"]] == [2, 1]
        assert data["items"][0]["performed_by_snapshot"]["username"] == "olivia"

    async def test_member_forbidden(self, client: AsyncClient, team):
        _, headers = team["alice"]
        resp = await client.get(
            f"/api/projects/{team['project_id']}/activities", headers=headers
        )
        assert resp.status_code == 403

    async def test_type_filter_and_asc(self, client: AsyncClient, team):
        _, headers = team["owner"]
        await client.patch(
            f"/api/projects/{team['project_id']}/status",
            json={"status": "inactive"},
            headers=headers,
        )
        resp = await client.get(
            f"/api/projects/{team['project_id']}/activities",
            params={"type": "STATUS_UPDATED,PROJECT_CREATED", "sort": "asc"},
            headers=headers,
        )
        types = [e["type"] for e in resp.json()["items"]]
        assert types == ["PROJECT_CREATED", "STATUS_UPDATED"]

    async def test_date_range_inclusive(self, client: AsyncClient, team, clock):
        _, headers = team["owner"]
        clock.advance(days=3)
        await client.patch(
            f"/api/projects/{team['project_id']}/status",
            json={"status": "inactive"},
            headers=headers,
        )
        url = f"/api/projects/{team['project_id']}/activities"

        # 创建发生在 2026-03-02，状态变更发生在 2026-03-05
        resp = await client.get(
            url, params={"from": "2026-03-02", "to": "2026-03-02"}, headers=headers
        )
        assert {e["type"] for e in resp.json()["items"]} == {
            "PROJECT_CREATED",
            "MEMBER_ADDED",
        }

        resp = await client.get(url, params={"from": "2026-03-05"}, headers=headers)
        assert [e["type"] for e in resp.json()["items"]] == ["STATUS_UPDATED"]

    async def test_invalid_dates(self, client: AsyncClient, team):
        _, headers = team["owner"]
        url = f"/api/projects/{team['project_id']}/activities"
        resp = await client.get(url, params={"from": "yesterday"}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_DATE"

        resp = await client.get(
            url, params={"from": "2026-03-05", "to": "2026-03-01"}, headers=headers
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_DATE_RANGE"

    async def test_pagination_clamped(self, client: AsyncClient, team):
        _, headers = team["owner"]
        resp = await client.get(
            f"/api/projects/{team['project_id']}/activities",
            params={"page": 0, "limit": 1},
            headers=headers,
        )
        data = resp.json()
        assert data["page"] == 1
        assert data["limit"] == 1
        assert len(data["items"]) == 1
        assert data["total_pages"] == 2


class TestTaskActivities:
    async def test_assignee_and_owner_read(self, client: AsyncClient, team):
        _, owner_headers = team["owner"]
        alice_id, alice_headers = team["alice"]
        _, bob_headers = team["bob"]

        resp = await client.post(
            f"/api/projects/{team['project_id']}/tasks",
            json={"title": "Fuel"},
            headers=owner_headers,
        )
        task_id = resp.json()["task_id"]
        await client.post(
            f"/api/tasks/{task_id}/assign",
            json={"member_id": alice_id},
            headers=owner_headers,
        )

        url = f"/api/tasks/{task_id}/activities"
        resp = await client.get(url, params={"sort": "asc"}, headers=alice_headers)
        assert resp.status_code == 200
        assert [e["type"] for e in resp.json()["items"]] == [
            "TASK_CREATED",
            "TASK_ASSIGNED",
        ]

        resp = await client.get(url, headers=owner_headers)
        assert resp.status_code == 200

        resp = await client.get(url, headers=bob_headers)
        assert resp.status_code == 403
