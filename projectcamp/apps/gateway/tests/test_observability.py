"""可观测性与错误渲染测试

测试内容：
1. HTTP 响应含 X-Request-ID 头（沿用上游传入值）
2. 路径中的资源 ID 提取
3. 错误统一渲染为 {"error": {"code", "message"}}
4. /health 与 /ready
"""

from httpx import AsyncClient
from projectcamp.gateway.middleware.trace_mw import extract_resource_ids

_PROJECT = "01JPROJECT0000000000000000"
_TASK = "01JTASK0000000000000000000"


class TestRequestId:
    async def test_response_has_request_id(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert len(resp.headers["X-Request-ID"]) == 26

    async def test_request_ids_unique(self, client: AsyncClient):
        first = await client.get("/health")
        second = await client.get("/health")
        assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]

    async def test_inbound_request_id_reused(self, client: AsyncClient):
        resp = await client.get("/health", headers={"X-Request-ID": "edge-1234"})
        assert resp.headers["X-Request-ID"] == "edge-1234"

    async def test_oversized_inbound_id_replaced(self, client: AsyncClient):
        resp = await client.get("/health", headers={"X-Request-ID": "x" * 200})
        assert len(resp.headers["X-Request-ID"]) == 26


class TestExtractResourceIds:
    def test_project_path(self):
        assert extract_resource_ids(f"/api/projects/{_PROJECT}/members") == {
            "project_id": _PROJECT
        }

    def test_task_comment_path(self):
        ids = extract_resource_ids(f"/api/tasks/{_TASK}/comments")
        assert ids == {"task_id": _TASK}

    def test_non_id_segment_ignored(self):
        assert extract_resource_ids("/api/projects/mine") == {}
        assert extract_resource_ids("/api/invitations") == {}


class TestErrorEnvelope:
    async def test_domain_error_envelope(self, client: AsyncClient):
        resp = await client.get("/api/projects")
        assert resp.status_code == 401
        body = resp.json()
        assert set(body) == {"error"}
        assert body["error"]["code"] == "UNAUTHORIZED"
        assert body["error"]["message"]

    async def test_request_validation_is_400(self, client: AsyncClient, register):
        _, headers = await register("olivia")
        resp = await client.post("/api/projects", json={}, headers=headers)
        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "VALIDATION_FAILED"
        assert "name" in error["message"]


class TestHealth:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.json() == {"status": "ok"}

    async def test_ready_with_sweeper_disabled(self, client: AsyncClient):
        resp = await client.get("/ready")
        assert resp.status_code == 200
        data = resp.json()
        assert data["checks"] == {"sqlite": "ok", "expiry_sweeper": "disabled"}

    async def test_ready_reports_stopped_sweeper(self, app, client: AsyncClient):
        class _StoppedSweeper:
            running = False

        app.state.sweeper = _StoppedSweeper()
        resp = await client.get("/ready")
        assert resp.status_code == 503
        assert resp.json()["checks"]["expiry_sweeper"] == "stopped"
