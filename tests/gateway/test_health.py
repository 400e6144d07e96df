"""健康检查与持久化告警测试

测试内容：
1. /health 永远 200
2. /ready 检查 sqlite / 快照写入时间 / console / 磁盘
3. 快照保存失败时请求仍成功，响应带 X-Persistence-Warning
"""

from typing import Any

from darconsole.core.console import ConsoleStore
from darconsole.core.exceptions import PersistenceError
from darconsole.core.models import UserRole
from httpx import AsyncClient


class BrokenSnapshotStore:
    async def load(self, key: str) -> Any | None:
        return None

    async def save(self, key: str, data: Any) -> None:
        raise PersistenceError(key, OSError("read-only file system"))


class TestHealth:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_ready(self, client: AsyncClient):
        resp = await client.get("/ready")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ready"
        assert data["checks"]["sqlite"] == "ok"
        assert data["checks"]["console"] == "ok"

    async def test_ready_reports_snapshot_times(self, client: AsyncClient, auth):
        resp = await client.post(
            "/api/projects", json={"name": "سرايا"}, headers=auth[UserRole.ADMIN]
        )
        assert resp.status_code == 201

        snapshots = (await client.get("/ready")).json()["checks"]["snapshots"]
        assert set(snapshots) == {"users", "projects", "requests"}
        assert snapshots["projects"] is not None

    async def test_not_ready_without_console(self, client: AsyncClient, test_app):
        del test_app.state.console
        resp = await client.get("/ready")
        assert resp.status_code == 503
        assert resp.json()["checks"]["console"] == "error: not loaded"


class TestPersistenceWarning:
    async def test_failed_save_sets_header(self, client: AsyncClient, test_app, auth):
        test_app.state.console = await ConsoleStore.open(BrokenSnapshotStore())

        resp = await client.post(
            "/api/projects", json={"name": "سرايا"}, headers=auth[UserRole.ADMIN]
        )
        assert resp.status_code == 201
        assert resp.headers["X-Persistence-Warning"] == "snapshot projects not saved"

        resp = await client.get("/api/projects", headers=auth[UserRole.ADMIN])
        assert resp.json()["projects"][0]["name"] == "سرايا"
        assert "X-Persistence-Warning" not in resp.headers

    async def test_no_header_on_success(self, client: AsyncClient, auth):
        resp = await client.post(
            "/api/projects", json={"name": "سرايا"}, headers=auth[UserRole.ADMIN]
        )
        assert "X-Persistence-Warning" not in resp.headers
