"""持久性集成测试

进程重启后项目、任务、请求与用户完整；lifespan 启动路径可用。
"""

import os
from pathlib import Path

from darconsole.core.config import USERS_KEY
from darconsole.core.console import ConsoleStore
from darconsole.core.store import create_store_group
from httpx import ASGITransport, AsyncClient

ADMIN = {"X-User-Id": "1"}
TECHNICAL = {"X-User-Id": "4"}


class TestDurability:
    """进程重启后数据完整"""

    async def test_state_survives_restart(self, tmp_path: Path):
        """写入 -> 关闭连接 -> 重新打开 -> 数据完整"""
        db_path = str(tmp_path / "durable.db")
        os.environ["DARCONSOLE_DB_PATH"] = db_path
        os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

        try:
            from darconsole.gateway.main import create_app

            # 第一次启动
            app1 = create_app()
            sg1 = await create_store_group(db_path)
            app1.state.store_group = sg1
            app1.state.console = await ConsoleStore.open(sg1.snapshot_store)

            async with AsyncClient(
                transport=ASGITransport(app=app1),
                base_url="http://test",
            ) as c1:
                await c1.post("/api/projects", json={"name": "سرايا"}, headers=ADMIN)
                resp = await c1.post(
                    "/api/projects/سرايا/tasks", json={"status": "منجز"}, headers=ADMIN
                )
                task_id = resp.json()["task"]["id"]
                resp = await c1.post(
                    "/api/requests",
                    json={"projectName": "سرايا", "serviceSubType": "رخص البناء"},
                    headers=TECHNICAL,
                )
                request_id = resp.json()["id"]
                resp = await c1.post(
                    "/api/users",
                    json={"name": "ريم", "email": "reem@dar.sa"},
                    headers=ADMIN,
                )
                assert resp.status_code == 201

            # 模拟进程退出
            await sg1.conn.close()

            # 第二次启动
            app2 = create_app()
            sg2 = await create_store_group(db_path)
            app2.state.store_group = sg2
            app2.state.console = await ConsoleStore.open(sg2.snapshot_store)

            async with AsyncClient(
                transport=ASGITransport(app=app2),
                base_url="http://test",
            ) as c2:
                resp = await c2.get("/api/projects/سرايا", headers=ADMIN)
                assert resp.status_code == 200
                project = resp.json()
                assert project["tasks"][0]["id"] == task_id
                assert project["progress"] == 100

                resp = await c2.get(f"/api/requests/{request_id}", headers=ADMIN)
                assert resp.status_code == 200
                assert resp.json()["status"] == "new"

                resp = await c2.post(
                    "/api/login", json={"email": "reem@dar.sa", "password": "123"}
                )
                assert resp.status_code == 200

            await sg2.conn.close()
        finally:
            os.environ.pop("DARCONSOLE_DB_PATH", None)
            os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)


class TestLifespan:
    async def test_lifespan_opens_and_closes_store(self, tmp_path: Path):
        os.environ["DARCONSOLE_DB_PATH"] = str(tmp_path / "sqlite" / "life.db")
        os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"
        try:
            from darconsole.gateway.main import create_app

            app = create_app()
            async with app.router.lifespan_context(app):
                assert app.state.console is not None
                assert len(app.state.console.registry.users) == 6
            assert (tmp_path / "sqlite" / "life.db").exists()

            store_group = await create_store_group(str(tmp_path / "sqlite" / "life.db"))
            try:
                users = await store_group.snapshot_store.load(USERS_KEY)
            finally:
                await store_group.conn.close()
            assert len(users) == 6
        finally:
            os.environ.pop("DARCONSOLE_DB_PATH", None)
            os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)
