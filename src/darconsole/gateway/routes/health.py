"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 SQLite 连通性、快照写入时间、快照加载状态、磁盘空间。
"""

import shutil
from datetime import datetime

import structlog
from darconsole.core.config import SNAPSHOT_KEYS
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查 -- 验证核心依赖可用性

    检查项：
    1. sqlite: 数据库连通性
    2. snapshots: 各快照键最后写入时间（尚未写入为 null，不影响就绪）
    3. console: 快照已加载（至少存在一个用户，否则无人可登录）
    4. disk_space_mb: 磁盘剩余空间
    """
    checks = {}
    all_ok = True

    # 1-2. SQLite 连通性与快照写入时间
    try:
        store_group = request.app.state.store_group
        cursor = await store_group.conn.execute("SELECT 1")
        await cursor.fetchone()
        checks["sqlite"] = "ok"
        checks["snapshots"] = {
            key: _isoformat(await store_group.snapshot_store.updated_at(key))
            for key in SNAPSHOT_KEYS
        }
    except Exception as e:
        log.warning("readiness_sqlite_failed", error=str(e))
        checks["sqlite"] = f"error: {e}"
        all_ok = False

    # 3. 快照加载检查
    console = getattr(request.app.state, "console", None)
    if console is None:
        checks["console"] = "error: not loaded"
        all_ok = False
    elif not console.registry.users:
        checks["console"] = "error: no users"
        all_ok = False
    else:
        checks["console"] = "ok"

    # 4. 磁盘空间检查
    try:
        disk_usage = shutil.disk_usage("/")
        checks["disk_space_mb"] = disk_usage.free // (1024 * 1024)
    except OSError:
        checks["disk_space_mb"] = 0
        all_ok = False

    status_code = 200 if all_ok else 503
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "ready" if all_ok else "not_ready",
            "checks": checks,
        },
    )
