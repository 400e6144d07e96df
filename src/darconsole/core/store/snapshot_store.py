"""SnapshotStore SQLite 实现

每个逻辑键保存一份完整快照，save 为整体覆盖写（upsert）。
I/O 与反序列化异常统一包装为 PersistenceError。
"""

import contextlib
import json
from datetime import UTC, datetime
from typing import Any

import aiosqlite

from ..exceptions import PersistenceError


class SqliteSnapshotStore:
    """SnapshotStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def load(self, key: str) -> Any | None:
        """读取快照，键不存在时返回 None"""
        try:
            cursor = await self._conn.execute(
                "SELECT payload FROM snapshots WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return json.loads(row[0])
        except (aiosqlite.Error, ValueError) as e:
            raise PersistenceError(key, e) from e

    async def save(self, key: str, data: Any) -> None:
        """整体覆盖写入快照并提交"""
        try:
            await self._conn.execute(
                """
                INSERT INTO snapshots (key, payload, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE
                SET payload = excluded.payload, updated_at = excluded.updated_at
                """,
                (
                    key,
                    json.dumps(data, ensure_ascii=False),
                    datetime.now(UTC).isoformat(),
                ),
            )
            await self._conn.commit()
        except (aiosqlite.Error, TypeError, ValueError) as e:
            # 连接已关闭时 rollback 同样失败，仍以 PersistenceError 上报原始错误
            with contextlib.suppress(aiosqlite.Error, ValueError):
                await self._conn.rollback()
            raise PersistenceError(key, e) from e

    async def updated_at(self, key: str) -> datetime | None:
        """快照最后写入时间，键不存在时返回 None（readiness 检查使用）"""
        try:
            cursor = await self._conn.execute(
                "SELECT updated_at FROM snapshots WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
        except (aiosqlite.Error, ValueError) as e:
            raise PersistenceError(key, e) from e
        return datetime.fromisoformat(row[0]) if row else None
