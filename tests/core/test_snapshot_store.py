"""SqliteSnapshotStore 测试

测试内容：
1. 缺失键返回 None
2. save 整体覆盖写入，load 读回相同 JSON
3. 损坏的 payload 包装为 PersistenceError
4. WAL 模式
"""

from pathlib import Path

import aiosqlite
import pytest
from darconsole.core.exceptions import PersistenceError
from darconsole.core.store import create_store_group
from darconsole.core.store.snapshot_store import SqliteSnapshotStore
from darconsole.core.store.sqlite_init import verify_wal_mode


class TestSqliteSnapshotStore:
    async def test_missing_key_returns_none(self, db_conn: aiosqlite.Connection):
        store = SqliteSnapshotStore(db_conn)
        assert await store.load("projects") is None

    async def test_save_then_load(self, db_conn: aiosqlite.Connection):
        store = SqliteSnapshotStore(db_conn)
        payload = [{"name": "سرايا", "tasks": [], "isPinned": True}]
        await store.save("projects", payload)
        assert await store.load("projects") == payload
        assert await store.updated_at("projects") is not None

    async def test_save_overwrites(self, db_conn: aiosqlite.Connection):
        store = SqliteSnapshotStore(db_conn)
        await store.save("users", [{"id": "1"}])
        await store.save("users", [{"id": "2"}, {"id": "3"}])
        assert await store.load("users") == [{"id": "2"}, {"id": "3"}]

    async def test_arabic_text_stored_verbatim(self, db_conn: aiosqlite.Connection):
        store = SqliteSnapshotStore(db_conn)
        await store.save("projects", [{"name": "المدينة المنورة"}])
        cursor = await db_conn.execute("SELECT payload FROM snapshots WHERE key = 'projects'")
        row = await cursor.fetchone()
        assert "المدينة المنورة" in row[0]

    async def test_corrupt_payload_raises(self, db_conn: aiosqlite.Connection):
        await db_conn.execute(
            "INSERT INTO snapshots (key, payload, updated_at) VALUES (?, ?, ?)",
            ("requests", "{not json", "2026-01-01T00:00:00+00:00"),
        )
        await db_conn.commit()
        store = SqliteSnapshotStore(db_conn)
        with pytest.raises(PersistenceError) as exc_info:
            await store.load("requests")
        assert exc_info.value.key == "requests"

    async def test_unserializable_data_raises(self, db_conn: aiosqlite.Connection):
        store = SqliteSnapshotStore(db_conn)
        with pytest.raises(PersistenceError):
            await store.save("users", [object()])
        assert await store.load("users") is None

    async def test_closed_connection_raises_persistence_error(self, tmp_db_path: Path):
        store_group = await create_store_group(str(tmp_db_path))
        await store_group.conn.close()
        with pytest.raises(PersistenceError) as exc_info:
            await store_group.snapshot_store.save("projects", [])
        assert exc_info.value.key == "projects"

    async def test_updated_at_missing_key(self, db_conn: aiosqlite.Connection):
        assert await SqliteSnapshotStore(db_conn).updated_at("requests") is None


class TestStoreGroup:
    async def test_creates_directory_and_enables_wal(self, tmp_path: Path):
        db_path = tmp_path / "nested" / "dir" / "console.db"
        store_group = await create_store_group(str(db_path))
        try:
            assert db_path.parent.exists()
            assert await verify_wal_mode(store_group.conn)
        finally:
            await store_group.conn.close()
