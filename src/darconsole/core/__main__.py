"""CLI 入口模块 -- python -m darconsole.core <command>

支持的命令：
  rebuild-counters  按任务列表重算所有项目的派生计数并写回快照
  seed-users        无用户快照时写入默认用户集
"""

import asyncio
import sys

from .config import PROJECTS_KEY, USERS_KEY, get_db_path, load_console_config

USAGE = """用法: python -m darconsole.core <command>
命令:
  rebuild-counters  按任务列表重算所有项目的派生计数并写回快照
  seed-users        无用户快照时写入默认用户集"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command = sys.argv[1]

    if command == "rebuild-counters":
        asyncio.run(rebuild_counters())
    elif command == "seed-users":
        asyncio.run(seed_users())
    else:
        print(f"未知命令: {command}")
        print("可用命令: rebuild-counters, seed-users")
        sys.exit(1)


async def rebuild_counters() -> None:
    """加载快照（加载时即按任务列表重算计数）并写回 projects"""
    from .console import ConsoleStore
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    try:
        console = await ConsoleStore.open(store_group.snapshot_store, load_console_config())
        await console.persist(PROJECTS_KEY)
        error = console.pop_persistence_error()
        if error is not None:
            print(f"写回失败: {error}")
            sys.exit(2)
        print(f"重算完成，共 {len(console.projects)} 个项目")
    finally:
        await store_group.conn.close()


async def seed_users() -> None:
    """仅在 users 快照不存在时写入默认用户"""
    from .console import ConsoleStore
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        if await store_group.snapshot_store.load(USERS_KEY) is not None:
            print("users 快照已存在，跳过")
            return
        console = await ConsoleStore.open(store_group.snapshot_store, load_console_config())
        await console.persist(USERS_KEY)
        print(f"已写入 {len(console.registry.users)} 个用户")
    finally:
        await store_group.conn.close()


if __name__ == "__main__":
    main()
