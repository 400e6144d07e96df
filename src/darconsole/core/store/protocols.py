"""Store Protocol 接口定义

快照存储的抽象接口，使用 Python Protocol 实现结构化子类型（duck typing）。
核心只依赖 load / save 两个操作，对存储技术无感知。
"""

from typing import Any, Protocol


class SnapshotStore(Protocol):
    """快照存储接口

    三个逻辑键：users / projects / requests，值为实体数组的 JSON 表示。
    """

    async def load(self, key: str) -> Any | None:
        """读取快照，键不存在时返回 None

        Raises:
            PersistenceError: 读取或反序列化失败
        """
        ...

    async def save(self, key: str, data: Any) -> None:
        """整体覆盖写入快照

        Raises:
            PersistenceError: 写入失败（已回滚）
        """
        ...
