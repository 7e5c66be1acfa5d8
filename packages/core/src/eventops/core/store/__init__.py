"""eventops Core Store -- 外部协作方接口 + 参考实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

from collections.abc import Awaitable
from pathlib import Path
from typing import TypeVar

import aiosqlite

from ..config import ATTACHMENT_BUCKET
from ..exceptions import EventOpsError, PersistenceError
from .object_store import FileObjectStore
from .protocols import IdentityProvider, ObjectStore, Record, RecordStore
from .record_store import SqliteRecordStore, to_jsonable
from .sqlite_init import init_db

T = TypeVar("T")

# 集合名
TASKS = "tasks"
TASK_ATTACHMENTS = "task_attachments"
TASK_INVENTORY = "task_inventory"
TEAM_MEMBERS = "team_members"
EVENTS = "events"
COST_CENTERS = "cost_centers"
INVENTORY = "inventory"


async def persist(operation: Awaitable[T]) -> T:
    """执行外部存储调用，非核心异常统一包装为 PersistenceError

    RecordStore / ObjectStore 可以是任意后端，抛出的异常类型不受约束。
    """
    try:
        return await operation
    except EventOpsError:
        raise
    except Exception as e:
        raise PersistenceError(str(e), original_error=e) from e


class StoreGroup:
    """Store 实例组 -- 所有集合共享同一个数据库连接"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        object_store: ObjectStore,
    ) -> None:
        self.conn = conn
        # 删除任务时级联删除附件记录与库存关联
        self.tasks = SqliteRecordStore(
            conn,
            TASKS,
            cascades=[(TASK_ATTACHMENTS, "task_id"), (TASK_INVENTORY, "task_id")],
        )
        self.attachments = SqliteRecordStore(conn, TASK_ATTACHMENTS)
        self.task_inventory = SqliteRecordStore(conn, TASK_INVENTORY)
        self.team_members = SqliteRecordStore(conn, TEAM_MEMBERS)
        self.events = SqliteRecordStore(conn, EVENTS)
        self.cost_centers = SqliteRecordStore(conn, COST_CENTERS)
        self.inventory = SqliteRecordStore(conn, INVENTORY)
        self.object_store = object_store

    async def close(self) -> None:
        await self.conn.close()


async def create_store_group(
    db_path: str,
    objects_dir: str | Path,
    public_base_url: str,
    bucket: str = ATTACHMENT_BUCKET,
) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径
        objects_dir: 对象存储根目录
        public_base_url: 附件公开 URL 前缀
        bucket: 附件 bucket 名

    Returns:
        StoreGroup 实例
    """
    objects_path = Path(objects_dir)
    objects_path.mkdir(parents=True, exist_ok=True)

    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(
        conn=conn,
        object_store=FileObjectStore(objects_path, public_base_url, bucket),
    )


__all__ = [
    "StoreGroup",
    "create_store_group",
    "persist",
    "RecordStore",
    "ObjectStore",
    "IdentityProvider",
    "Record",
    "SqliteRecordStore",
    "FileObjectStore",
    "init_db",
    "to_jsonable",
    "TASKS",
    "TASK_ATTACHMENTS",
    "TASK_INVENTORY",
    "TEAM_MEMBERS",
    "EVENTS",
    "COST_CENTERS",
    "INVENTORY",
]
