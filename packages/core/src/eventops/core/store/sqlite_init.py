"""SQLite 数据库初始化

PRAGMA 配置 + 通用 records 表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# records 表 DDL：所有集合共用，data 列为 JSON
_RECORDS_DDL = """
CREATE TABLE IF NOT EXISTS records (
    collection  TEXT NOT NULL,
    id          TEXT NOT NULL,
    data        TEXT NOT NULL DEFAULT '{}',
    created_at  TEXT NOT NULL,

    PRIMARY KEY (collection, id)
);
"""

_RECORDS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_records_collection ON records(collection);",
    # 任务子记录（附件、库存关联）按 task_id 查询/级联删除
    (
        "CREATE INDEX IF NOT EXISTS idx_records_task_id "
        "ON records(collection, json_extract(data, '$.task_id'));"
    ),
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    await conn.execute(_RECORDS_DDL)

    for idx_sql in _RECORDS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
