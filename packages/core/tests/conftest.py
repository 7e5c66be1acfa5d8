"""packages/core 测试配置 -- 核心层 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio
from eventops.core.lifecycle import TaskLifecycleEngine
from eventops.core.models import Actor, Task, TaskDraft, TaskStatus


@pytest_asyncio.fixture
async def core_db(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """核心层已初始化数据库连接"""
    from eventops.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def pending_task(engine: TaskLifecycleEngine, admin: Actor, assignee: Actor) -> Task:
    """Admin 创建、指派给 assignee 的 Pending 任务"""
    return await engine.create_task(
        admin,
        TaskDraft(title="Set up stage lighting", assignee_id=assignee.id),
    )


@pytest.fixture
def advance_to(engine: TaskLifecycleEngine, assignee: Actor):
    """返回协程函数：由负责人按顺序推进到指定状态"""

    async def _advance_to(task: Task, status: TaskStatus) -> Task:
        while task.status != status:
            task = await engine.advance(task, assignee)
        return task

    return _advance_to
