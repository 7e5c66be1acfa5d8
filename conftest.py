"""全局 pytest 配置 -- 临时 SQLite 数据库 + 对象存储 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from eventops.core.lifecycle import TaskLifecycleEngine
from eventops.core.models import Actor, ActorRole, MembershipStatus
from eventops.core.store import StoreGroup, create_store_group

PUBLIC_BASE_URL = "https://files.test/storage"


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def tmp_objects_dir(tmp_path: Path) -> Path:
    """提供临时对象存储目录"""
    objects_dir = tmp_path / "objects"
    objects_dir.mkdir(parents=True, exist_ok=True)
    return objects_dir


@pytest_asyncio.fixture
async def store_group(
    tmp_db_path: Path,
    tmp_objects_dir: Path,
) -> AsyncGenerator[StoreGroup, None]:
    """提供已初始化的 StoreGroup（SQLite + 文件系统）"""
    sg = await create_store_group(str(tmp_db_path), tmp_objects_dir, PUBLIC_BASE_URL)
    yield sg
    await sg.close()


@pytest_asyncio.fixture
async def engine(store_group: StoreGroup) -> TaskLifecycleEngine:
    return TaskLifecycleEngine(store_group)


@pytest.fixture
def admin() -> Actor:
    return Actor(id="admin-1", role=ActorRole.ADMIN, full_name="Ada Admin")


@pytest.fixture
def manager() -> Actor:
    return Actor(id="manager-1", role=ActorRole.MANAGER, full_name="Max Manager")


@pytest.fixture
def assignee() -> Actor:
    return Actor(id="employee-1", role=ActorRole.EMPLOYEE, full_name="Eve Employee")


@pytest.fixture
def outsider() -> Actor:
    """与任务无关的普通员工"""
    return Actor(id="employee-2", role=ActorRole.EMPLOYEE, full_name="Otto Outsider")


@pytest.fixture
def pending_member() -> Actor:
    return Actor(id="employee-3", role=ActorRole.EMPLOYEE, status=MembershipStatus.PENDING)
