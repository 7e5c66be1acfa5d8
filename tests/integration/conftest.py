"""集成测试共享 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from eventops.core import config
from eventops.core.lifecycle import TaskLifecycleEngine
from eventops.core.store import StoreGroup, create_store_group


@pytest_asyncio.fixture
async def integration_stores(tmp_path: Path, monkeypatch) -> AsyncGenerator[StoreGroup, None]:
    """按环境变量配置创建的 StoreGroup，并写入团队成员资料"""
    monkeypatch.setenv("EVENTOPS_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("EVENTOPS_PUBLIC_BASE_URL", "https://ops.example.com/storage/")
    monkeypatch.delenv("EVENTOPS_DB_PATH", raising=False)
    monkeypatch.delenv("EVENTOPS_OBJECTS_DIR", raising=False)

    store_group = await create_store_group(
        config.get_db_path(),
        config.get_objects_dir(),
        config.get_public_base_url(),
    )
    profiles = [
        {"id": "u-admin", "full_name": "Ada Admin", "role": "Admin", "status": "Active"},
        {"id": "u-manager", "full_name": "Max Manager", "role": "Manager", "status": "Active"},
        {"id": "u-eve", "full_name": "Eve Employee", "role": "Employee", "status": "Active"},
        {"id": "u-otto", "full_name": "Otto Outsider", "role": "Employee", "status": "Active"},
        {"id": "u-sam", "full_name": "Sam Suspended", "role": "Employee", "status": "Suspended"},
    ]
    for profile in profiles:
        await store_group.team_members.insert(profile)
    await store_group.events.insert({"id": "evt-gala", "name": "Spring Charity Gala"})
    await store_group.cost_centers.insert({"id": "cc-av", "code": "AV", "title": "Audio Visual"})

    yield store_group

    await store_group.close()


@pytest_asyncio.fixture
async def integration_engine(integration_stores: StoreGroup) -> TaskLifecycleEngine:
    return TaskLifecycleEngine(integration_stores)
