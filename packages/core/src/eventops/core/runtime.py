"""运行时入口 -- 日志初始化 + Store 创建/关闭

按 config 中的环境变量创建 StoreGroup，交出 TaskLifecycleEngine，退出时关闭连接。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog

from .config import ATTACHMENT_BUCKET, get_db_path, get_objects_dir, get_public_base_url
from .lifecycle import TaskLifecycleEngine
from .logging_config import setup_logging
from .store import create_store_group

log = structlog.get_logger()


@asynccontextmanager
async def open_engine(configure_logging: bool = True) -> AsyncGenerator[TaskLifecycleEngine, None]:
    """打开生命周期引擎

    Args:
        configure_logging: 是否调用 setup_logging()（宿主已配置日志时传 False）
    """
    if configure_logging:
        setup_logging()

    db_path = get_db_path()
    store_group = await create_store_group(
        db_path,
        get_objects_dir(),
        get_public_base_url(),
        ATTACHMENT_BUCKET,
    )
    log.info("eventops_started", db_path=db_path)
    try:
        yield TaskLifecycleEngine(store_group)
    finally:
        await store_group.close()
        log.info("eventops_stopped")
