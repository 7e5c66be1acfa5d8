"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、对象存储目录、附件大小/类型限制等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("EVENTOPS_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "EVENTOPS_DB_PATH",
        str(_get_base_dir() / "sqlite" / "eventops.db"),
    )


def get_objects_dir() -> Path:
    """获取对象存储根目录"""
    return Path(
        os.environ.get(
            "EVENTOPS_OBJECTS_DIR",
            str(_get_base_dir() / "objects"),
        )
    )


def get_public_base_url() -> str:
    """获取附件公开访问 URL 前缀（去掉末尾斜杠）"""
    return os.environ.get(
        "EVENTOPS_PUBLIC_BASE_URL",
        "http://localhost:8000/objects",
    ).rstrip("/")


# 附件所在的 bucket（对象路径前缀）
ATTACHMENT_BUCKET: str = os.environ.get("EVENTOPS_ATTACHMENT_BUCKET", "task-attachments")

# 附件最大字节数（默认 10 MiB）
ATTACHMENT_MAX_BYTES: int = int(
    os.environ.get("EVENTOPS_ATTACHMENT_MAX_BYTES", str(10 * 1024 * 1024))
)

# 允许上传的 MIME 类型：图片 / PDF / Word / Excel
ALLOWED_ATTACHMENT_TYPES: frozenset[str] = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/webp",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)

# 创建任务时关联库存的默认需求数量
DEFAULT_QUANTITY_REQUIRED: int = 1
