"""Store Protocol 接口定义

定义 RecordStore、ObjectStore、IdentityProvider 三个外部协作方的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
核心层只依赖这些接口，具体实现可替换为任意托管后端。
"""

from typing import Any, Protocol

from ..models.actor import Actor

Record = dict[str, Any]


class RecordStore(Protocol):
    """单个集合上的通用增删改查接口

    所有操作失败时抛出 PersistenceError，原样携带存储层信息。
    """

    async def get(self, record_id: str) -> Record | None:
        """根据 id 查询，不存在时返回 None"""
        ...

    async def insert(self, partial: Record) -> Record:
        """插入记录，缺少 id 时由存储层分配，返回完整记录"""
        ...

    async def update(
        self,
        record_id: str,
        partial: Record,
        expected: Record | None = None,
    ) -> Record:
        """合并更新字段，返回更新后的完整记录

        expected 非空时做比较写入：字段当前值不一致则抛出 ConflictError。
        """
        ...

    async def delete(self, record_id: str) -> None:
        """删除记录（依赖记录的级联删除由存储层负责）"""
        ...

    async def list(
        self,
        filter: Record | None = None,
        order: str | None = None,
    ) -> list[Record]:
        """查询记录，filter 为字段等值条件，order 为字段名（"-" 前缀表示倒序）"""
        ...


class ObjectStore(Protocol):
    """二进制对象存储接口"""

    async def upload(self, path: str, content: bytes, content_type: str) -> None:
        """上传对象"""
        ...

    def get_public_url(self, path: str) -> str:
        """获取对象的公开访问 URL"""
        ...


class IdentityProvider(Protocol):
    """身份提供方接口"""

    async def get_current_actor(self) -> Actor | None:
        """当前操作者，未登录时返回 None"""
        ...
