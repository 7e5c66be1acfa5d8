"""RecordStore SQLite 实现

所有集合共用 records 表，每行 data 列保存记录 JSON。
同一连接上的写操作各自提交；失败时回滚并包装为 PersistenceError。
"""

import json
import re
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import aiosqlite
from pydantic import TypeAdapter
from ulid import ULID

from ..exceptions import ConflictError, PersistenceError, RecordNotFoundError
from .protocols import Record

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_JSONABLE = TypeAdapter(Any)


def to_jsonable(value: Any) -> Any:
    """Decimal / datetime / Enum 等转换为 JSON 原生类型"""
    return _JSONABLE.dump_python(value, mode="json")


def _json_path(field: str) -> str:
    """字段名转换为 json_extract 路径（拒绝非法字段名）"""
    if not _FIELD_RE.match(field):
        raise ValueError(f"Invalid field name: {field!r}")
    return f"$.{field}"


class SqliteRecordStore:
    """RecordStore 的 SQLite 实现（单个集合）

    Args:
        conn: 共享数据库连接
        collection: 集合名
        cascades: 删除时一并删除的依赖记录 (集合名, 外键字段)
    """

    def __init__(
        self,
        conn: aiosqlite.Connection,
        collection: str,
        cascades: Sequence[tuple[str, str]] = (),
    ) -> None:
        self._conn = conn
        self._collection = collection
        self._cascades = tuple(cascades)

    @property
    def collection(self) -> str:
        return self._collection

    async def get(self, record_id: str) -> Record | None:
        """根据 id 查询记录"""
        try:
            cursor = await self._conn.execute(
                "SELECT data FROM records WHERE collection = ? AND id = ?",
                (self._collection, record_id),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError(str(e), original_error=e) from e
        if row is None:
            return None
        return json.loads(row[0])

    async def insert(self, partial: Record) -> Record:
        """插入记录，缺少 id 时分配 ULID"""
        data = to_jsonable(partial)
        record_id = data.get("id") or str(ULID())
        data["id"] = record_id
        try:
            await self._conn.execute(
                "INSERT INTO records (collection, id, data, created_at) VALUES (?, ?, ?, ?)",
                (
                    self._collection,
                    record_id,
                    json.dumps(data, ensure_ascii=False),
                    datetime.now(UTC).isoformat(),
                ),
            )
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._conn.rollback()
            raise PersistenceError(str(e), original_error=e) from e
        return data

    async def update(
        self,
        record_id: str,
        partial: Record,
        expected: Record | None = None,
    ) -> Record:
        """浅合并更新，expected 非空时先比较字段当前值"""
        current = await self.get(record_id)
        if current is None:
            raise RecordNotFoundError(self._collection, record_id)

        for field, value in (expected or {}).items():
            expected_value = to_jsonable(value)
            if current.get(field) != expected_value:
                raise ConflictError(record_id, field, expected_value, current.get(field))

        merged = {**current, **to_jsonable(partial), "id": record_id}
        sql = "UPDATE records SET data = ? WHERE collection = ? AND id = ?"
        params: list[Any] = [json.dumps(merged, ensure_ascii=False), self._collection, record_id]
        # 比较条件同时写进 WHERE，避免读写之间被其他写入覆盖
        for field, value in (expected or {}).items():
            sql += f" AND json_extract(data, '{_json_path(field)}') IS ?"
            params.append(to_jsonable(value))

        try:
            cursor = await self._conn.execute(sql, params)
            changed = cursor.rowcount
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._conn.rollback()
            raise PersistenceError(str(e), original_error=e) from e

        if changed == 0:
            latest = await self.get(record_id)
            if latest is None:
                raise RecordNotFoundError(self._collection, record_id)
            for field, value in (expected or {}).items():
                if latest.get(field) != to_jsonable(value):
                    raise ConflictError(record_id, field, to_jsonable(value), latest.get(field))
            raise PersistenceError(f"Update of {self._collection} record {record_id} affected no rows")
        return merged

    async def delete(self, record_id: str) -> None:
        """删除记录及其级联依赖记录（同一事务）"""
        try:
            await self._conn.execute(
                "DELETE FROM records WHERE collection = ? AND id = ?",
                (self._collection, record_id),
            )
            for child_collection, fk_field in self._cascades:
                await self._conn.execute(
                    f"DELETE FROM records WHERE collection = ? "
                    f"AND json_extract(data, '{_json_path(fk_field)}') = ?",
                    (child_collection, record_id),
                )
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._conn.rollback()
            raise PersistenceError(str(e), original_error=e) from e

    async def list(
        self,
        filter: Record | None = None,
        order: str | None = None,
    ) -> list[Record]:
        """等值过滤 + 单字段排序（"-" 前缀为倒序），默认按插入顺序"""
        sql = "SELECT data FROM records WHERE collection = ?"
        params: list[Any] = [self._collection]
        for field, value in (filter or {}).items():
            sql += f" AND json_extract(data, '{_json_path(field)}') IS ?"
            params.append(to_jsonable(value))

        if order:
            descending = order.startswith("-")
            field = order.lstrip("-")
            direction = "DESC" if descending else "ASC"
            sql += f" ORDER BY json_extract(data, '{_json_path(field)}') {direction}, rowid {direction}"
        else:
            sql += " ORDER BY rowid ASC"

        try:
            cursor = await self._conn.execute(sql, params)
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError(str(e), original_error=e) from e
        return [json.loads(row[0]) for row in rows]
