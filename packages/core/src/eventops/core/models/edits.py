"""编辑缓冲区模型

表单中尚未保存的字段。只有显式设置过的字段会写入（model_fields_set），
数字形式的字符串转换为 Decimal，空白字符串转换为 None。

字段类型由 pydantic 在调用方构造缓冲区时校验（抛出 pydantic.ValidationError）；
to_update() 中的数值解析失败抛出 eventops ValidationError，带字段名。
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel

from ..exceptions import ValidationError

RawNumber = str | int | float | Decimal | None


def parse_decimal(field: str, value: RawNumber, minimum: Decimal | None = None) -> Decimal | None:
    """解析数值输入

    Raises:
        ValidationError: 格式错误或小于 minimum
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = Decimal(str(value))
    except InvalidOperation as e:
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field) from e
    if not number.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} must be >= {minimum}", field=field)
    return number


def parse_text(value: str | None) -> str | None:
    """去除首尾空白，空串视为 None"""
    if value is None:
        return None
    value = value.strip()
    return value or None


class FulfillmentEdits(BaseModel):
    """履约信息编辑缓冲区（成本 + 供应商）"""

    actual_cost: RawNumber = None
    vendor_name: str | None = None
    vendor_address: str | None = None
    vendor_contact: str | None = None

    def to_update(self) -> dict[str, Any]:
        """转换为待合并到任务行的字段"""
        update: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if name == "actual_cost":
                update[name] = parse_decimal(name, value, minimum=Decimal(0))
            else:
                update[name] = parse_text(value)
        return update


class ProfitabilityEdits(BaseModel):
    """利润信息编辑缓冲区"""

    cost_to_client: RawNumber = None
    unit_type: str | None = None
    billable_quantity: RawNumber = None
    profitability_comments: str | None = None
    cost_center_id: str | None = None

    def to_update(self) -> dict[str, Any]:
        update: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if name in ("cost_to_client", "billable_quantity"):
                update[name] = parse_decimal(name, value)
            else:
                update[name] = parse_text(value)
        return update
