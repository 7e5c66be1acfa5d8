"""Inventory Domain Models

任务与库存条目的关联只是逻辑预留，不在创建时扣减库存。
"""

from pydantic import BaseModel, Field


class InventoryItem(BaseModel):
    """库存条目"""

    id: str
    item_name: str
    category: str | None = None
    current_stock: int = Field(default=0, ge=0)
    min_stock_level: int = Field(default=0, ge=0)
    image_url: str | None = None


class TaskInventoryLink(BaseModel):
    """任务所需库存条目"""

    id: str
    task_id: str
    inventory_id: str
    quantity_required: int = Field(ge=1, description="需求数量")
