"""库存消耗挂钩

创建任务时把选中的库存条目与任务关联（逻辑预留），不扣减库存。
实际库存调整是独立的手动操作（adjust_stock）。
"""

from collections.abc import Iterable

import structlog

from .exceptions import RecordNotFoundError, Unauthorized, ValidationError
from .models.actor import Actor
from .models.inventory import InventoryItem, TaskInventoryLink
from .models.task import Task
from .permissions import is_admin_or_manager
from .store import INVENTORY, persist
from .store.protocols import RecordStore

log = structlog.get_logger()


def validate_quantity(quantity_required: int) -> None:
    if isinstance(quantity_required, bool) or not isinstance(quantity_required, int):
        raise ValidationError("quantity_required must be an integer", field="quantity_required")
    if quantity_required < 1:
        raise ValidationError("quantity_required must be >= 1", field="quantity_required")


class InventoryHook:
    """任务 <-> 库存关联"""

    def __init__(self, task_inventory: RecordStore, inventory: RecordStore) -> None:
        self._task_inventory = task_inventory
        self._inventory = inventory

    async def link_items(
        self,
        task: Task,
        inventory_ids: Iterable[str],
        quantity_required: int,
    ) -> list[TaskInventoryLink]:
        """为每个选中的库存条目写入一条关联记录

        重复的 inventory_id 只关联一次。写入失败时 PersistenceError 直接抛出，
        已创建的任务不回滚。
        """
        validate_quantity(quantity_required)

        links: list[TaskInventoryLink] = []
        for inventory_id in dict.fromkeys(inventory_ids):
            record = await persist(
                self._task_inventory.insert(
                    {
                        "task_id": task.id,
                        "inventory_id": inventory_id,
                        "quantity_required": quantity_required,
                    }
                )
            )
            links.append(TaskInventoryLink.model_validate(record))

        if links:
            log.info(
                "task_inventory_linked",
                task_id=task.id,
                item_count=len(links),
                quantity_required=quantity_required,
            )
        return links

    async def list_links(self, task_id: str) -> list[TaskInventoryLink]:
        records = await persist(self._task_inventory.list(filter={"task_id": task_id}))
        return [TaskInventoryLink.model_validate(r) for r in records]

    async def adjust_stock(self, actor: Actor, item_id: str, delta: int) -> InventoryItem:
        """手动调整库存（正数入库，负数出库）

        Raises:
            Unauthorized: 非 Admin/Manager
            ValidationError: 调整后库存为负
            RecordNotFoundError: 库存条目不存在
        """
        if not is_admin_or_manager(actor):
            raise Unauthorized("Only Admin or Manager can adjust stock", actor_id=actor.id)

        record = await persist(self._inventory.get(item_id))
        if record is None:
            raise RecordNotFoundError(INVENTORY, item_id)
        item = InventoryItem.model_validate(record)

        new_stock = item.current_stock + delta
        if new_stock < 0:
            raise ValidationError(
                f"Stock for {item.item_name} cannot go below 0 "
                f"(current {item.current_stock}, change {delta})",
                field="current_stock",
            )

        updated = await persist(self._inventory.update(item_id, {"current_stock": new_stock}))
        log.info(
            "inventory_stock_adjusted",
            item_id=item_id,
            actor_id=actor.id,
            previous=item.current_stock,
            current=new_stock,
        )
        return InventoryItem.model_validate(updated)
