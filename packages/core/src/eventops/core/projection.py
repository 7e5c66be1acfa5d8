"""Task 查询投影

把任务与其负责人、所属活动、成本中心 join 成展示用视图，
并在每次读取时重新计算利润与进度（派生值，从不落盘）。
"""

from decimal import Decimal

import structlog
from pydantic import BaseModel, Field

from .exceptions import RecordNotFoundError
from .models.enums import FULFILLMENT_HIDDEN_STATES, TaskStatus, display_index, progress_fraction
from .models.references import CostCenter, EventSummary, TeamMember
from .models.task import Task
from .store import TASKS, StoreGroup, persist
from .store.protocols import Record, RecordStore

log = structlog.get_logger()

_ZERO = Decimal(0)
_ONE = Decimal(1)


class Profitability(BaseModel):
    """利润计算结果"""

    profit_per_unit: Decimal = Field(description="cost_to_client - actual_cost")
    net_profit: Decimal = Field(description="profit_per_unit x billable_quantity（缺省按 1）")


class Progress(BaseModel):
    """进度条位置"""

    step_index: int
    fraction: float


class TaskView(BaseModel):
    """任务展示视图"""

    task: Task
    assignee: TeamMember | None = None
    event: EventSummary | None = None
    cost_center: CostCenter | None = None
    serial_number: str
    profitability: Profitability
    progress: Progress
    fulfillment_visible: bool


def compute_profitability(task: Task) -> Profitability:
    """缺失的金额按 0 计算，没有声明数量的任务按 1 个计费单位计算"""
    profit_per_unit = (task.cost_to_client or _ZERO) - (task.actual_cost or _ZERO)
    quantity = task.billable_quantity or _ONE
    return Profitability(
        profit_per_unit=profit_per_unit,
        net_profit=profit_per_unit * quantity,
    )


def progress_for(status: TaskStatus) -> Progress:
    return Progress(step_index=display_index(status), fraction=progress_fraction(status))


def fulfillment_visible(status: TaskStatus) -> bool:
    """开始工作之前不显示履约信息"""
    return status not in FULFILLMENT_HIDDEN_STATES


def serial_number(task: Task, event_name: str | None = None) -> str:
    """展示编号：活动名首字母（最多 2 个，无活动时为 TS）+ 任务 id 前 4 位"""
    if task.custom_id:
        return task.custom_id
    words = (event_name or "").split()
    initials = "".join(word[0] for word in words).upper()[:2] if words else "TS"
    return f"{initials}{task.id[:4].upper()}"


class TaskQuery:
    """任务查询服务"""

    def __init__(self, stores: StoreGroup) -> None:
        self._stores = stores

    async def get_task_view(self, task_id: str) -> TaskView:
        """查询单个任务视图

        Raises:
            RecordNotFoundError: 任务不存在
        """
        record = await persist(self._stores.tasks.get(task_id))
        if record is None:
            raise RecordNotFoundError(TASKS, task_id)
        return await self._build_view(Task.model_validate(record), cache={})

    async def list_task_views(self, event_id: str | None = None) -> list[TaskView]:
        """查询任务视图列表（可按活动筛选），按创建时间倒序"""
        task_filter = {"event_id": event_id} if event_id is not None else None
        records = await persist(
            self._stores.tasks.list(filter=task_filter, order="-created_at")
        )
        # 同一次查询中重复的关联记录只读取一次
        cache: dict[tuple[str, str], Record | None] = {}
        views = []
        for record in records:
            views.append(await self._build_view(Task.model_validate(record), cache))
        return views

    async def _build_view(
        self,
        task: Task,
        cache: dict[tuple[str, str], Record | None],
    ) -> TaskView:
        assignee = await self._lookup(self._stores.team_members, task.assignee_id, cache)
        event = await self._lookup(self._stores.events, task.event_id, cache)
        cost_center = await self._lookup(self._stores.cost_centers, task.cost_center_id, cache)

        event_summary = EventSummary.model_validate(event) if event else None
        return TaskView(
            task=task,
            assignee=TeamMember.model_validate(assignee) if assignee else None,
            event=event_summary,
            cost_center=CostCenter.model_validate(cost_center) if cost_center else None,
            serial_number=serial_number(task, event_summary.name if event_summary else None),
            profitability=compute_profitability(task),
            progress=progress_for(task.status),
            fulfillment_visible=fulfillment_visible(task.status),
        )

    @staticmethod
    async def _lookup(
        store: RecordStore,
        record_id: str | None,
        cache: dict[tuple[str, str], Record | None],
    ) -> Record | None:
        if record_id is None:
            return None
        key = (getattr(store, "collection", type(store).__name__), record_id)
        if key not in cache:
            cache[key] = await persist(store.get(record_id))
            if cache[key] is None:
                log.warning("task_reference_missing", collection=key[0], record_id=record_id)
        return cache[key]
