"""Task Domain Model

tasks 集合中的一行即一个 Task。
状态与时间戳只能通过生命周期引擎的流转写入；
acknowledged_at / started_at / completed_at 仅在首次进入对应状态时写入，之后不再清除。
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from .enums import TaskPriority, TaskStatus


class TaskTransition(BaseModel):
    """一次已应用的状态流转（审计记录）"""

    from_status: TaskStatus
    to_status: TaskStatus
    actor_id: str = Field(description="执行流转的操作者 ID")
    ts: datetime = Field(description="流转时间")


class Task(BaseModel):
    """Task 数据模型"""

    id: str = Field(description="存储层分配的唯一标识")
    custom_id: str | None = Field(default=None, description="可读编号")
    title: str = Field(description="任务标题")
    description: str | None = Field(default=None)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="当前状态")
    event_id: str | None = Field(default=None, description="所属活动")
    assignee_id: str | None = Field(default=None, description="负责人（团队成员 ID）")
    created_by: str | None = Field(default=None, description="创建者 ID")

    # 时间线
    deadline: datetime | None = None
    created_at: datetime = Field(description="创建时间")
    acknowledged_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    # 履约信息
    actual_cost: Decimal | None = Field(default=None, ge=0)
    vendor_name: str | None = None
    vendor_address: str | None = None
    vendor_contact: str | None = None

    # 利润信息
    cost_to_client: Decimal | None = None
    unit_type: str | None = None
    billable_quantity: Decimal | None = None
    profitability_comments: str | None = None
    cost_center_id: str | None = None

    status_history: list[TaskTransition] = Field(
        default_factory=list,
        description="每次流转的审计记录，按时间正序",
    )


class TaskDraft(BaseModel):
    """创建任务时的输入"""

    title: str
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    event_id: str | None = None
    assignee_id: str | None = None
    deadline: datetime | None = None
    custom_id: str | None = None
