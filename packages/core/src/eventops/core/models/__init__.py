"""eventops Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .actor import Actor
from .attachment import TaskAttachment, UploadFile
from .edits import FulfillmentEdits, ProfitabilityEdits
from .enums import (
    FULFILLMENT_HIDDEN_STATES,
    LEGACY_STATUS_ALIASES,
    STATUS_SEQUENCE,
    STATUS_TIMESTAMP_FIELDS,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    ActorRole,
    AttachmentContext,
    MembershipStatus,
    TaskPriority,
    TaskStatus,
    display_index,
    next_status,
    normalize_status,
    progress_fraction,
    validate_transition,
)
from .inventory import InventoryItem, TaskInventoryLink
from .references import CostCenter, EventSummary, TeamMember
from .task import Task, TaskDraft, TaskTransition

__all__ = [
    # 枚举
    "TaskStatus",
    "TaskPriority",
    "ActorRole",
    "MembershipStatus",
    "AttachmentContext",
    # 状态机
    "STATUS_SEQUENCE",
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "LEGACY_STATUS_ALIASES",
    "STATUS_TIMESTAMP_FIELDS",
    "FULFILLMENT_HIDDEN_STATES",
    "validate_transition",
    "normalize_status",
    "next_status",
    "display_index",
    "progress_fraction",
    # Task
    "Task",
    "TaskDraft",
    "TaskTransition",
    # 编辑缓冲区
    "FulfillmentEdits",
    "ProfitabilityEdits",
    # Actor
    "Actor",
    # Attachment
    "TaskAttachment",
    "UploadFile",
    # Inventory
    "InventoryItem",
    "TaskInventoryLink",
    # 关联实体
    "TeamMember",
    "EventSummary",
    "CostCenter",
]
