"""枚举定义

包含 TaskStatus 状态机、TaskPriority、ActorRole、MembershipStatus、AttachmentContext 枚举，
以及 STATUS_SEQUENCE 有序状态表、VALID_TRANSITIONS 合法流转映射和进度显示辅助函数。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """Task 状态机"""

    PENDING = "Pending"
    ACKNOWLEDGED = "Acknowledged"
    IN_PROGRESS = "In Progress"
    AWAITING_APPROVAL = "Awaiting Approval"
    COMPLETED = "Completed"

    # 历史遗留状态：读取时接受，进度显示等同 ACKNOWLEDGED，新流转不会产生
    IN_REVIEW = "In Review"


class TaskPriority(StrEnum):
    """任务优先级"""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class ActorRole(StrEnum):
    """操作者角色"""

    ADMIN = "Admin"
    MANAGER = "Manager"
    EMPLOYEE = "Employee"


class MembershipStatus(StrEnum):
    """团队成员状态"""

    PENDING = "Pending"
    ACTIVE = "Active"
    SUSPENDED = "Suspended"


class AttachmentContext(StrEnum):
    """附件上传场景"""

    CREATION = "creation"
    SUBMISSION = "submission"
    COMMENT = "comment"


# 有序状态表（不含遗留别名）
STATUS_SEQUENCE: tuple[TaskStatus, ...] = (
    TaskStatus.PENDING,
    TaskStatus.ACKNOWLEDGED,
    TaskStatus.IN_PROGRESS,
    TaskStatus.AWAITING_APPROVAL,
    TaskStatus.COMPLETED,
)

# 遗留状态 -> 规范状态
LEGACY_STATUS_ALIASES: dict[TaskStatus, TaskStatus] = {
    TaskStatus.IN_REVIEW: TaskStatus.ACKNOWLEDGED,
}

# 合法状态流转：顺序推进 + 审批分支（驳回回到 IN_PROGRESS）
VALID_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.PENDING: {TaskStatus.ACKNOWLEDGED},
    TaskStatus.ACKNOWLEDGED: {TaskStatus.IN_PROGRESS},
    TaskStatus.IN_REVIEW: {TaskStatus.IN_PROGRESS},
    TaskStatus.IN_PROGRESS: {TaskStatus.AWAITING_APPROVAL},
    TaskStatus.AWAITING_APPROVAL: {TaskStatus.COMPLETED, TaskStatus.IN_PROGRESS},
    # 终态不可再流转
    TaskStatus.COMPLETED: set(),
}

TERMINAL_STATES: set[TaskStatus] = {TaskStatus.COMPLETED}

# 履约信息（成本/供应商）在这些状态下不显示
FULFILLMENT_HIDDEN_STATES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.PENDING, TaskStatus.ACKNOWLEDGED, TaskStatus.IN_REVIEW}
)

# 进入状态时写入的时间戳字段
STATUS_TIMESTAMP_FIELDS: dict[TaskStatus, str] = {
    TaskStatus.ACKNOWLEDGED: "acknowledged_at",
    TaskStatus.IN_PROGRESS: "started_at",
    TaskStatus.COMPLETED: "completed_at",
}


def validate_transition(from_status: TaskStatus, to_status: TaskStatus) -> bool:
    """验证状态流转是否合法

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_TRANSITIONS.get(from_status, set())
    return to_status in allowed


def normalize_status(status: TaskStatus) -> TaskStatus:
    """遗留状态映射为规范状态"""
    return LEGACY_STATUS_ALIASES.get(status, status)


def display_index(status: TaskStatus) -> int:
    """进度条位置（IN_REVIEW 与 ACKNOWLEDGED 同位）"""
    return STATUS_SEQUENCE.index(normalize_status(status))


def progress_fraction(status: TaskStatus) -> float:
    """完成比例 stepIndex / (len - 1)"""
    return display_index(status) / (len(STATUS_SEQUENCE) - 1)


def next_status(status: TaskStatus) -> TaskStatus | None:
    """有序状态表中的下一状态，已完成时返回 None"""
    index = display_index(status)
    if index + 1 >= len(STATUS_SEQUENCE):
        return None
    return STATUS_SEQUENCE[index + 1]
