"""权限谓词

纯函数：只依赖 (actor, task)，不做任何 I/O。
既不是负责人也不是 Admin/Manager 的操作者只能查看，不能修改。
"""

from .models.actor import Actor
from .models.enums import (
    ActorRole,
    AttachmentContext,
    TaskStatus,
    next_status,
)
from .models.task import Task

PRIVILEGED_ROLES: frozenset[ActorRole] = frozenset({ActorRole.ADMIN, ActorRole.MANAGER})

# 负责人提交审批后不能再修改履约信息或补充 comment 附件
_ASSIGNEE_LOCKED_STATES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.AWAITING_APPROVAL, TaskStatus.COMPLETED}
)


def is_assignee(actor: Actor, task: Task) -> bool:
    return task.assignee_id is not None and actor.id == task.assignee_id


def is_admin_or_manager(actor: Actor) -> bool:
    return actor.role in PRIVILEGED_ROLES


def is_observer(actor: Actor, task: Task) -> bool:
    """只读观察者：既不是负责人也不是 Admin/Manager"""
    return not is_assignee(actor, task) and not is_admin_or_manager(actor)


def can_edit_fulfillment(actor: Actor, task: Task) -> bool:
    """Admin/Manager 任何阶段可改；负责人只能在提交审批之前修改"""
    if is_admin_or_manager(actor):
        return True
    return is_assignee(actor, task) and task.status not in _ASSIGNEE_LOCKED_STATES


def is_locked_for_assignee(actor: Actor, task: Task) -> bool:
    """等待审批期间负责人不能自行修改"""
    return is_assignee(actor, task) and task.status == TaskStatus.AWAITING_APPROVAL


def can_approve(actor: Actor, task: Task) -> bool:
    return is_admin_or_manager(actor) and task.status == TaskStatus.AWAITING_APPROVAL


def can_advance(actor: Actor, task: Task) -> bool:
    return (
        is_assignee(actor, task)
        and not is_locked_for_assignee(actor, task)
        and next_status(task.status) is not None
    )


def can_upload(actor: Actor, task: Task, context: AttachmentContext) -> bool:
    """附件上传权限（统一策略）

    - submission: 负责人且任务处于 In Progress
    - creation: 任务仍为 Pending，且操作者是创建者、负责人或 Admin/Manager
    - comment: 负责人或 Admin/Manager；负责人提交审批后不能再补充
    """
    if context == AttachmentContext.SUBMISSION:
        return is_assignee(actor, task) and task.status == TaskStatus.IN_PROGRESS
    if context == AttachmentContext.CREATION:
        is_creator = task.created_by is not None and actor.id == task.created_by
        return task.status == TaskStatus.PENDING and (
            is_creator or is_assignee(actor, task) or is_admin_or_manager(actor)
        )
    if is_admin_or_manager(actor):
        return True
    return is_assignee(actor, task) and task.status not in _ASSIGNEE_LOCKED_STATES
