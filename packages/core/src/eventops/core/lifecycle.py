"""TaskLifecycleEngine -- 任务生命周期状态机

状态顺序：Pending -> Acknowledged -> In Progress -> Awaiting Approval -> Completed
审批分支：Awaiting Approval 时 Admin/Manager 可批准（-> Completed）或驳回（-> In Progress）。

每个操作都是 (task, actor, input) 的函数：
1. 从 RecordStore 重新读取任务（传入的 task 只提供 id）
2. 校验操作者与当前状态
3. 计算下一状态与时间戳，合并编辑缓冲区
4. 单行写入 RecordStore（状态流转带 status + assignee_id 比较写入）
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

import structlog

from .attachments import AttachmentService
from .config import DEFAULT_QUANTITY_REQUIRED
from .exceptions import (
    EventOpsError,
    InvalidTransition,
    PersistenceError,
    RecordNotFoundError,
    Unauthorized,
    ValidationError,
)
from .inventory import InventoryHook, validate_quantity
from .models.actor import Actor
from .models.attachment import TaskAttachment, UploadFile
from .models.edits import FulfillmentEdits, ProfitabilityEdits
from .models.enums import (
    FULFILLMENT_HIDDEN_STATES,
    STATUS_TIMESTAMP_FIELDS,
    AttachmentContext,
    MembershipStatus,
    TaskStatus,
    next_status,
    validate_transition,
)
from .models.task import Task, TaskDraft, TaskTransition
from .permissions import (
    can_advance,
    can_approve,
    can_edit_fulfillment,
    is_admin_or_manager,
    is_assignee,
    is_observer,
)
from .store import TASKS, StoreGroup, persist

log = structlog.get_logger()


class TaskLifecycleEngine:
    """任务生命周期引擎"""

    def __init__(self, stores: StoreGroup) -> None:
        self._stores = stores
        self.attachments = AttachmentService(stores.attachments, stores.object_store)
        self.inventory = InventoryHook(stores.task_inventory, stores.inventory)

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    async def get_task(self, task_id: str) -> Task:
        """读取任务当前状态

        Raises:
            RecordNotFoundError: 任务不存在
        """
        record = await persist(self._stores.tasks.get(task_id))
        if record is None:
            raise RecordNotFoundError(TASKS, task_id)
        return Task.model_validate(record)

    # ------------------------------------------------------------------
    # 创建
    # ------------------------------------------------------------------

    async def create_task(
        self,
        actor: Actor,
        draft: TaskDraft,
        inventory_ids: Iterable[str] = (),
        quantity_required: int = DEFAULT_QUANTITY_REQUIRED,
        attachment: UploadFile | None = None,
    ) -> Task:
        """创建任务（status=Pending）

        流程：
        1. 写入任务行
        2. 关联所需库存（失败时抛出 PersistenceError，任务不回滚）
        3. 可选的创建附件（尽力而为：失败只记录日志，不影响任务创建）
        """
        self._ensure_active(actor)
        title = draft.title.strip()
        if not title:
            raise ValidationError("title is required", field="title")
        inventory_ids = list(inventory_ids)
        if inventory_ids:
            validate_quantity(quantity_required)

        record = await persist(
            self._stores.tasks.insert(
                {
                    **draft.model_dump(),
                    "title": title,
                    "status": TaskStatus.PENDING,
                    "created_by": actor.id,
                    "created_at": datetime.now(UTC),
                    "status_history": [],
                }
            )
        )
        task = Task.model_validate(record)
        log.info(
            "task_created",
            task_id=task.id,
            actor_id=actor.id,
            assignee_id=task.assignee_id,
            event_id=task.event_id,
        )

        if inventory_ids:
            try:
                await self.inventory.link_items(task, inventory_ids, quantity_required)
            except PersistenceError:
                log.error("task_inventory_link_failed", task_id=task.id)
                raise

        if attachment is not None:
            try:
                await self.attachments.upload(task, actor, attachment, AttachmentContext.CREATION)
            except EventOpsError as e:
                log.warning(
                    "creation_attachment_failed",
                    task_id=task.id,
                    error_type=type(e).__name__,
                    error=e.message,
                )

        return task

    # ------------------------------------------------------------------
    # 状态流转
    # ------------------------------------------------------------------

    async def advance(
        self,
        task: Task,
        actor: Actor,
        target_status: TaskStatus | None = None,
        edits: FulfillmentEdits | None = None,
    ) -> Task:
        """推进任务状态

        target_status 为空时推进到有序状态表中的下一状态（仅负责人）；
        显式 target_status 用于审批分支（Admin/Manager 批准或驳回）。
        目标状态等于当前状态时视为重放，直接返回当前任务。

        Raises:
            Unauthorized: 操作者不满足 can_advance / can_approve
            InvalidTransition: 没有下一状态或目标不可达
            ValidationError: 编辑缓冲区中的数值不合法
            ConflictError: 读取后任务状态已被其他操作者修改
            PersistenceError: 存储写入失败
        """
        current = await self.get_task(task.id)
        return await self.apply_transition(
            current,
            actor,
            edits or FulfillmentEdits(),
            target_status=target_status,
        )

    async def approve(
        self,
        task: Task,
        actor: Actor,
        edits: FulfillmentEdits | None = None,
    ) -> Task:
        """审批通过：Awaiting Approval -> Completed"""
        return await self.advance(task, actor, TaskStatus.COMPLETED, edits)

    async def reject(self, task: Task, actor: Actor) -> Task:
        """驳回：Awaiting Approval -> In Progress（不重写 started_at）"""
        return await self.advance(task, actor, TaskStatus.IN_PROGRESS)

    async def apply_transition(
        self,
        current: Task,
        actor: Actor,
        edits: FulfillmentEdits,
        target_status: TaskStatus | None = None,
    ) -> Task:
        """对已读取的任务应用一次流转，并合并编辑缓冲区中的履约字段

        Raises:
            ConflictError: current 读取后状态或负责人已被修改
        """
        self._ensure_active(actor)
        if is_observer(actor, current):
            self._reject(current, actor, "observer")
            raise Unauthorized("Only the assignee or an Admin/Manager can update this task", actor.id)

        target = self._resolve_target(current, actor, target_status)
        if target is None:
            log.info(
                "task_transition_replayed",
                task_id=current.id,
                status=current.status.value,
                actor_id=actor.id,
            )
            return current

        # 先解析编辑缓冲区，格式错误时不产生任何写入
        patch: dict[str, Any] = edits.to_update()
        now = datetime.now(UTC)
        patch["status"] = target

        timestamp_field = STATUS_TIMESTAMP_FIELDS.get(target)
        if timestamp_field is not None and getattr(current, timestamp_field) is None:
            patch[timestamp_field] = now

        history = [
            *current.status_history,
            TaskTransition(from_status=current.status, to_status=target, actor_id=actor.id, ts=now),
        ]
        patch["status_history"] = [entry.model_dump(mode="json") for entry in history]

        # 权限按 current 校验，写入时要求状态与负责人都未改变
        record = await persist(
            self._stores.tasks.update(
                current.id,
                patch,
                expected={"status": current.status, "assignee_id": current.assignee_id},
            )
        )
        log.info(
            "task_transition_applied",
            task_id=current.id,
            from_status=current.status.value,
            to_status=target.value,
            actor_id=actor.id,
            stamped=timestamp_field if timestamp_field in patch else None,
            fulfillment_fields=sorted(k for k in patch if k in FulfillmentEdits.model_fields),
        )
        return Task.model_validate(record)

    def _resolve_target(
        self,
        current: Task,
        actor: Actor,
        target_status: TaskStatus | None,
    ) -> TaskStatus | None:
        """计算目标状态并校验权限，重放时返回 None"""
        if target_status is None:
            target = next_status(current.status)
            if target is None:
                self._reject(current, actor, "no_next_status")
                raise InvalidTransition(current.status.value)
            if not can_advance(actor, current):
                self._reject(current, actor, "cannot_advance")
                raise Unauthorized(self._advance_denied_message(actor, current), actor.id)
            return target

        target = TaskStatus(target_status)
        if target == current.status:
            if target == TaskStatus.COMPLETED and not is_admin_or_manager(actor):
                self._reject(current, actor, "cannot_approve", target=target.value)
                raise Unauthorized("Only an Admin or Manager can approve or reject", actor.id)
            return None
        if not validate_transition(current.status, target):
            self._reject(current, actor, "invalid_target", target=target.value)
            raise InvalidTransition(current.status.value, target.value)

        if current.status == TaskStatus.AWAITING_APPROVAL:
            if not can_approve(actor, current):
                self._reject(current, actor, "cannot_approve", target=target.value)
                raise Unauthorized("Only an Admin or Manager can approve or reject", actor.id)
        elif not can_advance(actor, current):
            self._reject(current, actor, "cannot_advance", target=target.value)
            raise Unauthorized(self._advance_denied_message(actor, current), actor.id)
        return target

    @staticmethod
    def _advance_denied_message(actor: Actor, task: Task) -> str:
        if task.status == TaskStatus.AWAITING_APPROVAL and task.assignee_id == actor.id:
            return "Task is awaiting approval and locked for the assignee"
        return "Only the assignee can move this task forward"

    # ------------------------------------------------------------------
    # 字段编辑
    # ------------------------------------------------------------------

    async def save_fulfillment(self, task: Task, actor: Actor, edits: FulfillmentEdits) -> Task:
        """保存履约信息（成本/供应商），不改变状态与时间戳"""
        self._ensure_active(actor)
        current = await self.get_task(task.id)
        if not can_edit_fulfillment(actor, current):
            self._reject(current, actor, "cannot_edit_fulfillment")
            if is_assignee(actor, current):
                raise Unauthorized(
                    f"Task is {current.status.value} and locked for the assignee", actor.id
                )
            raise Unauthorized("Only the assignee or an Admin/Manager can edit fulfillment", actor.id)

        patch = edits.to_update()
        if not patch:
            return current

        record = await persist(self._stores.tasks.update(current.id, patch))
        log.info(
            "task_fulfillment_saved",
            task_id=current.id,
            actor_id=actor.id,
            fields=sorted(patch),
        )
        return Task.model_validate(record)

    async def save_profitability(
        self,
        task: Task,
        actor: Actor,
        edits: ProfitabilityEdits,
    ) -> Task:
        """保存利润信息（仅 Admin/Manager）"""
        self._ensure_active(actor)
        if not is_admin_or_manager(actor):
            log.warning("task_profitability_rejected", task_id=task.id, actor_id=actor.id)
            raise Unauthorized("Only an Admin or Manager can edit profitability", actor.id)
        current = await self.get_task(task.id)

        patch = edits.to_update()
        if not patch:
            return current

        record = await persist(self._stores.tasks.update(current.id, patch))
        log.info(
            "task_profitability_saved",
            task_id=current.id,
            actor_id=actor.id,
            fields=sorted(patch),
        )
        return Task.model_validate(record)

    async def reassign(self, task: Task, actor: Actor, new_assignee_id: str | None) -> Task:
        """重新指派负责人（仅 Admin/Manager，任何阶段），不改变状态与时间戳

        只有在开始工作之前（Pending / Acknowledged）才能清空负责人。
        """
        self._ensure_active(actor)
        if not is_admin_or_manager(actor):
            log.warning("task_reassign_rejected", task_id=task.id, actor_id=actor.id)
            raise Unauthorized("Only an Admin or Manager can reassign tasks", actor.id)
        current = await self.get_task(task.id)

        assignee_id = (new_assignee_id or "").strip() or None
        if assignee_id is None and current.status not in FULFILLMENT_HIDDEN_STATES:
            raise ValidationError(
                f"assignee is required once a task is {current.status.value}",
                field="assignee_id",
            )

        record = await persist(
            self._stores.tasks.update(current.id, {"assignee_id": assignee_id})
        )
        log.info(
            "task_reassigned",
            task_id=current.id,
            actor_id=actor.id,
            previous_assignee_id=current.assignee_id,
            assignee_id=assignee_id,
        )
        return Task.model_validate(record)

    async def delete_task(self, task: Task, actor: Actor) -> None:
        """删除任务（不可恢复，附件记录由存储层级联删除）"""
        self._ensure_active(actor)
        if not is_admin_or_manager(actor):
            log.warning("task_delete_rejected", task_id=task.id, actor_id=actor.id)
            raise Unauthorized("Only an Admin or Manager can delete tasks", actor.id)
        current = await self.get_task(task.id)

        await persist(self._stores.tasks.delete(current.id))
        log.info("task_deleted", task_id=current.id, actor_id=actor.id)

    # ------------------------------------------------------------------
    # 附件
    # ------------------------------------------------------------------

    async def upload_attachment(
        self,
        task: Task,
        actor: Actor,
        file: UploadFile,
        context: AttachmentContext,
    ) -> TaskAttachment:
        """按当前状态上传附件（submission 仅负责人在 In Progress 时可用）"""
        self._ensure_active(actor)
        current = await self.get_task(task.id)
        return await self.attachments.upload(current, actor, file, context)

    # ------------------------------------------------------------------
    # 内部
    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_active(actor: Actor) -> None:
        if actor.status != MembershipStatus.ACTIVE:
            raise Unauthorized(f"membership is {actor.status.value}", actor.id)

    @staticmethod
    def _reject(task: Task, actor: Actor, reason: str, **extra: Any) -> None:
        log.warning(
            "task_operation_rejected",
            task_id=task.id,
            actor_id=actor.id,
            status=task.status.value,
            reason=reason,
            **extra,
        )
