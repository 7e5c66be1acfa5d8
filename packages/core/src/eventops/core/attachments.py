"""任务附件上传与查询

上传流程：
1. 校验大小/类型（与角色无关）
2. 校验上传权限（can_upload）
3. 写入对象存储（路径以 task_id 为命名空间）
4. 写入附件记录

第 4 步失败时第 3 步写入的对象不回滚（孤儿对象，已知风险），仅记录日志。
"""

from collections.abc import Collection
from datetime import UTC, datetime

import structlog
from ulid import ULID

from .config import ALLOWED_ATTACHMENT_TYPES, ATTACHMENT_MAX_BYTES
from .exceptions import EventOpsError, Unauthorized, ValidationError
from .models.actor import Actor
from .models.attachment import TaskAttachment, UploadFile
from .models.enums import AttachmentContext
from .models.task import Task
from .permissions import can_upload
from .store import persist
from .store.protocols import ObjectStore, RecordStore

log = structlog.get_logger()


def _format_limit(max_bytes: int) -> str:
    if max_bytes % (1024 * 1024) == 0:
        return f"{max_bytes // (1024 * 1024)}MB"
    return f"{max_bytes} bytes"


def validate_upload(
    file: UploadFile,
    max_bytes: int = ATTACHMENT_MAX_BYTES,
    allowed_types: Collection[str] = ALLOWED_ATTACHMENT_TYPES,
) -> None:
    """校验附件大小与 MIME 类型

    Raises:
        ValidationError: 超过大小限制或类型不在允许列表中
    """
    if file.size > max_bytes:
        raise ValidationError(
            f"File size exceeds {_format_limit(max_bytes)} limit.",
            field="file_size",
        )
    if file.content_type not in allowed_types:
        raise ValidationError(
            "Invalid file type. Only images, PDF and MS Office documents are allowed.",
            field="file_type",
        )


class AttachmentService:
    """附件业务服务"""

    def __init__(
        self,
        attachments: RecordStore,
        object_store: ObjectStore,
        max_bytes: int = ATTACHMENT_MAX_BYTES,
        allowed_types: Collection[str] = ALLOWED_ATTACHMENT_TYPES,
    ) -> None:
        self._attachments = attachments
        self._object_store = object_store
        self._max_bytes = max_bytes
        self._allowed_types = allowed_types

    async def upload(
        self,
        task: Task,
        actor: Actor,
        file: UploadFile,
        context: AttachmentContext,
    ) -> TaskAttachment:
        """上传附件并创建附件记录

        Raises:
            ValidationError: 大小/类型不合法
            Unauthorized: 当前状态下操作者无权上传
            PersistenceError: 对象存储或记录写入失败
        """
        validate_upload(file, self._max_bytes, self._allowed_types)

        if not can_upload(actor, task, context):
            log.warning(
                "attachment_upload_rejected",
                task_id=task.id,
                actor_id=actor.id,
                status=task.status.value,
                context=context.value,
            )
            raise Unauthorized(
                f"Cannot upload {context.value} attachment while task is {task.status.value}",
                actor_id=actor.id,
            )

        file_path = f"{task.id}/{ULID()}.{file.extension}"
        await persist(self._object_store.upload(file_path, file.content, file.content_type))

        try:
            record = await persist(
                self._attachments.insert(
                    {
                        "task_id": task.id,
                        "file_name": file.file_name,
                        "file_path": file_path,
                        "file_type": file.content_type,
                        "file_size": file.size,
                        "uploaded_by": actor.id,
                        "context": context,
                        "created_at": datetime.now(UTC),
                    }
                )
            )
        except EventOpsError:
            log.error("attachment_record_failed_blob_orphaned", task_id=task.id, file_path=file_path)
            raise

        attachment = TaskAttachment.model_validate(record)
        log.info(
            "attachment_uploaded",
            task_id=task.id,
            attachment_id=attachment.id,
            context=context.value,
            file_size=attachment.file_size,
        )
        return attachment

    async def list_attachments(self, task_id: str) -> list[TaskAttachment]:
        """查询任务附件，最新的在前"""
        records = await persist(
            self._attachments.list(filter={"task_id": task_id}, order="-created_at")
        )
        return [TaskAttachment.model_validate(r) for r in records]

    def public_url(self, attachment: TaskAttachment) -> str:
        return self._object_store.get_public_url(attachment.file_path)
