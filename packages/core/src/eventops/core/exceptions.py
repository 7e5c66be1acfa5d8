"""Core 异常体系

所有核心操作要么返回结果，要么抛出以下异常之一。
"""


class EventOpsError(Exception):
    """eventops 核心基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: UI 是否可提示后重试（不改变任何状态）
        """
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable


class Unauthorized(EventOpsError):
    """操作者缺少所需角色或与任务的关系"""

    def __init__(self, message: str, actor_id: str | None = None) -> None:
        super().__init__(message, recoverable=True)
        self.actor_id = actor_id


class InvalidTransition(EventOpsError):
    """没有合法的下一状态，或目标状态不可达

    正常情况下应由 UI 禁用按钮避免，引擎仍做防御性检查。
    """

    def __init__(self, from_status: str, to_status: str | None = None) -> None:
        if to_status is None:
            message = f"No next status after {from_status}"
        else:
            message = f"Cannot transition from {from_status} to {to_status}"
        super().__init__(message, recoverable=False)
        self.from_status = from_status
        self.to_status = to_status


class ValidationError(EventOpsError):
    """输入校验失败（附件大小/类型、数值字段格式等）

    message 中指明被违反的约束。
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, recoverable=True)
        self.field = field


class PersistenceError(EventOpsError):
    """底层存储调用失败，原样携带存储层的错误信息"""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message, recoverable=True)
        self.original_error = original_error


class RecordNotFoundError(PersistenceError):
    """记录不存在"""

    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(f"{collection} record not found: {record_id}")
        self.collection = collection
        self.record_id = record_id


class ConflictError(PersistenceError):
    """写入时比较失败：记录已被其他操作者修改"""

    def __init__(self, record_id: str, field: str, expected: object, actual: object) -> None:
        super().__init__(
            f"Record {record_id} changed concurrently: "
            f"expected {field}={expected!r}, found {actual!r}"
        )
        self.record_id = record_id
        self.field = field
        self.expected = expected
        self.actual = actual
