"""TaskAttachment Domain Model

附件只能通过上传操作创建（先校验大小/类型），创建后不可修改；
随所属任务一起删除（由存储层级联负责）。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import AttachmentContext


class TaskAttachment(BaseModel):
    """附件元数据"""

    id: str = Field(description="存储层分配的唯一标识")
    task_id: str = Field(description="所属任务 ID")
    file_name: str = Field(description="原始文件名")
    file_path: str = Field(description="对象存储路径（以 task_id 为命名空间）")
    file_type: str = Field(description="MIME 类型")
    file_size: int = Field(ge=0, description="大小（字节）")
    uploaded_by: str = Field(description="上传者 ID")
    context: AttachmentContext = Field(description="上传场景")
    created_at: datetime = Field(description="创建时间")


class UploadFile(BaseModel):
    """待上传的文件"""

    file_name: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        """文件扩展名（不含点，无扩展名时为 bin）"""
        _, dot, ext = self.file_name.rpartition(".")
        return ext.lower() if dot and ext else "bin"
