"""关联实体（只读）

任务展示时 join 的负责人、活动、成本中心。
"""

from pydantic import BaseModel, Field

from .enums import ActorRole, MembershipStatus


class TeamMember(BaseModel):
    """团队成员资料"""

    id: str
    full_name: str | None = None
    avatar_url: str | None = None
    role: ActorRole | None = None
    status: MembershipStatus | None = None


class EventSummary(BaseModel):
    """活动摘要"""

    id: str
    name: str = Field(default="")


class CostCenter(BaseModel):
    """成本中心"""

    id: str
    code: str
    title: str
