"""Actor Domain Model

当前操作者由外部身份提供方给出，核心层只读。
"""

from pydantic import BaseModel, Field

from .enums import ActorRole, MembershipStatus


class Actor(BaseModel):
    """执行操作的已认证身份"""

    id: str = Field(description="操作者 ID（与团队成员 ID 一致）")
    role: ActorRole = Field(description="角色")
    status: MembershipStatus = Field(default=MembershipStatus.ACTIVE, description="成员状态")
    full_name: str | None = Field(default=None)
