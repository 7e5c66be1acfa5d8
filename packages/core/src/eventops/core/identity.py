"""身份提供方适配器 + 成员状态校验

核心操作不读取环境中的"当前用户"，调用方先通过 require_active_actor
取得 Actor，再显式传入每个操作。
"""

import structlog
from pydantic import ValidationError as PydanticValidationError

from .exceptions import PersistenceError, Unauthorized
from .models.actor import Actor
from .models.enums import MembershipStatus
from .models.references import TeamMember
from .store import persist
from .store.protocols import IdentityProvider, RecordStore

log = structlog.get_logger()


class StaticIdentityProvider:
    """固定返回给定 Actor（None 表示未登录）"""

    def __init__(self, actor: Actor | None) -> None:
        self._actor = actor

    async def get_current_actor(self) -> Actor | None:
        return self._actor


class ProfileIdentityProvider:
    """根据已认证用户 ID 读取团队成员资料构造 Actor"""

    def __init__(self, team_members: RecordStore, user_id: str | None) -> None:
        self._team_members = team_members
        self._user_id = user_id

    async def get_current_actor(self) -> Actor | None:
        if self._user_id is None:
            return None
        record = await persist(self._team_members.get(self._user_id))
        if record is None:
            log.warning("profile_not_found", user_id=self._user_id)
            return None
        try:
            member = TeamMember.model_validate(record)
        except PydanticValidationError as e:
            raise PersistenceError(f"Malformed profile {self._user_id}: {e}", original_error=e) from e
        if member.role is None:
            log.warning("profile_without_role", user_id=self._user_id)
            return None
        return Actor(
            id=member.id,
            role=member.role,
            status=member.status or MembershipStatus.PENDING,
            full_name=member.full_name,
        )


async def require_active_actor(provider: IdentityProvider) -> Actor:
    """获取当前操作者，并要求成员状态为 Active

    Raises:
        Unauthorized: 未登录，或成员状态为 Pending / Suspended
    """
    actor = await provider.get_current_actor()
    if actor is None:
        raise Unauthorized("not signed in")
    if actor.status != MembershipStatus.ACTIVE:
        log.warning("inactive_actor_rejected", actor_id=actor.id, status=actor.status.value)
        raise Unauthorized(f"membership is {actor.status.value}", actor_id=actor.id)
    return actor
