"""Actor: the signed-in user on whose behalf the caches act."""

from typing import Optional

from eventtalk.domain.model.common import DomainModel
from eventtalk.domain.value import Role, UserId


class Actor(DomainModel):
    """Authenticated user as seen by the sync engine."""

    id: UserId
    role: Role = Role.USER
    name: Optional[str] = None

    @property
    def can_moderate(self) -> bool:
        return self.role.can_moderate
