from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    USER = 'user'
    CONSULTANT = 'consultant'
    ADMIN = 'admin'
    SUPERADMIN = 'superadmin'

    @property
    def is_privileged(self) -> bool:
        return self in (Role.ADMIN, Role.SUPERADMIN)


@dataclass(frozen=True)
class ActorContext:
    """Who is making the request, as established by authentication."""

    actor_id: int
    role: Role

    @property
    def is_privileged(self) -> bool:
        return self.role.is_privileged
