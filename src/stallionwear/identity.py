"""Authenticated principal supplied by the identity collaborator.

Token issuance and verification happen outside the core. Every operation
receives a ``Principal`` and trusts it completely; ownership checks are done
here.
"""

from dataclasses import dataclass
from enum import Enum

from stallionwear.errors import AccessDenied


class Role(Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    id: str
    role: Role = Role.USER

    @classmethod
    def user(cls, user_id) -> "Principal":
        return cls(id=str(user_id), role=Role.USER)

    @classmethod
    def admin(cls, user_id) -> "Principal":
        return cls(id=str(user_id), role=Role.ADMIN)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def owns(self, owner_id) -> bool:
        """True when the principal may act on a resource owned by ``owner_id``."""
        return self.is_admin or str(owner_id) == str(self.id)


def require_admin(actor_role) -> None:
    """Raise ``AccessDenied`` unless ``actor_role`` is the admin role."""
    role = actor_role.value if isinstance(actor_role, Role) else actor_role
    if role != Role.ADMIN.value:
        raise AccessDenied({"role": ["Access denied. Admin role required."]})
