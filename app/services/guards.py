"""
Authorization predicates evaluated once at the top of a service operation.
"""
from typing import Optional

from app.core.exceptions import AccessDeniedError
from app.core.security import Actor
from app.models.company import Company
from app.models.user import UserRole


def actor_owns(company: Optional[Company], actor: Actor) -> bool:
    return company is not None and company.owner_id == actor.id


def require_owner(company: Optional[Company], actor: Actor, message: str = "You do not own this company") -> None:
    if not actor_owns(company, actor):
        raise AccessDeniedError(message)


def require_role(actor: Actor, *roles: UserRole, message: Optional[str] = None) -> None:
    if actor.role not in roles:
        allowed = ", ".join(role.value for role in roles)
        raise AccessDeniedError(message or f"Access denied. Required roles: {allowed}")


def is_admin(actor: Actor) -> bool:
    return actor.role == UserRole.ADMIN
