"""
Capability-based authorization.

A role is resolved into a fixed capability set once, when the session
context is built. Services receive the context explicitly and check
capabilities instead of comparing role strings.
"""
from typing import Dict
from pydantic import BaseModel, ConfigDict

from app.core.exceptions import AccessDeniedError
from app.models.user import User, UserRole


class Capabilities(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_review: bool = False
    can_manage_holidays: bool = False
    can_manage_users: bool = False

    @classmethod
    def for_role(cls, role: UserRole) -> "Capabilities":
        return ROLE_CAPABILITIES[UserRole(role)]


ROLE_CAPABILITIES: Dict[UserRole, Capabilities] = {
    UserRole.EMPLOYEE: Capabilities(),
    UserRole.MANAGER: Capabilities(can_review=True),
    UserRole.HR: Capabilities(can_review=True, can_manage_holidays=True, can_manage_users=True),
}


class SessionContext(BaseModel):
    """Who is calling: passed into every engine operation."""
    model_config = ConfigDict(frozen=True)

    user_id: int
    role: UserRole
    capabilities: Capabilities

    @classmethod
    def for_user(cls, user: User) -> "SessionContext":
        return cls(user_id=user.id, role=user.role, capabilities=Capabilities.for_role(user.role))

    def require(self, capability: str, action: str = "perform this action") -> None:
        if not getattr(self.capabilities, capability):
            raise AccessDeniedError(f"Role '{self.role.value}' is not allowed to {action}")
