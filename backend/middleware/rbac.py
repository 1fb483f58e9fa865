"""
Role-Based Access Control Middleware

Maps the caller's role to permissions. Identity comes from the upstream
identity provider in the x-user-id / x-user-role / x-user-name headers and
is trusted as passed in.
"""

import logging
from enum import Enum

from fastapi import Depends, HTTPException, Request
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Portal roles."""
    ADMIN = "admin"
    PSW = "psw"
    CLIENT = "client"


class Permission(str, Enum):
    """Granular permissions."""
    # Quotes and bookings
    QUOTE_CREATE = "quote:create"
    BOOKING_READ = "booking:read"
    BOOKING_CREATE = "booking:create"
    BOOKING_CANCEL = "booking:cancel"
    BOOKING_MANAGE = "booking:manage"  # archive, restore, assign worker

    # Job board
    SHIFT_READ = "shift:read"
    SHIFT_WORK = "shift:work"  # claim, check in, sign out

    # Payroll
    PAYROLL_READ = "payroll:read"
    PAYROLL_SETTLE = "payroll:settle"
    PAYROLL_EXPORT = "payroll:export"

    # Admin
    ADMIN_SETTINGS = "admin:settings"


# Role-permission mapping
ROLE_PERMISSIONS: dict[Role, set[Permission]] = {
    Role.ADMIN: set(Permission),  # All permissions
    Role.PSW: {
        Permission.SHIFT_READ, Permission.SHIFT_WORK,
    },
    Role.CLIENT: {
        Permission.QUOTE_CREATE,
        Permission.BOOKING_READ, Permission.BOOKING_CREATE, Permission.BOOKING_CANCEL,
    },
}


class CurrentUser(BaseModel):
    """Acting user context."""
    id: str
    name: str = ""
    role: Role
    permissions: set[Permission] = Field(default_factory=set)

    def has_permission(self, permission: Permission) -> bool:
        return permission in self.permissions

    def has_any_permission(self, *permissions: Permission) -> bool:
        return any(p in self.permissions for p in permissions)


async def get_current_user(request: Request) -> CurrentUser:
    """Build the acting user from the identity headers."""
    user_id = request.headers.get("x-user-id")
    role_value = request.headers.get("x-user-role")
    if not user_id or not role_value:
        raise HTTPException(status_code=401, detail="Identity headers required")

    try:
        role = Role(role_value.lower())
    except ValueError:
        raise HTTPException(status_code=403, detail=f"Unknown role: {role_value}")

    return CurrentUser(
        id=user_id,
        name=request.headers.get("x-user-name", ""),
        role=role,
        permissions=ROLE_PERMISSIONS.get(role, set()),
    )


def require_permission(*permissions: Permission):
    """Dependency that checks for specific permissions."""

    async def check(user: CurrentUser = Depends(get_current_user)):
        for perm in permissions:
            if not user.has_permission(perm):
                logger.warning(f"User {user.id} ({user.role.value}) denied {perm.value}")
                raise HTTPException(
                    status_code=403,
                    detail=f"Missing permission: {perm.value}",
                )
        return user

    return check


def require_role(*roles: Role):
    """Dependency that checks for specific roles."""

    async def check(user: CurrentUser = Depends(get_current_user)):
        if user.role not in roles:
            raise HTTPException(
                status_code=403,
                detail=f"Required role: {', '.join(r.value for r in roles)}",
            )
        return user

    return check
