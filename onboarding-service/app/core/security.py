"""
Caller identity and role checks.

Authentication happens upstream: the gateway resolves the token and forwards
the user id and role as request headers (``X-User-Id`` / ``X-User-Role`` by
default).  This module only reads those values and exposes them as FastAPI
dependencies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from fastapi import Depends, Request

from app.core.config import settings
from app.core.exceptions import AuthenticationError, PermissionDeniedError


class UserRole(str, Enum):
    """Roles recognised by the onboarding service."""

    INVESTOR = "Investor"
    ADVISOR = "Advisor"
    OPERATIONS_TEAM = "OperationsTeam"


REVIEWER_ROLES = (UserRole.ADVISOR, UserRole.OPERATIONS_TEAM)


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    role: UserRole

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles


def resolve_user(user_id: Optional[str], role: Optional[str]) -> CurrentUser:
    """Build a :class:`CurrentUser` from raw header values."""
    if not user_id or not user_id.strip():
        raise AuthenticationError()
    try:
        resolved_role = UserRole(role)
    except ValueError:
        raise AuthenticationError(f"Unrecognised role: {role!r}") from None
    return CurrentUser(user_id=user_id.strip(), role=resolved_role)


async def get_current_user(request: Request) -> CurrentUser:
    """FastAPI dependency returning the already-authenticated caller."""
    return resolve_user(
        request.headers.get(settings.USER_ID_HEADER),
        request.headers.get(settings.USER_ROLE_HEADER),
    )


def require_roles(*roles: UserRole) -> Callable:
    """Dependency factory: only callers holding one of ``roles`` pass."""

    async def _check(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not user.has_role(*roles):
            raise PermissionDeniedError()
        return user

    return _check
