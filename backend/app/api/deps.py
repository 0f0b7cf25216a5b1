# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, status

from app.exceptions import AppError
from app.schemas.auth import AuthContext, Role


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
    x_role: Role = Header(default="employee"),
) -> AuthContext:
    """Build the caller's identity from the X-User-Id and X-Role headers."""
    return AuthContext(user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(auth: AuthDep) -> AuthContext:
    """Only approvers may decide submissions or change limits."""
    if not auth.is_admin:
        raise AppError("Admin access required", status_code=status.HTTP_403_FORBIDDEN)
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]
