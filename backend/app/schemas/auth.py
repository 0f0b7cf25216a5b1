# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Literal

from pydantic import BaseModel

Role = Literal["employee", "admin"]


class AuthContext(BaseModel):
    """Caller identity taken from the dev auth headers.

    Employees act on their own TOIL only; admins may read anyone's weeks and
    decide submissions.
    """

    user_id: uuid.UUID
    role: Role = "employee"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def can_access(self, user_id: uuid.UUID) -> bool:
        """True when the caller may read ``user_id``'s TOIL data."""
        return self.is_admin or self.user_id == user_id
