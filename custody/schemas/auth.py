# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from custody.models.enums import Role


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    user_id: uuid.UUID
    role: Role = Role.EMPLOYEE

    @property
    def is_manager(self) -> bool:
        return self.role in (Role.PROJECT_MANAGER, Role.GENERAL_MANAGER)
