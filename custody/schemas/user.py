# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from custody.models.enums import Role


class ProvisionUserRequest(BaseModel):
    """Request body for provisioning a user.

    ``id`` lets the identity provider's subject id be reused as the user id.
    """

    id: uuid.UUID | None = None
    name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    role: Role = Role.EMPLOYEE


class UserResponse(BaseModel):
    """Response schema for a user."""

    id: uuid.UUID
    name: str
    email: str | None
    role: Role
    is_active: bool
    created_at: datetime


class UserListResponse(BaseModel):
    """List of users."""

    items: list[UserResponse]
    total: int
