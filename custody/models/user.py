# ruff: noqa: TC003
from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from custody.models.base import TimestampMixin, UUIDBase
from custody.models.enums import Role


class User(UUIDBase, TimestampMixin, table=True):
    """A provisioned person who submits or decides on requests."""

    __tablename__ = "app_user"
    __table_args__ = (sa.Index("ix_user_role_active", "role", "is_active"),)

    name: str = Field(max_length=255)
    email: str | None = Field(default=None, max_length=255)
    role: str = Field(default=Role.EMPLOYEE, max_length=50, sa_column_kwargs={"server_default": "employee"})
    is_active: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
