# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from custody.models.base import TimestampMixin, UUIDBase, reference_field


class Project(UUIDBase, TimestampMixin, table=True):
    """A project that employees raise requests against. Soft-deactivated, never deleted."""

    __tablename__ = "project"

    name: str = Field(max_length=255)
    description: str = Field(default="", sa_column_kwargs={"server_default": ""})
    is_active: bool = Field(default=True, index=True, sa_column_kwargs={"server_default": sa.true()})
    created_by: uuid.UUID | None = None


class ProjectMembership(UUIDBase, TimestampMixin, table=True):
    """Links an employee to a project. Immutable; duplicate links are allowed."""

    __tablename__ = "project_membership"

    employee_id: uuid.UUID = reference_field("app_user.id", index=True)
    project_id: uuid.UUID = reference_field("project.id", index=True)
    created_by: uuid.UUID | None = None
