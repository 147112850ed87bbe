# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CreateProjectRequest(BaseModel):
    """Request body for creating a project."""

    name: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=2000)


class SetActiveRequest(BaseModel):
    """Request body for activating or deactivating a project or user."""

    is_active: bool


class ProjectResponse(BaseModel):
    """Response schema for a project."""

    id: uuid.UUID
    name: str
    description: str
    is_active: bool
    created_by: uuid.UUID | None
    created_at: datetime


class ProjectListResponse(BaseModel):
    """List of projects."""

    items: list[ProjectResponse]
    total: int


class CreateMembershipRequest(BaseModel):
    """Request body for linking an employee to a project."""

    employee_id: uuid.UUID
    project_id: uuid.UUID


class MembershipResponse(BaseModel):
    """Response schema for a project membership."""

    id: uuid.UUID
    employee_id: uuid.UUID
    project_id: uuid.UUID
    created_by: uuid.UUID | None
    created_at: datetime


class EmployeeProjectsResponse(BaseModel):
    """Projects an employee may select when submitting a request."""

    employee_id: uuid.UUID
    project_ids: list[uuid.UUID]
    projects: list[ProjectResponse]
