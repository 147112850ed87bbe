# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from custody.api.deps import AuthDep, ManagerDep, ProjectManagerDep
from custody.db import SessionDep
from custody.exceptions import AuthorizationError
from custody.schemas.project import (
    CreateMembershipRequest,
    CreateProjectRequest,
    EmployeeProjectsResponse,
    MembershipResponse,
    ProjectListResponse,
    ProjectResponse,
    SetActiveRequest,
)
from custody.services import membership as membership_service
from custody.services import project as project_service

projects_router = APIRouter(prefix="/projects", tags=["projects"])
memberships_router = APIRouter(tags=["projects"])


@projects_router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: CreateProjectRequest,
    session: SessionDep,
    auth: ProjectManagerDep,
) -> ProjectResponse:
    """Create a project (project manager only)."""
    return await project_service.create_project(session, auth, payload)


@projects_router.get("", response_model=ProjectListResponse)
async def list_projects(
    session: SessionDep,
    auth: AuthDep,
    is_active: bool | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> ProjectListResponse:
    """List projects."""
    return await project_service.list_projects(session, is_active=is_active, offset=offset, limit=limit)


@projects_router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> ProjectResponse:
    """Get a single project."""
    return await project_service.get_project(session, project_id)


@projects_router.patch("/{project_id}/active", response_model=ProjectResponse)
async def set_project_active(
    project_id: uuid.UUID,
    payload: SetActiveRequest,
    session: SessionDep,
    auth: ProjectManagerDep,
) -> ProjectResponse:
    """Activate or deactivate a project (project manager only)."""
    return await project_service.set_project_active(session, auth, project_id, payload.is_active)


@memberships_router.post("/memberships", response_model=MembershipResponse, status_code=status.HTTP_201_CREATED)
async def link_employee(
    payload: CreateMembershipRequest,
    session: SessionDep,
    auth: ManagerDep,
) -> MembershipResponse:
    """Link an employee to a project."""
    return await membership_service.link(session, auth, payload)


@memberships_router.get("/employees/{employee_id}/projects", response_model=EmployeeProjectsResponse)
async def get_employee_projects(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    active_only: bool = Query(default=True),
) -> EmployeeProjectsResponse:
    """Projects the employee may submit requests against."""
    if not auth.is_manager and auth.user_id != employee_id:
        raise AuthorizationError("Employees may only view their own projects")
    return await membership_service.list_employee_projects(session, employee_id, active_only=active_only)
