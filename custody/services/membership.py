# ruff: noqa: TC003
"""Project membership directory: which projects an employee may pick."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from custody.exceptions import NotFoundError, ValidationError
from custody.models.enums import AuditAction, AuditEntityType, Role
from custody.models.project import Project, ProjectMembership
from custody.models.user import User
from custody.schemas.project import EmployeeProjectsResponse, MembershipResponse
from custody.services.audit import model_to_audit_dict, write_audit_log
from custody.services.project import build_project_response

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from custody.schemas.auth import AuthContext
    from custody.schemas.project import CreateMembershipRequest


def _build_membership_response(membership: ProjectMembership) -> MembershipResponse:
    return MembershipResponse(
        id=membership.id,
        employee_id=membership.employee_id,
        project_id=membership.project_id,
        created_by=membership.created_by,
        created_at=membership.created_at,
    )


async def link(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateMembershipRequest,
) -> MembershipResponse:
    """Link an employee to a project. Linking twice records a second, identical fact."""
    employee = await session.get(User, payload.employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    if employee.role != Role.EMPLOYEE.value:
        raise ValidationError("Only employees can be linked to projects")
    project = await session.get(Project, payload.project_id)
    if project is None:
        raise NotFoundError("Project not found")

    membership = ProjectMembership(
        employee_id=payload.employee_id,
        project_id=payload.project_id,
        created_by=auth.user_id,
    )
    session.add(membership)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.MEMBERSHIP,
        entity_id=membership.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(membership),
    )

    await session.commit()
    await session.refresh(membership)
    return _build_membership_response(membership)


async def projects_for(session: AsyncSession, employee_id: uuid.UUID) -> set[uuid.UUID]:
    """Return the IDs of every project the employee is linked to."""
    result = await session.execute(
        select(col(ProjectMembership.project_id)).where(col(ProjectMembership.employee_id) == employee_id)
    )
    return set(result.scalars().all())


async def list_employee_projects(
    session: AsyncSession,
    employee_id: uuid.UUID,
    *,
    active_only: bool = True,
) -> EmployeeProjectsResponse:
    """Projects selectable by the employee in submission forms."""
    project_ids = await projects_for(session, employee_id)
    projects: list[Project] = []
    if project_ids:
        query = select(Project).where(col(Project.id).in_(project_ids))
        if active_only:
            query = query.where(col(Project.is_active).is_(True))
        result = await session.execute(query.order_by(col(Project.name)))
        projects = list(result.scalars().all())

    return EmployeeProjectsResponse(
        employee_id=employee_id,
        project_ids=sorted(project_ids, key=str),
        projects=[build_project_response(p) for p in projects],
    )
