# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from custody.exceptions import NotFoundError
from custody.models.enums import AuditAction, AuditEntityType
from custody.models.project import Project
from custody.schemas.project import ProjectListResponse, ProjectResponse
from custody.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from custody.schemas.auth import AuthContext
    from custody.schemas.project import CreateProjectRequest


def build_project_response(project: Project) -> ProjectResponse:
    """Map a project model to its response schema."""
    return ProjectResponse(
        id=project.id,
        name=project.name,
        description=project.description,
        is_active=project.is_active,
        created_by=project.created_by,
        created_at=project.created_at,
    )


async def get_project_or_404(session: AsyncSession, project_id: uuid.UUID) -> Project:
    """Fetch a project by ID. Raises 404 if not found."""
    project = await session.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return project


async def create_project(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateProjectRequest,
) -> ProjectResponse:
    """Create an active project."""
    project = Project(
        name=payload.name.strip(),
        description=payload.description.strip(),
        created_by=auth.user_id,
    )
    session.add(project)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.PROJECT,
        entity_id=project.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(project),
    )

    await session.commit()
    await session.refresh(project)
    return build_project_response(project)


async def set_project_active(
    session: AsyncSession,
    auth: AuthContext,
    project_id: uuid.UUID,
    is_active: bool,
) -> ProjectResponse:
    """Activate or deactivate a project. Projects are never hard-deleted."""
    project = await get_project_or_404(session, project_id)
    before = model_to_audit_dict(project)
    project.is_active = is_active
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.PROJECT,
        entity_id=project.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(project),
    )

    await session.commit()
    await session.refresh(project)
    return build_project_response(project)


async def get_project(session: AsyncSession, project_id: uuid.UUID) -> ProjectResponse:
    """Get a single project."""
    return build_project_response(await get_project_or_404(session, project_id))


async def list_projects(
    session: AsyncSession,
    *,
    is_active: bool | None = None,
    offset: int = 0,
    limit: int = 50,
) -> ProjectListResponse:
    """List projects, newest first."""
    filters = []
    if is_active is not None:
        filters.append(col(Project.is_active).is_(is_active))

    count_result = await session.execute(select(func.count()).select_from(Project).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(Project).where(*filters).order_by(col(Project.created_at).desc()).offset(offset).limit(limit)
    )
    return ProjectListResponse(
        items=[build_project_response(p) for p in result.scalars().all()],
        total=total,
    )
