# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, Request

from custody.config import get_settings
from custody.models.enums import Role
from custody.schemas.auth import AuthContext
from custody.services.authorization import parse_role, require_role
from custody.services.export import ReportExporter
from custody.services.notification import NotificationDispatcher
from custody.services.storage import ObjectStore


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
    x_role: str | None = Header(default=None),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    role = parse_role(x_role, strict=get_settings().strict_roles)
    return AuthContext(user_id=x_user_id, role=role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_manager(auth: AuthDep) -> AuthContext:
    """Require a project manager or general manager."""
    require_role(auth.role, Role.PROJECT_MANAGER, Role.GENERAL_MANAGER)
    return auth


async def require_project_manager(auth: AuthDep) -> AuthContext:
    """Require the project manager role."""
    require_role(auth.role, Role.PROJECT_MANAGER)
    return auth


async def require_general_manager(auth: AuthDep) -> AuthContext:
    """Require the general manager role."""
    require_role(auth.role, Role.GENERAL_MANAGER)
    return auth


ManagerDep = Annotated[AuthContext, Depends(require_manager)]
ProjectManagerDep = Annotated[AuthContext, Depends(require_project_manager)]
GeneralManagerDep = Annotated[AuthContext, Depends(require_general_manager)]


# ---------------------------------------------------------------------------
# Collaborators, built once per application in create_app()
# ---------------------------------------------------------------------------


def get_notifier(request: Request) -> NotificationDispatcher:
    """FastAPI dependency for the notification dispatcher."""
    return request.app.state.notifier


def get_object_store(request: Request) -> ObjectStore:
    """FastAPI dependency for the object store."""
    return request.app.state.object_store


def get_report_exporter(request: Request) -> ReportExporter:
    """FastAPI dependency for the spreadsheet exporter."""
    return request.app.state.report_exporter


NotifierDep = Annotated[NotificationDispatcher, Depends(get_notifier)]
ObjectStoreDep = Annotated[ObjectStore, Depends(get_object_store)]
ExporterDep = Annotated[ReportExporter, Depends(get_report_exporter)]
