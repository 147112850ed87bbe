# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from custody.api.deps import AuthDep, GeneralManagerDep, ManagerDep
from custody.db import SessionDep
from custody.exceptions import AuthorizationError
from custody.models.enums import Role
from custody.schemas.project import SetActiveRequest
from custody.schemas.user import ProvisionUserRequest, UserListResponse, UserResponse
from custody.services import user as user_service

users_router = APIRouter(prefix="/users", tags=["users"])


@users_router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def provision_user(
    payload: ProvisionUserRequest,
    session: SessionDep,
    auth: GeneralManagerDep,
) -> UserResponse:
    """Provision a user (general manager only)."""
    return await user_service.provision_user(session, auth, payload)


@users_router.get("", response_model=UserListResponse)
async def list_users(
    session: SessionDep,
    auth: ManagerDep,
    role: Role | None = Query(default=None),
    is_active: bool | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> UserListResponse:
    """List users (managers only)."""
    return await user_service.list_users(session, role=role, is_active=is_active, offset=offset, limit=limit)


@users_router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> UserResponse:
    """Get a user. Employees may only read their own profile."""
    if not auth.is_manager and auth.user_id != user_id:
        raise AuthorizationError("Employees may only view their own profile")
    return await user_service.get_user(session, user_id)


@users_router.patch("/{user_id}/active", response_model=UserResponse)
async def set_user_active(
    user_id: uuid.UUID,
    payload: SetActiveRequest,
    session: SessionDep,
    auth: ManagerDep,
) -> UserResponse:
    """Activate or deactivate a user (managers only)."""
    return await user_service.set_user_active(session, auth, user_id, payload.is_active)
